"""Per-commit LLM summaries with failure isolation.

Each commit is summarized on its own: its git show text is sent to the LLM
with a fixed instruction, and any git or LLM failure is returned as a failed
SummaryResult so the rest of the batch keeps going.
"""

from commitlib import prompt_loader
from commitlib.report_models import CommitRecord
from commitlib.report_models import SummaryResult


SUMMARY_PROMPT_NAME = "commit_summary.txt"


#============================================
def build_commit_prompt(show_text: str) -> str:
	"""
	Prepend the fixed analysis instruction to one commit's show text.
	"""
	template = prompt_loader.load_prompt(SUMMARY_PROMPT_NAME)
	return prompt_loader.render_prompt(template, {"commit_text": show_text})


#============================================
def describe_error(error: Exception) -> str:
	"""
	Format an exception as 'ClassName: message' for the report.
	"""
	message = str(error).strip()
	if not message:
		return error.__class__.__name__
	return f"{error.__class__.__name__}: {message}"


#============================================
def summarize_show_text(client, sha: str, show_text: str, max_tokens: int = 1200) -> SummaryResult:
	"""
	Ask the LLM to explain already-loaded show text for one commit.
	"""
	try:
		text = client.generate(
			prompt=build_commit_prompt(show_text),
			purpose=f"commit summary {sha[:7]}",
			max_tokens=max_tokens,
		)
	except Exception as error:
		return SummaryResult.failure(describe_error(error))
	text = (text or "").strip()
	if not text:
		return SummaryResult.failure("LLM returned no summary text.")
	return SummaryResult.success(text)


#============================================
def summarize_commit(repo, client, sha: str, max_tokens: int = 1200) -> SummaryResult:
	"""
	Summarize one commit, returning a failed result instead of raising.

	Args:
		repo: GitRepo-like object with show_commit(sha).
		client: LLMClient-like object with generate(prompt, purpose, max_tokens).
		sha: commit hash to summarize.
		max_tokens: max generation tokens for the LLM call.

	Returns:
		SummaryResult with summary text, or with the error message.
	"""
	try:
		show_text = repo.show_commit(sha)
	except Exception as error:
		# one bad commit must not stop the batch
		return SummaryResult.failure(describe_error(error))
	return summarize_show_text(client, sha, show_text, max_tokens=max_tokens)


#============================================
def summarize_commits(
	repo,
	client,
	commits: list[CommitRecord],
	max_tokens: int = 1200,
	log_fn=None,
	error_fn=None,
) -> list[SummaryResult]:
	"""
	Summarize commits one at a time, returning results in commit order.
	"""
	results = []
	total = len(commits)
	for index, commit in enumerate(commits, start=1):
		if log_fn:
			log_fn(f"[{index}/{total}] Summarizing {commit.short_sha} {commit.subject}")
		result = summarize_commit(repo, client, commit.sha, max_tokens=max_tokens)
		failure_fn = error_fn or log_fn
		if failure_fn and not result.ok:
			failure_fn(f"[{index}/{total}] Summary failed for {commit.short_sha}: {result.error_message}")
		results.append(result)
	return results
