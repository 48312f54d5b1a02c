#!/usr/bin/env python3
"""Write per-day Markdown commit reports with LLM summaries.

Lists the commits of a local git repository inside a date window, groups
them by UTC calendar day, asks the configured LLM to explain each commit's
change set, and writes one commit-report-<date>.md per day into the
repository. A failed summary or a failed file write is recorded and the run
moves on; only an invalid window or a failed commit listing stops the run.
"""

# Standard Library
import argparse
import os
import sys
from datetime import datetime

# PIP3 modules
import rich.console
import rich.prompt
import rich.table
from dotenv import load_dotenv

# local repo modules
from commitlib import commit_summarizer
from commitlib import date_window
from commitlib import day_grouper
from commitlib import git_client
from commitlib import llm_client
from commitlib import pipeline_settings
from commitlib import report_builder
from commitlib import report_writer
from commitlib.report_errors import CommitReportError
from commitlib.report_models import DateWindow
from commitlib.report_models import DayBucket
from commitlib.report_models import DayOutcome
from commitlib.report_models import WriteResult


DEFAULT_MAX_TOKENS = 1200
RICH_CONSOLE = rich.console.Console()
ERROR_CONSOLE = rich.console.Console(stderr=True)


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	line = f"[commit_report {now_text}] {message}"
	lower = message.lower()
	style = "cyan"
	if ("failed" in lower) or ("error" in lower):
		style = "bold red"
	elif ("skipping" in lower) or ("no commits" in lower):
		style = "yellow"
	elif ("wrote " in lower) or ("complete" in lower):
		style = "green"
	RICH_CONSOLE.print(line, style=style, markup=False, highlight=False)


#============================================
def log_error(message: str) -> None:
	"""
	Print one timestamped error line to stderr.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	ERROR_CONSOLE.print(
		f"[commit_report {now_text}] {message}",
		style="bold red",
		markup=False,
		highlight=False,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Summarize git commits per day with an LLM and write Markdown reports."
	)
	parser.add_argument(
		'-r', '--repo', dest='repo_path',
		default=None,
		help="Path to a project containing a .git directory (prompted when omitted).",
	)
	parser.add_argument(
		'-s', '--start', dest='start_date',
		default=None,
		help="First day of the window, YYYY-MM-DD (prompted when omitted).",
	)
	parser.add_argument(
		'-e', '--end', dest='end_date',
		default=None,
		help="Last day of the window, YYYY-MM-DD (prompted when omitted).",
	)
	parser.add_argument(
		'-a', '--author', dest='author_filter',
		default="",
		help="Only include commits whose author contains this text.",
	)
	parser.add_argument(
		'-c', '--commit', dest='commit_hash',
		default=None,
		help="Summarize one commit hash (7-40 hex chars) instead of a date window.",
	)
	parser.add_argument(
		'--settings', dest='settings',
		default="settings.yaml",
		help="YAML settings path for LLM defaults.",
	)
	parser.add_argument(
		'--llm-transport', dest='llm_transport',
		choices=list(llm_client.SUPPORTED_TRANSPORTS),
		default=None,
		help="LLM transport selection (defaults from settings.yaml).",
	)
	parser.add_argument(
		'--llm-model', dest='llm_model',
		default=None,
		help="Optional model override (defaults from OPENAI_MODEL or settings.yaml).",
	)
	parser.add_argument(
		'--llm-max-tokens', dest='llm_max_tokens',
		type=int,
		default=None,
		help="Max generation tokens per LLM call (defaults from settings.yaml).",
	)
	parser.add_argument(
		'--language', dest='language',
		default=None,
		help="Language for the generated summaries (defaults from settings.yaml).",
	)
	parser.add_argument(
		'-v', '--verbose', dest='verbose',
		action='store_true',
		help="Log each LLM request as it is sent.",
	)
	args = parser.parse_args(argv)
	return args


#============================================
def ask_repo_path() -> str:
	"""
	Prompt until the operator enters a path containing a .git directory.
	"""
	while True:
		value = rich.prompt.Prompt.ask("Project path containing a .git directory").strip()
		if git_client.has_git_dir(value):
			return value
		log_error("Enter a path that contains a valid .git directory.")


#============================================
def ask_date(label: str):
	"""
	Prompt until the operator enters a YYYY-MM-DD date.
	"""
	while True:
		value = rich.prompt.Prompt.ask(f"{label} date (YYYY-MM-DD)")
		try:
			return date_window.parse_date_text(value)
		except ValueError as error:
			log_error(str(error))


#============================================
def resolve_repo_path(args: argparse.Namespace) -> str:
	"""
	Use --repo when valid, otherwise prompt for it.
	"""
	if args.repo_path is None:
		return os.path.abspath(ask_repo_path())
	if not git_client.has_git_dir(args.repo_path):
		raise CommitReportError(f"No .git directory found in: {args.repo_path}")
	return os.path.abspath(args.repo_path)


#============================================
def resolve_date(value: str | None, label: str):
	"""
	Parse a date flag, or prompt for it when missing.
	"""
	if value is None:
		return ask_date(label)
	try:
		return date_window.parse_date_text(value)
	except ValueError as error:
		raise CommitReportError(str(error)) from error


#============================================
def build_client_from_settings(args: argparse.Namespace, settings: dict) -> tuple:
	"""
	Create the LLM client from settings plus CLI overrides.

	Returns:
		Tuple of (client, max_tokens).
	"""
	default_transport = pipeline_settings.get_enabled_llm_transport(settings)
	transport_name = args.llm_transport or default_transport
	settings_model = pipeline_settings.get_llm_provider_model(settings, transport_name)
	model = llm_client.resolve_model(
		transport_name,
		(args.llm_model or "").strip(),
		settings_model,
	)
	language = args.language or pipeline_settings.get_setting_str(
		settings, ["llm", "language"], llm_client.DEFAULT_LANGUAGE,
	)
	temperature = pipeline_settings.get_setting_float(settings, ["llm", "temperature"], None)
	base_url = pipeline_settings.get_setting_str(
		settings,
		["llm", "providers", "ollama", "base_url"],
		llm_client.DEFAULT_OLLAMA_URL,
	)
	default_max_tokens = pipeline_settings.get_setting_int(
		settings, ["llm", "max_tokens"], DEFAULT_MAX_TOKENS,
	)
	max_tokens = default_max_tokens if args.llm_max_tokens is None else args.llm_max_tokens
	log_step(f"LLM: {llm_client.describe_llm_execution_path(transport_name, model)}, language: {language}")
	client = llm_client.create_llm_client(
		transport_name,
		model,
		language=language,
		temperature=temperature,
		base_url=base_url,
		quiet=not args.verbose,
		log_fn=log_step,
	)
	return client, max_tokens


#============================================
def process_day(
	repo,
	client,
	bucket: DayBucket,
	target_dir: str,
	max_tokens: int = DEFAULT_MAX_TOKENS,
	log_fn=None,
	error_fn=None,
) -> DayOutcome:
	"""
	Summarize, assemble and write the report for one day bucket.
	"""
	if log_fn:
		log_fn(f"Processing {bucket.calendar_date}: {len(bucket.commits)} commit(s)")
	results = commit_summarizer.summarize_commits(
		repo, client, bucket.commits,
		max_tokens=max_tokens, log_fn=log_fn, error_fn=error_fn,
	)
	document = report_builder.build_report_document(bucket, results)
	write_result = report_writer.write_report(document, target_dir)
	if write_result.ok:
		if log_fn:
			log_fn(f"Wrote {write_result.path}")
	elif error_fn:
		error_fn(f"Report write failed for {bucket.calendar_date}: {write_result.error_message}")
	error_count = sum(1 for result in results if not result.ok)
	return DayOutcome(
		calendar_date=bucket.calendar_date,
		commit_count=len(bucket.commits),
		error_count=error_count,
		write_result=write_result,
	)


#============================================
def run_report(
	repo,
	client,
	window: DateWindow,
	target_dir: str,
	max_tokens: int = DEFAULT_MAX_TOKENS,
	log_fn=None,
	error_fn=None,
) -> list[DayOutcome]:
	"""
	Run the full window pipeline and return one outcome per written day.

	Raises:
		FetchFailureError: the commit listing itself failed.
	"""
	commits = repo.list_commits(window)
	if not commits:
		if log_fn:
			log_fn(
				f"No commits found between {window.start.isoformat()} "
				+ f"and {window.end.isoformat()}."
			)
		return []
	buckets = day_grouper.group_commits_by_day(commits)
	if log_fn:
		log_fn(f"Found {len(commits)} commit(s) across {len(buckets)} day(s).")
	outcomes = []
	for bucket in buckets.values():
		outcome = process_day(
			repo, client, bucket, target_dir,
			max_tokens=max_tokens, log_fn=log_fn, error_fn=error_fn,
		)
		outcomes.append(outcome)
	return outcomes


#============================================
def run_single_commit(
	repo,
	client,
	sha: str,
	target_dir: str,
	max_tokens: int = DEFAULT_MAX_TOKENS,
	log_fn=None,
) -> WriteResult:
	"""
	Show and summarize one commit, then write commit-show-<sha>.txt.
	"""
	show_text = repo.show_commit(sha)
	if log_fn:
		log_fn(f"Loaded commit {sha} ({len(show_text)} chars)")
	result = commit_summarizer.summarize_show_text(client, sha, show_text, max_tokens=max_tokens)
	summary_text = result.text if result.ok else f"(error occurred)\n{result.error_message}"
	return report_writer.write_commit_show(target_dir, sha, show_text, summary_text)


#============================================
def render_summary_table(outcomes: list[DayOutcome]) -> None:
	"""
	Render the final per-day summary table.
	"""
	table = rich.table.Table(title="Commit Report Summary")
	table.add_column("Date", style="bold cyan")
	table.add_column("Commits", justify="right")
	table.add_column("Errors", justify="right")
	table.add_column("Report")
	for outcome in outcomes:
		if outcome.write_result.ok:
			status_text = f"[green]{os.path.basename(outcome.write_result.path)}[/green]"
		else:
			status_text = "[red]write failed[/red]"
		table.add_row(
			outcome.calendar_date,
			str(outcome.commit_count),
			str(outcome.error_count),
			status_text,
		)
	RICH_CONSOLE.print(table)


#============================================
def main() -> None:
	"""
	Collect input, validate the window and write the reports.
	"""
	load_dotenv()
	args = parse_args()
	try:
		settings, settings_path = pipeline_settings.load_settings(args.settings)
		log_step(f"Using settings file: {settings_path}")
		repo_path = resolve_repo_path(args)
		repo = git_client.GitRepo(repo_path)
		if args.commit_hash is not None:
			sha = args.commit_hash.strip()
			if not git_client.is_commit_hash(sha):
				raise CommitReportError(f"Not a valid commit hash: {args.commit_hash}")
			log_step(f"Repository: {repo_path}")
			log_step(f"Commit: {sha}")
			client, max_tokens = build_client_from_settings(args, settings)
			write_result = run_single_commit(repo, client, sha, repo_path, max_tokens, log_fn=log_step)
			if write_result.ok:
				log_step(f"Wrote {write_result.path}")
			else:
				log_error(f"Failed to save commit output: {write_result.error_message}")
			return
		start = resolve_date(args.start_date, "Start")
		end = resolve_date(args.end_date, "End")
		window = date_window.validate_range(start, end, args.author_filter)
		log_step(f"Repository: {repo_path}")
		log_step(f"Window: {window.start.isoformat()} -> {window.end.isoformat()}")
		if window.author_filter:
			log_step(f"Author filter: {window.author_filter}")
		client, max_tokens = build_client_from_settings(args, settings)
		outcomes = run_report(
			repo, client, window, repo_path,
			max_tokens=max_tokens, log_fn=log_step, error_fn=log_error,
		)
	except CommitReportError as error:
		log_error(str(error))
		sys.exit(1)
	if outcomes:
		render_summary_table(outcomes)
	log_step("Commit report run complete.")


if __name__ == "__main__":
	main()
