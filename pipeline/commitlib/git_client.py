import os
import re
import subprocess
from datetime import datetime
from datetime import timezone

from commitlib.report_errors import FetchFailureError
from commitlib.report_errors import GitCommandError
from commitlib.report_models import CommitRecord
from commitlib.report_models import DateWindow


FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
# sha, strict ISO author date, subject, author name, author email
LOG_FORMAT = "%H%x1f%aI%x1f%s%x1f%an%x1f%ae%x1e"
COMMIT_HASH_RE = re.compile(r"^[0-9a-f]{7,40}$", re.IGNORECASE)


#============================================
def has_git_dir(repo_path: str) -> bool:
	"""
	Return True when repo_path contains a .git directory.
	"""
	if not repo_path:
		return False
	return os.path.isdir(os.path.join(repo_path, ".git"))


#============================================
def is_commit_hash(text: str) -> bool:
	"""
	Return True for full or abbreviated hex commit hashes (7-40 chars).
	"""
	return bool(COMMIT_HASH_RE.match((text or "").strip()))


#============================================
def parse_iso(ts: str) -> datetime:
	"""
	Parse an ISO timestamp string into a timezone-aware datetime.
	"""
	parsed = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed


#============================================
def parse_log_output(text: str) -> list[CommitRecord]:
	"""
	Parse git log output written with LOG_FORMAT into commit records.

	Records keep the order git printed them in.
	"""
	commits = []
	for chunk in text.split(RECORD_SEP):
		chunk = chunk.strip("\r\n")
		if not chunk:
			continue
		fields = chunk.split(FIELD_SEP)
		if len(fields) != 5:
			raise ValueError(f"Unexpected git log record: {chunk!r}")
		sha, timestamp_text, subject, author_name, author_email = fields
		commits.append(CommitRecord(
			sha=sha.strip(),
			timestamp=parse_iso(timestamp_text),
			subject=subject,
			author_name=author_name,
			author_email=author_email,
		))
	return commits


#============================================
def filter_by_author_name(commits: list[CommitRecord], author_filter: str) -> list[CommitRecord]:
	"""
	Keep commits whose author name contains author_filter.

	git --author also matches the email part of the ident, so the name is
	checked again after parsing.
	"""
	if not author_filter:
		return commits
	return [commit for commit in commits if author_filter in commit.author_name]


#============================================
class GitRepo:
	"""
	Thin wrapper around the git executable for one local repository.
	"""

	def __init__(self, repo_path: str):
		self.repo_path = os.path.abspath(repo_path)

	#============================================
	def _run_git(self, args: list[str]) -> str:
		"""
		Run git inside the repository and return stdout.
		"""
		try:
			result = subprocess.run(
				["git"] + args,
				cwd=self.repo_path,
				capture_output=True,
				text=True,
				encoding="utf-8",
				errors="replace",
				check=False,
			)
		except FileNotFoundError as error:
			raise GitCommandError("git is not installed or not found in PATH") from error
		if result.returncode != 0:
			err_text = result.stderr.strip() or "unknown git error"
			raise GitCommandError(
				f"git {' '.join(args)} failed: {err_text}",
				returncode=result.returncode,
			)
		return result.stdout

	#============================================
	def build_log_args(self, window: DateWindow) -> list[str]:
		"""
		Build git log arguments for one date window.

		Dates go to git as plain YYYY-MM-DD text, so git decides where the
		since/until boundaries fall.
		"""
		args = [
			"log",
			f"--since={window.start.isoformat()}",
			f"--until={window.end.isoformat()}",
			f"--pretty=format:{LOG_FORMAT}",
		]
		if window.author_filter:
			args.extend([f"--author={window.author_filter}", "--fixed-strings"])
		return args

	#============================================
	def has_head_commit(self) -> bool:
		"""
		Return False when HEAD is unborn, as in a freshly initialized repository.
		"""
		try:
			self._run_git(["rev-parse", "--verify", "-q", "HEAD"])
		except GitCommandError as error:
			# exit 1 is an unresolvable HEAD, 128 means no repository
			if error.returncode == 1:
				return False
			raise
		return True

	#============================================
	def list_commits(self, window: DateWindow) -> list[CommitRecord]:
		"""
		List commits inside the window, newest first as git reports them.

		Raises:
			FetchFailureError: git log failed or printed unparseable output.
		"""
		try:
			if not self.has_head_commit():
				return []
			output = self._run_git(self.build_log_args(window))
			commits = parse_log_output(output)
		except (GitCommandError, ValueError) as error:
			raise FetchFailureError(f"Could not list commits in {self.repo_path}: {error}") from error
		return filter_by_author_name(commits, window.author_filter)

	#============================================
	def show_commit(self, sha: str) -> str:
		"""
		Return commit header, full patch and per-file stat for one commit.
		"""
		return self._run_git([
			"show",
			"--pretty=fuller",
			"--patch",
			"--stat",
			sha,
		])
