"""Tests for pipeline/commit_report.py run orchestration."""

# Standard Library
import os
import shutil
import subprocess
import sys
from datetime import date
from datetime import datetime

import pytest

# add pipeline directory to path for commitlib imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "pipeline"))

import commit_report
from commitlib import git_client
from commitlib.report_errors import FetchFailureError
from commitlib.report_errors import GitCommandError
from commitlib.report_models import CommitRecord
from commitlib.report_models import DateWindow


GIT_AVAILABLE = shutil.which("git") is not None


class FakeRepo:
	def __init__(self, commits: list, fail_listing: bool = False):
		self.commits = commits
		self.fail_listing = fail_listing

	def list_commits(self, window):
		if self.fail_listing:
			raise FetchFailureError("git log failed")
		return list(self.commits)

	def show_commit(self, sha: str) -> str:
		return f"commit {sha}\n\n    change {sha}\n"


class FakeClient:
	def __init__(self, failing: set | None = None):
		self.failing = failing or set()
		self.calls = 0

	def generate(self, prompt=None, purpose=None, max_tokens=0):
		self.calls += 1
		for sha in self.failing:
			if sha in prompt:
				return ""
		return "Summary of the change."


#============================================
def make_commit(sha: str, ts: str) -> CommitRecord:
	"""
	Build a CommitRecord with an ISO timestamp.
	"""
	return CommitRecord(
		sha=sha,
		timestamp=datetime.fromisoformat(ts),
		subject=f"subject {sha}",
		author_name="Alice",
		author_email="alice@example.com",
	)


#============================================
def make_window() -> DateWindow:
	"""
	Window covering 2024-01-01 and 2024-01-02.
	"""
	return DateWindow(start=date(2024, 1, 1), end=date(2024, 1, 2))


#============================================
def run_main(monkeypatch, argv: list[str]) -> int:
	"""
	Run main() with argv and return the exit code, 0 when it returns normally.
	"""
	monkeypatch.setattr(sys, "argv", ["commit_report.py"] + argv)
	try:
		commit_report.main()
	except SystemExit as error:
		return error.code
	return 0


#============================================
def test_run_report_two_commits_one_day(tmp_path) -> None:
	"""
	Two commits on one day should produce exactly one report with two entries.
	"""
	commits = [
		make_commit("a" * 40, "2024-01-01T15:00:00+00:00"),
		make_commit("b" * 40, "2024-01-01T09:00:00+00:00"),
	]
	outcomes = commit_report.run_report(FakeRepo(commits), FakeClient(), make_window(), str(tmp_path))
	assert [o.calendar_date for o in outcomes] == ["2024-01-01"]
	assert sorted(os.listdir(tmp_path)) == ["commit-report-2024-01-01.md"]
	body = (tmp_path / "commit-report-2024-01-01.md").read_text(encoding="utf-8")
	assert "## 1. `aaaaaaa`" in body
	assert "## 2. `bbbbbbb`" in body
	assert "## 3." not in body
	assert not (tmp_path / "commit-report-2024-01-02.md").exists()


#============================================
def test_run_report_no_commits_writes_nothing(tmp_path) -> None:
	"""
	An empty window should be a successful no-op with a notice.
	"""
	lines = []
	outcomes = commit_report.run_report(
		FakeRepo([]), FakeClient(), make_window(), str(tmp_path), log_fn=lines.append,
	)
	assert outcomes == []
	assert os.listdir(tmp_path) == []
	assert any("No commits found" in line for line in lines)


#============================================
def test_run_report_partial_failure_continues(tmp_path) -> None:
	"""
	One failed summary should be recorded and later dates still written.
	"""
	commits = [
		make_commit("c" * 40, "2024-01-02T12:00:00+00:00"),
		make_commit("d" * 40, "2024-01-01T12:00:00+00:00"),
		make_commit("e" * 40, "2024-01-01T08:00:00+00:00"),
	]
	client = FakeClient({"d" * 40})
	errors = []
	outcomes = commit_report.run_report(
		FakeRepo(commits), client, make_window(), str(tmp_path), error_fn=errors.append,
	)
	assert client.calls == 3
	assert [(o.calendar_date, o.commit_count, o.error_count) for o in outcomes] == [
		("2024-01-02", 1, 0),
		("2024-01-01", 2, 1),
	]
	body = (tmp_path / "commit-report-2024-01-01.md").read_text(encoding="utf-8")
	assert body.count("(error occurred)") == 1
	assert body.count("Summary of the change.") == 1
	assert (tmp_path / "commit-report-2024-01-02.md").exists()
	assert len(errors) == 1
	assert "Summary failed for ddddddd" in errors[0]


#============================================
def test_run_report_write_failure_isolated(tmp_path) -> None:
	"""
	A write failure should be reported per date without aborting the run.
	"""
	commits = [
		make_commit("a" * 40, "2024-01-02T12:00:00+00:00"),
		make_commit("b" * 40, "2024-01-01T12:00:00+00:00"),
	]
	errors = []
	outcomes = commit_report.run_report(
		FakeRepo(commits), FakeClient(), make_window(),
		str(tmp_path / "missing"), error_fn=errors.append,
	)
	assert len(outcomes) == 2
	assert all(not o.write_result.ok for o in outcomes)
	assert len(errors) == 2


#============================================
def test_run_report_listing_failure_is_fatal(tmp_path) -> None:
	"""
	A failed commit listing should propagate with nothing written.
	"""
	with pytest.raises(FetchFailureError):
		commit_report.run_report(
			FakeRepo([], fail_listing=True), FakeClient(), make_window(), str(tmp_path),
		)
	assert os.listdir(tmp_path) == []


#============================================
def test_run_single_commit_writes_show_file(tmp_path) -> None:
	"""
	Single-commit mode should write show text followed by the summary.
	"""
	result = commit_report.run_single_commit(FakeRepo([]), FakeClient(), "abc1234", str(tmp_path))
	assert result.ok
	text = (tmp_path / "commit-show-abc1234.txt").read_text(encoding="utf-8")
	assert text.startswith("commit abc1234")
	assert text.endswith("Summary of the change.")


#============================================
def test_run_single_commit_unknown_hash_raises(tmp_path) -> None:
	"""
	A missing commit in single-commit mode should be a fatal git error.
	"""
	class MissingRepo(FakeRepo):
		def show_commit(self, sha: str) -> str:
			raise GitCommandError("bad object")

	with pytest.raises(GitCommandError):
		commit_report.run_single_commit(MissingRepo([]), FakeClient(), "abc1234", str(tmp_path))


#============================================
def test_parse_args_defaults() -> None:
	"""
	Optional flags should default to prompting and settings-driven LLM options.
	"""
	args = commit_report.parse_args(["--repo", ".", "--start", "2024-01-01"])
	assert args.repo_path == "."
	assert args.start_date == "2024-01-01"
	assert args.end_date is None
	assert args.author_filter == ""
	assert args.llm_transport is None
	assert args.verbose is False
	assert commit_report.parse_args(["-v"]).verbose is True


#============================================
def test_main_malformed_settings_exits_with_error(tmp_path, monkeypatch, capsys) -> None:
	"""
	A settings file that is not a mapping should exit 1 with a stderr message.
	"""
	settings_path = tmp_path / "settings.yaml"
	settings_path.write_text("- one\n- two\n", encoding="utf-8")
	code = run_main(monkeypatch, ["--settings", str(settings_path)])
	assert code == 1
	assert "must contain a mapping" in capsys.readouterr().err


#============================================
def test_main_two_enabled_providers_exits_with_error(tmp_path, monkeypatch, capsys) -> None:
	"""
	Two enabled LLM providers should exit 1 before any report is written.
	"""
	repo_dir = tmp_path / "project"
	(repo_dir / ".git").mkdir(parents=True)
	settings_path = tmp_path / "settings.yaml"
	settings_path.write_text(
		"llm:\n"
		"  providers:\n"
		"    openai:\n"
		"      enabled: true\n"
		"    ollama:\n"
		"      enabled: true\n",
		encoding="utf-8",
	)
	code = run_main(monkeypatch, [
		"--settings", str(settings_path),
		"--repo", str(repo_dir),
		"--start", "2024-01-01",
		"--end", "2024-01-02",
	])
	assert code == 1
	assert "Only one LLM provider" in capsys.readouterr().err
	assert sorted(os.listdir(repo_dir)) == [".git"]


#============================================
@pytest.mark.skipif(not GIT_AVAILABLE, reason="git is not installed")
def test_run_report_empty_repository(tmp_path) -> None:
	"""
	A freshly initialized repository should report no commits and write nothing.
	"""
	subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
	lines = []
	repo = git_client.GitRepo(str(tmp_path))
	outcomes = commit_report.run_report(repo, FakeClient(), make_window(), str(tmp_path), log_fn=lines.append)
	assert outcomes == []
	assert sorted(os.listdir(tmp_path)) == [".git"]
	assert any("No commits found" in line for line in lines)


#============================================
@pytest.mark.skipif(not GIT_AVAILABLE, reason="git is not installed")
def test_run_report_real_repository(tmp_path) -> None:
	"""
	An end-to-end run against a temporary git repository should write one day.
	"""
	subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
	env = dict(os.environ)
	env.update({
		"GIT_AUTHOR_NAME": "Alice Example",
		"GIT_AUTHOR_EMAIL": "alice@example.com",
		"GIT_COMMITTER_NAME": "Alice Example",
		"GIT_COMMITTER_EMAIL": "alice@example.com",
		"GIT_AUTHOR_DATE": "2024-01-02T12:00:00+00:00",
		"GIT_COMMITTER_DATE": "2024-01-02T12:00:00+00:00",
	})
	for name in ("one.txt", "two.txt"):
		(tmp_path / name).write_text(name + "\n", encoding="utf-8")
		subprocess.run(["git", "-C", str(tmp_path), "add", name], check=True, env=env)
		subprocess.run(
			["git", "-C", str(tmp_path), "-c", "commit.gpgsign=false", "commit", "-q", "-m", f"Add {name}"],
			check=True,
			env=env,
		)
	window = DateWindow(start=date(2023, 12, 30), end=date(2024, 1, 5))
	repo = git_client.GitRepo(str(tmp_path))
	outcomes = commit_report.run_report(repo, FakeClient(), window, str(tmp_path))
	assert [(o.calendar_date, o.commit_count, o.error_count) for o in outcomes] == [("2024-01-02", 2, 0)]
	body = (tmp_path / "commit-report-2024-01-02.md").read_text(encoding="utf-8")
	assert "Add two.txt" in body
	assert "Add one.txt" in body
	assert body.index("Add two.txt") < body.index("Add one.txt")
