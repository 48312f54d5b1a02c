"""
Markdown assembly for per-day commit reports.
"""

from commitlib.report_models import CommitRecord
from commitlib.report_models import DayBucket
from commitlib.report_models import ReportDocument
from commitlib.report_models import SummaryResult


ERROR_HEADING = "### (error occurred)"
SEPARATOR = "---"


#============================================
def format_commit_entry(index: int, commit: CommitRecord, result: SummaryResult) -> list[str]:
	"""
	Build Markdown lines for one numbered commit entry.
	"""
	lines = [
		f"## {index}. `{commit.short_sha}` {commit.subject}",
		"",
		f"- Author: {commit.author_name} <{commit.author_email}>",
		f"- Date: {commit.timestamp.isoformat()}",
		f"- Commit: {commit.sha}",
		"",
	]
	if result.ok:
		lines.append(result.text)
	else:
		lines.append(ERROR_HEADING)
		lines.append("")
		lines.append(result.error_message)
	lines.append("")
	lines.append(SEPARATOR)
	lines.append("")
	return lines


#============================================
def render_report_markdown(bucket: DayBucket, results: list[SummaryResult]) -> str:
	"""
	Render one day's commits and summaries as Markdown text.
	"""
	if len(results) != len(bucket.commits):
		raise ValueError(
			f"Expected {len(bucket.commits)} summary results for {bucket.calendar_date}, "
			+ f"got {len(results)}"
		)
	error_count = sum(1 for result in results if not result.ok)
	lines = [
		f"# Commit report for {bucket.calendar_date}",
		"",
		f"Total commits: {len(bucket.commits)} (summary errors: {error_count})",
		"",
	]
	for index, (commit, result) in enumerate(zip(bucket.commits, results), start=1):
		lines.extend(format_commit_entry(index, commit, result))
	return "\n".join(lines)


#============================================
def build_report_document(bucket: DayBucket, results: list[SummaryResult]) -> ReportDocument:
	"""
	Assemble the report document for one day bucket.
	"""
	body_text = render_report_markdown(bucket, results)
	return ReportDocument(calendar_date=bucket.calendar_date, body_text=body_text)
