import os

from commitlib.report_models import ReportDocument
from commitlib.report_models import WriteResult


REPORT_FILENAME_TEMPLATE = "commit-report-{date}.md"
SHOW_FILENAME_TEMPLATE = "commit-show-{sha}.txt"


#============================================
def report_filename(calendar_date: str) -> str:
	"""
	Return the report filename for one calendar date.
	"""
	return REPORT_FILENAME_TEMPLATE.format(date=calendar_date)


#============================================
def write_text_file(path: str, text: str) -> None:
	"""
	Write text in one call, replacing any existing file.
	"""
	with open(path, "w", encoding="utf-8") as handle:
		handle.write(text)


#============================================
def write_report(document: ReportDocument, target_dir: str) -> WriteResult:
	"""
	Write one report document, returning a failed result on OSError.
	"""
	path = os.path.join(target_dir, report_filename(document.calendar_date))
	try:
		write_text_file(path, document.body_text)
	except OSError as error:
		return WriteResult(
			calendar_date=document.calendar_date,
			path=path,
			ok=False,
			error_message=str(error),
		)
	return WriteResult(calendar_date=document.calendar_date, path=path, ok=True)


#============================================
def write_commit_show(target_dir: str, sha: str, show_text: str, summary_text: str) -> WriteResult:
	"""
	Write single-commit show output followed by its summary.
	"""
	clean_sha = sha.strip()
	path = os.path.join(target_dir, SHOW_FILENAME_TEMPLATE.format(sha=clean_sha))
	try:
		write_text_file(path, show_text + "\n\n" + summary_text)
	except OSError as error:
		return WriteResult(calendar_date="", path=path, ok=False, error_message=str(error))
	return WriteResult(calendar_date="", path=path, ok=True)
