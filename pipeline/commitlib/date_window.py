import calendar
import re
from datetime import date
from datetime import datetime

from commitlib.report_errors import InvalidRangeError
from commitlib.report_errors import RangeTooLargeError
from commitlib.report_models import DateWindow


DATE_TEXT_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_SPAN_MONTHS = 2


#============================================
def parse_date_text(text: str) -> date:
	"""
	Parse strict YYYY-MM-DD text into a date.
	"""
	value = (text or "").strip()
	if not DATE_TEXT_RE.match(value):
		raise ValueError(f"Date must use YYYY-MM-DD format: {text!r}")
	return datetime.strptime(value, "%Y-%m-%d").date()


#============================================
def add_months(value: date, months: int) -> date:
	"""
	Add calendar months, clamping the day to the target month's last day.
	"""
	month_index = value.month - 1 + months
	year = value.year + month_index // 12
	month = month_index % 12 + 1
	last_day = calendar.monthrange(year, month)[1]
	return date(year, month, min(value.day, last_day))


#============================================
def max_end_date(start: date) -> date:
	"""
	Return the latest end date accepted for a window starting at start.
	"""
	return add_months(start, MAX_SPAN_MONTHS)


#============================================
def validate_range(start: date, end: date, author_filter: str = "") -> DateWindow:
	"""
	Validate a requested date window and return it as a DateWindow.

	Args:
		start: first calendar date of the window.
		end: last calendar date of the window.
		author_filter: optional author substring passed through unchanged.

	Returns:
		DateWindow for the validated range.

	Raises:
		InvalidRangeError: start falls after end.
		RangeTooLargeError: end is more than two calendar months after start.
	"""
	if start > end:
		raise InvalidRangeError(
			f"Start date {start.isoformat()} is after end date {end.isoformat()}."
		)
	limit = max_end_date(start)
	if end > limit:
		raise RangeTooLargeError(
			f"Date window {start.isoformat()} -> {end.isoformat()} exceeds "
			+ f"{MAX_SPAN_MONTHS} months (latest allowed end: {limit.isoformat()})."
		)
	return DateWindow(start=start, end=end, author_filter=(author_filter or "").strip())
