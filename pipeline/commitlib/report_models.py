from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import date
from datetime import datetime


SHORT_SHA_LENGTH = 7


@dataclass(frozen=True)
class DateWindow:
	start: date
	end: date
	author_filter: str = ""


@dataclass(frozen=True)
class CommitRecord:
	sha: str
	timestamp: datetime
	subject: str
	author_name: str
	author_email: str

	@property
	def short_sha(self) -> str:
		return self.sha[:SHORT_SHA_LENGTH]


@dataclass
class DayBucket:
	calendar_date: str
	commits: list[CommitRecord] = field(default_factory=list)


@dataclass(frozen=True)
class SummaryResult:
	"""
	Outcome of summarizing one commit: summary text or an error message.
	"""
	ok: bool
	text: str = ""
	error_message: str = ""

	@classmethod
	def success(cls, text: str) -> SummaryResult:
		return cls(ok=True, text=text)

	@classmethod
	def failure(cls, error_message: str) -> SummaryResult:
		return cls(ok=False, error_message=error_message)


@dataclass(frozen=True)
class ReportDocument:
	calendar_date: str
	body_text: str


@dataclass(frozen=True)
class WriteResult:
	calendar_date: str
	path: str
	ok: bool
	error_message: str = ""


@dataclass(frozen=True)
class DayOutcome:
	calendar_date: str
	commit_count: int
	error_count: int
	write_result: WriteResult
