"""Exception types raised by the commit report pipeline.

Range, listing and settings errors abort a run.
Git and LLM failures during per-commit work are caught by the summarizer and
recorded in the report instead.
"""


#============================================
class CommitReportError(RuntimeError):
	"""
	Base class for commit report failures.
	"""


#============================================
class InvalidRangeError(CommitReportError):
	"""
	Raised when the start date falls after the end date.
	"""


#============================================
class RangeTooLargeError(CommitReportError):
	"""
	Raised when the end date exceeds start plus the maximum month span.
	"""


#============================================
class FetchFailureError(CommitReportError):
	"""
	Raised when the initial commit listing cannot be read from git.
	"""


#============================================
class GitCommandError(CommitReportError):
	"""
	Raised when one git invocation exits non-zero or git is missing.
	"""

	def __init__(self, message: str, returncode: int | None = None):
		super().__init__(message)
		self.returncode = returncode


#============================================
class SettingsError(CommitReportError):
	"""
	Raised when settings.yaml is malformed or names an unusable provider.
	"""


#============================================
class LLMError(CommitReportError):
	"""
	Base class for summarizer service failures.
	"""


#============================================
class TransportUnavailableError(LLMError):
	"""
	Raised when the configured LLM backend cannot be reached or used.
	"""


#============================================
class EmptyResponseError(LLMError):
	"""
	Raised when the LLM returns no usable text.
	"""
