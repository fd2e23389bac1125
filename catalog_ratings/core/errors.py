# ===== EXCEPTIONS =====
from typing import Optional


class RatingPipelineError(Exception):
    """Base class for every error raised by the rating pipeline."""


class SelectorTimeout(RatingPipelineError):
    """An expected UI element never appeared within its time budget."""

    def __init__(self, selector: str, timeout_ms: int):
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms}ms waiting for '{selector}'")


class ExtractionFailed(RatingPipelineError):
    """The detail page loaded but its score elements were absent or malformed."""


class ScrapeFailed(RatingPipelineError):
    """Wraps whatever went wrong while scraping a single title."""

    def __init__(self, title: str, cause: Optional[BaseException] = None):
        self.title = title
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"Failed to scrape '{title}': {reason}")


class RecoveryFailed(RatingPipelineError):
    """A session could not be returned to the search page."""


class LaunchFailed(RatingPipelineError):
    """The browser or one of the pool's sessions could not be started."""


class UnknownLayoutError(RatingPipelineError):
    """The configured site layout name is not registered."""


class JobDeadlineExceeded(RatingPipelineError):
    """A single job ran past its overall deadline."""

    def __init__(self, deadline_s: float, state: str):
        self.deadline_s = deadline_s
        self.state = state
        super().__init__(f"Job exceeded its {deadline_s:g}s deadline while {state}")
