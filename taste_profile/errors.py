"""Error types raised by the analysis pipeline"""
from typing import Optional, Tuple


class TasteProfileError(Exception):
    """Base class for all analysis errors"""


class FetchError(TasteProfileError):
    """A remote catalog call failed.

    Carries the underlying cause and, for artist batches, the index range
    of the chunk that failed.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 chunk_range: Optional[Tuple[int, int]] = None, source: Optional[str] = None):
        self.message = message
        self.cause = cause
        self.chunk_range = chunk_range
        self.source = source
        details = message
        if source:
            details = f"[{source}] {details}"
        if chunk_range is not None:
            details += f" (chunk {chunk_range[0]}..{chunk_range[1]})"
        if cause is not None:
            details += f": {cause}"
        super().__init__(details)

    def with_source(self, source: str) -> 'FetchError':
        """Return a copy annotated with the source kind it came from"""
        return FetchError(self.message, self.cause, self.chunk_range, source)


class NoDataError(TasteProfileError):
    """A fully walked source yielded zero history items"""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"No history items found for source {source}")


class ExhaustedSourcesError(TasteProfileError):
    """Both the primary and the fallback source failed"""

    def __init__(self, primary_error: BaseException, fallback_error: BaseException):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Could not analyze primary source ({primary_error}) or fallback source ({fallback_error})"
        )


class AnalysisCancelled(TasteProfileError):
    """The analysis was cancelled or ran past its deadline"""
