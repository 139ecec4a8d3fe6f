"""Error taxonomy for ingestion runs.

All of these are recovered by the coordinator's fallback policy; none of them
reaches a consumer of the ``ArticleStore``.
"""

from __future__ import annotations

from typing import Optional

from boxwall_news.models import (
    FallbackReason,
    FetchHttpError,
    FetchNoConnectivity,
    FetchOutcome,
    FetchTimedOut,
    FetchTransportError,
)


class IngestionError(Exception):
    """Base class for failures that make a run fall back to sample data."""

    reason: FallbackReason = FallbackReason.TRANSPORT_ERROR


class TransportFailure(IngestionError):
    """Raised when the blog page could not be retrieved at all."""

    def __init__(self, message: str, *, reason: FallbackReason = FallbackReason.TRANSPORT_ERROR):
        super().__init__(message)
        self.reason = reason


class ServerFailure(IngestionError):
    """Raised when the blog answered with a non-2xx status."""

    reason = FallbackReason.SERVER_ERROR

    def __init__(self, status: int):
        super().__init__(f"HTTP {status} from news source")
        self.status = status


class ParseFailure(IngestionError):
    """Raised when the document itself cannot be decoded or parsed."""

    reason = FallbackReason.PARSE_ERROR


class EmptyResult(IngestionError):
    """Raised when a parsed document yields no usable articles."""

    reason = FallbackReason.EMPTY_RESULT


class RunCancelled(Exception):
    """Raised at a checkpoint once a run has been superseded or cancelled.

    Not an ``IngestionError``: a cancelled run publishes nothing.
    """


def failure_for_outcome(outcome: FetchOutcome) -> Optional[IngestionError]:
    """Map a non-success fetch outcome to the matching failure, or None on success."""
    if isinstance(outcome, FetchTimedOut):
        return TransportFailure("request timed out", reason=FallbackReason.TIMEOUT)
    if isinstance(outcome, FetchNoConnectivity):
        return TransportFailure(outcome.message or "no connectivity", reason=FallbackReason.NO_CONNECTIVITY)
    if isinstance(outcome, FetchHttpError):
        return ServerFailure(outcome.status)
    if isinstance(outcome, FetchTransportError):
        return TransportFailure(outcome.message)
    return None
