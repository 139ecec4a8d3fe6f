"""
Data models for the news ingestion pipeline.

``RawArticle`` and the ``Fetch*`` outcome variants only live for the duration
of one ingestion run. ``IngestionResult`` is the value that is published to
the ``ArticleStore`` and retained between runs.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union
from urllib.parse import urlparse


def is_absolute_http_url(value: Optional[str]) -> bool:
    """Return True when ``value`` is an absolute http(s) URI with a host."""
    if not value:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class Article:
    """A published blog article."""

    title: str
    content: str
    published_at: datetime
    source_url: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    id: str = field(init=False)

    def __post_init__(self):
        if not is_absolute_http_url(self.source_url):
            raise ValueError(f"Article source_url must be an absolute http(s) URL: {self.source_url!r}")
        if self.published_at is None:
            raise ValueError("Article published_at is required")
        # Same link, same id: stable for as long as the page lists the post.
        object.__setattr__(self, "id", str(uuid.uuid5(uuid.NAMESPACE_URL, self.source_url)))


@dataclass(frozen=True)
class RawArticle:
    """Fields extracted from one candidate node, before date normalisation."""

    position: int
    title: str
    content: str
    date_text: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    source_url: Optional[str] = None


class FallbackReason(str, Enum):
    """Why a run published the sample articles instead of live ones."""

    TIMEOUT = "timeout"
    NO_CONNECTIVITY = "no_connectivity"
    SERVER_ERROR = "server_error"
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"
    EMPTY_RESULT = "empty_result"


@dataclass(frozen=True)
class IngestionResult:
    """The outcome of one completed run, as seen by consumers."""

    articles: Tuple[Article, ...]
    used_fallback: bool
    run_id: str
    completed_at: datetime
    error_message: Optional[str] = None
    fallback_reason: Optional[FallbackReason] = None


@dataclass(frozen=True)
class FetchSuccess:
    body: bytes
    status: int
    encoding: Optional[str] = None
    # Final URL after redirects; relative links resolve against it.
    url: Optional[str] = None


@dataclass(frozen=True)
class FetchTimedOut:
    pass


@dataclass(frozen=True)
class FetchNoConnectivity:
    message: str = ""


@dataclass(frozen=True)
class FetchHttpError:
    status: int


@dataclass(frozen=True)
class FetchTransportError:
    message: str


FetchOutcome = Union[FetchSuccess, FetchTimedOut, FetchNoConnectivity, FetchHttpError, FetchTransportError]
