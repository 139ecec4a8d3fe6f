"""
HTML extraction of blog posts.

The blog page is a Wix blog: every post is rendered as an ``<article>``
element with a heading, optional excerpt/body/date nodes, a "read more" link
and an optional lazy ``<wow-image>`` whose ``data-image-info`` attribute holds
a JSON payload with the image URI.

Every field is read by its own accessor returning a ``FieldResult``. The
record builder decides per field whether an error degrades the field or
rejects the candidate; only a missing source link rejects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Set, TypeVar, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from structlog.stdlib import BoundLogger

from boxwall_news.core.config import Settings, get_settings
from boxwall_news.core.logging import get_logger
from boxwall_news.ingestion.errors import ParseFailure
from boxwall_news.models import RawArticle, is_absolute_http_url

logger = get_logger(__name__)

T = TypeVar("T")

CANDIDATE_SELECTOR = "article"
TITLE_SELECTOR = "h2"
SUBTITLE_SELECTOR = ".post-excerpt"
CONTENT_SELECTOR = ".post-content"
DATE_SELECTOR = ".post-metadata__date"
READ_MORE_SELECTOR = "a.blog-link-hover-color"
PERMALINK_SELECTOR = 'a[href*="/post/"]'
IMAGE_SELECTOR = "wow-image[data-image-info]"
IMAGE_INFO_ATTRIBUTE = "data-image-info"


@dataclass(frozen=True)
class FieldResult(Generic[T]):
    """Value of one extracted field, or the reason it could not be read."""

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


@dataclass(frozen=True)
class CandidateResult:
    position: int
    article: Optional[RawArticle] = None
    skip_reason: Optional[str] = None
    field_errors: dict = field(default_factory=dict)

    @property
    def skipped(self) -> bool:
        return self.article is None


@dataclass
class ExtractionReport:
    """All records extracted from one document, plus the skipped candidates.

    A candidate whose source link was already extracted is skipped, so every
    record in ``articles`` links to a distinct post.
    """

    articles: List[RawArticle] = field(default_factory=list)
    skipped: List[CandidateResult] = field(default_factory=list)
    candidate_count: int = 0
    _seen_links: Set[str] = field(default_factory=set, repr=False, compare=False)

    def record(self, result: CandidateResult, log: Optional[BoundLogger] = None) -> None:
        if not result.skipped and result.article.source_url in self._seen_links:
            result = CandidateResult(
                position=result.position,
                skip_reason=f"duplicate source link {result.article.source_url!r}",
                field_errors=result.field_errors,
            )
        if result.skipped:
            log_skipped_candidate(result, log)
            self.skipped.append(result)
            return
        self._seen_links.add(result.article.source_url)
        self.articles.append(result.article)

    def log_summary(self, log: Optional[BoundLogger] = None) -> None:
        (log or logger).info(
            "articles_extracted",
            candidates=self.candidate_count,
            extracted=len(self.articles),
            skipped=len(self.skipped),
        )


def _clean_text(node: Tag) -> str:
    return " ".join(node.get_text(" ").split())


def text_field(node: Tag, selector: str) -> FieldResult[str]:
    """Text of the first ``selector`` match; value is None when there is no match."""
    match = node.select_one(selector)
    if match is None:
        return FieldResult()
    return FieldResult(value=_clean_text(match))


def _href(node: Tag, selector: str) -> Optional[str]:
    link = node.select_one(selector)
    if link is None:
        return None
    href = link.get("href")
    if isinstance(href, list):
        href = " ".join(href)
    href = (href or "").strip()
    return href or None


def source_url_field(node: Tag, page_url: str) -> FieldResult[str]:
    """The post's link: the "read more" anchor first, then any permalink anchor."""
    attempts = []
    for selector in (READ_MORE_SELECTOR, PERMALINK_SELECTOR):
        href = _href(node, selector)
        if href is None:
            attempts.append(f"{selector}: missing")
            continue
        resolved = urljoin(page_url, href)
        if is_absolute_http_url(resolved):
            return FieldResult(value=resolved)
        attempts.append(f"{selector}: unresolvable {href!r}")
    return FieldResult(error="no source link (" + "; ".join(attempts) + ")")


def image_url_field(node: Tag, image_base_url: str) -> FieldResult[str]:
    """Image URL from the lazy-image JSON payload; value is None when there is no image."""
    image = node.select_one(IMAGE_SELECTOR)
    if image is None:
        return FieldResult()
    raw = image.get(IMAGE_INFO_ATTRIBUTE)
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        return FieldResult(error=f"invalid image info JSON: {exc}")
    image_data = payload.get("imageData") if isinstance(payload, dict) else None
    uri = image_data.get("uri") if isinstance(image_data, dict) else None
    if not isinstance(uri, str) or not uri.strip():
        return FieldResult(error="image info has no imageData.uri")
    return FieldResult(value=f"{image_base_url.rstrip('/')}/{uri.strip().lstrip('/')}")


class ArticleExtractor:
    """Parses the blog page and turns its candidate nodes into ``RawArticle`` records."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def parse_document(self, body: Union[bytes, str], encoding: Optional[str] = None) -> BeautifulSoup:
        """Decode and parse the page. Raises ``ParseFailure`` when that is impossible."""
        if isinstance(body, bytes):
            try:
                text = body.decode(encoding or "utf-8")
            except LookupError:
                logger.warning("document_unknown_encoding", encoding=encoding)
                try:
                    text = body.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ParseFailure(f"Document is not valid UTF-8: {exc}") from exc
            except UnicodeDecodeError as exc:
                raise ParseFailure(f"Document could not be decoded as {encoding or 'utf-8'}: {exc}") from exc
        else:
            text = body

        try:
            return BeautifulSoup(text, "html.parser")
        except (ParserRejectedMarkup, AssertionError) as exc:
            raise ParseFailure(f"Document could not be parsed: {exc}") from exc

    def select_candidates(self, document: BeautifulSoup) -> List[Tag]:
        return document.select(CANDIDATE_SELECTOR)

    def extract_candidate(self, position: int, node: Tag, page_url: Optional[str] = None) -> CandidateResult:
        """Build one record. Never raises; failures end up in the result.

        Relative links resolve against ``page_url``, the configured source URL
        by default.
        """
        try:
            source = source_url_field(node, page_url or self.settings.source_url)
            if not source.ok:
                return CandidateResult(position=position, skip_reason=source.error)

            fields = {
                "title": text_field(node, TITLE_SELECTOR),
                "subtitle": text_field(node, SUBTITLE_SELECTOR),
                "content": text_field(node, CONTENT_SELECTOR),
                "date_text": text_field(node, DATE_SELECTOR),
                "image_url": image_url_field(node, self.settings.image_base_url),
            }
            errors = {name: result.error for name, result in fields.items() if not result.ok}

            article = RawArticle(
                position=position,
                title=fields["title"].value_or(""),
                subtitle=fields["subtitle"].value_or(None),
                content=fields["content"].value_or(""),
                date_text=fields["date_text"].value_or(""),
                image_url=fields["image_url"].value_or(None),
                source_url=source.value,
            )
        except Exception as exc:
            return CandidateResult(position=position, skip_reason=f"{type(exc).__name__}: {exc}")

        if errors:
            logger.debug("candidate_fields_degraded", position=position, errors=errors)
        return CandidateResult(position=position, article=article, field_errors=errors)

    def extract(
        self,
        html: Union[bytes, str],
        encoding: Optional[str] = None,
        page_url: Optional[str] = None,
    ) -> List[RawArticle]:
        """Parse ``html`` and return every usable record in document order."""
        return self.extract_report(html, encoding, page_url).articles

    def extract_report(
        self,
        html: Union[bytes, str],
        encoding: Optional[str] = None,
        page_url: Optional[str] = None,
    ) -> ExtractionReport:
        document = self.parse_document(html, encoding)
        candidates = self.select_candidates(document)
        report = ExtractionReport(candidate_count=len(candidates))

        for position, node in enumerate(candidates):
            report.record(self.extract_candidate(position, node, page_url))

        report.log_summary()
        return report


def log_skipped_candidate(result: CandidateResult, log: Optional[BoundLogger] = None) -> None:
    (log or logger).warning("candidate_skipped", position=result.position, reason=result.skip_reason)
