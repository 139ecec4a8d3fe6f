"""
Coordinator for news ingestion runs.

A run fetches the blog page, extracts its posts, normalises their dates and
publishes the sorted result to the ``ArticleStore``. At most one run is active:
``refresh()`` swaps in a fresh run token before any asynchronous work starts,
which cancels the previous run. A run checks its token at every checkpoint and
only the run holding the current, uncancelled token may publish.

Every failure (transport, HTTP status, unparsable document, empty result)
publishes the built-in sample articles together with a user-facing message.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

import httpx
from structlog.stdlib import BoundLogger

from boxwall_news.core.config import Settings, get_settings
from boxwall_news.core.logging import configure_logging, generate_correlation_id, get_logger, log_exception
from boxwall_news.ingestion.dates import DateNormalizer
from boxwall_news.ingestion.errors import (
    EmptyResult,
    IngestionError,
    RunCancelled,
    failure_for_outcome,
)
from boxwall_news.ingestion.extractor import ArticleExtractor, ExtractionReport
from boxwall_news.ingestion.fetcher import HttpFetcher
from boxwall_news.ingestion.samples import sample_articles
from boxwall_news.models import Article, FallbackReason, FetchSuccess, IngestionResult, RawArticle
from boxwall_news.services.store import ArticleStore, Opener

logger = get_logger(__name__)

Clock = Callable[[], datetime]

FALLBACK_MESSAGES: Dict[FallbackReason, str] = {
    FallbackReason.TIMEOUT: "Connection timed out. Showing sample data.",
    FallbackReason.NO_CONNECTIVITY: "No internet connection. Showing sample data.",
    FallbackReason.SERVER_ERROR: "The news server returned an error. Showing sample data.",
    FallbackReason.TRANSPORT_ERROR: "Failed to load news. Showing sample data.",
    FallbackReason.PARSE_ERROR: "Failed to load news. Showing sample data.",
    FallbackReason.EMPTY_RESULT: "Could not load latest news. Showing sample data.",
}


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FALLBACK = "fallback"
    CANCELLED = "cancelled"


@dataclass
class RunToken:
    """Right of one run to publish. Replaced on every ``refresh()``."""

    run_id: str
    started_at: datetime
    cancelled: bool = False
    # Set once the run has published or wound down after cancellation.
    finished: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionCoordinator:
    """Owns the single-flight run lifecycle and the fallback policy."""

    def __init__(
        self,
        store: ArticleStore,
        *,
        settings: Optional[Settings] = None,
        fetcher: Optional[HttpFetcher] = None,
        extractor: Optional[ArticleExtractor] = None,
        date_normalizer: Optional[DateNormalizer] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.fetcher = fetcher or HttpFetcher(self.settings)
        self.extractor = extractor or ArticleExtractor(self.settings)
        self.date_normalizer = date_normalizer or DateNormalizer(self.settings.date_timezone)
        self._clock = clock or _utcnow
        self._current: Optional[RunToken] = None
        self._tasks: Set[asyncio.Task] = set()
        self.state = RunState.IDLE

    @property
    def current_run_id(self) -> Optional[str]:
        if self._current is None or not self._current.active:
            return None
        return self._current.run_id

    def refresh(self) -> asyncio.Task:
        """Start a new run, cancelling the one in flight. Must be called on a running loop."""
        loop = asyncio.get_running_loop()
        token = RunToken(run_id=generate_correlation_id(), started_at=self._clock())
        previous, self._current = self._current, token
        if previous is not None and previous.active:
            previous.cancel()
            logger.info("ingestion_run_superseded", run_id=previous.run_id, superseded_by=token.run_id)

        self.state = RunState.RUNNING
        self.store.begin_loading()

        task = loop.create_task(self._run(token), name=f"news_ingestion_{token.run_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel(self) -> None:
        """Cancel the current run, leaving the published result untouched."""
        token = self._current
        if token is None or not token.active:
            return
        token.cancel()
        self._wind_down(token)
        logger.info("ingestion_run_cancel_requested", run_id=token.run_id)

    async def aclose(self) -> None:
        """Cancel everything and wait for outstanding run tasks to finish."""
        self.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, token: RunToken) -> None:
        log = get_logger(__name__, correlation_id=token.run_id)
        log.info("ingestion_run_started", url=self.settings.source_url)

        try:
            articles = await self._ingest(token, log)
        except RunCancelled:
            self._finish_cancelled(token, log)
            return
        except asyncio.CancelledError:
            self._finish_cancelled(token, log)
            raise
        except IngestionError as exc:
            log.warning("ingestion_run_failed", reason=exc.reason.value, error=str(exc))
            self._publish_fallback(token, exc.reason, log)
            return
        except Exception as exc:
            log_exception(log, exc, {"run_id": token.run_id})
            self._publish_fallback(token, FallbackReason.PARSE_ERROR, log)
            return

        result = IngestionResult(
            articles=tuple(articles),
            used_fallback=False,
            run_id=token.run_id,
            completed_at=self._clock(),
        )
        if self._publish(token, result, RunState.COMPLETED, log):
            log.info("ingestion_run_completed", articles=len(articles))

    async def _ingest(self, token: RunToken, log: BoundLogger) -> List[Article]:
        outcome = await self.fetcher.fetch(
            self.settings.source_url,
            self.settings.fetch_timeout_seconds,
            logger=log,
        )
        self._checkpoint(token)

        failure = failure_for_outcome(outcome)
        if failure is not None:
            raise failure
        assert isinstance(outcome, FetchSuccess)

        document = await asyncio.to_thread(self.extractor.parse_document, outcome.body, outcome.encoding)
        self._checkpoint(token)

        candidates = self.extractor.select_candidates(document)
        log.debug("candidates_selected", candidates=len(candidates))

        report = ExtractionReport(candidate_count=len(candidates))
        for position, node in enumerate(candidates):
            # Let a newer refresh() run before this candidate is processed.
            await asyncio.sleep(0)
            self._checkpoint(token)

            report.record(self.extractor.extract_candidate(position, node, outcome.url), log)
            self._checkpoint(token)
        report.log_summary(log)

        articles: List[Article] = []
        for raw in report.articles:
            article = self._build_article(raw, token.started_at, log)
            if article is not None:
                articles.append(article)

        if not articles:
            raise EmptyResult(f"No usable articles among {len(candidates)} candidates")

        # sorted() is stable with reverse=True, so ties keep document order.
        return sorted(articles, key=lambda article: article.published_at, reverse=True)

    def _build_article(self, raw: RawArticle, run_started_at: datetime, log: BoundLogger) -> Optional[Article]:
        published_at = self.date_normalizer.parse(raw.date_text, fallback=run_started_at)
        try:
            return Article(
                title=raw.title,
                subtitle=raw.subtitle,
                content=raw.content,
                image_url=raw.image_url,
                published_at=published_at,
                source_url=raw.source_url or "",
            )
        except ValueError as exc:
            log.warning("candidate_skipped", position=raw.position, reason=str(exc))
            return None

    def _checkpoint(self, token: RunToken) -> None:
        if token.cancelled or token is not self._current:
            raise RunCancelled(token.run_id)

    def _publish_fallback(self, token: RunToken, reason: FallbackReason, log: BoundLogger) -> None:
        result = IngestionResult(
            articles=sample_articles(token.started_at),
            used_fallback=True,
            run_id=token.run_id,
            completed_at=self._clock(),
            error_message=FALLBACK_MESSAGES[reason],
            fallback_reason=reason,
        )
        if self._publish(token, result, RunState.FALLBACK, log):
            log.info("ingestion_fallback_published", reason=reason.value)

    def _publish(self, token: RunToken, result: IngestionResult, state: RunState, log: BoundLogger) -> bool:
        if token.cancelled or token is not self._current:
            self._finish_cancelled(token, log)
            return False
        # Listeners run inside publish() and may start the next run.
        token.finished = True
        self.state = state
        self.store.publish(result)
        return True

    def _finish_cancelled(self, token: RunToken, log: BoundLogger) -> None:
        if token is self._current and not token.finished:
            # Covers task.cancel() as well as cancel().
            token.cancel()
            self._wind_down(token)
        log.info("ingestion_run_cancelled")

    def _wind_down(self, token: RunToken) -> None:
        token.finished = True
        self.state = RunState.CANCELLED
        self.store.end_loading()


def build_pipeline(
    settings: Optional[Settings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    opener: Optional[Opener] = None,
    clock: Optional[Clock] = None,
) -> IngestionCoordinator:
    """Wire a store and coordinator from settings. The store is ``coordinator.store``.

    Also configures logging from ``log_level`` and ``log_json``.
    """
    resolved = settings or get_settings()
    configure_logging(resolved.log_level, resolved.log_json)
    store = ArticleStore(opener=opener)
    return IngestionCoordinator(
        store,
        settings=resolved,
        fetcher=HttpFetcher(resolved, client=client),
        extractor=ArticleExtractor(resolved),
        date_normalizer=DateNormalizer(resolved.date_timezone),
        clock=clock,
    )
