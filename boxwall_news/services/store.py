"""
Observable state shared with the presentation layer.

The store is an owned object: the coordinator writes to it, every consumer
gets the same instance injected and only reads from it.
"""

from __future__ import annotations

import webbrowser
from typing import Callable, List, Optional, Tuple

from boxwall_news.core.logging import get_logger
from boxwall_news.models import Article, IngestionResult

logger = get_logger(__name__)

Listener = Callable[["ArticleStore"], None]
Opener = Callable[[str], object]


class ArticleStore:
    """Holds the last published ``IngestionResult`` and the loading flag."""

    def __init__(self, *, opener: Optional[Opener] = None) -> None:
        self._result: Optional[IngestionResult] = None
        self._is_loading = False
        self._listeners: List[Listener] = []
        self._opener: Opener = opener or webbrowser.open

    @property
    def result(self) -> Optional[IngestionResult]:
        return self._result

    @property
    def articles(self) -> Tuple[Article, ...]:
        return self._result.articles if self._result is not None else ()

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error_message(self) -> Optional[str]:
        if self._result is None or not self._result.used_fallback:
            return None
        return self._result.error_message

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_loading(self) -> None:
        if not self._is_loading:
            self._is_loading = True
            self._notify()

    def end_loading(self) -> None:
        if self._is_loading:
            self._is_loading = False
            self._notify()

    def publish(self, result: IngestionResult) -> None:
        """Replace the current result and clear the loading flag in one step."""
        self._result = result
        self._is_loading = False
        self._notify()

    def open_article(self, article: Article) -> None:
        logger.info("article_opened", article_id=article.id, url=article.source_url)
        self._opener(article.source_url)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as exc:
                logger.warning("store_listener_failed", error=str(exc), error_type=type(exc).__name__)
