"""Async HTTP fetching of the blog page."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from structlog.stdlib import BoundLogger

from boxwall_news.core.config import Settings, get_settings
from boxwall_news.core.logging import get_logger
from boxwall_news.models import (
    FetchHttpError,
    FetchNoConnectivity,
    FetchOutcome,
    FetchSuccess,
    FetchTimedOut,
    FetchTransportError,
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@asynccontextmanager
async def _client_context(
    client: Optional[httpx.AsyncClient],
    *,
    timeout: float,
    user_agent: str,
) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": user_agent},
        follow_redirects=True,
    ) as owned_client:
        yield owned_client


class HttpFetcher:
    """Issues one timed, cache-bypassing GET and classifies the outcome.

    ``fetch`` never raises; every failure is returned as one of the
    ``FetchOutcome`` variants. Task cancellation still propagates.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client

    async def fetch(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        *,
        logger: Optional[BoundLogger] = None,
    ) -> FetchOutcome:
        target = url or self.settings.source_url
        effective_timeout = timeout if timeout is not None else self.settings.fetch_timeout_seconds
        log = (logger or get_logger(__name__)).bind(url=target)

        log.debug("news_fetch_started", timeout_seconds=effective_timeout)
        try:
            async with _client_context(
                self._client,
                timeout=effective_timeout,
                user_agent=self.settings.user_agent,
            ) as active_client:
                response = await active_client.get(
                    target,
                    headers=NO_CACHE_HEADERS,
                    timeout=effective_timeout,
                    follow_redirects=True,
                )
        except httpx.TimeoutException as exc:
            log.warning("news_fetch_timed_out", error=str(exc))
            return FetchTimedOut()
        except httpx.ConnectError as exc:
            log.warning("news_fetch_no_connectivity", error=str(exc))
            return FetchNoConnectivity(message=str(exc))
        except httpx.HTTPError as exc:
            log.warning("news_fetch_transport_error", error=str(exc), error_type=type(exc).__name__)
            return FetchTransportError(message=str(exc) or type(exc).__name__)
        except (httpx.InvalidURL, OSError) as exc:
            log.warning("news_fetch_transport_error", error=str(exc), error_type=type(exc).__name__)
            return FetchTransportError(message=str(exc) or type(exc).__name__)

        status = response.status_code
        if not 200 <= status <= 299:
            if status == 404:
                log.warning("news_page_not_found", status_code=status)
            elif status >= 500:
                log.warning("news_server_error", status_code=status)
            else:
                log.warning("news_fetch_http_error", status_code=status)
            return FetchHttpError(status=status)

        log.info("news_fetch_succeeded", status_code=status, bytes=len(response.content))
        return FetchSuccess(
            body=response.content,
            status=status,
            encoding=response.charset_encoding,
            url=str(response.url),
        )
