"""Run coordination and consumer-facing state."""

from .coordinator import FALLBACK_MESSAGES, IngestionCoordinator, RunState, RunToken, build_pipeline
from .store import ArticleStore

__all__ = [
    "FALLBACK_MESSAGES",
    "IngestionCoordinator",
    "RunState",
    "RunToken",
    "build_pipeline",
    "ArticleStore",
]
