"""Built-in articles shown whenever live ingestion cannot produce a result."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Tuple

from boxwall_news.models import Article

# (title, subtitle, content, link, age in days)
SAMPLE_ARTICLES = [
    (
        "BoxWall Launches New Sustainability Initiative",
        "Less waste on every job site",
        "BoxWall is expanding its programme for reusable wall systems and reporting the CO2 saved per project.",
        "https://boxwall.no/blogg/sustainability",
        2,
    ),
    (
        "Introducing BoxWall Premium Series",
        "A new line of acoustic partition walls",
        "The Premium Series combines sound dampening with the same quick mounting system as the standard walls.",
        "https://boxwall.no/blogg/premium",
        5,
    ),
]


def sample_articles(now: datetime) -> Tuple[Article, ...]:
    """Return the sample set dated relative to ``now``, newest first."""
    articles = [
        Article(
            title=title,
            subtitle=subtitle,
            content=content,
            image_url=None,
            published_at=now - timedelta(days=age_days),
            source_url=link,
        )
        for title, subtitle, content, link, age_days in SAMPLE_ARTICLES
    ]
    return tuple(sorted(articles, key=lambda article: article.published_at, reverse=True))
