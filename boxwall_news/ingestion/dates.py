"""Parsing of the blog's Norwegian publication dates (``"12. okt. 2024"``)."""

from __future__ import annotations

import re
from datetime import datetime, tzinfo
from typing import Optional

from dateutil import parser as date_parser
from dateutil import tz

from boxwall_news.core.logging import get_logger

logger = get_logger(__name__)

# dd. MMM. yyyy; the period after the month is absent for short names like "mai".
DATE_PATTERN = re.compile(r"^\s*(\d{1,2})\.\s*([^\W\d_]+)\.?\s*(\d{4})\s*$")


class NorwegianParserInfo(date_parser.parserinfo):
    """Month-name table for the nb_NO locale."""

    MONTHS = [
        ("jan", "januar"),
        ("feb", "februar"),
        ("mar", "mars"),
        ("apr", "april"),
        ("mai",),
        ("jun", "juni"),
        ("jul", "juli"),
        ("aug", "august"),
        ("sep", "sept", "september"),
        ("okt", "oktober"),
        ("nov", "november"),
        ("des", "desember"),
    ]


MONTH_ABBREVIATIONS = ["jan.", "feb.", "mar.", "apr.", "mai", "jun.", "jul.", "aug.", "sep.", "okt.", "nov.", "des."]


class DateNormalizer:
    """Turns the blog's date strings into aware timestamps.

    Anything that does not match ``dd. MMM. yyyy`` resolves to the fallback
    timestamp the caller passes in, so a record is never dropped or left
    unsortable because of its date.
    """

    def __init__(self, timezone: str | tzinfo = "Europe/Oslo") -> None:
        zone = tz.gettz(timezone) if isinstance(timezone, str) else timezone
        if zone is None:
            raise ValueError(f"Unknown time zone: {timezone}")
        self.timezone = zone
        self._parserinfo = NorwegianParserInfo(dayfirst=True)

    def parse(self, text: str, fallback: datetime) -> datetime:
        parsed = self.try_parse(text)
        if parsed is None:
            logger.debug("date_parse_fallback", date_text=text)
            return fallback
        return parsed

    def try_parse(self, text: Optional[str]) -> Optional[datetime]:
        """Parse ``text`` strictly; None when it does not match the pattern."""
        if not text:
            return None
        match = DATE_PATTERN.match(text)
        if not match:
            return None
        day, month_name, year = match.groups()
        if self._parserinfo.month(month_name) is None:
            return None
        try:
            parsed = date_parser.parse(
                f"{day} {month_name} {year}",
                parserinfo=self._parserinfo,
                default=datetime(int(year), 1, 1),
            )
        except (ValueError, OverflowError):
            return None
        return parsed.replace(tzinfo=self.timezone)

    def format(self, timestamp: datetime) -> str:
        """Render ``timestamp`` in the same ``dd. MMM. yyyy`` form the blog uses."""
        local = timestamp.astimezone(self.timezone) if timestamp.tzinfo else timestamp
        return f"{local.day:02d}. {MONTH_ABBREVIATIONS[local.month - 1]} {local.year}"
