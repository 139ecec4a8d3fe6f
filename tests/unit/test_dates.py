"""Unit tests for Norwegian publication date parsing."""

from datetime import datetime, timezone

import pytest
from dateutil import tz

from boxwall_news.ingestion.dates import DateNormalizer

FALLBACK = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
OSLO = tz.gettz("Europe/Oslo")


class TestDateNormalizer:
    """Test parsing against the dd. MMM. yyyy pattern."""

    def setup_method(self):
        self.normalizer = DateNormalizer("Europe/Oslo")

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("12. okt. 2024", datetime(2024, 10, 12, tzinfo=OSLO)),
            ("5. mar. 2024", datetime(2024, 3, 5, tzinfo=OSLO)),
            ("20. mai 2024", datetime(2024, 5, 20, tzinfo=OSLO)),
            ("01. des. 2023", datetime(2023, 12, 1, tzinfo=OSLO)),
            ("  3. jan. 2025 ", datetime(2025, 1, 3, tzinfo=OSLO)),
            ("12. okt.2024", datetime(2024, 10, 12, tzinfo=OSLO)),
        ],
    )
    def test_parse_valid_dates(self, text, expected):
        assert self.normalizer.parse(text, fallback=FALLBACK) == expected

    def test_parsed_date_is_midnight_in_configured_zone(self):
        parsed = self.normalizer.parse("12. okt. 2024", fallback=FALLBACK)
        assert parsed.tzinfo is OSLO
        assert (parsed.hour, parsed.minute) == (0, 0)

    @pytest.mark.parametrize(
        "text",
        ["", "i går", "12 October 2024", "2024-10-12", "31. feb. 2024", "12. foo. 2024", "okt. 2024"],
    )
    def test_unparsable_dates_fall_back(self, text):
        assert self.normalizer.parse(text, fallback=FALLBACK) is FALLBACK

    def test_try_parse_returns_none_for_garbage(self):
        assert self.normalizer.try_parse("not a date") is None
        assert self.normalizer.try_parse(None) is None

    def test_format_round_trips_blog_pattern(self):
        assert self.normalizer.format(datetime(2024, 10, 12, tzinfo=OSLO)) == "12. okt. 2024"
        assert self.normalizer.format(datetime(2024, 5, 2, tzinfo=OSLO)) == "02. mai 2024"

    def test_unknown_zone_rejected(self):
        with pytest.raises(ValueError, match="Unknown time zone"):
            DateNormalizer("Mars/Olympus_Mons")
