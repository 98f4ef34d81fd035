"""Unit tests for newsdesk.backend.core.utils."""

from datetime import datetime, timedelta, timezone

import pytest

from newsdesk.backend.core.utils import slugify, to_naive_utc, total_pages, utc_now, with_suffix


class TestUtcNow:
    def test_is_naive(self):
        assert utc_now().tzinfo is None

    def test_matches_utc_clock(self):
        expected = datetime.now(timezone.utc).replace(tzinfo=None)
        assert abs(utc_now() - expected) < timedelta(seconds=2)


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "slug"),
        [
            ("Hypotéka v roku 2025!", "hypoteka-v-roku-2025"),
            ("  Spaces   everywhere  ", "spaces-everywhere"),
            ("Úver & Pôžička", "uver-and-pozicka"),
            ("Привет мир", "privet-mir"),
            ("Ипотека в 2025 году", "ipoteka-v-2025-godu"),
            ("already-a-slug", "already-a-slug"),
            ("UPPER_case", "upper-case"),
        ],
    )
    def test_slugify(self, text, slug):
        assert slugify(text) == slug

    def test_only_symbols_gives_empty_slug(self):
        assert slugify("!!!") == ""


class TestWithSuffix:
    def test_appends_counter(self):
        assert with_suffix("mortgages", 2) == "mortgages-2"


class TestTotalPages:
    @pytest.mark.parametrize(
        ("total", "limit", "pages"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, 0, 0)],
    )
    def test_total_pages(self, total, limit, pages):
        assert total_pages(total, limit) == pages


class TestToNaiveUtc:
    def test_naive_value_unchanged(self):
        value = datetime(2025, 3, 1, 12, 0)
        assert to_naive_utc(value) == value

    def test_aware_value_converted(self):
        value = datetime(2025, 3, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(value) == datetime(2025, 3, 1, 12, 0)
