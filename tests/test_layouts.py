"""Unit tests for catalog_ratings.scraping.layouts — score parsing and layout lookup."""

import asyncio

import pytest

from catalog_ratings.core.errors import ExtractionFailed, UnknownLayoutError
from catalog_ratings.scraping.layouts import (
    LAYOUTS,
    OPENCRITIC,
    OPENCRITIC_DETAIL_WAIT,
    get_layout,
    parse_score,
)

from fakes import FakePage, FakeSite, detail_html

URL = "https://ratings.test/game/1234/returnal"


# ============================================================================
# parse_score
# ============================================================================
class TestParseScore:
    def test_plain_integer(self):
        assert parse_score("85") == 85

    def test_percentage(self):
        assert parse_score("92%") == 92

    def test_surrounding_whitespace(self):
        assert parse_score("  77 ") == 77

    def test_empty_and_none(self):
        assert parse_score("") is None
        assert parse_score(None) is None

    def test_non_numeric(self):
        assert parse_score("TBD") is None
        assert parse_score("N/A") is None


# ============================================================================
# SiteLayout.parse_scores
# ============================================================================
class TestParseScores:
    def test_reads_three_orbs_in_order(self):
        rating = OPENCRITIC.parse_scores(detail_html(("86", "93%", "8.0"), "Mighty"), URL)
        assert rating == {
            "top_critic_average": 86,
            "critics_recommend": 93,
            "player_rating": "8.0",
            "tier": "Mighty",
            "url": URL,
        }

    def test_missing_tier_is_none(self):
        rating = OPENCRITIC.parse_scores(detail_html(("70", "55%", "6.5"), tier=None), URL)
        assert rating["tier"] is None
        assert rating["top_critic_average"] == 70

    def test_empty_alt_is_none(self):
        rating = OPENCRITIC.parse_scores(detail_html(tier=""), URL)
        assert rating["tier"] is None

    def test_fewer_than_three_orbs(self):
        rating = OPENCRITIC.parse_scores(detail_html(("81",)), URL)
        assert rating["top_critic_average"] == 81
        assert rating["critics_recommend"] is None
        assert rating["player_rating"] is None

    def test_extra_orbs_are_ignored(self):
        rating = OPENCRITIC.parse_scores(detail_html(("81", "75%", "7.9", "99")), URL)
        assert rating["player_rating"] == "7.9"

    def test_non_numeric_scores_become_none(self):
        rating = OPENCRITIC.parse_scores(detail_html(("TBD", "", "tbd")), URL)
        assert rating["top_critic_average"] is None
        assert rating["critics_recommend"] is None
        assert rating["player_rating"] == "tbd"

    def test_no_orbs_raises(self):
        with pytest.raises(ExtractionFailed):
            OPENCRITIC.parse_scores("<html><body><p>Not found</p></body></html>", URL)


# ============================================================================
# SiteLayout.extract
# ============================================================================
class TestExtract:
    def test_extract_from_live_page(self):
        site = FakeSite({"Returnal": detail_html(("86", "93%", "8.0"))})
        page = FakePage(site)
        page.query = "Returnal"
        page.url = URL

        rating = asyncio.run(OPENCRITIC.extract(page, timeout_ms=50))
        assert rating["top_critic_average"] == 86
        assert rating["url"] == URL

    def test_orbs_never_render(self):
        site = FakeSite({"Returnal": "<html><body>loading</body></html>"})
        page = FakePage(site)
        page.query = "Returnal"
        page.url = URL

        with pytest.raises(ExtractionFailed):
            asyncio.run(OPENCRITIC.extract(page, timeout_ms=50))


# ============================================================================
# get_layout
# ============================================================================
class TestGetLayout:
    def test_registered_layouts(self):
        assert get_layout("opencritic") is OPENCRITIC
        assert get_layout("OpenCritic-Detail-Wait") is OPENCRITIC_DETAIL_WAIT
        assert set(LAYOUTS) == {"opencritic", "opencritic-detail-wait"}

    def test_only_detail_wait_layout_waits_for_url(self):
        assert OPENCRITIC.detail_url_fragment is None
        assert OPENCRITIC_DETAIL_WAIT.detail_url_fragment == "/game/"

    def test_unknown_layout(self):
        with pytest.raises(UnknownLayoutError, match="metacritic"):
            get_layout("metacritic")
