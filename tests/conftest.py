"""Shared fixtures for the catalog_ratings test suite."""

import pytest

from catalog_ratings.config import ScrapeSettings
from catalog_ratings.core.database import Database
from catalog_ratings.scraping.layouts import OPENCRITIC

from fakes import BASE_URL, FakeBrowser, FakeSite, detail_html


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """Settings with short timeouts so failing waits resolve quickly."""
    return ScrapeSettings(
        base_url=BASE_URL,
        layout_name="opencritic",
        pool_size=4,
        headless=True,
        ui_timeout_ms=50,
        navigation_timeout_ms=50,
        initial_navigation_timeout_ms=50,
        job_timeout_s=2.0,
    )


@pytest.fixture
def layout():
    return OPENCRITIC


@pytest.fixture
def site():
    """A site that knows three games."""
    return FakeSite({
        "God of War Ragnarök": detail_html(("94", "98%", "9.1"), "Mighty"),
        "Returnal": detail_html(("86", "93%", "8.0"), "Mighty"),
        "Ghost of Tsushima": detail_html(("85", "91%", ""), "Strong"),
    })


@pytest.fixture
def browser(site):
    return FakeBrowser(site)


@pytest.fixture
def db(tmp_path):
    return Database(str(tmp_path / "data" / "games.db"))


@pytest.fixture
def catalogue(db):
    """A catalogue with four purchased games; returns the Database."""
    db.upsert_purchased_game("ENT-1", "God of War Ragnarök - Digital Deluxe Edition", platform="ps5")
    db.upsert_purchased_game("ENT-2", "Returnal - PS5 Version", platform="ps5")
    db.upsert_purchased_game("ENT-3", "Ghost of Tsushima™", platform="ps4", is_active=True)
    db.upsert_purchased_game("ENT-4", "Unknown Indie Game", platform="ps4")
    return db
