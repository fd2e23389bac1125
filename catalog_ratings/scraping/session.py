# ===== IMPORTS & DEPENDENCIES =====
import asyncio
import logging
from enum import Enum
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, TimeoutError

from catalog_ratings.config import ScrapeSettings, VIEWPORT
from catalog_ratings.core.errors import JobDeadlineExceeded, RecoveryFailed, ScrapeFailed, SelectorTimeout
from catalog_ratings.models.rating import Game, JobOutcome, ScrapedRating
from catalog_ratings.scraping.layouts import SiteLayout
from catalog_ratings.utils.clean_title import normalize_game_name

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


class SessionState(Enum):
    READY = "ready"
    SEARCHING = "searching"
    AWAITING_RESULTS = "awaiting_results"
    SELECTING = "selecting"
    AWAITING_DETAIL = "awaiting_detail"
    EXTRACTING = "extracting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RECOVERING = "recovering"


# ===== CORE BUSINESS LOGIC =====
class ScrapeSession:
    """
    One isolated browser context driving the ratings site.

    Each job searches for a title, opens the first suggestion, extracts the scores and
    then always navigates back to the search page so the next job starts clean.
    """

    def __init__(self, index: int, settings: ScrapeSettings, layout: SiteLayout):
        self.index = index
        self.settings = settings
        self.layout = layout
        self.state = SessionState.READY
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def __repr__(self) -> str:
        return f"<ScrapeSession #{self.index} state={self.state.value}>"

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"[{self.__class__.__name__} #{self.index}] {self.state.value} -> {state.value}")
        self.state = state

    async def open(self, browser: Browser) -> None:
        """Creates the session's own context and page and loads the search page."""
        self.context = await browser.new_context(viewport=VIEWPORT)
        self.page = await self.context.new_page()
        await self.page.goto(
            self.settings.base_url,
            wait_until='networkidle',
            timeout=self.settings.initial_navigation_timeout_ms,
        )
        await self.page.wait_for_selector(self.layout.search_input_selector, timeout=self.settings.ui_timeout_ms)
        self._set_state(SessionState.READY)
        logger.info(f"🚀 [{self.__class__.__name__} #{self.index}] Ready on {self.settings.base_url}")

    async def close(self) -> None:
        if self.context is not None:
            await self.context.close()
            self.context = None
            self.page = None

    async def _wait_for(self, selector: str) -> None:
        try:
            await self.page.wait_for_selector(selector, timeout=self.settings.ui_timeout_ms)
        except TimeoutError as e:
            raise SelectorTimeout(selector, self.settings.ui_timeout_ms) from e

    async def _scrape(self, search_name: str) -> ScrapedRating:
        """Runs search -> select -> extract for one title. Raises on any failure."""
        ui_timeout = self.settings.ui_timeout_ms

        self._set_state(SessionState.SEARCHING)
        await self._wait_for(self.layout.search_input_selector)
        search_input = self.page.locator(self.layout.search_input_selector).first
        await search_input.fill("", timeout=ui_timeout)
        await search_input.press_sequentially(search_name, timeout=ui_timeout)

        self._set_state(SessionState.AWAITING_RESULTS)
        await self._wait_for(self.layout.results_selector)

        self._set_state(SessionState.SELECTING)
        await self.page.click(self.layout.first_result_selector, timeout=ui_timeout)

        self._set_state(SessionState.AWAITING_DETAIL)
        if self.layout.detail_url_fragment:
            try:
                await self.page.wait_for_url(f"**{self.layout.detail_url_fragment}**", timeout=ui_timeout)
            except TimeoutError:
                logger.debug(f"[{self.__class__.__name__} #{self.index}] Detail URL not reached for '{search_name}', extracting anyway.")

        self._set_state(SessionState.EXTRACTING)
        return await self.layout.extract(self.page, ui_timeout)

    async def _recover(self) -> None:
        """Navigates back to the search page and checks the search box is usable."""
        self._set_state(SessionState.RECOVERING)
        try:
            await self.page.goto(
                self.settings.base_url,
                wait_until='networkidle',
                timeout=self.settings.navigation_timeout_ms,
            )
            await self.page.wait_for_selector(self.layout.search_input_selector, timeout=self.settings.ui_timeout_ms)
        except Exception as e:
            error = RecoveryFailed(f"Session #{self.index} could not return to {self.settings.base_url}: {e}")
            logger.warning(f"⚠️ [{self.__class__.__name__} #{self.index}] {error}")
        finally:
            self._set_state(SessionState.READY)

    async def run_job(self, game: Game) -> JobOutcome:
        """
        Scrapes one game and returns its outcome. Never raises for per-job errors:
        timeouts, missing elements and the job deadline all become a failed outcome.
        """
        title = game['name']
        search_name = normalize_game_name(title)
        logger.info(f"[{self.__class__.__name__} #{self.index}] Searching for: {search_name}")

        try:
            if not search_name:
                raise ScrapeFailed(title, ValueError("normalized title is empty"))
            try:
                rating = await asyncio.wait_for(self._scrape(search_name), timeout=self.settings.job_timeout_s)
            except asyncio.TimeoutError as e:
                raise ScrapeFailed(title, JobDeadlineExceeded(self.settings.job_timeout_s, self.state.value)) from e
            except Exception as e:
                raise ScrapeFailed(title, e) from e
            self._set_state(SessionState.SUCCEEDED)
            return JobOutcome(game=game, rating=rating)
        except ScrapeFailed as e:
            self._set_state(SessionState.FAILED)
            logger.error(f"❌ [{self.__class__.__name__} #{self.index}] {e}")
            return JobOutcome(game=game, error=str(e))
        finally:
            await self._recover()
