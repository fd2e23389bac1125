# ===== IMPORTS & DEPENDENCIES =====
import logging
from typing import List, Optional

from playwright.async_api import async_playwright, Browser, Playwright

from catalog_ratings.config import ScrapeSettings, BROWSER_ARGS
from catalog_ratings.core.errors import LaunchFailed
from catalog_ratings.scraping.layouts import SiteLayout
from catalog_ratings.scraping.session import ScrapeSession

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

# ===== CORE BUSINESS LOGIC =====
class SessionPool:
    """
    Owns a fixed number of scrape sessions for the lifetime of a run.

    All sessions share one Chromium process but each gets its own browser context, so
    no cookies, DOM or navigation state leak between them. Launching is all-or-nothing:
    if any session fails to start, everything opened so far is closed and LaunchFailed
    is raised.
    """

    def __init__(self, settings: ScrapeSettings, layout: SiteLayout, size: int, browser: Optional[Browser] = None):
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")
        self.settings = settings
        self.layout = layout
        self.size = size
        self.sessions: List[ScrapeSession] = []
        self._browser = browser
        self._owns_browser = browser is None
        self._playwright: Optional[Playwright] = None

    async def __aenter__(self) -> "SessionPool":
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _start_browser(self) -> Browser:
        self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(headless=self.settings.headless, args=BROWSER_ARGS)

    async def launch(self) -> None:
        """Starts the browser (unless one was injected) and opens every session."""
        logger.info(f"🚀 [{self.__class__.__name__}] Launching {self.size} session(s) against {self.settings.base_url}")
        try:
            if self._browser is None:
                self._browser = await self._start_browser()
            for index in range(1, self.size + 1):
                session = ScrapeSession(index, self.settings, self.layout)
                self.sessions.append(session)
                await session.open(self._browser)
        except Exception as e:
            logger.error(f"❌ [{self.__class__.__name__}] Launch failed: {e}", exc_info=True)
            await self.close()
            raise LaunchFailed(f"Could not launch a pool of {self.size} session(s): {e}") from e
        logger.info(f"✅ [{self.__class__.__name__}] All {self.size} session(s) ready.")

    async def close(self) -> None:
        """Closes every session, then the browser and Playwright if the pool started them."""
        for session in self.sessions:
            try:
                await session.close()
            except Exception as e:
                logger.warning(f"⚠️ [{self.__class__.__name__}] Error closing session #{session.index}: {e}")
        self.sessions = []

        if self._owns_browser and self._browser is not None:
            try:
                await self._browser.close()
                logger.debug(f"[{self.__class__.__name__}] Playwright browser closed.")
            except Exception as e:
                logger.warning(f"⚠️ [{self.__class__.__name__}] Error closing browser: {e}")
            self._browser = None

        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"⚠️ [{self.__class__.__name__}] Error stopping Playwright: {e}")
