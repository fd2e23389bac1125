# ===== IMPORTS & DEPENDENCIES =====
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from bs4 import BeautifulSoup
from playwright.async_api import Page, TimeoutError

from catalog_ratings.core.errors import ExtractionFailed, UnknownLayoutError
from catalog_ratings.models.rating import ScrapedRating

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")


def parse_score(text: Optional[str]) -> Optional[int]:
    """Parses the leading integer of a score text ('85', '92%'); anything else is None."""
    if not text:
        return None
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


# ===== CORE BUSINESS LOGIC =====
@dataclass(frozen=True)
class SiteLayout:
    """
    Describes how a ratings site is laid out: where the search box lives, what the
    type-ahead looks like and where the scores are rendered on a game page.

    Subclasses may override `parse_scores` when a site renders scores differently.
    """
    name: str
    search_input_selector: str
    results_selector: str
    first_result_selector: str
    score_orb_selector: str
    tier_image_selector: str
    detail_url_fragment: Optional[str] = None

    def parse_scores(self, html: str, url: str) -> ScrapedRating:
        """Reads the three score orbs and the tier badge out of a rendered detail page."""
        soup = BeautifulSoup(html, 'lxml')
        orbs = soup.select(self.score_orb_selector)
        if not orbs:
            raise ExtractionFailed(f"No score elements matching '{self.score_orb_selector}' on {url}")

        scores: List[str] = [orb.get_text(strip=True) for orb in orbs[:3]]
        scores += [""] * (3 - len(scores))
        top_critic, critics_rec, player_rate = scores

        tier = None
        tier_tag = soup.select_one(self.tier_image_selector)
        if tier_tag is not None:
            tier = tier_tag.get('alt') or None

        return ScrapedRating(
            top_critic_average=parse_score(top_critic),
            critics_recommend=parse_score(critics_rec),
            player_rating=player_rate or None,
            tier=tier,
            url=url,
        )

    async def extract(self, page: Page, timeout_ms: int) -> ScrapedRating:
        """Waits for the score orbs to render, then parses the live page."""
        try:
            await page.wait_for_selector(self.score_orb_selector, timeout=timeout_ms)
        except TimeoutError as e:
            raise ExtractionFailed(f"Score elements did not render within {timeout_ms}ms on {page.url}") from e

        html = await page.content()
        rating = self.parse_scores(html, page.url)
        logger.debug(f"[{self.__class__.__name__}:{self.name}] Parsed rating: {rating}")
        return rating


OPENCRITIC = SiteLayout(
    name="opencritic",
    search_input_selector='input[placeholder="Search"]',
    results_selector="ngb-typeahead-window",
    first_result_selector="ngb-typeahead-window button:first-child",
    score_orb_selector="app-score-orb .inner-orb",
    tier_image_selector="app-tier-display.mighty-score img",
)

OPENCRITIC_DETAIL_WAIT = SiteLayout(
    name="opencritic-detail-wait",
    search_input_selector='input[placeholder="Search"]',
    results_selector="ngb-typeahead-window",
    first_result_selector="ngb-typeahead-window button:first-child",
    score_orb_selector="app-score-orb .inner-orb",
    tier_image_selector="app-tier-display.mighty-score img",
    detail_url_fragment="/game/",
)

LAYOUTS: Dict[str, SiteLayout] = {layout.name: layout for layout in (OPENCRITIC, OPENCRITIC_DETAIL_WAIT)}


def get_layout(name: str) -> SiteLayout:
    """Looks up a registered layout by its configured name."""
    try:
        return LAYOUTS[name.lower()]
    except KeyError:
        raise UnknownLayoutError(
            f"Unknown site layout '{name}'. Available layouts: {', '.join(sorted(LAYOUTS))}"
        ) from None
