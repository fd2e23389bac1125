# ===== TYPES & INTERFACES =====

from dataclasses import dataclass, field
from typing import TypedDict, List, Optional


class Game(TypedDict):
    """
    A catalogue entry waiting for a rating.

    Attributes:
        id (int): Internal catalogue row id.
        name (str): The title as it appears in the catalogue.
        entitlement_id (str): Stable external identifier, unique per game.
    """
    id: int
    name: str
    entitlement_id: str


class ScrapedRating(TypedDict):
    """
    The raw values pulled off a game's detail page.

    Attributes:
        top_critic_average (Optional[int]): Top critic average (0-100).
        critics_recommend (Optional[int]): Percentage of critics recommending the game.
        player_rating (Optional[str]): Player rating as displayed by the site.
        tier (Optional[str]): Tier label, e.g. 'Mighty', 'Strong', 'Fair'.
        url (str): Canonical URL of the detail page.
    """
    top_critic_average: Optional[int]
    critics_recommend: Optional[int]
    player_rating: Optional[str]
    tier: Optional[str]
    url: str


class RatingRecord(ScrapedRating):
    """A persisted rating row, keyed by `entitlement_id`."""
    entitlement_id: str
    updated_at: str


class FailureRecord(TypedDict):
    """A persisted failure row for a game that has no rating yet."""
    entitlement_id: str
    error_message: str
    observed_at: str


@dataclass
class JobOutcome:
    """Terminal result of one scrape job. Exactly one of `rating` / `error` is set."""
    game: Game
    rating: Optional[ScrapedRating] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.rating is not None


@dataclass
class RunSummary:
    """Aggregate counters for a pipeline run."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_titles: List[str] = field(default_factory=list)

    def merge(self, outcomes: List[JobOutcome]) -> None:
        """Folds a settled batch of outcomes into the run totals."""
        for outcome in outcomes:
            self.processed += 1
            if outcome.succeeded:
                self.succeeded += 1
            else:
                self.failed += 1
                self.failed_titles.append(outcome.game['name'])

    def format_report(self) -> str:
        lines = [
            "========== SUMMARY ==========",
            f"Total games: {self.processed}",
            f"Successfully scraped: {self.succeeded}",
            f"Failed: {self.failed}",
        ]
        if self.failed_titles:
            lines.append("")
            lines.append("========== FAILED GAMES ==========")
            lines.extend(f"  - {title}" for title in self.failed_titles)
        return "\n".join(lines)
