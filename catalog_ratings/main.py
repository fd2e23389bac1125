# ===== IMPORTS & DEPENDENCIES =====
import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional, Sequence

# --- Configuration ---
from catalog_ratings.config import LOG_LEVEL, DATABASE_PATH, SAMPLE_TITLES, ScrapeSettings

# --- Core Components ---
from catalog_ratings.core.database import Database
from catalog_ratings.core.errors import LaunchFailed, UnknownLayoutError

# --- Data Models ---
from catalog_ratings.models.rating import Game, JobOutcome, RunSummary

# --- Scraping ---
from catalog_ratings.scraping.layouts import SiteLayout, get_layout
from catalog_ratings.scraping.session_pool import SessionPool

# ===== CONFIGURATION & CONSTANTS =====
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

PoolFactory = Callable[[ScrapeSettings, SiteLayout, int], SessionPool]


def _batched(games: Sequence[Game], size: int) -> List[List[Game]]:
    return [list(games[i:i + size]) for i in range(0, len(games), size)]


# ===== CORE BUSINESS LOGIC / PIPELINE =====
class RatingPipeline:
    """
    Scrapes ratings for a queue of games with a fixed pool of browser sessions.

    Games are cut into consecutive batches of pool size; game i of a batch always goes
    to session i. A batch settles completely before the next one starts, and only
    after it settles are the outcomes persisted and counted.
    """

    def __init__(
        self,
        db: Optional[Database],
        settings: ScrapeSettings,
        layout: SiteLayout,
        pool_factory: PoolFactory = SessionPool,
    ):
        self.db = db
        self.settings = settings
        self.layout = layout
        self.pool_factory = pool_factory
        self.outcomes: List[JobOutcome] = []

    def _persist(self, outcome: JobOutcome) -> None:
        """Writes one outcome to the store. A no-op when running without a database."""
        if self.db is None:
            return
        entitlement_id = outcome.game['entitlement_id']
        if outcome.succeeded:
            self.db.upsert_rating(entitlement_id, outcome.rating)
        else:
            self.db.upsert_failure(entitlement_id, outcome.error)

    def _log_outcome(self, position: int, total: int, outcome: JobOutcome) -> None:
        name = outcome.game['name']
        if outcome.succeeded:
            rating = outcome.rating
            logger.info(f"✅ [{position}/{total}] Saved: {name} - {rating['tier']} - {rating['top_critic_average']}/100")
        else:
            logger.info(f"❌ [{position}/{total}] Failed to scrape rating: {name}")

    async def _run_batch(self, sessions, batch: List[Game]) -> List[JobOutcome]:
        """Runs one job per session and waits for all of them, whatever their result."""
        tasks = [session.run_job(game) for session, game in zip(sessions, batch)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: List[JobOutcome] = []
        for game, result in zip(batch, results):
            if isinstance(result, JobOutcome):
                outcomes.append(result)
            else:
                logger.error(f"❌ [{self.__class__.__name__}] Unhandled error for '{game['name']}': {result!r}")
                outcomes.append(JobOutcome(game=game, error=f"{type(result).__name__}: {result}"))
        return outcomes

    async def run(self, games: Sequence[Game]) -> RunSummary:
        """Executes the complete scrape over `games` and returns the run summary."""
        summary = RunSummary()
        self.outcomes = []
        total = len(games)
        if total == 0:
            logger.info("No games to process")
            return summary

        pool_size = min(self.settings.pool_size, total)
        batches = _batched(games, pool_size)
        logger.info(
            f"🚀 [{self.__class__.__name__}] Processing {total} game(s) in {len(batches)} batch(es) "
            f"with {pool_size} session(s) using layout '{self.layout.name}'"
        )

        async with self.pool_factory(self.settings, self.layout, pool_size) as pool:
            for batch_no, batch in enumerate(batches, start=1):
                offset = (batch_no - 1) * pool_size
                for i, game in enumerate(batch, start=1):
                    logger.info(f"[{offset + i}/{total}] Processing: {game['name']} (session #{i})")

                outcomes = await self._run_batch(pool.sessions, batch)

                for i, outcome in enumerate(outcomes, start=1):
                    self._persist(outcome)
                    self._log_outcome(offset + i, total, outcome)
                summary.merge(outcomes)
                self.outcomes.extend(outcomes)
                logger.info(
                    f"[{self.__class__.__name__}] Batch {batch_no}/{len(batches)} settled: "
                    f"{summary.succeeded} succeeded, {summary.failed} failed so far"
                )

        logger.info(f"🏁 [{self.__class__.__name__}] Run finished.")
        return summary


def format_sample_report(outcomes: List[JobOutcome]) -> str:
    """Renders the per-title ratings block printed in sample mode."""
    lines = ["========== GAME RATINGS ==========", ""]
    for outcome in outcomes:
        if not outcome.succeeded:
            continue
        rating = outcome.rating
        lines.extend([
            f"Game: {outcome.game['name']}",
            f"  Tier: {rating['tier'] or 'No Tier'}",
            f"  Top Critic Average: {rating['top_critic_average']}",
            f"  Critics Recommend: {rating['critics_recommend']}",
            f"  Player Rating: {rating['player_rating']}",
            f"  URL: {rating['url']}",
            "",
        ])
    return "\n".join(lines)


# ===== INITIALIZATION & STARTUP =====
def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    defaults = ScrapeSettings()
    p = argparse.ArgumentParser(description="Scrape critic and player ratings for games in the catalogue.")
    p.add_argument("--db", default=DATABASE_PATH, help=f"SQLite database path (default: {DATABASE_PATH})")
    p.add_argument("--pool-size", type=int, default=defaults.pool_size, help="Number of parallel browser sessions")
    p.add_argument("--limit", type=int, default=None, help="Only process the first N pending games")
    p.add_argument("--layout", default=defaults.layout_name, help="Ratings site layout to use")
    p.add_argument("--base-url", default=defaults.base_url, help="Ratings site home page")
    p.add_argument("--ui-timeout-ms", type=int, default=defaults.ui_timeout_ms, help="Timeout for each UI wait")
    p.add_argument("--job-timeout", type=float, default=defaults.job_timeout_s, help="Deadline for one job, in seconds")
    p.add_argument("--headed", action="store_true", help="Show the browser windows")
    p.add_argument("--titles", nargs="*", default=None,
                   help="Sample mode: scrape these titles (or a built-in list) without touching the database")
    args = p.parse_args(argv)
    if args.pool_size < 1:
        p.error("--pool-size must be at least 1")
    if args.limit is not None and args.limit < 0:
        p.error("--limit must not be negative")
    return args


def settings_from_args(args: argparse.Namespace) -> ScrapeSettings:
    defaults = ScrapeSettings()
    return ScrapeSettings(
        base_url=args.base_url,
        layout_name=args.layout,
        pool_size=args.pool_size,
        headless=defaults.headless and not args.headed,
        ui_timeout_ms=args.ui_timeout_ms,
        navigation_timeout_ms=defaults.navigation_timeout_ms,
        initial_navigation_timeout_ms=defaults.initial_navigation_timeout_ms,
        job_timeout_s=args.job_timeout,
    )


async def run(args: argparse.Namespace) -> int:
    """Runs either the catalogue pipeline or sample mode. Returns a process exit code."""
    settings = settings_from_args(args)
    try:
        layout = get_layout(settings.layout_name)
    except UnknownLayoutError as e:
        logger.error(f"❌ {e}")
        return 2

    if args.titles is not None:
        titles = args.titles or SAMPLE_TITLES
        games = [Game(id=i, name=title, entitlement_id=f"sample-{i}") for i, title in enumerate(titles, start=1)]
        pipeline = RatingPipeline(None, settings, layout)
    else:
        db = Database(args.db)
        games = db.pending_games(limit=args.limit)
        logger.info(f"Found {len(games)} games without ratings")
        pipeline = RatingPipeline(db, settings, layout)

    try:
        summary = await pipeline.run(games)
    except LaunchFailed as e:
        logger.critical(f"🔥 Could not start browser sessions, aborting run: {e}")
        return 1

    if args.titles is not None:
        print(format_sample_report(pipeline.outcomes))
    print(summary.format_report())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Console entry point."""
    args = parse_args(argv)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
