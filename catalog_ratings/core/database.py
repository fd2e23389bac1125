# ===== IMPORTS & DEPENDENCIES =====
import sqlite3
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from catalog_ratings.models.rating import FailureRecord, Game, RatingRecord, ScrapedRating

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ===== CORE BUSINESS LOGIC =====
class Database:
    """Stores the game catalogue together with scraped ratings and scrape failures."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._create_tables()
        logger.info(f"[{self.__class__.__name__}] Database initialized at: {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Yields a new connection that commits on success and is always closed."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _create_tables(self) -> None:
        """Creates required tables if they don't exist."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS purchased_games (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    concept_id TEXT,
                    entitlement_id TEXT UNIQUE NOT NULL,
                    image_url TEXT,
                    is_active INTEGER,
                    is_downloadable INTEGER,
                    is_pre_order INTEGER,
                    membership TEXT,
                    name TEXT NOT NULL,
                    platform TEXT,
                    product_id TEXT,
                    title_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS game_ratings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entitlement_id TEXT UNIQUE NOT NULL,
                    top_critic_average INTEGER,
                    critics_recommend INTEGER,
                    player_rating TEXT,
                    tier TEXT,
                    url TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            # A failure row only matters while the game has no rating
            conn.execute("""
                CREATE TABLE IF NOT EXISTS failed_scrapes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entitlement_id TEXT UNIQUE NOT NULL,
                    error_message TEXT NOT NULL,
                    observed_at TEXT NOT NULL
                )
            """)
        logger.info(f"[{self.__class__.__name__}] Database tables verified/created.")

    def upsert_purchased_game(self, entitlement_id: str, name: str, **fields: Any) -> None:
        """
        Inserts or updates a catalogue entry keyed by `entitlement_id`.
        Extra keyword arguments map onto the remaining purchased_games columns.
        """
        allowed = {
            'concept_id', 'image_url', 'is_active', 'is_downloadable', 'is_pre_order',
            'membership', 'platform', 'product_id', 'title_id',
        }
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown purchased_games columns: {', '.join(sorted(unknown))}")

        now = _now()
        columns = ['entitlement_id', 'name', *fields.keys(), 'created_at', 'updated_at']
        values = [entitlement_id, name, *fields.values(), now, now]
        updates = ", ".join(f"{col} = excluded.{col}" for col in ['name', *fields.keys(), 'updated_at'])
        with self._get_connection() as conn:
            conn.execute(
                f"INSERT INTO purchased_games ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)}) "
                f"ON CONFLICT(entitlement_id) DO UPDATE SET {updates}",
                values,
            )

    def pending_games(self, limit: Optional[int] = None) -> List[Game]:
        """Returns catalogue games without a rating, newest catalogue rows first."""
        query = """
            SELECT g.id, g.name, g.entitlement_id
            FROM purchased_games g
            LEFT JOIN game_ratings r ON r.entitlement_id = g.entitlement_id
            WHERE r.id IS NULL
            ORDER BY g.id DESC
        """
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [Game(id=row['id'], name=row['name'], entitlement_id=row['entitlement_id']) for row in rows]

    def upsert_rating(self, entitlement_id: str, rating: ScrapedRating) -> None:
        """
        Inserts or replaces the rating for a game (last write wins) and drops any
        failure recorded for it earlier, in the same transaction.
        """
        now = _now()
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO game_ratings (
                    entitlement_id, top_critic_average, critics_recommend, player_rating, tier, url,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(entitlement_id) DO UPDATE SET
                    top_critic_average = excluded.top_critic_average,
                    critics_recommend = excluded.critics_recommend,
                    player_rating = excluded.player_rating,
                    tier = excluded.tier,
                    url = excluded.url,
                    updated_at = excluded.updated_at
                """,
                (
                    entitlement_id, rating['top_critic_average'], rating['critics_recommend'],
                    rating['player_rating'], rating['tier'], rating['url'], now, now,
                ),
            )
            cursor = conn.execute("DELETE FROM failed_scrapes WHERE entitlement_id = ?", (entitlement_id,))
            if cursor.rowcount > 0:
                logger.info(f"[{self.__class__.__name__}] Cleared stale failure for {entitlement_id}")

    def upsert_failure(self, entitlement_id: str, error_message: str) -> None:
        """Inserts or replaces the failure record for a game."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO failed_scrapes (entitlement_id, error_message, observed_at) VALUES (?, ?, ?)
                ON CONFLICT(entitlement_id) DO UPDATE SET
                    error_message = excluded.error_message,
                    observed_at = excluded.observed_at
                """,
                (entitlement_id, error_message, _now()),
            )

    def get_rating(self, entitlement_id: str) -> Optional[RatingRecord]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT entitlement_id, top_critic_average, critics_recommend, player_rating, tier, url, updated_at "
                "FROM game_ratings WHERE entitlement_id = ?",
                (entitlement_id,),
            ).fetchone()
        return RatingRecord(**dict(row)) if row else None

    def get_failure(self, entitlement_id: str) -> Optional[FailureRecord]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT entitlement_id, error_message, observed_at FROM failed_scrapes WHERE entitlement_id = ?",
                (entitlement_id,),
            ).fetchone()
        return FailureRecord(**dict(row)) if row else None

    def count_ratings(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM game_ratings").fetchone()[0]

    def get_games_with_ratings(self) -> List[Dict[str, Any]]:
        """
        Returns every catalogue game with its rating columns (None when unrated) and
        whether its latest scrape failed. This is the read model the catalogue UI lists.
        """
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT g.id, g.name, g.image_url, g.platform, g.entitlement_id, g.is_active,
                       r.top_critic_average, r.critics_recommend, r.player_rating, r.tier, r.url,
                       f.error_message
                FROM purchased_games g
                LEFT JOIN game_ratings r ON r.entitlement_id = g.entitlement_id
                LEFT JOIN failed_scrapes f ON f.entitlement_id = g.entitlement_id
                ORDER BY g.name DESC
            """).fetchall()

        games = []
        for row in rows:
            game = dict(row)
            game['is_active'] = bool(game['is_active']) if game['is_active'] is not None else None
            game['has_failed'] = game['error_message'] is not None
            games.append(game)
        return games
