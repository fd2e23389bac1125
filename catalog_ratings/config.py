# ===== CONFIGURATION & CONSTANTS =====
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- General Settings ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DATABASE_PATH = os.getenv("DATABASE_PATH", "data/games.db")

# --- Ratings Site ---
RATINGS_BASE_URL = os.getenv("RATINGS_BASE_URL", "https://opencritic.com/")
RATINGS_SITE_LAYOUT = os.getenv("RATINGS_SITE_LAYOUT", "opencritic")

# --- Session Pool ---
POOL_SIZE = int(os.getenv("RATINGS_POOL_SIZE", "4"))
HEADLESS = _env_bool("RATINGS_HEADLESS", True)
VIEWPORT = {"width": 1512, "height": 982}
BROWSER_ARGS = [f"--window-size={VIEWPORT['width']},{VIEWPORT['height']}"]

# --- Timeouts ---
UI_TIMEOUT_MS = int(os.getenv("RATINGS_UI_TIMEOUT_MS", "10000"))
NAVIGATION_TIMEOUT_MS = int(os.getenv("RATINGS_NAVIGATION_TIMEOUT_MS", "30000"))
INITIAL_NAVIGATION_TIMEOUT_MS = int(os.getenv("RATINGS_INITIAL_NAVIGATION_TIMEOUT_MS", "90000"))
JOB_TIMEOUT_S = float(os.getenv("RATINGS_JOB_TIMEOUT_S", "90"))

# --- Sample Mode ---
SAMPLE_TITLES = [
    "God of War Ragnarök",
    "The Last of Us Part II",
    "Spider-Man 2",
    "Horizon Forbidden West",
    "Ghost of Tsushima",
]


@dataclass
class ScrapeSettings:
    """Runtime knobs handed to the session pool and every scrape session."""
    base_url: str = RATINGS_BASE_URL
    layout_name: str = RATINGS_SITE_LAYOUT
    pool_size: int = POOL_SIZE
    headless: bool = HEADLESS
    ui_timeout_ms: int = UI_TIMEOUT_MS
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS
    initial_navigation_timeout_ms: int = INITIAL_NAVIGATION_TIMEOUT_MS
    job_timeout_s: float = JOB_TIMEOUT_S
