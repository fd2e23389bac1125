# ===== UTILITY FUNCTIONS =====
import re

_SEPARATOR = r"\s*[-–:]\s*"

_EDITION_KEYWORD = (
    r"(?:Standard|Deluxe|Ultimate|Gold|Premium|Digital|Complete|Game\s+of\s+the\s+Year|GOTY"
    r"|Remastered|Enhanced|Director['’]?s?\s*Cut|Launch|Limited|Collector['’]?s?|Special)"
)

_TRADEMARK_RE = re.compile(r"[™®©]")
_EDITION_SUFFIX_RE = re.compile(
    _SEPARATOR + _EDITION_KEYWORD + r"(?:\s+" + _EDITION_KEYWORD + r")*\s*Edition\s*$",
    re.IGNORECASE,
)
_PLATFORM_SUFFIX_RE = re.compile(
    _SEPARATOR + r"(?:PS4|PS5|PlayStation\s*[45])(?:\s*(?:Version|Edition))?\s*$",
    re.IGNORECASE,
)
_FULL_GAME_SUFFIX_RE = re.compile(_SEPARATOR + r"Full\s+Game\s*$", re.IGNORECASE)
_TRAILING_SEPARATOR_RE = re.compile(r"[\s\-–:]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def _strip_suffixes(title: str) -> str:
    title = _EDITION_SUFFIX_RE.sub("", title)
    title = _PLATFORM_SUFFIX_RE.sub("", title)
    title = _FULL_GAME_SUFFIX_RE.sub("", title)
    title = _TRAILING_SEPARATOR_RE.sub("", title)
    return _WHITESPACE_RE.sub(" ", title).strip()


def normalize_game_name(title: str) -> str:
    """
    Turns a catalogue title into a search-friendly one by dropping trademark
    glyphs and trailing edition, platform and "Full Game" qualifiers.

    Suffixes are peeled repeatedly so stacked qualifiers such as
    "X - Deluxe Edition - PS5" are fully removed and the result is a fixed point:
    normalize_game_name(normalize_game_name(t)) == normalize_game_name(t).
    """
    if not title:
        return ""

    cleaned = _TRADEMARK_RE.sub("", title)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    while True:
        stripped = _strip_suffixes(cleaned)
        if stripped == cleaned:
            return cleaned
        cleaned = stripped
