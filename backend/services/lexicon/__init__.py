"""Editable heuristic tables for the extraction pipeline.

Each table is a JSON file next to this module (patois markers, ASR
corrections, dialect pattern sets, skills, localities, job signals, culture
terms, countries). Tables are loaded once per process; set
``LEXICON_DIR`` to point at a directory with replacement files.
"""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path

from config import settings

logger = logging.getLogger(__name__)

_BUNDLED_DIR = Path(__file__).parent


def _table_path(name: str) -> Path:
    if settings.lexicon_dir:
        override = Path(settings.lexicon_dir) / f"{name}.json"
        if override.exists():
            return override
        logger.warning("Lexicon override %s not found, using bundled table", override)
    return _BUNDLED_DIR / f"{name}.json"


@lru_cache(maxsize=None)
def load_table(name: str) -> dict:
    """Load a lexicon table by name (without the .json suffix)."""
    path = _table_path(name)
    with path.open(encoding="utf-8") as fh:
        table = json.load(fh)
    logger.debug("Loaded lexicon table %s from %s", name, path)
    return table


@lru_cache(maxsize=None)
def compile_patterns(name: str, *keys: str) -> tuple[re.Pattern, ...]:
    """Compile the regex list found at ``table[key1][key2]...`` (case-insensitive)."""
    node = load_table(name)
    for key in keys:
        node = node[key]
    return tuple(re.compile(p, re.IGNORECASE) for p in node)


@lru_cache(maxsize=2048)
def term_pattern(term: str) -> re.Pattern:
    """Whole-word pattern for a plain lexicon term ("st. ann" also matches "st ann")."""
    escaped = re.escape(term.lower())
    escaped = escaped.replace(r"\.", r"\.?").replace(r"\ ", r"\s+")
    return re.compile(rf"(?<![a-z0-9]){escaped}(?![a-z0-9])", re.IGNORECASE)


def clear() -> None:
    """Drop cached tables. Useful for testing overrides."""
    load_table.cache_clear()
    compile_patterns.cache_clear()
    term_pattern.cache_clear()


def caribbean_countries() -> list[dict]:
    """Countries searched by the location corrector, in priority order."""
    return load_table("countries")["caribbean_countries"]


def country_info(name: str | None) -> dict | None:
    """Look up a Caribbean country by display name or alias (case-insensitive)."""
    if not name:
        return None
    needle = name.strip().lower()
    for country in caribbean_countries():
        if needle == country["name"].lower() or needle in country["aliases"]:
            return country
    return None
