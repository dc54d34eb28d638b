"""
Canonical keys for species, moves, abilities and items.

Every source document spells names its own way ("Mr. Mime", "Nidoran♀",
"Flabébé", "TM 120 - Ice Spinner").  The key is the only join between
independently parsed documents, so two display strings that differ only by
case, punctuation, gender symbols or whitelisted accents must produce the
same key.  Anything else (typos, synonyms) stays distinct.
"""

from __future__ import annotations

import re
from typing import Optional

_APOSTROPHES = re.compile(r"['’‘`]")
_PUNCTUATION = re.compile(r"[.,:;!?()\[\]\"*]")
_WHITESPACE = re.compile(r"[\s_]+")
_HYPHEN_RUNS = re.compile(r"-{2,}")

_GENDER_SYMBOLS = {"♀": "-f", "♂": "-m"}

# Accents seen in species/item names; anything outside the list is kept as is
_DIACRITICS = str.maketrans({
    "é": "e", "è": "e", "ê": "e", "ë": "e",
    "á": "a", "à": "a", "â": "a", "ä": "a",
    "í": "i", "ï": "i",
    "ó": "o", "ô": "o", "ö": "o",
    "ú": "u", "ü": "u",
    "ç": "c", "ñ": "n",
})

# "TM 120 - Ice Spinner", "HM01 - Cut", "TR05: Flamethrower", "TM01Focus Punch"
_MACHINE_PREFIX = re.compile(r"^\s*(?:TM|HM|TR)\s*\d+\s*(?:[-–—:]\s*)?", re.IGNORECASE)
# "Potion [x1]", "Rare Candy [3]"
_QUANTITY_SUFFIX = re.compile(r"\s*\[\s*x?\s*\d+\s*\]\s*$", re.IGNORECASE)


def normalize(display_name: Optional[str]) -> str:
    """Convert a display name into a lowercase hyphenated key.

    Args:
        display_name (str): Name as written in a source document.

    Returns:
        str: The key, ``""`` when nothing usable remains.
    """
    if not display_name:
        return ""

    key = str(display_name).strip().lower()
    key = _APOSTROPHES.sub("", key)
    key = _PUNCTUATION.sub("", key)
    for symbol, suffix in _GENDER_SYMBOLS.items():
        key = key.replace(symbol, suffix)
    key = key.translate(_DIACRITICS)
    key = _WHITESPACE.sub("-", key)
    key = _HYPHEN_RUNS.sub("-", key)
    return key.strip("-")


def strip_move_label(display_name: Optional[str]) -> str:
    """Drop a leading TM/HM/TR number and a trailing ``[xN]`` quantity."""
    if not display_name:
        return ""
    text = _MACHINE_PREFIX.sub("", str(display_name))
    return _QUANTITY_SUFFIX.sub("", text).strip()


def normalize_move(display_name: Optional[str]) -> str:
    """Key for a move or item label that may carry a machine number or quantity."""
    return normalize(strip_move_label(display_name))
