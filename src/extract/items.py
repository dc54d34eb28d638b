"""
Item and TM location extraction from item-guide workbooks.

Each hackrom documents its items in its own sheet layout, so extraction is
driven by small per-sheet rules rather than detection.  A rule reads a few
fixed columns from a start row onward and emits ``(item key, location)``
observations.  The rule kinds cover the layouts seen so far:

  - ColumnRule        one name column and one location column
  - TwoRowRule        name on row r, its location on row r + 1
  - DualColumnRule    two unrelated tables side by side over the same rows
  - HeaderLocatedRule finds the name/location columns from a header row,
                      for guides whose column order moves between releases

Z-Crystal sheets additionally get the ``-z`` suffix on "...ium" keys so they
match the item keys used everywhere else.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from src.extract.base import Grid, Observation, cell
from src.extract.keys import normalize, normalize_move

logger = logging.getLogger(__name__)

HEADER_SCAN_DEPTH = 5
LOCATION_HEADER = "LOCATION"
NAME_HEADERS = frozenset({"TM", "MOVE", "ITEM", "MEGA STONE", "TM ## - NAME"})
LOOSE_NAME_HEADERS = ("TM", "NAME", "MOVE", "ITEM", "MEGA")

_Z_CRYSTAL = re.compile(r"ium$")


def z_crystal_key(key: str) -> str:
    """'firium' → 'firium-z'; other keys are returned unchanged."""
    return f"{key}-z" if _Z_CRYSTAL.search(key) else key


def item_key(name: str, moves: bool = False, z_crystals: bool = False) -> str:
    key = normalize_move(name) if moves else normalize(name)
    if z_crystals and key:
        key = z_crystal_key(key)
    return key


def format_location(location: str, label: str = "") -> str:
    return f"{label}: {location}" if label else location


# ---------------------------------------------------------------------------
# Positional rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnPair:
    """Name/location columns of one table; ``label_col`` prefixes the location."""

    name_col: int
    location_col: int
    label_col: Optional[int] = None
    moves: bool = False
    z_crystals: bool = False

    def read(self, rows: Grid, r: int, location_row: Optional[int] = None) -> Optional[Observation]:
        name = cell(rows, r, self.name_col)
        location = cell(rows, r if location_row is None else location_row, self.location_col)
        if not name or not location:
            return None
        key = item_key(name, moves=self.moves, z_crystals=self.z_crystals)
        if not key:
            return None
        label = cell(rows, r, self.label_col) if self.label_col is not None else ""
        return key, format_location(location, label)


@dataclass(frozen=True)
class ColumnRule:
    """
    Single table: read ``name_col`` and ``location_col`` from ``start_row`` on.

    Example
    -------
    TM sheet with the number in column 0, the move in column 2 and the
    location in column 4::

        ColumnRule("TMs", name_col=2, location_col=4, label_col=0, moves=True)
    """

    sheet: str
    name_col: int
    location_col: int
    start_row: int = 1
    label_col: Optional[int] = None
    moves: bool = False
    z_crystals: bool = False

    @property
    def pair(self) -> ColumnPair:
        return ColumnPair(self.name_col, self.location_col, self.label_col, self.moves, self.z_crystals)

    def extract(self, rows: Grid) -> list[Observation]:
        pair = self.pair
        found: list[Observation] = []
        for r in range(self.start_row, len(rows)):
            observation = pair.read(rows, r)
            if observation:
                found.append(observation)
        return found


@dataclass(frozen=True)
class TwoRowRule:
    """Name on row r in ``name_col``, its location on row r + 1 in ``location_col``."""

    sheet: str
    name_col: int
    location_col: int
    start_row: int = 0
    moves: bool = False
    z_crystals: bool = False

    def extract(self, rows: Grid) -> list[Observation]:
        pair = ColumnPair(self.name_col, self.location_col, moves=self.moves, z_crystals=self.z_crystals)
        found: list[Observation] = []
        r = self.start_row
        while r < len(rows) - 1:
            observation = pair.read(rows, r, location_row=r + 1)
            if observation:
                found.append(observation)
                r += 2
            else:
                r += 1
        return found


@dataclass(frozen=True)
class DualColumnRule:
    """Two independent tables laid out side by side in the same row range."""

    sheet: str
    left: ColumnPair
    right: ColumnPair
    start_row: int = 1

    def extract(self, rows: Grid) -> list[Observation]:
        found: list[Observation] = []
        for pair in (self.left, self.right):
            for r in range(self.start_row, len(rows)):
                observation = pair.read(rows, r)
                if observation:
                    found.append(observation)
        return found


# ---------------------------------------------------------------------------
# Header-located rule
# ---------------------------------------------------------------------------


def _is_name_header(text: str, loose: bool) -> bool:
    if loose:
        return any(token in text for token in LOOSE_NAME_HEADERS)
    return text in NAME_HEADERS or "NAME" in text


def find_item_header(rows: Grid, loose: bool = False) -> Optional[tuple[int, int, int]]:
    """
    Locate ``(header_row, name_col, location_col)`` in the top rows.

    The strict variant stops at the first row with a ``LOCATION`` cell and
    falls back to the column left of it for names; the loose variant needs
    both headers in the same row and matches them by substring.
    """
    for r in range(min(len(rows), HEADER_SCAN_DEPTH)):
        name_col = -1
        location_col = -1
        for c in range(len(rows[r])):
            text = cell(rows, r, c).upper()
            if not text:
                continue
            if text == LOCATION_HEADER or (loose and LOCATION_HEADER in text):
                location_col = c
            elif _is_name_header(text, loose):
                name_col = c
        if loose and location_col >= 0 and name_col >= 0:
            return r, name_col, location_col
        if not loose and location_col >= 0:
            return r, name_col if name_col >= 0 else max(0, location_col - 1), location_col
    return None


@dataclass(frozen=True)
class HeaderLocatedRule:
    """Applies to every sheet not in ``excluded`` (``sheet`` is ``"*"``)."""

    loose: bool = False
    excluded: frozenset = frozenset({"Main", "Source"})
    sheet: str = "*"

    def extract(self, rows: Grid) -> list[Observation]:
        header = find_item_header(rows, loose=self.loose)
        if header is None:
            return []
        header_row, name_col, location_col = header
        pair = ColumnPair(name_col, location_col, moves=True)
        found: list[Observation] = []
        for r in range(header_row + 1, len(rows)):
            observation = pair.read(rows, r)
            if observation:
                found.append(observation)
        return found


Rule = Union[ColumnRule, TwoRowRule, DualColumnRule, HeaderLocatedRule]


def _rule_sheets(rule: Rule, sheet_names: Sequence[str]) -> list[str]:
    if isinstance(rule, HeaderLocatedRule):
        return [name for name in sheet_names if name not in rule.excluded]
    return [rule.sheet] if rule.sheet in sheet_names else []


def extract_item_locations(sheets: dict[str, Grid], rules: Iterable[Rule]) -> list[Observation]:
    """Apply every rule to the sheets it targets, in rule order."""
    observations: list[Observation] = []
    sheet_names = list(sheets)
    for rule in rules:
        targets = _rule_sheets(rule, sheet_names)
        if not targets:
            logger.debug(f"No sheet for {rule!r}")
            continue
        for sheet_name in targets:
            found = rule.extract(sheets[sheet_name])
            logger.debug(f"[{sheet_name}] {len(found)} item observations")
            observations.extend(found)
    return observations
