"""
Encounter-table extraction from community spreadsheets.

Encounter workbooks list routes across the top and species in the cells
below, but no two documentation teams lay them out the same way.  Two
families are recognised:

Family A ("header-first")
    Row 0 holds route names sparsely (one name every few columns), row 1
    holds column labels ("Level", "Pokémon", ...), data starts at row 2.

Family B ("scan-for-route-row")
    The route row sits somewhere in the first few rows and has to be found
    by scoring rows against a vocabulary of area keywords.  Reference tabs
    without such a row are skipped.

Both families forward-fill the sparse route row so every column knows which
route it belongs to, then collect ``"<route> [<sheet>]"`` tags per species
key.  Everything here is a pure function of the cell text.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from src.extract.base import Grid, cell
from src.extract.keys import normalize

logger = logging.getLogger(__name__)

# key → distinct route tags in discovery order
LocationMap = dict[str, list[str]]

FAMILY_HEADER_FIRST = "header-first"
FAMILY_ROUTE_ROW = "route-row"
FAMILIES = (FAMILY_HEADER_FIRST, FAMILY_ROUTE_ROW)

# ---------------------------------------------------------------------------
# Detection constants
# ---------------------------------------------------------------------------

ROUTE_KEYWORDS = re.compile(
    r"ROUTE|CITY|TOWN|CAVE|FOREST|TOWER|ISLAND|TUNNEL|MOUNTAIN|MT\.|SAFARI|"
    r"MANSION|PLANT|ROAD|LAKE|RUINS",
    re.IGNORECASE,
)
ROUTE_ROW_MIN_MATCHES = 3
ROUTE_ROW_SCAN_DEPTH = 5
ROUTE_CELL_MIN_LENGTH = 4

# Column labels that live in the route row but are not routes
NON_ROUTE_LABEL = re.compile(r"^(level|pok|caught|rod|surf)", re.IGNORECASE)

POKEMON_LABEL = re.compile(r"pok[eé]mon", re.IGNORECASE)
POKEMON_LABEL_EXACT = re.compile(r"^pok[eé]mon$", re.IGNORECASE)

EXCLUDED_SHEETS = frozenset({"Main", "Source", "Dex"})
NULL_MARKERS = frozenset({"#N/A", "N/A"})

HEADER_FIRST_MIN_ROWS = 3
ROUTE_ROW_MIN_ROWS = 4
HEADER_FIRST_DATA_START = 2
FALLBACK_SAMPLE_ROWS = range(2, 10)

_INTEGER = re.compile(r"^\d+$")
_CONTROL_CHARS = re.compile(r"[\t\r]")


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def clean_route_label(text: str) -> str:
    return _CONTROL_CHARS.sub("", text).strip()


def looks_like_species(value: str) -> bool:
    """Capitalised word of 3+ characters that is not a number ("Zigzagoon", not "12")."""
    return (
        len(value) > 2
        and value[0].isupper()
        and value[1].islower()
        and not value[0].isdigit()
    )


def is_species_cell(value: str) -> bool:
    """A data cell worth normalising: non-empty, not a level, not a null marker."""
    return bool(value) and value not in NULL_MARKERS and not _INTEGER.match(value)


def route_tag(route: str, sheet_name: str) -> str:
    return f"{route} [{sheet_name}]"


def add_observation(location_map: LocationMap, key: str, tag: str) -> None:
    """Record *tag* for *key* once."""
    tags = location_map.setdefault(key, [])
    if tag not in tags:
        tags.append(tag)


def merge_location_maps(maps: Iterable[LocationMap]) -> LocationMap:
    merged: LocationMap = {}
    for location_map in maps:
        for key, tags in location_map.items():
            for tag in tags:
                add_observation(merged, key, tag)
    return merged


# ---------------------------------------------------------------------------
# Layout detection
# ---------------------------------------------------------------------------


def score_candidate_row(row: Sequence[str]) -> int:
    """Number of cells in *row* that read like an area name."""
    score = 0
    for value in row:
        text = str(value).strip()
        if len(text) >= ROUTE_CELL_MIN_LENGTH and ROUTE_KEYWORDS.search(text):
            score += 1
    return score


def find_route_row(
    rows: Sequence[Sequence[str]],
    depth: int = ROUTE_ROW_SCAN_DEPTH,
    min_matches: int = ROUTE_ROW_MIN_MATCHES,
) -> Optional[int]:
    """Index of the first of the top *depth* rows scoring at least *min_matches*."""
    for r, row in enumerate(rows[:depth]):
        if score_candidate_row(row) >= min_matches:
            return r
    return None


def forward_fill_routes(
    row: Sequence[str],
    min_length: int = 2,
    stoplist: Optional[re.Pattern] = None,
) -> list[str]:
    """
    Give every column the most recent route label to its left.

    A cell becomes the new current route when it is at least *min_length*
    characters long and does not match *stoplist*.
    """
    routes: list[str] = []
    current = ""
    for value in row:
        text = clean_route_label(str(value))
        if len(text) >= min_length and not (stoplist and stoplist.match(text)):
            current = text
        routes.append(current)
    return routes


def find_labelled_pokemon_columns(
    rows: Sequence[Sequence[str]],
    row_indexes: Iterable[int],
    exact: bool = False,
) -> list[int]:
    """Columns whose label cell in any of *row_indexes* says "Pokémon"."""
    pattern = POKEMON_LABEL_EXACT if exact else POKEMON_LABEL
    columns: list[int] = []
    for r in row_indexes:
        if r >= len(rows):
            continue
        for c in range(len(rows[r])):
            if c not in columns and pattern.search(cell(rows, r, c)):
                columns.append(c)
    return sorted(columns)


def detect_pokemon_columns(rows: Sequence[Sequence[str]]) -> list[int]:
    """
    Fallback when no column is labelled: flag columns 1.. whose sampled data
    cells contain at least one capitalised, non-numeric word.
    """
    if not rows:
        return []
    columns: list[int] = []
    for c in range(1, len(rows[0])):
        for r in FALLBACK_SAMPLE_ROWS:
            if looks_like_species(cell(rows, r, c)):
                columns.append(c)
                break
    return columns


# ---------------------------------------------------------------------------
# Family extractors
# ---------------------------------------------------------------------------


def _collect(
    sheet_name: str,
    rows: Sequence[Sequence[str]],
    columns: Sequence[int],
    routes: Sequence[str],
    data_start: int,
    location_map: LocationMap,
    route_fallback: str = "",
) -> int:
    found = 0
    for r in range(data_start, len(rows)):
        for c in columns:
            value = cell(rows, r, c)
            if not is_species_cell(value):
                continue
            route = (routes[c] if c < len(routes) else "") or route_fallback
            if not route:
                continue
            key = normalize(value)
            if len(key) < 2:
                continue
            add_observation(location_map, key, route_tag(route, sheet_name))
            found += 1
    return found


def extract_header_first(sheet_name: str, rows: Grid, location_map: LocationMap) -> int:
    """Family A. Returns the number of observations made."""
    if len(rows) < HEADER_FIRST_MIN_ROWS:
        return 0

    routes = forward_fill_routes(rows[0], min_length=2)
    columns = find_labelled_pokemon_columns(rows, [1])
    if not columns:
        columns = detect_pokemon_columns(rows)
    if not columns:
        logger.debug(f"[{sheet_name}] no Pokémon column found")
        return 0

    return _collect(
        sheet_name, rows, columns, routes, HEADER_FIRST_DATA_START, location_map,
        route_fallback=sheet_name,
    )


def extract_route_row(sheet_name: str, rows: Grid, location_map: LocationMap) -> int:
    """Family B. Returns the number of observations made."""
    if sheet_name in EXCLUDED_SHEETS or len(rows) < ROUTE_ROW_MIN_ROWS:
        return 0

    route_row = find_route_row(rows)
    if route_row is None:
        logger.debug(f"[{sheet_name}] no route row, not an encounter sheet")
        return 0

    routes = forward_fill_routes(rows[route_row], min_length=3, stoplist=NON_ROUTE_LABEL)
    columns = find_labelled_pokemon_columns(
        rows, range(route_row, route_row + 3), exact=True
    )
    if not columns:
        logger.debug(f"[{sheet_name}] route row {route_row} but no Pokémon label")
        return 0

    return _collect(sheet_name, rows, columns, routes, route_row + 2, location_map)


_EXTRACTORS = {
    FAMILY_HEADER_FIRST: extract_header_first,
    FAMILY_ROUTE_ROW: extract_route_row,
}


def parse_encounter_workbook(sheets: dict[str, Grid], family: str) -> LocationMap:
    """Run the *family* extractor over every sheet of a workbook."""
    if family not in _EXTRACTORS:
        raise ValueError(f"Unknown encounter layout family {family!r}; expected one of {FAMILIES}")

    extractor = _EXTRACTORS[family]
    location_map: LocationMap = {}
    for sheet_name, rows in sheets.items():
        found = extractor(sheet_name, rows, location_map)
        logger.debug(f"[{sheet_name}] {found} encounter observations")
    return location_map
