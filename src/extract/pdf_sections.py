"""
Item locations from PDF item guides.

A PDF has no cells, only positioned words.  ``words_to_lines`` rebuilds
text lines from pdfplumber words and puts a tab wherever the horizontal gap
between two words is wide enough to be a column break.  The resulting lines
are then read by a small state machine:

    NONE ──"<Item Name> Location"──▶ ITEM(key)
    ITEM ──line without a tab──────▶ NONE
    any  ──"Item\\t…Location" / "All items except…"──▶ NONE

Inside an ITEM section every tabbed line is one more place where that
single item can be found.  Outside a section, tabbed lines are ordinary
two-column tables (TM / tutor tables, item / berry tables).  The parser is
single pass and never looks back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from src.extract.base import Observation, SourceReadError
from src.extract.keys import normalize, normalize_move

logger = logging.getLogger(__name__)

LINE_TOLERANCE = 3.0
COLUMN_GAP = 12.0

HEADER_BANNER = re.compile(r"^Item\t.*Location", re.IGNORECASE)
NOTICE_PREFIX = "All items except"
SECTION_TITLE = re.compile(r"^([A-Z][\w'’.é-]*(?:\s+[A-Z][\w'’.é-]*)*)\s+Location$")
MACHINE_LABEL = re.compile(r"^(TM|HM)\s*(\d+)\s*(.+)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Line reconstruction
# ---------------------------------------------------------------------------


def words_to_lines(
    words: Sequence[dict[str, Any]],
    line_tolerance: float = LINE_TOLERANCE,
    column_gap: float = COLUMN_GAP,
) -> list[str]:
    """
    Rebuild tab-delimited text lines from pdfplumber word dicts.

    Words whose ``top`` is within *line_tolerance* of the current line join
    it; inside a line a gap wider than *column_gap* becomes a tab.
    """
    lines: list[list[dict[str, Any]]] = []
    line_tops: list[float] = []
    for word in sorted(words, key=lambda w: (float(w["top"]), float(w["x0"]))):
        top = float(word["top"])
        if lines and abs(top - line_tops[-1]) <= line_tolerance:
            lines[-1].append(word)
        else:
            lines.append([word])
            line_tops.append(top)

    text_lines: list[str] = []
    for line_words in lines:
        line_words.sort(key=lambda w: float(w["x0"]))
        parts: list[str] = []
        previous_x1: Optional[float] = None
        for word in line_words:
            if previous_x1 is not None:
                gap = float(word["x0"]) - previous_x1
                parts.append("\t" if gap > column_gap else " ")
            parts.append(str(word["text"]))
            previous_x1 = float(word["x1"])
        text_lines.append("".join(parts))
    return text_lines


def read_pdf_lines(path: Path) -> list[str]:
    """Every reconstructed line of every page, pages concatenated in order."""
    lines: list[str] = []
    try:
        with pdfplumber.open(str(path)) as pdf:
            for page in pdf.pages:
                words = page.extract_words(keep_blank_chars=False, use_text_flow=False)
                lines.extend(words_to_lines(words))
    except (OSError, PDFSyntaxError, PdfminerException) as exc:
        raise SourceReadError(Path(path), str(exc)) from exc
    return lines


# ---------------------------------------------------------------------------
# Section state machine
# ---------------------------------------------------------------------------


class SectionKind(Enum):
    NONE = "no_section"
    ITEM = "in_section"


@dataclass(frozen=True)
class SectionState:
    kind: SectionKind = SectionKind.NONE
    key: Optional[str] = None

    @classmethod
    def in_section(cls, key: str) -> "SectionState":
        return cls(SectionKind.ITEM, key)


NO_SECTION = SectionState()


def split_columns(line: str) -> list[str]:
    return [column.strip() for column in line.split("\t")]


def _pair(key: str, location: str) -> list[Observation]:
    if key and location:
        return [(key, location)]
    return []


def step(state: SectionState, line: str) -> tuple[SectionState, list[Observation]]:
    """Consume one line; return the next state and what the line emitted."""
    text = line.strip(" \r\n")
    if HEADER_BANNER.match(text) or text.startswith(NOTICE_PREFIX):
        return NO_SECTION, []

    if "\t" not in text:
        title = SECTION_TITLE.match(text)
        if title:
            key = normalize(title.group(1))
            return (SectionState.in_section(key), []) if key else (NO_SECTION, [])
        return NO_SECTION, []

    columns = split_columns(text)

    if state.kind is SectionKind.ITEM:
        if len(columns) >= 2 and columns[0] and columns[1]:
            return state, _pair(state.key, f"{columns[0]}: {columns[1]}")
        return state, []

    observations: list[Observation] = []
    if MACHINE_LABEL.match(columns[0]):
        observations += _pair(normalize_move(columns[0]), columns[1] if len(columns) > 1 else "")
        # Move tutor table laid out to the right
        if len(columns) >= 4:
            observations += _pair(normalize_move(columns[2]), columns[3])
        return state, observations

    if len(columns) >= 2:
        observations += _pair(normalize(columns[0]), columns[1])
        # Berry table laid out to the right
        if len(columns) >= 4:
            observations += _pair(normalize(columns[2]), columns[3])
    return state, observations


def parse_item_pdf(lines: Iterable[str]) -> list[Observation]:
    """Fold ``step`` over the lines of an item guide."""
    state = NO_SECTION
    observations: list[Observation] = []
    for line in lines:
        state, emitted = step(state, line)
        observations.extend(emitted)
    return observations
