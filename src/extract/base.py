"""
Shared plumbing for the hackrom extractors.

Every extraction stage works on plain text: a learnset dump is a string,
a workbook is a mapping of sheet name to a 2-D grid of cell strings, and a
PDF is a list of reconstructed text lines.  This module owns the only code
that touches the file system on the way in:

  - ExtractConfig, the run configuration shared by the CLI and the builder
  - read_text / read_workbook, which turn a source file into plain text
  - SourceReadError, raised when a file exists but cannot be read at all
  - save_json / load_json convenience helpers for the output artifacts

Readers never return partial data.  A file that is missing is the caller's
business (it simply skips that stage); a file that is present but unreadable
raises SourceReadError so the caller can abort that one source and move on.
"""

from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

# One sheet: rows of cell text, blank cells are ""
Grid = list[list[str]]

# One observation emitted by an extractor: (normalized key, text)
Observation = tuple[str, str]


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------


@dataclass
class ExtractConfig:
    """
    Configuration for one conversion run.

    Parameters
    ----------
    hackrom_dir : Path
        Root directory holding one sub-directory of source documents per game.
    output_dir : Path
        Where the per-game JSON datasets are written.
    workers : int
        Number of worker processes.  ``1`` builds the games one after the
        other in the current process.
    """

    hackrom_dir: Path = field(default_factory=lambda: Path("HackRomInfo"))
    output_dir: Path = field(default_factory=lambda: Path("data/games"))
    workers: int = 1

    def __post_init__(self) -> None:
        # Accept plain strings so callers can write ExtractConfig(output_dir="…")
        self.hackrom_dir = Path(self.hackrom_dir)
        self.output_dir = Path(self.output_dir)
        self.workers = max(1, int(self.workers))


class SourceReadError(Exception):
    """A source document exists but could not be read as its format."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path
        self.reason = reason


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    """Read a UTF-8 text document (a leading BOM is dropped)."""
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(Path(path), str(exc)) from exc


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


def cell(rows: Sequence[Sequence[str]], r: int, c: int) -> str:
    """Stripped text of ``rows[r][c]``; ``""`` outside a ragged grid."""
    if r < 0 or c < 0 or r >= len(rows) or c >= len(rows[r]):
        return ""
    return _cell_text(rows[r][c]).strip()


def frame_to_grid(frame: pd.DataFrame) -> Grid:
    """Convert a header-less DataFrame into rows of cell strings."""
    return [[_cell_text(value) for value in row] for row in frame.itertuples(index=False)]


def read_workbook(path: Path) -> dict[str, Grid]:
    """
    Read every sheet of a workbook as untyped text.

    Cells are read as strings (``dtype=str``) so that route numbers, levels
    and species names all arrive in the same shape; blank cells become ``""``.
    Sheet order follows the workbook.
    """
    try:
        frames = pd.read_excel(Path(path), sheet_name=None, header=None, dtype=str)
    # A zip with broken XML inside raises a SyntaxError subclass (ElementTree
    # ParseError), a zip missing a workbook member raises KeyError
    except (OSError, ValueError, KeyError, SyntaxError, zipfile.BadZipFile, InvalidFileException) as exc:
        raise SourceReadError(Path(path), str(exc)) from exc

    return {str(name): frame_to_grid(frame) for name, frame in frames.items()}


# ---------------------------------------------------------------------------
# Persistence helpers
# ---------------------------------------------------------------------------


def save_json(data: Any, path: Path) -> None:
    """Write *data* as indented JSON to *path* (creates parent dirs)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
    logger.debug(f"Saved → {path}")


def load_json(path: Path) -> Optional[Any]:
    """
    Load JSON from *path*.

    Returns ``None`` if the file is missing or contains invalid JSON
    rather than raising an exception.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return None
