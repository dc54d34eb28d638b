"""
Registry of supported hackroms and the shape of their source documents.

``Constants.GAME_CONFIG`` / ``Constants.GAME_SOURCES`` hold the plain data
(identity card, file names).  This module adds what cannot live in a
constants table: which encounter layout family each workbook follows and
which item rules apply to each item guide.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from configs.constants import Constants
from src.extract.encounters import FAMILY_HEADER_FIRST, FAMILY_ROUTE_ROW
from src.extract.items import (
    ColumnPair,
    ColumnRule,
    DualColumnRule,
    HeaderLocatedRule,
    Rule,
    TwoRowRule,
)
from src.pipeline.models import GameMetadata

ENCOUNTER_FAMILIES: dict[str, str] = {
    "runbun": FAMILY_HEADER_FIRST,
    "radical-red": FAMILY_ROUTE_ROW,
    "emerald-imperium": FAMILY_HEADER_FIRST,
}

# Emerald Imperium lays out each item category on its own tab
_IMPERIUM_POSITIONAL: tuple[Rule, ...] = (
    ColumnRule("TMs", name_col=2, location_col=4, label_col=0, moves=True),
    ColumnRule("Mega Stones", name_col=0, location_col=2),
    ColumnRule("Z-Crystals", name_col=0, location_col=1, z_crystals=True),
    TwoRowRule("Evolution Items", name_col=0, location_col=1, start_row=1),
    DualColumnRule(
        "Held Items & Berries",
        left=ColumnPair(name_col=0, location_col=1),
        right=ColumnPair(name_col=3, location_col=4),
    ),
)

ITEM_RULES: dict[str, tuple[Rule, ...]] = {
    "runbun": (),
    "radical-red": (HeaderLocatedRule(),),
    "emerald-imperium": _IMPERIUM_POSITIONAL + (
        HeaderLocatedRule(
            loose=True,
            excluded=frozenset(rule.sheet for rule in _IMPERIUM_POSITIONAL),
        ),
    ),
}


@dataclass(frozen=True)
class WorkbookSource:
    """One spreadsheet and how to read it."""

    filename: str
    family: Optional[str] = None
    rules: tuple[Rule, ...] = ()


@dataclass(frozen=True)
class GameSpec:
    """Everything needed to build one game's dataset."""

    game: GameMetadata
    directory: str
    learnsets: Optional[str] = None
    encounters: tuple[WorkbookSource, ...] = ()
    items: tuple[WorkbookSource, ...] = ()
    item_pdf: Optional[str] = None

    @property
    def id(self) -> str:
        return self.game.id

    def path(self, hackrom_dir: Path, filename: str) -> Path:
        return Path(hackrom_dir) / self.directory / filename

    def source_paths(self, hackrom_dir: Path) -> list[Path]:
        """Every declared source document, present or not."""
        names: list[str] = []
        if self.learnsets:
            names.append(self.learnsets)
        names.extend(source.filename for source in self.encounters)
        names.extend(source.filename for source in self.items)
        if self.item_pdf:
            names.append(self.item_pdf)
        return [self.path(hackrom_dir, name) for name in names]


def load_game_spec(game_id: str) -> GameSpec:
    """Build the GameSpec of a registered game from the constants tables."""
    if game_id not in Constants.GAME_CONFIG:
        raise KeyError(f"Unknown game '{game_id}'")

    sources = Constants.GAME_SOURCES.get(game_id, {})
    family = ENCOUNTER_FAMILIES.get(game_id, FAMILY_HEADER_FIRST)
    rules = ITEM_RULES.get(game_id, (HeaderLocatedRule(),))
    return GameSpec(
        game=GameMetadata.from_dict(game_id, Constants.GAME_CONFIG[game_id]),
        directory=sources.get("directory", game_id),
        learnsets=sources.get("learnsets"),
        encounters=tuple(WorkbookSource(name, family=family) for name in sources.get("encounters", [])),
        items=tuple(WorkbookSource(name, rules=rules) for name in sources.get("items", [])),
        item_pdf=sources.get("item_pdf"),
    )


def registered_games() -> list[str]:
    """Game ids in their display order."""
    return sorted(Constants.GAME_CONFIG, key=lambda game_id: Constants.GAME_CONFIG[game_id].get("sort_order", 0))
