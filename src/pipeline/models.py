"""
Records of the canonical per-game dataset.

The field names written by ``to_dict`` are the importer's schema, so they
differ slightly from the attribute names (``key`` is written ``name_key``,
``move_key`` is written ``move_name_key``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

LEVEL_UP = "level-up"
HIDDEN_ABILITY_SLOT = 3
COVERAGE_VALUES = ("full", "changes_only")


@dataclass
class LearnsetEntry:
    """One level-up move of a species."""

    move_key: str
    level: int
    method: str = LEVEL_UP

    def to_dict(self) -> dict[str, Any]:
        return {"move_name_key": self.move_key, "learn_method": self.method, "level": self.level}


@dataclass
class AbilityEntry:
    """
    One ability slot.  Slots 1-2 are standard abilities, slot 3 is reserved
    for the hidden ability.
    """

    ability_key: str
    slot: int = 1
    is_hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"ability_key": self.ability_key, "slot": self.slot, "is_hidden": self.is_hidden}


@dataclass
class PokemonOverride:
    """Everything a game changes about one species."""

    key: str
    learnset: list[LearnsetEntry] = field(default_factory=list)
    abilities: list[AbilityEntry] = field(default_factory=list)
    evolution_method: Optional[str] = None
    locations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name_key": self.key,
            "learnset": [entry.to_dict() for entry in self.learnset],
            "abilities": [entry.to_dict() for entry in self.abilities],
        }
        if self.evolution_method:
            data["evolution_method"] = self.evolution_method
        if self.locations:
            data["locations"] = list(self.locations)
        return data


@dataclass
class ItemLocationRecord:
    """Where one item (or TM move) can be found."""

    key: str
    locations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"name_key": self.key, "locations": list(self.locations)}


@dataclass(frozen=True)
class GameMetadata:
    """Identity card of a hackrom, copied verbatim into the dataset."""

    id: str
    name_en: str
    name_fr: str
    base_rom: str
    version: str
    author: str
    sort_order: int = 0
    coverage: str = "full"
    is_hackrom: bool = True

    def __post_init__(self) -> None:
        if self.coverage not in COVERAGE_VALUES:
            raise ValueError(f"coverage must be one of {COVERAGE_VALUES}, got {self.coverage!r}")

    @classmethod
    def from_dict(cls, game_id: str, d: dict[str, Any]) -> "GameMetadata":
        return cls(
            id=game_id,
            name_en=d["name_en"],
            name_fr=d.get("name_fr", d["name_en"]),
            base_rom=d["base_rom"],
            version=d["version"],
            author=d["author"],
            sort_order=d.get("sort_order", 0),
            coverage=d.get("coverage", "full"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name_en": self.name_en,
            "name_fr": self.name_fr,
            "base_rom": self.base_rom,
            "version": self.version,
            "author": self.author,
            "is_hackrom": self.is_hackrom,
            "sort_order": self.sort_order,
            "coverage": self.coverage,
        }


@dataclass
class GameDataset:
    """The output unit: one per hackrom, rebuilt from scratch on every run."""

    game: GameMetadata
    pokemon_overrides: list[PokemonOverride] = field(default_factory=list)
    item_locations: list[ItemLocationRecord] = field(default_factory=list)
    # Reserved, this pipeline never fills it
    move_overrides: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "game": self.game.to_dict(),
            "pokemon_overrides": [override.to_dict() for override in self.pokemon_overrides],
            "move_overrides": list(self.move_overrides),
            "item_locations": [record.to_dict() for record in self.item_locations],
        }
