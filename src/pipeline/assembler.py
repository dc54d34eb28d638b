"""
Reconciliation of extractor outputs into one GameDataset.

Extractors never talk to each other: the learnset parser produces
PokemonOverride records, the encounter extractors produce key → route tag
maps, the item extractors produce ``(key, location)`` pairs.  A
GameAssembler is created for one game build, receives all of them, and is
the only place where records sharing a key are merged.

Merge rules
-----------
* Learnset records are authoritative for moves, abilities and evolution.
  Two records for the same key are merged by appending their lists; an
  evolution method, once set, is never overwritten.
* Location maps are unioned per key.  At build time each learnset record
  takes the locations of its key; keys left over become location-only
  records, so no species seen in an encounter table is dropped.
* Item locations are appended per key, skipping strings already present
  after whitespace normalisation.  Keys shorter than 2 characters and
  locations shorter than 3 are extraction noise and are dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from src.extract.base import Observation
from src.extract.encounters import LocationMap, add_observation, merge_location_maps
from src.pipeline.models import GameDataset, GameMetadata, ItemLocationRecord, PokemonOverride

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 2
MIN_LOCATION_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


class GameAssembler:
    """
    Accumulates the extractor outputs of one game.

    Usage
    -----
    ::

        assembler = GameAssembler(game)
        assembler.add_learnsets(parse_learnsets(text))
        assembler.add_pokemon_locations(parse_encounter_workbook(sheets, family))
        assembler.add_item_locations(extract_item_locations(sheets, rules))
        dataset = assembler.build()
    """

    def __init__(self, game: GameMetadata) -> None:
        self.game = game
        self._pokemon: dict[str, PokemonOverride] = {}
        self._locations: LocationMap = {}
        self._items: dict[str, ItemLocationRecord] = {}

    # ------------------------------------------------------------------
    # Pokémon
    # ------------------------------------------------------------------

    def add_learnsets(self, overrides: Iterable[PokemonOverride]) -> int:
        """Add learnset records; returns how many new keys were introduced."""
        added = 0
        for override in overrides:
            existing = self._pokemon.get(override.key)
            if existing is None:
                self._pokemon[override.key] = PokemonOverride(
                    key=override.key,
                    learnset=list(override.learnset),
                    abilities=list(override.abilities),
                    evolution_method=override.evolution_method,
                )
                added += 1
                continue

            logger.debug(f"Merging repeated learnset block for {override.key!r}")
            existing.learnset.extend(override.learnset)
            existing.abilities.extend(override.abilities)
            if existing.evolution_method is None:
                existing.evolution_method = override.evolution_method
        return added

    def add_pokemon_locations(self, location_map: LocationMap) -> int:
        """Union a key → route tags map into the game; returns the number of keys seen."""
        cleaned: LocationMap = {}
        for key, tags in location_map.items():
            if len(key) < MIN_KEY_LENGTH:
                continue
            for tag in tags:
                tag = normalize_whitespace(tag)
                if tag:
                    add_observation(cleaned, key, tag)
        self._locations = merge_location_maps([self._locations, cleaned])
        return len(location_map)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item_location(self, key: str, location: str) -> bool:
        """
        Append *location* to item *key*.

        Returns ``False`` when the pair was rejected as noise or the
        location was already known.
        """
        location = normalize_whitespace(location)
        if len(key) < MIN_KEY_LENGTH or len(location) < MIN_LOCATION_LENGTH:
            logger.debug(f"Rejected item location {key!r} → {location!r}")
            return False

        record = self._items.get(key)
        if record is None:
            self._items[key] = ItemLocationRecord(key=key, locations=[location])
            return True
        if location in record.locations:
            return False
        record.locations.append(location)
        return True

    def add_item_locations(self, observations: Iterable[Observation]) -> int:
        """Add many ``(key, location)`` pairs; returns how many were appended."""
        return sum(1 for key, location in observations if self.add_item_location(key, location))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def build(self) -> GameDataset:
        """
        Produce the dataset.  The assembler's own state is not modified, so
        ``build`` may be called more than once.
        """
        remaining: LocationMap = {key: list(tags) for key, tags in self._locations.items()}
        overrides: list[PokemonOverride] = []

        for override in self._pokemon.values():
            locations = remaining.pop(override.key, [])
            overrides.append(PokemonOverride(
                key=override.key,
                learnset=list(override.learnset),
                abilities=list(override.abilities),
                evolution_method=override.evolution_method,
                locations=locations,
            ))

        # Species only seen in encounter tables
        for key, locations in remaining.items():
            overrides.append(PokemonOverride(key=key, locations=locations))

        items = [
            ItemLocationRecord(key=record.key, locations=list(record.locations))
            for record in self._items.values()
        ]
        return GameDataset(game=self.game, pokemon_overrides=overrides, item_locations=items)
