"""
Parser for plain-text learnset dumps.

The dump is a sequence of blocks separated by blank lines, one block per
species::

    Bulbasaur
    Lv. 1 Tackle
    Lv. 3 Growl
    Ability 1: Overgrow
    Ability 2: None
    Hidden Ability: Chlorophyll
    Evolves at level 16

The first line names the species.  Every following line is matched against
three patterns (level-up move, ability, evolution) in that order; anything
else is commentary and is ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from src.extract.keys import normalize, normalize_move
from src.pipeline.models import HIDDEN_ABILITY_SLOT, AbilityEntry, LearnsetEntry, PokemonOverride

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = re.compile(r"\n[ \t]*\n\s*")
LEVEL_UP_LINE = re.compile(r"^Lv\.\s*(\d+)\s+(.+)$")
ABILITY_LINE = re.compile(r"^(Hidden Ability|Ability(?:\s*([12]))?)\s*:\s*(.+)$")
EVOLVES_LINE = re.compile(r"^Evolves?\s+(.+)$", re.IGNORECASE)

NO_ABILITY = "None"


def split_blocks(content: str) -> list[list[str]]:
    """Split a dump into blocks of stripped, non-blank lines."""
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    blocks: list[list[str]] = []
    for raw_block in BLOCK_SEPARATOR.split(content):
        lines = [line.strip() for line in raw_block.split("\n") if line.strip()]
        if lines:
            blocks.append(lines)
    return blocks


def parse_ability_line(label: str, digit: Optional[str], value: str) -> Optional[AbilityEntry]:
    """Build the AbilityEntry for one ``Ability N: X`` / ``Hidden Ability: X`` line."""
    value = value.strip()
    if value == NO_ABILITY:
        return None

    is_hidden = label == "Hidden Ability"
    if is_hidden:
        slot = HIDDEN_ABILITY_SLOT
    else:
        slot = int(digit) if digit else 1
    return AbilityEntry(ability_key=normalize(value), slot=slot, is_hidden=is_hidden)


def parse_block(lines: list[str]) -> Optional[PokemonOverride]:
    """
    Turn one block into a PokemonOverride.

    Returns ``None`` for blocks without a single move or ability, which are
    headers, notes or other noise.
    """
    key = normalize(lines[0])
    learnset: list[LearnsetEntry] = []
    abilities: list[AbilityEntry] = []
    evolution_method: Optional[str] = None

    for line in lines[1:]:
        level_match = LEVEL_UP_LINE.match(line)
        if level_match:
            level = int(level_match.group(1))
            move_key = normalize_move(level_match.group(2))
            if level < 1 or not move_key:
                logger.debug(f"Dropping learnset line for {key!r}: {line!r}")
                continue
            learnset.append(LearnsetEntry(move_key=move_key, level=level))
            continue

        ability_match = ABILITY_LINE.match(line)
        if ability_match:
            entry = parse_ability_line(*ability_match.groups())
            if entry is not None:
                abilities.append(entry)
            continue

        evolves_match = EVOLVES_LINE.match(line)
        if evolves_match:
            # Last one wins
            evolution_method = evolves_match.group(1).strip()

    if not key or not (learnset or abilities):
        return None
    return PokemonOverride(
        key=key,
        learnset=learnset,
        abilities=abilities,
        evolution_method=evolution_method,
    )


def parse_learnsets(content: str) -> list[PokemonOverride]:
    """Parse a whole learnset dump, preserving block order."""
    overrides: list[PokemonOverride] = []
    blocks = split_blocks(content)
    for lines in blocks:
        override = parse_block(lines)
        if override is not None:
            overrides.append(override)

    logger.debug(f"{len(overrides)} of {len(blocks)} learnset blocks kept")
    return overrides
