"""
Game Builder: turns each hackrom's source documents into its dataset.

WHAT THIS FILE DOES
───────────────────
For every registered game it reads whichever source documents exist,
hands each one to the extractor of its family, feeds the observations into
a fresh GameAssembler, and writes the assembled dataset to
``<output_dir>/<game id>.json``:

  learnset .txt      → parse_learnsets           → add_learnsets
  encounter .xlsx    → parse_encounter_workbook  → add_pokemon_locations
  item guide .xlsx   → extract_item_locations    → add_item_locations
  item guide .pdf    → parse_item_pdf            → add_item_locations

FAILURE ISOLATION
─────────────────
Missing files skip their stage.  An unreadable file (SourceReadError)
aborts that one source; the game carries on with the rest.  Anything that
escapes a whole game build is logged and recorded as a failure, and the
remaining games still run.  Nothing is written for a game until its
dataset is fully assembled, and each run overwrites the previous file.

Games share no state, so ``build_all`` can fan them out to worker
processes; each worker owns its own assembler and writes its own file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from src.extract.base import ExtractConfig, SourceReadError, read_text, read_workbook, save_json
from src.extract.encounters import parse_encounter_workbook
from src.extract.items import extract_item_locations
from src.extract.learnset import parse_learnsets
from src.extract.pdf_sections import parse_item_pdf, read_pdf_lines
from src.pipeline.assembler import GameAssembler
from src.pipeline.games import GameSpec, load_game_spec, registered_games
from src.pipeline.models import GameDataset
from utils.custom_multiprocessing import ProcessExecutor

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Run summary dataclass
# ---------------------------------------------------------------------------


@dataclass
class BuildReport:
    """What happened to each game during one run."""

    written: dict[str, Path] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


# ---------------------------------------------------------------------------
# Main builder class
# ---------------------------------------------------------------------------


class GameBuilder:
    """
    Builds and writes the dataset of one or more games.

    Usage
    -----
    ::

        builder = GameBuilder(ExtractConfig(hackrom_dir="HackRomInfo", output_dir="data/games"))
        report = builder.build_all()
        # → writes data/games/<game id>.json for every registered game
    """

    def __init__(self, config: ExtractConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Per-source stages
    # ------------------------------------------------------------------

    def _run_stage(self, spec: GameSpec, filename: Optional[str], label: str, stage: Callable[[Path], int]) -> int:
        """
        Run one extraction stage against one source file.

        Returns the number of records the stage contributed; ``0`` when the
        file is not declared, missing, or unreadable.
        """
        if not filename:
            return 0
        path = spec.path(self.config.hackrom_dir, filename)
        if not path.exists():
            logger.info(f"  [{spec.id}] {label}: {path.name} not found, skipped")
            return 0
        try:
            count = stage(path)
        except SourceReadError as exc:
            logger.error(f"  [{spec.id}] {label}: {exc}")
            return 0
        logger.info(f"  [{spec.id}] {label:10s} {count:>5} records  ←  {path.name}")
        return count

    def build_game(self, spec: GameSpec) -> GameDataset:
        """Read every available source of *spec* and assemble its dataset."""
        logger.info(f"Building {spec.game.name_en} data...")
        assembler = GameAssembler(spec.game)

        def learnsets(path: Path) -> int:
            return assembler.add_learnsets(parse_learnsets(read_text(path)))

        self._run_stage(spec, spec.learnsets, "learnsets", learnsets)

        for source in spec.encounters:
            def encounters(path: Path, family: str = source.family) -> int:
                return assembler.add_pokemon_locations(parse_encounter_workbook(read_workbook(path), family))

            self._run_stage(spec, source.filename, "encounters", encounters)

        for source in spec.items:
            def items(path: Path, rules=source.rules) -> int:
                return assembler.add_item_locations(extract_item_locations(read_workbook(path), rules))

            self._run_stage(spec, source.filename, "items", items)

        def item_pdf(path: Path) -> int:
            return assembler.add_item_locations(parse_item_pdf(read_pdf_lines(path)))

        self._run_stage(spec, spec.item_pdf, "item pdf", item_pdf)

        dataset = assembler.build()
        logger.info(
            f"  Total: {len(dataset.pokemon_overrides)} pokemon, "
            f"{len(dataset.item_locations)} items"
        )
        return dataset

    def output_path(self, game_id: str) -> Path:
        return self.config.output_dir / f"{game_id}.json"

    def write_game(self, dataset: GameDataset) -> Path:
        """Overwrite ``<output_dir>/<game id>.json`` with *dataset*."""
        path = self.output_path(dataset.game.id)
        save_json(dataset.to_dict(), path)
        logger.info(f"  -> {path.name} written")
        return path

    def build_and_write(self, game_id: str) -> Path:
        return self.write_game(self.build_game(load_game_spec(game_id)))

    # ------------------------------------------------------------------
    # Orchestrator
    # ------------------------------------------------------------------

    def build_all(self, game_ids: Optional[Sequence[str]] = None) -> BuildReport:
        """
        Build every requested game (all registered games by default).

        A failure in one game is logged and reported; it never stops the
        other games.
        """
        selected = list(game_ids) if game_ids else registered_games()
        report = BuildReport()

        logger.info("=" * 60)
        logger.info(f"Game Builder: {len(selected)} game(s), {self.config.workers} worker(s)")
        logger.info("=" * 60)

        if self.config.workers <= 1:
            for game_id in selected:
                try:
                    report.written[game_id] = self.build_and_write(game_id)
                except Exception as exc:  # noqa: BLE001
                    logger.exception(f"Game {game_id} failed")
                    report.failed[game_id] = str(exc)
        else:
            with ProcessExecutor(max_workers=self.config.workers) as executor:
                pending = {
                    game_id: executor.submit(_build_and_write_worker, config=self.config, game_id=game_id)
                    for game_id in selected
                }
                executor.wait_on_futures(pending.values())

            for game_id, future in pending.items():
                exc = future.exception()
                if exc is not None:
                    logger.error(f"Game {game_id} failed", exc_info=exc)
                    report.failed[game_id] = str(exc)
                else:
                    report.written[game_id] = future.result()

        logger.info("=" * 60)
        logger.info(f"Done: {len(report.written)} written, {len(report.failed)} failed")
        logger.info("=" * 60)
        return report


def _build_and_write_worker(config: ExtractConfig, game_id: str) -> Path:
    """Process-pool entry point; each worker builds its own GameBuilder."""
    return GameBuilder(config).build_and_write(game_id)
