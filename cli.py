"""
hackrom-data unified CLI.

Single entry point for the hackrom conversion pipeline.

Usage
-----
# Conversion
python cli.py convert                            # every registered game
python cli.py convert --game radical-red         # one game
python cli.py convert --workers 3                # one process per game

# Inspection
python cli.py list                               # games and which sources exist

# Dev / debug
python cli.py debug sheet "Pokémon Locations.xlsx" --family header-first
python cli.py debug stats                        # summary of written datasets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from configs.constants import Constants


# ---------------------------------------------------------------------------
# Logging setup (project modules are imported lazily, after this runs)
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=Constants.LOG_FORMAT,
        datefmt=Constants.LOG_DATE_FORMAT,
        stream=sys.stdout,
    )


def _config(args: argparse.Namespace):
    from src.extract.base import ExtractConfig

    return ExtractConfig(
        hackrom_dir=Path(args.hackrom_dir),
        output_dir=Path(args.output_dir),
        workers=getattr(args, "workers", 1),
    )


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------


def cmd_convert(args: argparse.Namespace) -> int:
    """Build and write the dataset of each requested game."""
    from src.pipeline.game_builder import GameBuilder

    report = GameBuilder(_config(args)).build_all(args.game)
    for game_id, reason in report.failed.items():
        print(f"✗ {game_id}: {reason}", file=sys.stderr)
    return 0 if report.ok else 1


def cmd_list(args: argparse.Namespace) -> int:
    """Print registered games and the state of their source documents."""
    from src.pipeline.games import load_game_spec, registered_games

    hackrom_dir = Path(args.hackrom_dir)
    for game_id in registered_games():
        spec = load_game_spec(game_id)
        print(f"\n{spec.game.name_en} ({game_id}, base: {spec.game.base_rom}, coverage: {spec.game.coverage})")
        for path in spec.source_paths(hackrom_dir):
            mark = "✓" if path.exists() else "·"
            print(f"  {mark} {path}")
    return 0


def cmd_debug_sheet(args: argparse.Namespace) -> int:
    """Show what the encounter heuristics detect on every sheet of a workbook."""
    from src.extract.base import SourceReadError, read_workbook
    from src.extract.encounters import (
        FAMILY_HEADER_FIRST,
        detect_pokemon_columns,
        find_labelled_pokemon_columns,
        find_route_row,
        parse_encounter_workbook,
        score_candidate_row,
    )

    try:
        sheets = read_workbook(Path(args.path))
    except SourceReadError as exc:
        print(exc, file=sys.stderr)
        return 1

    for sheet_name, rows in sheets.items():
        print(f"\n{'─' * 60}")
        print(f"[{sheet_name}] {len(rows)} rows")
        if args.family == FAMILY_HEADER_FIRST:
            labelled = find_labelled_pokemon_columns(rows, [1])
            print(f"  labelled Pokémon columns: {labelled}")
            if not labelled:
                print(f"  fallback Pokémon columns: {detect_pokemon_columns(rows)}")
        else:
            scores = [score_candidate_row(row) for row in rows[:5]]
            route_row = find_route_row(rows)
            print(f"  route-row scores: {scores}  →  route row: {route_row}")
            if route_row is not None:
                columns = find_labelled_pokemon_columns(rows, range(route_row, route_row + 3), exact=True)
                print(f"  Pokémon columns: {columns}")
        location_map = parse_encounter_workbook({sheet_name: rows}, args.family)
        print(f"  species found: {len(location_map)}")
    return 0


def cmd_debug_stats(args: argparse.Namespace) -> int:
    """Print a summary of the datasets in the output directory."""
    from src.extract.base import load_json

    output_dir = Path(args.output_dir)
    files = sorted(output_dir.glob("*.json")) if output_dir.exists() else []
    if not files:
        print(f"No datasets in {output_dir}")
        return 0

    print(f"\n📁 Datasets in {output_dir}")
    for path in files:
        data = load_json(path)
        if not isinstance(data, dict):
            print(f"  {path.name:30s} unreadable")
            continue
        pokemon = data.get("pokemon_overrides", [])
        with_learnset = sum(1 for p in pokemon if p.get("learnset"))
        with_locations = sum(1 for p in pokemon if p.get("locations"))
        print(
            f"  {path.name:30s} {len(pokemon):>5} pokemon "
            f"({with_learnset} learnsets, {with_locations} located)  "
            f"{len(data.get('item_locations', [])):>5} items"
        )
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    from src.extract.encounters import FAMILIES, FAMILY_HEADER_FIRST

    root = argparse.ArgumentParser(
        prog="hackrom-data",
        description="hackrom documentation → game dataset converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    root.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # ---- shared / default paths ----
    root.add_argument("--hackrom-dir", default=Constants.HACKROM_DIR, metavar="DIR")
    root.add_argument("--output-dir", default=Constants.OUTPUT_DIR, metavar="DIR")

    subparsers = root.add_subparsers(dest="command", required=True)

    # ================================================================
    # convert
    # ================================================================
    convert_p = subparsers.add_parser("convert", help="Build game datasets")
    convert_p.add_argument(
        "--game",
        action="append",
        choices=sorted(Constants.GAME_CONFIG),
        help="Game id. Repeat the flag for several games; defaults to all.",
    )
    convert_p.add_argument("--workers", type=int, default=1, help="Worker processes")
    convert_p.set_defaults(func=cmd_convert)

    # ================================================================
    # list
    # ================================================================
    subparsers.add_parser("list", help="Show registered games and their sources").set_defaults(
        func=cmd_list
    )

    # ================================================================
    # debug
    # ================================================================
    debug_p = subparsers.add_parser("debug", help="Development / inspection tools")
    debug_sub = debug_p.add_subparsers(dest="tool", required=True)

    ds = debug_sub.add_parser("sheet", help="Show encounter detection per sheet")
    ds.add_argument("path", help="Workbook path")
    ds.add_argument("--family", choices=FAMILIES, default=FAMILY_HEADER_FIRST)
    ds.set_defaults(func=cmd_debug_sheet)

    debug_sub.add_parser("stats", help="Summarise written datasets").set_defaults(
        func=cmd_debug_stats
    )

    return root


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    # Dispatch to the appropriate handler
    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
