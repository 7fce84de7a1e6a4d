#!/usr/bin/env python3
"""Command-line front end for the crafting engine.

Usage:
    python -m craft_engine [OPTIONS] COMMAND

    # Combine two elements (uses Claude if ANTHROPIC_API_KEY is set)
    python -m craft_engine combine Water Fire

    # Offline play: only seed recipes and fallback rules
    python -m craft_engine --model mock combine Fire Unobtainium

    # Show discovered elements / engine statistics
    python -m craft_engine list
    python -m craft_engine stats

    # Back up and restore a save
    python -m craft_engine export -o craft-game-save.json
    python -m craft_engine import craft-game-save.json

    # Wipe all discoveries
    python -m craft_engine reset --yes
"""

import argparse
import asyncio
import logging
import sys
from dotenv import load_dotenv

from craft_engine.config import EngineSettings
from craft_engine.engine import CombinationEngine, build_engine
from craft_engine.persistence import InvalidSaveError

DEFAULT_EXPORT_FILE = "craft-game-save.json"


def _print_discoveries(engine: CombinationEngine):
    discovered, total = engine.discovery_progress()
    print(f"\n{'='*50}\nDISCOVERED ELEMENTS ({discovered}/{total})\n{'='*50}")
    for element in engine.discovered_elements():
        print(f"  {element.glyph}  {element.name}")
    print(f"{'='*50}\n")


def cmd_combine(engine: CombinationEngine, args) -> int:
    result = asyncio.run(engine.combine(args.first, args.second))
    if not result.success:
        print(f"✗ {result.message}")
        return 1
    print(f"{args.first} + {args.second} = {result.glyph} {result.result}")
    if result.is_new:
        print(f"✓ New element discovered: {result.result}!")
    return 0


def cmd_list(engine: CombinationEngine, args) -> int:
    _print_discoveries(engine)
    return 0


def cmd_stats(engine: CombinationEngine, args) -> int:
    stats = engine.get_statistics()
    print(f"Save version:   {stats['version']}")
    print(f"Elements:       {stats['total_elements']}")
    print(f"Recipes:        {stats['total_recipes']}")
    print(f"Discovered:     {stats['total_discovered']}")
    print(f"Model:          {stats['generator']['model']}")
    return 0


def cmd_export(engine: CombinationEngine, args) -> int:
    path = engine.export_to_file(args.output)
    print(f"✓ Data exported to {path}")
    return 0


def cmd_import(engine: CombinationEngine, args) -> int:
    try:
        engine.import_from_file(args.file)
    except (OSError, InvalidSaveError) as e:
        print(f"✗ Invalid save file: {e}")
        return 1
    print(f"✓ Data imported from {args.file}")
    _print_discoveries(engine)
    return 0


def cmd_reset(engine: CombinationEngine, args) -> int:
    if not args.yes:
        answer = input("Are you sure you want to reset the game? This will delete all your discoveries! [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Reset cancelled.")
            return 0
    engine.reset_to_default()
    print("✓ Game reset.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Element-combination crafting engine")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--db", type=str, default=None, help="SQLite save file (overrides config)")
    parser.add_argument("--model", type=str, default=None, help="Generation model, or 'mock' for offline play")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("combine", help="Combine two elements")
    p.add_argument("first")
    p.add_argument("second")
    p.set_defaults(func=cmd_combine)

    sub.add_parser("list", help="List discovered elements").set_defaults(func=cmd_list)
    sub.add_parser("stats", help="Show engine statistics").set_defaults(func=cmd_stats)

    p = sub.add_parser("export", help="Export the save to a JSON file")
    p.add_argument("-o", "--output", default=DEFAULT_EXPORT_FILE)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Import a save from a JSON file")
    p.add_argument("file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("reset", help="Reset to the default state")
    p.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    p.set_defaults(func=cmd_reset)

    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = EngineSettings.load(args.config)
    if args.db:
        settings.storage_backend = "sqlite"
        settings.storage_path = args.db
    if args.model:
        settings.model = args.model

    with build_engine(settings) as engine:
        return args.func(engine, args)


if __name__ == "__main__":
    sys.exit(main())
