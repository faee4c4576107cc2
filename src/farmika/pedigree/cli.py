"""CLI for pedigree checks and breeding planning.

Usage:
    farmika-pedigree classify SHIVA "CRIA DE SHIVA Y JAZZ"
    farmika-pedigree depth --dry-run
    farmika-pedigree recommend --env constrained
    farmika-pedigree seasonal --json
    farmika-pedigree import-text SHIVA pedigree.txt --dry-run
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from farmika.analysis.seasonal import analyze_breeding_history
from farmika.core.client import AuthenticationError, RetryableError, StorageAPIError
from farmika.core.config import settings
from farmika.data.animals import fetch_all_animals, write_pedigree_slots
from farmika.pedigree.depth import detect_generation_depth, sync_pedigree_depths
from farmika.pedigree.models import Animal
from farmika.pedigree.recommendations import generate_recommendations, invalidate_recommendations
from farmika.pedigree.relationships import classify_relationship
from farmika.pedigree.resolver import AncestorIndex
from farmika.pedigree.text_import import parse_pedigree_text


def find_in_population(identifier: str, index: AncestorIndex) -> Animal:
    """Look up an animal by id or name in a population index.

    Raises:
        ValueError: If no animal matches
    """
    animal = index.get(index.resolve(identifier))
    if animal is None:
        raise ValueError(f"No animal found matching '{identifier}'")
    return animal


async def _classify(args: argparse.Namespace) -> None:
    population = await fetch_all_animals()
    index = AncestorIndex.build(population)
    animal_a = find_in_population(args.animal_a, index)
    animal_b = find_in_population(args.animal_b, index)

    verdict = classify_relationship(animal_a, animal_b, index, max_depth=args.depth)
    if args.json:
        print(json.dumps(verdict.to_dict(), indent=2))
        return

    status = "BLOCKED" if verdict.should_block else "OK"
    print(f"{animal_a.label} x {animal_b.label}: {status}")
    print(f"  Relationship: {verdict.type.value}")
    print(f"  {verdict.details}")


async def _depth(args: argparse.Namespace) -> None:
    population = await fetch_all_animals()

    if args.dry_run:
        counts: dict[int, int] = {}
        for animal in population:
            depth = detect_generation_depth(animal)
            counts[depth] = counts.get(depth, 0) + 1
        print(f"Detected pedigree depth for {len(population)} animals:")
        for depth in sorted(counts):
            print(f"  Generation {depth}: {counts[depth]}")
        return

    print(f"Updating pedigree depth for {len(population)} animals...")
    result = await sync_pedigree_depths(population)
    print(f"  Updated: {result['updated']}")
    print(f"  Unchanged: {result['unchanged']}")
    if result["errors"]:
        print(f"  Errors: {result['errors']}")


async def _recommend(args: argparse.Namespace) -> None:
    recommendations = await generate_recommendations(max_depth=args.depth, environment_class=args.env)
    if args.json:
        print(json.dumps([r.to_dict() for r in recommendations], indent=2))
        return

    if not recommendations:
        print("No compatible breeding pairs found.")
        return

    print(f"{'Male':<20} {'Female':<20} {'Score':>5}  Risk")
    for r in recommendations:
        print(f"{r.male_name:<20} {r.female_name:<20} {r.compatibility_score:>5}  {r.inbreeding_risk}")


async def _seasonal(args: argparse.Namespace) -> None:
    analysis = await analyze_breeding_history()
    if args.json:
        print(json.dumps(analysis, indent=2))
        return

    print(f"Best months: {', '.join(analysis['bestMonths']) or '-'}")
    print(f"Worst months: {', '.join(analysis['worstMonths']) or '-'}")
    print()
    for line in analysis["recommendations"]:
        print(f"  - {line}")


async def _import_text(args: argparse.Namespace) -> None:
    text = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
    slots = parse_pedigree_text(text)
    if not slots:
        raise ValueError("No pedigree names found in the text")

    depth = detect_generation_depth(slots)
    if args.dry_run:
        print(f"Parsed {len(slots)} pedigree slots (depth {depth}):")
        for slot, name in slots.items():
            print(f"  {slot}: {name}")
        return

    population = await fetch_all_animals()
    index = AncestorIndex.build(population)
    animal = find_in_population(args.animal, index)
    await write_pedigree_slots(animal.id, slots)
    invalidate_recommendations()

    linked = sum(1 for name in slots.values() if index.resolve(name) is not None)
    print(f"Imported {len(slots)} pedigree slots for {animal.label} (depth {depth})")
    print(f"  Linked to herd records: {linked}")


COMMANDS = {
    "classify": _classify,
    "depth": _depth,
    "recommend": _recommend,
    "seasonal": _seasonal,
    "import-text": _import_text,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pedigree checks and breeding planning")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    classify_parser = subparsers.add_parser("classify", help="Check the relationship between two animals")
    classify_parser.add_argument("animal_a", help="Animal ID or name")
    classify_parser.add_argument("animal_b", help="Animal ID or name")
    classify_parser.add_argument("--depth", type=int, default=2, help="Generations to inspect")
    classify_parser.add_argument("--json", action="store_true", help="Output as JSON")

    depth_parser = subparsers.add_parser("depth", help="Detect and store pedigree depth for all animals")
    depth_parser.add_argument("--dry-run", action="store_true", help="Report depths without writing")

    recommend_parser = subparsers.add_parser("recommend", help="List recommended breeding pairs")
    recommend_parser.add_argument("--depth", type=int, help="Generations to inspect (default by environment)")
    recommend_parser.add_argument(
        "--env",
        choices=["constrained", "unconstrained"],
        help=f"Environment class (default: {settings.environment_class})",
    )
    recommend_parser.add_argument("--json", action="store_true", help="Output as JSON")

    seasonal_parser = subparsers.add_parser("seasonal", help="Best and worst breeding months")
    seasonal_parser.add_argument("--json", action="store_true", help="Output as JSON")

    import_parser = subparsers.add_parser("import-text", help="Import a pedigree from pasted text")
    import_parser.add_argument("animal", help="Animal ID or name to store the pedigree on")
    import_parser.add_argument("file", help="Text file with the pedigree (- for stdin)")
    import_parser.add_argument("--dry-run", action="store_true", help="Show parsed slots without writing")

    return parser


async def cli_main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        await handler(args)
    except AuthenticationError as e:
        print(f"Session rejected by the backend ({e}). Sign in again and retry.", file=sys.stderr)
        return 2
    except RetryableError as e:
        print(f"Backend unavailable, try again later: {e}", file=sys.stderr)
        return 1
    except (StorageAPIError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cli() -> None:
    """Sync CLI entry point."""
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(cli_main()))


if __name__ == "__main__":
    cli()
