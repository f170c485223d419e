"""
1) Load the family tree: a JSON person list, a GEDCOM file, or a SQLite store.
2) Optionally seed a SQLite store with the loaded people.
3) Optionally report head counts, or list the people matching a name.
4) Optionally narrow the tree to the people around one person.
5) Validate the data for cycles, dangling or one-sided links, and impossible dates.
6) Lay the tree out by generation.
7) Write the layout: an image, pinned DOT source, or the position map as JSON.
"""

from pathlib import Path
import argparse
import json
import logging
import sys

from database import create_database, load_people, store_people
from graph import build_graph, connected_people, family_statistics, get_ego_subgraph, search_people, subset_people
from layout import calculate_layout
from models import Person
from parsing import format_date, load_people_json, normalize_data, parse_gedcom, positions_to_dict
from plotting import export_dot, plot_layout
from validation import validate_people


def load_input(path: Path) -> list[Person]:
    """Load people from a .json, .ged or .db file."""
    ext = path.suffix.lower()
    if ext == ".json":
        return load_people_json(path)
    if ext in (".ged", ".gedcom"):
        return normalize_data(parse_gedcom(path))
    if ext in (".db", ".sqlite"):
        conn = create_database(path)
        try:
            return load_people(conn)
        finally:
            conn.close()
    raise ValueError(f"Unsupported input file: {path}")


def resolve_person(people: list[Person], key: str) -> str:
    """Turn a person ID, or a name matching exactly one person, into an ID."""
    if any(p.id == key for p in people):
        return key
    matches = search_people(people, key)
    if len(matches) == 1:
        return matches[0].id
    if not matches:
        raise ValueError(f"No person with ID or name {key!r}")
    raise ValueError(f"{len(matches)} people match {key!r}: {', '.join(p.id for p in matches)}")


def write_output(positions, output_path: Path | None, highlight: set[str] | None = None):
    ext = output_path.suffix.lower() if output_path else ""
    if ext == ".dot":
        export_dot(positions, output_path)
    elif ext == ".json":
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(positions_to_dict(positions), fh, indent=2)
        print(f"Positions saved to {output_path}")
    else:
        plot_layout(positions, output_path, highlight=highlight)


def print_statistics(people: list[Person]):
    stats = family_statistics(people)
    print("Family statistics:")
    for name, count in stats.items():
        print(f"  {name.replace('_', ' ')}: {count}")


def print_matches(people: list[Person], query: str):
    matches = search_people(people, query)
    print(f"  {len(matches)} people match {query!r}")
    for p in matches:
        print(f"    {p.id}: {p.full_name} (born {format_date(p.birth_date)})")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lay out and draw a family tree by generation.")
    parser.add_argument("input", type=Path, help="People as .json, .ged or .db")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output .png/.svg/.pdf image, .dot source or .json positions (default: show)",
    )
    parser.add_argument("--db", type=Path, help="Seed this SQLite store with the loaded people")
    parser.add_argument("--stats", action="store_true", help="Print head counts and stop")
    parser.add_argument("--search", metavar="NAME", help="List people whose name contains NAME and stop")
    parser.add_argument("--focus", help="Only lay out people around this person ID or unique name")
    parser.add_argument("--radius", type=int, default=2, help="Relationship distance kept by --focus")
    parser.add_argument(
        "--highlight",
        metavar="ID_OR_NAME",
        help="Emphasise this person with their parents, children and spouse in the image",
    )
    parser.add_argument("--no-validate", action="store_true", help="Skip data validation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log layout details")
    return parser.parse_args(argv)


def run(args: argparse.Namespace):
    print(f"Loading people from: {args.input}")
    people = load_input(args.input)
    print(f"  Found {len(people)} people")

    if args.db:
        print(f"Storing people in SQLite: {args.db}")
        conn = create_database(args.db)
        store_people(conn, people)
        conn.close()

    if args.stats:
        print_statistics(people)
        return

    if args.search is not None:
        print_matches(people, args.search)
        return

    if args.focus:
        focus_id = resolve_person(people, args.focus)
        print(f"Focusing on {focus_id} (radius {args.radius})...")
        ego = get_ego_subgraph(build_graph(people), focus_id, radius=args.radius)
        people = subset_people(people, set(ego.nodes()))
        print(f"  Kept {len(people)} people")

    highlight = None
    if args.highlight:
        highlight_id = resolve_person(people, args.highlight)
        highlight = connected_people(build_graph(people), highlight_id)
        print(f"Highlighting {highlight_id} and {len(highlight) - 1} relatives")

    if not args.no_validate:
        print("Validating people...")
        warnings = validate_people(people)
        if warnings:
            print(f"  Found {len(warnings)} validation warnings:")
            for w in warnings[:10]:  # Show first 10 warnings
                print(f"    - {w}")
            if len(warnings) > 10:
                print(f"    ... and {len(warnings) - 10} more")
        else:
            print("  No validation issues found")

    print("Computing layout...")
    positions = calculate_layout(people)
    print(f"  Placed {len(positions)} of {len(people)} people")

    write_output(positions, args.output, highlight)
    print("Done!")


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        run(args)
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
