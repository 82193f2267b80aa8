"""
Create a season and seed its bracket from a JSON file.

    python scripts/seed_bracket.py [path/to/entrants.json] [--start]
"""
import argparse
import json
from pathlib import Path

from sqlmodel import Session

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in __import__("sys").path:
    __import__("sys").path.insert(0, str(PROJECT_ROOT))

from showdown.database import create_db_and_tables, engine
from showdown.services.admin import create_season, start_season
from showdown.services.bracket import EntrantSeed, seed_bracket, validate_seeds


def load_seed_file(json_path: Path) -> dict:
    """Load season name and entrant descriptors from JSON file."""
    with open(json_path, "r", encoding="utf-8") as f:
        return json.load(f)


def seed_from_file(json_path: Path, start: bool = False) -> int:
    """
    Create a season, seed its 8 entrants and 7 matches.
    Returns the new season id. A bad entrant list creates nothing.
    """
    data = load_seed_file(json_path)
    seeds = [
        EntrantSeed(name=e["name"], color_hex=e["color"], conference=e["conference"])
        for e in data["entrants"]
    ]
    validate_seeds(seeds)

    with Session(engine) as session:
        season = create_season(session, data.get("season_name", "Season"))
        matches = seed_bracket(session, season.id, seeds)
        print(f"Season {season.id} '{season.name}': {len(matches)} matches created")

        if start:
            first = start_season(session, season.id)
            print(f"Match {first.match_number} live until {first.ends_at.isoformat()}")

        return season.id


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", nargs="?", default=str(PROJECT_ROOT / "data" / "entrants.example.json"))
    parser.add_argument("--start", action="store_true", help="Start the season after seeding")
    args = parser.parse_args()

    print("Creating database tables...")
    create_db_and_tables()

    print(f"Seeding bracket from {args.path}...")
    season_id = seed_from_file(Path(args.path), start=args.start)
    print(f"Done! Season {season_id} seeded.")


if __name__ == "__main__":
    main()
