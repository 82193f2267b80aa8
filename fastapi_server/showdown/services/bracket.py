"""
Bracket builder - seeds 8 entrants into the fixed 7-match bracket.

    QF1 (1) ─┐
             ├─ SF (5) ─┐
    QF2 (2) ─┘          │
                        ├─ Final (7)
    QF3 (3) ─┐          │
             ├─ SF (6) ─┘
    QF4 (4) ─┘

QF1/QF2 are drawn from the left conference, QF3/QF4 from the right, pairing
entrants in the order given.
"""
import logging
from dataclasses import dataclass
from typing import Sequence

from sqlmodel import Session

from showdown import config
from showdown.errors import InvalidInput, SeasonNotFound
from showdown.models import Entrant, Match, Season
from showdown.models.entrant import CONFERENCES
from showdown.services.transaction import transaction

logger = logging.getLogger(__name__)

BRACKET_SIZE = 8
PER_CONFERENCE = BRACKET_SIZE // 2

# match_number -> (round, next match_number)
TOPOLOGY = {
    1: (1, 5),
    2: (1, 5),
    3: (1, 6),
    4: (1, 6),
    5: (2, 7),
    6: (2, 7),
    7: (3, None),
}


@dataclass
class EntrantSeed:
    name: str
    color_hex: str
    conference: str


def validate_seeds(entrants: Sequence[EntrantSeed]) -> None:
    if len(entrants) != BRACKET_SIZE:
        raise InvalidInput(f"Expected {BRACKET_SIZE} entrants, got {len(entrants)}")

    for seed in entrants:
        if not seed.name or not seed.name.strip():
            raise InvalidInput("Entrant name must not be empty")
        if seed.conference not in CONFERENCES:
            raise InvalidInput(f"Unknown conference '{seed.conference}'")

    left = sum(1 for s in entrants if s.conference == "left")
    if left != PER_CONFERENCE:
        raise InvalidInput(
            f"Expected {PER_CONFERENCE} left and {PER_CONFERENCE} right entrants, "
            f"got {left} left and {BRACKET_SIZE - left} right"
        )


def seed_bracket(session: Session, season_id: int, entrants: Sequence[EntrantSeed]) -> list[Match]:
    """
    Create a season's entrants and its 7 matches, wired for progression.

    Not idempotent: calling it twice for one season creates a second bracket.
    Returns the matches ordered by match number.
    """
    validate_seeds(entrants)

    with transaction(session):
        season = session.get(Season, season_id)
        if season is None:
            raise SeasonNotFound(f"Season {season_id} not found")

        created = []
        for seed in entrants:
            entrant = Entrant(
                season_id=season_id,
                name=seed.name.strip(),
                color_hex=seed.color_hex,
                conference=seed.conference,
            )
            session.add(entrant)
            created.append(entrant)
        session.flush()

        left = [e for e in created if e.conference == "left"]
        right = [e for e in created if e.conference == "right"]
        pairs = {
            1: (left[0], left[1]),
            2: (left[2], left[3]),
            3: (right[0], right[1]),
            4: (right[2], right[3]),
        }

        # Create the final first so every feeder can point at an existing id
        matches: dict[int, Match] = {}
        for match_number in sorted(TOPOLOGY, reverse=True):
            round_number, next_number = TOPOLOGY[match_number]
            entrant_a, entrant_b = pairs.get(match_number, (None, None))
            match = Match(
                season_id=season_id,
                match_number=match_number,
                round=round_number,
                entrant_a_id=entrant_a.id if entrant_a else None,
                entrant_b_id=entrant_b.id if entrant_b else None,
                current_score_a=config.CP_START,
                current_score_b=config.CP_START,
                next_match_id=matches[next_number].id if next_number else None,
            )
            session.add(match)
            session.flush()
            matches[match_number] = match

    logger.info(f"Seeded bracket for season {season_id}: {len(created)} entrants, {len(matches)} matches")
    return [matches[n] for n in sorted(matches)]
