"""
Match resolver - settles a closed match and moves its winner along the bracket.

Every state transition here is a conditional UPDATE whose WHERE clause names
the state it expects to find:

  claim      active and not finished        -> finished, scores frozen
  fill slot  next.entrant_x IS NULL         -> next.entrant_x = winner
  activate   next has both slots, idle      -> next live for MATCH_DURATION

Row locks (PostgreSQL) or the single-writer lock (SQLite) make each of these
land for exactly one caller, so two feeders resolving at once still fill
both slots and activate the next match once.
"""
import logging
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from showdown.clock import as_utc, utcnow
from showdown.errors import MatchNotActive, MatchNotFound, MatchNotReady
from showdown.models import Entrant, Match
from showdown.services.activation import activate_match
from showdown.services.transaction import transaction

logger = logging.getLogger(__name__)


@dataclass
class MatchOutcome:
    match_id: int
    match_number: int
    winner_id: int
    loser_id: int
    final_score_a: int
    final_score_b: int
    tie_break_random: bool
    next_match_id: Optional[int] = None
    next_match_activated: bool = False
    already_finished: bool = False

    @classmethod
    def from_match(cls, match: Match, **extra) -> "MatchOutcome":
        loser_id = match.entrant_b_id if match.winner_id == match.entrant_a_id else match.entrant_a_id
        return cls(
            match_id=match.id,
            match_number=match.match_number,
            winner_id=match.winner_id,
            loser_id=loser_id,
            final_score_a=match.final_score_a,
            final_score_b=match.final_score_b,
            tie_break_random=match.tie_break_random,
            next_match_id=match.next_match_id,
            **extra,
        )

    def to_dict(self) -> dict:
        return asdict(self)


def decide_winner(entrant_a_id: int, entrant_b_id: int, score_a: int, score_b: int) -> tuple[int, int, bool]:
    """
    Returns (winner_id, loser_id, tie_break_random).

    Higher score wins; a tie is settled by a fair coin from the OS CSPRNG.
    """
    if score_a > score_b:
        return entrant_a_id, entrant_b_id, False
    if score_b > score_a:
        return entrant_b_id, entrant_a_id, False
    if secrets.randbelow(2) == 0:
        return entrant_a_id, entrant_b_id, True
    return entrant_b_id, entrant_a_id, True


def resolve_match(
    session: Session,
    match_id: int,
    now: Optional[datetime] = None,
    source: str = "scheduler",
) -> MatchOutcome:
    """
    Finish a live match: freeze scores, pick the winner, eliminate the loser
    and advance the winner into the next match.

    Idempotent: an already finished match returns its recorded outcome with
    already_finished=True and nothing is written.
    """
    now = as_utc(now) if now else utcnow()

    with transaction(session):
        match = session.get(Match, match_id)
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found")
        if match.finished:
            return MatchOutcome.from_match(match, already_finished=True)
        if not match.active:
            raise MatchNotActive(f"Match {match_id} is not active")
        if not match.slotted:
            raise MatchNotReady(f"Match {match_id} is missing an entrant")

        claimed = session.execute(
            update(Match)
            .where(Match.id == match_id)
            .where(Match.active == True)  # noqa: E712
            .where(Match.finished == False)  # noqa: E712
            .values(
                finished=True,
                active=False,
                final_score_a=Match.current_score_a,
                final_score_b=Match.current_score_b,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        session.refresh(match)

        if not claimed:
            # Another resolver got there first
            if match.finished:
                return MatchOutcome.from_match(match, already_finished=True)
            raise MatchNotActive(f"Match {match_id} is not active")

        winner_id, loser_id, tie = decide_winner(
            match.entrant_a_id, match.entrant_b_id, match.final_score_a, match.final_score_b
        )
        match.winner_id = winner_id
        match.tie_break_random = tie
        session.add(match)
        session.flush()

        session.execute(
            update(Entrant)
            .where(Entrant.id == loser_id)
            .values(eliminated=True)
            .execution_options(synchronize_session=False)
        )

        outcome = MatchOutcome.from_match(match)
        if match.next_match_id is not None:
            outcome.next_match_activated = _advance_winner(session, match, winner_id, now)

    logger.info(
        f"Match {outcome.match_number} (id={match_id}) resolved by {source}: "
        f"winner={winner_id} {outcome.final_score_a}-{outcome.final_score_b}"
        f"{' (random tie-break)' if outcome.tie_break_random else ''}"
    )
    if outcome.next_match_id is None:
        logger.info(f"Final resolved, season {match.season_id} complete: champion={winner_id}")
    return outcome


def _advance_winner(session: Session, match: Match, winner_id: int, now: datetime) -> bool:
    """Slot the winner into the next match; activate it if that filled the pair."""
    next_id = match.next_match_id

    filled_slot = None
    for field in ("entrant_a_id", "entrant_b_id"):
        column = getattr(Match, field)
        filled = session.execute(
            update(Match)
            .where(Match.id == next_id)
            .where(column.is_(None))
            .values({field: winner_id, "updated_at": now})
            .execution_options(synchronize_session=False)
        ).rowcount
        if filled:
            filled_slot = field
            break

    if filled_slot is None:
        logger.warning(f"Match {next_id} has no open slot for winner {winner_id} of match {match.id}")
        return False

    next_match = session.get(Match, next_id)
    if not activate_match(session, next_match, now, exclusive=False, reset_scores=True):
        logger.info(f"Winner {winner_id} slotted into match {next_match.match_number} ({filled_slot}); waiting on sibling")
        return False

    stray = session.execute(
        update(Match)
        .where(Match.season_id == match.season_id)
        .where(Match.id != next_id)
        .where(Match.active == True)  # noqa: E712
        .values(active=False, updated_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if stray:
        logger.warning(f"Deactivated {stray} stray active match(es) in season {match.season_id}")
    return True
