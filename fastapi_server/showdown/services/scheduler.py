"""
Scheduler - resolves matches whose voting window has closed and starts the
next eligible match on demand.

resolve_due_matches() is what a cron job or the in-process loop calls each
tick; start_next_match() covers starts the resolver does not make itself
(the next quarterfinal, or manual recovery).
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from showdown.clock import as_utc, utcnow
from showdown.errors import ActiveMatchExists, NoEligibleMatch, ShowdownError
from showdown.models import Match
from showdown.services.activation import activate_match
from showdown.services.queries import current_season_id, get_active_match
from showdown.services.resolver import MatchOutcome, resolve_match
from showdown.services.transaction import transaction

logger = logging.getLogger(__name__)


def find_due_match_ids(session: Session, now: datetime) -> list[int]:
    return list(
        session.exec(
            select(Match.id)
            .where(Match.active == True)  # noqa: E712
            .where(Match.finished == False)  # noqa: E712
            .where(Match.ends_at.is_not(None))
            .where(Match.ends_at <= now)
            .order_by(Match.match_number)
        ).all()
    )


def resolve_due_matches(session: Session, now: Optional[datetime] = None) -> list[MatchOutcome]:
    """
    Resolve every live match whose ends_at has passed.

    Nothing due returns an empty list and writes nothing. A failure on one
    match is logged and does not stop the rest.
    """
    now = as_utc(now) if now else utcnow()

    due_ids = find_due_match_ids(session, now)
    if not due_ids:
        logger.debug("No due matches")
        return []

    if len(due_ids) > 1:
        logger.warning(f"{len(due_ids)} matches due at once: {due_ids}")

    outcomes = []
    for match_id in due_ids:
        try:
            outcomes.append(resolve_match(session, match_id, now=now, source="scheduler"))
        except ShowdownError as e:
            logger.warning(f"Could not resolve due match {match_id}: {e.code} {e.detail}")
    return outcomes


def start_next_match(
    session: Session,
    season_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Match:
    """
    Activate the lowest-numbered idle match that has both entrants.

    Refuses while a match is live. Defaults to the current season.
    """
    now = as_utc(now) if now else utcnow()

    with transaction(session):
        if season_id is None:
            season_id = current_season_id(session)
        if season_id is None:
            raise NoEligibleMatch("No season exists")

        active = get_active_match(session, season_id)
        if active is not None:
            raise ActiveMatchExists(f"Match {active.match_number} is already active")

        candidate = session.exec(
            select(Match)
            .where(Match.season_id == season_id)
            .where(Match.active == False)  # noqa: E712
            .where(Match.finished == False)  # noqa: E712
            .where(Match.entrant_a_id.is_not(None))
            .where(Match.entrant_b_id.is_not(None))
            .order_by(Match.match_number)
        ).first()
        if candidate is None:
            raise NoEligibleMatch(f"No match ready to start in season {season_id}")

        # Only the lowest candidate is tried: losing this race means someone else started a match
        if not activate_match(session, candidate, now, exclusive=True):
            raise ActiveMatchExists("Another match was activated concurrently")

    session.refresh(candidate)
    return candidate


def run_scheduler_tick(session_factory) -> list[MatchOutcome]:
    """One scheduler pass with a fresh session."""
    with session_factory() as session:
        return resolve_due_matches(session)


async def scheduler_loop(session_factory, interval_seconds: float) -> None:
    """Resolve due matches every interval until cancelled."""
    logger.info(f"Scheduler loop started (every {interval_seconds}s)")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            outcomes = await asyncio.to_thread(run_scheduler_tick, session_factory)
            for outcome in outcomes:
                logger.info(f"Scheduler resolved match {outcome.match_number}")
        except Exception as e:
            logger.warning(f"Scheduler tick failed: {e}")
