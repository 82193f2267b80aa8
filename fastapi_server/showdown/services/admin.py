"""
Admin overrides - audited score events, forced resolution and season control.

Callers are expected to have passed the admin gate already; nothing here
checks identity.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from showdown import config
from showdown.clock import as_utc, utcnow
from showdown.errors import (
    ActiveMatchExists,
    InvalidEntrant,
    InvalidInput,
    MatchNotActive,
    MatchNotFound,
    MatchNotReady,
    NoActiveMatch,
    SeasonNotFound,
    WindowClosed,
)
from showdown.models import AdminEvent, Match, Season
from showdown.services.activation import activate_match
from showdown.services.queries import current_season_id, get_active_match
from showdown.services.resolver import MatchOutcome, resolve_match
from showdown.services.scheduler import start_next_match
from showdown.services.scores import adjust_score
from showdown.services.transaction import transaction

logger = logging.getLogger(__name__)


def apply_event(
    session: Session,
    match_id: int,
    entrant_id: int,
    delta: int,
    reason: str,
    now: Optional[datetime] = None,
) -> int:
    """
    Apply a signed CP adjustment to an entrant in the live match.

    Refused with WindowClosed once the match is within EVENT_CUTOFF_SECONDS
    of its end. Writes an AdminEvent audit row with the resulting score and
    returns that score.
    """
    now = as_utc(now) if now else utcnow()
    reason = (reason or "").strip()

    with transaction(session):
        match = session.get(Match, match_id)
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found")
        if not reason:
            raise InvalidInput("Reason is required")
        if not match.active or match.finished:
            raise MatchNotActive(f"Match {match_id} is not active")
        if not match.has_entrant(entrant_id):
            raise InvalidEntrant(f"Entrant {entrant_id} is not in match {match_id}")

        if match.ends_at is not None:
            cutoff = match.ends_at - timedelta(seconds=config.EVENT_CUTOFF_SECONDS)
            if now >= cutoff:
                logger.warning(f"Event on match {match_id} refused: inside cutoff window (ends {match.ends_at})")
                raise WindowClosed(
                    f"Events are closed within {config.EVENT_CUTOFF_SECONDS}s of the match end"
                )

        new_score = adjust_score(session, match, entrant_id, delta)
        if new_score is None:
            raise MatchNotActive(f"Match {match_id} closed before the event landed")

        session.add(
            AdminEvent(
                season_id=match.season_id,
                match_id=match_id,
                entrant_id=entrant_id,
                delta=delta,
                reason=reason,
                score_after=new_score,
                created_at=now,
            )
        )

    logger.info(f"Admin event on match {match_id}: entrant={entrant_id} delta={delta:+d} -> {new_score} ({reason})")
    return new_score


def force_end(session: Session, match_id: int, now: Optional[datetime] = None) -> MatchOutcome:
    """Resolve a live match now, ignoring ends_at."""
    return resolve_match(session, match_id, now=now, source="admin")


def force_start_next(
    session: Session,
    season_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Match:
    return start_next_match(session, season_id=season_id, now=now)


def create_season(session: Session, name: str) -> Season:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Season name is required")

    with transaction(session):
        season = Season(name=name)
        session.add(season)

    session.refresh(season)
    logger.info(f"Created season {season.id}: {season.name}")
    return season


def start_season(session: Session, season_id: int, now: Optional[datetime] = None) -> Match:
    """
    Make a season current and open its first quarterfinal.

    Other seasons are marked inactive. Match 1 must be seeded and idle.
    """
    now = as_utc(now) if now else utcnow()

    with transaction(session):
        season = session.get(Season, season_id)
        if season is None:
            raise SeasonNotFound(f"Season {season_id} not found")

        first = session.exec(
            select(Match)
            .where(Match.season_id == season_id)
            .where(Match.match_number == 1)
        ).first()
        if first is None:
            raise MatchNotFound(f"Season {season_id} has no bracket")
        if first.finished or not first.slotted:
            raise MatchNotReady(f"Match 1 of season {season_id} cannot be started")
        if first.active:
            raise ActiveMatchExists(f"Season {season_id} is already running")

        session.execute(
            update(Season)
            .where(Season.id != season_id)
            .values(active=False)
            .execution_options(synchronize_session=False)
        )
        season.active = True
        session.add(season)

        if not activate_match(session, first, now, exclusive=True):
            raise ActiveMatchExists(f"Another match in season {season_id} is active")

    session.refresh(first)
    logger.info(f"Season {season_id} started")
    return first


def end_match_soon(
    session: Session,
    seconds: int = 60,
    season_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Match:
    """Pull the live match's end time in to now + seconds (for exercising the scheduler)."""
    now = as_utc(now) if now else utcnow()
    if seconds < 0:
        raise InvalidInput("seconds must not be negative")

    with transaction(session):
        if season_id is None:
            season_id = current_season_id(session)
        match = get_active_match(session, season_id)
        if match is None:
            raise NoActiveMatch("No active match")
        match.ends_at = now + timedelta(seconds=seconds)
        match.updated_at = now
        session.add(match)

    session.refresh(match)
    logger.info(f"Match {match.match_number} (id={match.id}) now ends at {match.ends_at}")
    return match
