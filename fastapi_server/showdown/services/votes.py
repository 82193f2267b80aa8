"""
Vote ledger - one vote per (match, voter key), each worth CP_PER_VOTE.

Voting policy: a voter key that has voted in a match can never vote in it
again. The UNIQUE (match_id, voter_key) constraint is what enforces it; the
lookup before the insert only gives the common case a clean error.
"""
import hashlib
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from showdown import config
from showdown.clock import as_utc, utcnow
from showdown.errors import AlreadyVoted, InvalidEntrant, MatchNotActive, MatchNotFound
from showdown.models import Match, Vote
from showdown.services.scores import adjust_score
from showdown.services.transaction import transaction

logger = logging.getLogger(__name__)


def derive_voter_key(client_ip: str, season_id: int, match_id: int, salt: Optional[str] = None) -> str:
    """Hash a client IP into a per-season, per-match deduplication key."""
    if salt is None:
        salt = config.VOTER_KEY_SALT
    raw = f"{client_ip}{season_id}{match_id}{salt}"
    return hashlib.sha256(raw.encode()).hexdigest()


def cast_vote(
    session: Session,
    match_id: int,
    entrant_id: int,
    voter_key: str,
    now: Optional[datetime] = None,
) -> int:
    """
    Record a vote and add CP_PER_VOTE to the voted entrant's score.

    Checks run in order: match exists, match is live, entrant is in the
    match, key has not voted. The vote row and the increment commit together
    or not at all. Returns the entrant's new score.
    """
    now = as_utc(now) if now else utcnow()

    with transaction(session):
        match = session.get(Match, match_id)
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found")
        if not match.active or match.finished:
            raise MatchNotActive(f"Match {match_id} is not accepting votes")
        if not match.has_entrant(entrant_id):
            raise InvalidEntrant(f"Entrant {entrant_id} is not in match {match_id}")

        existing = session.exec(
            select(Vote.id)
            .where(Vote.match_id == match_id)
            .where(Vote.voter_key == voter_key)
        ).first()
        if existing is not None:
            raise AlreadyVoted(f"Already voted in match {match_id}")

        session.add(
            Vote(
                season_id=match.season_id,
                match_id=match_id,
                entrant_id=entrant_id,
                voter_key=voter_key,
                created_at=now,
            )
        )
        try:
            session.flush()
        except IntegrityError as e:
            # Lost the race against a concurrent vote with the same key
            raise AlreadyVoted(f"Already voted in match {match_id}") from e

        new_score = adjust_score(session, match, entrant_id, config.CP_PER_VOTE)
        if new_score is None:
            raise MatchNotActive(f"Match {match_id} closed before the vote landed")

    logger.debug(f"Vote accepted: match={match_id} entrant={entrant_id} score={new_score}")
    return new_score
