"""
Matches router - public endpoints for the live match, the bracket and voting.

Voters are anonymous: each vote is deduplicated on a hash of the client IP,
season and match.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field
from sqlmodel import Session

from showdown.clock import as_utc
from showdown.database import get_session
from showdown.errors import MatchNotFound
from showdown.models import Entrant, Match
from showdown.services.queries import (
    current_season_id,
    entrants_by_id,
    get_active_match,
    get_bracket,
    get_last_finished_match,
)
from showdown.services.votes import cast_vote, derive_voter_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["matches"])


# --- Request/Response Models ---

class EntrantView(BaseModel):
    id: int
    name: str
    color_hex: str
    conference: str
    eliminated: bool


class SlotView(EntrantView):
    current_score: int


class MatchView(BaseModel):
    id: int
    season_id: int
    match_number: int
    round: int
    started_at: Optional[str]
    ends_at: Optional[str]
    active: bool
    finished: bool
    entrant_a: Optional[SlotView]
    entrant_b: Optional[SlotView]
    winner: Optional[EntrantView]
    final_score_a: Optional[int]
    final_score_b: Optional[int]
    tie_break_random: bool
    next_match_id: Optional[int]


class VoteRequest(BaseModel):
    match_id: int = Field(ge=1)
    entrant_id: int = Field(ge=1)


class VoteResponse(BaseModel):
    ok: bool = True
    new_score: int


# --- Utility Functions ---

def iso(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC with a Z suffix."""
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")


def entrant_view(entrant: Entrant) -> EntrantView:
    return EntrantView(
        id=entrant.id,
        name=entrant.name,
        color_hex=entrant.color_hex,
        conference=entrant.conference,
        eliminated=entrant.eliminated,
    )


def slot_view(entrant: Optional[Entrant], score: int) -> Optional[SlotView]:
    if entrant is None:
        return None
    return SlotView(**entrant_view(entrant).model_dump(), current_score=score)


def match_view(match: Match, entrants: dict[int, Entrant]) -> MatchView:
    return MatchView(
        id=match.id,
        season_id=match.season_id,
        match_number=match.match_number,
        round=match.round,
        started_at=iso(match.started_at),
        ends_at=iso(match.ends_at),
        active=match.active,
        finished=match.finished,
        entrant_a=slot_view(entrants.get(match.entrant_a_id), match.current_score_a),
        entrant_b=slot_view(entrants.get(match.entrant_b_id), match.current_score_b),
        winner=entrant_view(entrants[match.winner_id]) if match.winner_id in entrants else None,
        final_score_a=match.final_score_a,
        final_score_b=match.final_score_b,
        tie_break_random=match.tie_break_random,
        next_match_id=match.next_match_id,
    )


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# --- Endpoints ---

@router.get("/current-matchup")
def get_current_matchup(
    season_id: Optional[int] = Query(default=None, ge=1),
    session: Session = Depends(get_session),
):
    """The single live match, or null when nothing is being voted on."""
    if season_id is None:
        season_id = current_season_id(session)
    match = get_active_match(session, season_id)
    if match is None:
        return {"ok": True, "matchup": None}
    return {"ok": True, "matchup": match_view(match, entrants_by_id(session, match.season_id))}


@router.get("/tournament-bracket")
def get_tournament_bracket(
    season_id: Optional[int] = Query(default=None, ge=1),
    session: Session = Depends(get_session),
):
    """All seven matches of a season (current season by default)."""
    if season_id is None:
        season_id = current_season_id(session)
    if season_id is None:
        return {"ok": True, "season_id": None, "matchups": []}

    entrants = entrants_by_id(session, season_id)
    return {
        "ok": True,
        "season_id": season_id,
        "matchups": [match_view(m, entrants) for m in get_bracket(session, season_id)],
    }


@router.get("/last-finished-match")
def get_last_finished(
    season_id: Optional[int] = Query(default=None, ge=1),
    session: Session = Depends(get_session),
):
    if season_id is None:
        season_id = current_season_id(session)
    match = get_last_finished_match(session, season_id)
    if match is None:
        return {"ok": True, "match": None}
    return {"ok": True, "match": match_view(match, entrants_by_id(session, match.season_id))}


@router.post("/vote", response_model=VoteResponse)
def vote(
    body: VoteRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    """
    Cast one vote for an entrant in the live match.

    Each client gets one vote per match; repeats return 409 AlreadyVoted.
    """
    match = session.get(Match, body.match_id)
    if match is None:
        raise MatchNotFound(f"Match {body.match_id} not found")

    voter_key = derive_voter_key(client_ip(request), match.season_id, match.id)
    new_score = cast_vote(session, body.match_id, body.entrant_id, voter_key)
    return VoteResponse(new_score=new_score)
