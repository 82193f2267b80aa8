"""
Admin router - season setup, score events and manual control of the bracket.

Every endpoint requires the shared admin token in the X-Admin-Token header.
"""
import logging
import secrets
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field
from sqlmodel import Session

from showdown import config
from showdown.database import get_session
from showdown.errors import Forbidden
from showdown.routers.matches import iso, match_view
from showdown.services import admin
from showdown.services.bracket import EntrantSeed, seed_bracket
from showdown.services.queries import entrants_by_id
from showdown.services.scheduler import resolve_due_matches

logger = logging.getLogger(__name__)


def require_admin(x_admin_token: Optional[str] = Header(None, alias="X-Admin-Token")) -> None:
    """Allow the request only if it carries the configured admin token."""
    expected = config.ADMIN_TOKEN
    if not expected or not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        logger.warning("Rejected admin request: missing or invalid X-Admin-Token")
        raise Forbidden("Admin token required")


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


# --- Request Models ---

class CreateSeasonRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class EntrantSeedRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(min_length=1, max_length=16, description="Hex color, e.g. #ff6600")
    conference: Literal["left", "right"]


class SeedBracketRequest(BaseModel):
    season_id: int = Field(ge=1)
    entrants: list[EntrantSeedRequest]


class SeasonRequest(BaseModel):
    season_id: int = Field(ge=1)


class EventRequest(BaseModel):
    match_id: int = Field(ge=1)
    entrant_id: int = Field(ge=1)
    delta: int
    reason: str = Field(min_length=1, max_length=500)


class MatchRequest(BaseModel):
    match_id: int = Field(ge=1)


class StartNextRequest(BaseModel):
    season_id: Optional[int] = Field(default=None, ge=1)


class EndSoonRequest(BaseModel):
    seconds: int = Field(default=60, ge=0, le=86400)
    season_id: Optional[int] = Field(default=None, ge=1)


# --- Endpoints ---

@router.post("/create-season")
def create_season(request: CreateSeasonRequest, session: Session = Depends(get_session)):
    season = admin.create_season(session, request.name)
    return {"ok": True, "season_id": season.id}


@router.post("/seed-bracket")
def seed(request: SeedBracketRequest, session: Session = Depends(get_session)):
    """Create the 8 entrants and 7 matches. Must only be called once per season."""
    seeds = [EntrantSeed(name=e.name, color_hex=e.color, conference=e.conference) for e in request.entrants]
    matches = seed_bracket(session, request.season_id, seeds)
    return {"ok": True, "match_ids": [m.id for m in matches]}


@router.post("/start-season")
def start_season(request: SeasonRequest, session: Session = Depends(get_session)):
    match = admin.start_season(session, request.season_id)
    return {"ok": True, "matchup": match_view(match, entrants_by_id(session, match.season_id))}


@router.post("/event")
def add_event(request: EventRequest, session: Session = Depends(get_session)):
    """Adjust an entrant's CP in the live match. Closed near the end of the match."""
    new_score = admin.apply_event(
        session, request.match_id, request.entrant_id, request.delta, request.reason
    )
    return {"ok": True, "new_score": new_score}


@router.post("/force-end")
def force_end(request: MatchRequest, session: Session = Depends(get_session)):
    outcome = admin.force_end(session, request.match_id)
    return {"ok": True, "result": outcome.to_dict()}


@router.post("/start-next-match")
def start_next_match(
    request: Optional[StartNextRequest] = None,
    session: Session = Depends(get_session),
):
    season_id = request.season_id if request else None
    match = admin.force_start_next(session, season_id=season_id)
    return {
        "ok": True,
        "match_id": match.id,
        "started_at": iso(match.started_at),
        "ends_at": iso(match.ends_at),
    }


@router.post("/resolve-due")
def resolve_due(session: Session = Depends(get_session)):
    """Run one scheduler pass now."""
    outcomes = resolve_due_matches(session)
    return {"ok": True, "resolved": [o.to_dict() for o in outcomes]}


@router.post("/end-soon")
def end_soon(request: EndSoonRequest, session: Session = Depends(get_session)):
    """Move the live match's end time to now + seconds."""
    match = admin.end_match_soon(session, seconds=request.seconds, season_id=request.season_id)
    return {"ok": True, "match_id": match.id, "ends_at": iso(match.ends_at)}
