"""
Read-side queries over seasons and matches.

There is no cached "current match id": the active match is always whatever
the matches table says is active and unfinished.
"""
from typing import Optional

from sqlmodel import Session, select

from showdown.models import Entrant, Match, Season


def current_season_id(session: Session) -> Optional[int]:
    """The active season, else the most recently created one."""
    season = session.exec(
        select(Season).where(Season.active == True).order_by(Season.id.desc())  # noqa: E712
    ).first()
    if season is None:
        season = session.exec(select(Season).order_by(Season.id.desc())).first()
    return season.id if season else None


def get_active_match(session: Session, season_id: Optional[int] = None) -> Optional[Match]:
    statement = select(Match).where(Match.active == True, Match.finished == False)  # noqa: E712
    if season_id is not None:
        statement = statement.where(Match.season_id == season_id)
    return session.exec(statement.order_by(Match.match_number)).first()


def get_bracket(session: Session, season_id: int) -> list[Match]:
    """All matches of a season ordered by match number (empty if not seeded)."""
    return list(
        session.exec(
            select(Match)
            .where(Match.season_id == season_id)
            .order_by(Match.match_number)
        ).all()
    )


def get_last_finished_match(session: Session, season_id: Optional[int] = None) -> Optional[Match]:
    statement = select(Match).where(Match.finished == True)  # noqa: E712
    if season_id is not None:
        statement = statement.where(Match.season_id == season_id)
    return session.exec(
        statement.order_by(Match.updated_at.desc(), Match.match_number.desc())
    ).first()


def entrants_by_id(session: Session, season_id: int) -> dict[int, Entrant]:
    entrants = session.exec(select(Entrant).where(Entrant.season_id == season_id)).all()
    return {e.id: e for e in entrants}
