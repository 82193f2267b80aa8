"""
Atomic score mutation shared by votes and admin events.
"""
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from showdown.clock import utcnow
from showdown.models import Match


def score_field(match: Match, entrant_id: int) -> str:
    return "current_score_a" if entrant_id == match.entrant_a_id else "current_score_b"


def adjust_score(session: Session, match: Match, entrant_id: int, delta: int) -> Optional[int]:
    """
    Add delta to the entrant's current score in a single conditional UPDATE.

    The increment happens in SQL (col = col + delta) and only while the match is
    still active, so concurrent writers never lose an update. Returns the new
    score, or None if the match stopped being active before the write landed.
    """
    field = score_field(match, entrant_id)
    column = getattr(Match, field)
    result = session.execute(
        update(Match)
        .where(Match.id == match.id)
        .where(Match.active == True)  # noqa: E712
        .where(Match.finished == False)  # noqa: E712
        .values({field: column + delta, "updated_at": utcnow()})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None
    return session.exec(select(column).where(Match.id == match.id)).one()
