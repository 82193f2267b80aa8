"""
Match activation - opening a fully slotted match's voting window.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import exists, update
from sqlalchemy.orm import aliased
from sqlmodel import Session

from showdown import config
from showdown.models import Match

logger = logging.getLogger(__name__)


def match_duration() -> timedelta:
    return timedelta(hours=config.MATCH_DURATION_HOURS)


def activate_match(
    session: Session,
    match: Match,
    now: datetime,
    exclusive: bool = True,
    reset_scores: bool = False,
) -> bool:
    """
    Open a fresh voting window on a slotted, idle match.

    A single conditional UPDATE: it only lands if the match is still idle and
    has both entrants. With exclusive=True it also refuses while any other
    match in the season is live. Scores are left as recorded unless
    reset_scores is set, so a reopened match keeps the votes it already took.
    Returns True if this call activated it.
    """
    statement = (
        update(Match)
        .where(Match.id == match.id)
        .where(Match.entrant_a_id.is_not(None))
        .where(Match.entrant_b_id.is_not(None))
        .where(Match.active == False)  # noqa: E712
        .where(Match.finished == False)  # noqa: E712
    )
    if exclusive:
        other = aliased(Match)
        statement = statement.where(
            ~exists().where(
                other.season_id == match.season_id,
                other.id != match.id,
                other.active == True,  # noqa: E712
                other.finished == False,  # noqa: E712
            )
        )

    values = {"active": True, "started_at": now, "ends_at": now + match_duration(), "updated_at": now}
    if reset_scores:
        values["current_score_a"] = config.CP_START
        values["current_score_b"] = config.CP_START

    result = session.execute(
        statement.values(values).execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False

    logger.info(f"Match {match.match_number} (id={match.id}) activated until {now + match_duration()}")
    return True
