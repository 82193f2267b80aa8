"""
Admin Events - audited out-of-band score adjustments.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from showdown.clock import utcnow
from showdown.db_types import UTCDateTime


class AdminEvent(SQLModel, table=True):
    __tablename__ = "admin_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    match_id: int = Field(foreign_key="matches.id", index=True)
    entrant_id: int = Field(foreign_key="entrants.id")
    delta: int  # signed
    reason: str = Field(max_length=500)
    score_after: int
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
