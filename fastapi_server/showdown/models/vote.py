"""
Votes - append-only ballots, one per (match, voter key).
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint

from showdown.clock import utcnow
from showdown.db_types import UTCDateTime


class Vote(SQLModel, table=True):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("match_id", "voter_key", name="uq_vote_match_voter"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    match_id: int = Field(foreign_key="matches.id", index=True)
    entrant_id: int = Field(foreign_key="entrants.id")
    voter_key: str = Field(max_length=128)  # SHA-256 hex of ip + season + match + salt
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
