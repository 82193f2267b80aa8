"""
Matches - one bout in the fixed 7-match bracket.

Match numbers 1-4 are quarterfinals (seeded), 5-6 semifinals and 7 the final.
next_match_id points at the match the winner advances into (null for the final).
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from showdown.clock import utcnow
from showdown.db_types import UTCDateTime


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    match_number: int = Field(index=True)  # 1..7
    round: int  # 1 = QF, 2 = SF, 3 = final

    entrant_a_id: Optional[int] = Field(default=None, foreign_key="entrants.id")
    entrant_b_id: Optional[int] = Field(default=None, foreign_key="entrants.id")

    current_score_a: int
    current_score_b: int
    final_score_a: Optional[int] = None
    final_score_b: Optional[int] = None

    started_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    ends_at: Optional[datetime] = Field(default=None, index=True, sa_type=UTCDateTime)
    active: bool = Field(default=False, index=True)
    finished: bool = Field(default=False, index=True)

    winner_id: Optional[int] = Field(default=None, foreign_key="entrants.id")
    tie_break_random: bool = Field(default=False)
    next_match_id: Optional[int] = Field(default=None, foreign_key="matches.id")

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    @property
    def slotted(self) -> bool:
        return self.entrant_a_id is not None and self.entrant_b_id is not None

    def has_entrant(self, entrant_id: int) -> bool:
        return entrant_id is not None and entrant_id in (self.entrant_a_id, self.entrant_b_id)
