"""
Entrants - the eight contestants seeded into a season's bracket.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from showdown.clock import utcnow
from showdown.db_types import UTCDateTime

CONFERENCES = ("left", "right")


class Entrant(SQLModel, table=True):
    __tablename__ = "entrants"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    name: str = Field(max_length=100)
    color_hex: str = Field(max_length=16)  # "#1f77b4"
    conference: str = Field(max_length=5)  # "left" | "right"
    eliminated: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
