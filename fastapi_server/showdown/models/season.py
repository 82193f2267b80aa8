"""
Seasons - one tournament instance.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from showdown.clock import utcnow
from showdown.db_types import UTCDateTime


class Season(SQLModel, table=True):
    __tablename__ = "seasons"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    active: bool = Field(default=False, index=True)
    start_date: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
