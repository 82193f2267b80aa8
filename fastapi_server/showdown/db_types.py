"""
Column types shared by the models.
"""
from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

from showdown.clock import as_utc


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp.

    PostgreSQL stores it as TIMESTAMPTZ. SQLite has no timezone support and
    hands back naive values, which are re-attached to UTC on load.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect: Dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect: Dialect):
        if value is None:
            return None
        return as_utc(value)
