"""
Transaction boundary shared by every engine operation.

One operation == one session transaction. Engine errors roll back and
propagate unchanged; unexpected database errors roll back and surface as
StoreError.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from showdown.errors import ShowdownError, StoreError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(session: Session):
    try:
        yield session
        session.commit()
    except ShowdownError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Transaction failed: {e}")
        raise StoreError(str(e)) from e
