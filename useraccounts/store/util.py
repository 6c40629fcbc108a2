"""Helpers and Flask application integration."""

from typing import Generator, Optional, Any
from datetime import datetime
from contextlib import contextmanager

from pytz import UTC
from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from sqlalchemy.orm.session import Session

from .. import logging
from ..exceptions import StoreError, Unavailable
from .models import db

logger = logging.getLogger(__name__)


def now() -> int:
    """Get the current epoch/unix time."""
    return epoch(datetime.now(tz=UTC))


def epoch(t: datetime) -> int:
    """Convert a :class:`.datetime` to UNIX time."""
    delta = t - datetime.fromtimestamp(0, tz=UTC)
    return int(round((delta).total_seconds()))


def from_epoch(t: int) -> Optional[datetime]:
    """Get a :class:`datetime` from an UNIX timestamp. Zero means never."""
    if not t:
        return None
    return datetime.fromtimestamp(t, tz=UTC)


@contextmanager
def transaction() -> Generator:
    """
    Context manager for database transaction.

    The work is committed when the block exits, including changes that the
    caller has already flushed. Database errors are rolled back and
    re-raised as :class:`.StoreError` (or :class:`.Unavailable` when the
    database cannot be reached). Any other exception is rolled back and
    propagated unchanged.
    """
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        logger.error('Database unavailable, rolling back: %s', str(e))
        db.session.rollback()
        raise Unavailable(f'Database unavailable: {e}') from e
    except SQLAlchemyError as e:
        logger.error('Commit failed, rolling back: %s', str(e))
        db.session.rollback()
        raise StoreError(f'Database error: {e}') from e
    except Exception:
        db.session.rollback()
        raise


def init_app(app: Optional[Flask]) -> None:
    """Set configuration defaults and attach session to the application."""
    if app is not None:
        app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
    db.init_app(app)


def current_session() -> Session:
    """Get/create database session for this context."""
    return db.session


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available(**kwargs: Any) -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text("SELECT 1")).all()
    except SQLAlchemyError as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True
