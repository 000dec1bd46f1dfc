# app/services/sessions.py
"""
Server-side sessions keyed by an opaque cookie token.

Expired rows are dropped lazily when looked up and in bulk by
``sweep_expired_sessions``, which the app runs on a timer.
"""

import asyncio
import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.session import UserSession

logger = logging.getLogger(__name__)


def _max_age() -> timedelta:
    return timedelta(seconds=get_settings().session_max_age_seconds)


def create_session(db: Session, user_id: int) -> str:
    token = secrets.token_urlsafe(32)
    db.add(UserSession(token=token, user_id=user_id, expires_at=datetime.utcnow() + _max_age()))
    db.commit()
    return token


def resolve_session(db: Session, token: str | None) -> int | None:
    """Return the user id behind ``token``, or None if it is unknown or expired."""
    if not token:
        return None

    record = db.get(UserSession, token)
    if record is None:
        return None

    now = datetime.utcnow()
    if record.expires_at <= now:
        db.delete(record)
        db.commit()
        return None

    # sliding inactivity window
    record.expires_at = now + _max_age()
    db.commit()
    return record.user_id


def destroy_session(db: Session, token: str | None) -> None:
    if not token:
        return
    db.query(UserSession).filter(UserSession.token == token).delete()
    db.commit()


def sweep_expired_sessions(db: Session) -> int:
    removed = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= datetime.utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    if removed:
        logger.info("Swept %d expired sessions", removed)
    return removed


async def run_session_sweeper(session_factory, interval_seconds: float) -> None:
    """Sweep expired sessions forever; cancel the task to stop it."""

    def _sweep():
        db = session_factory()
        try:
            return sweep_expired_sessions(db)
        finally:
            db.close()

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(_sweep)
        except Exception:
            logger.exception("Session sweep failed")
