# app/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import LoginRequired
from app.models.database import get_db
from app.models.user import User
from app.services.sessions import resolve_session


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(get_settings().session_cookie_name)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    user_id = resolve_session(db, get_session_token(request))
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Route dependency for pages that need a logged in user; others are sent to /login."""
    if user is None:
        raise LoginRequired()
    return user
