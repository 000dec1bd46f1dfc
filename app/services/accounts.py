# app/services/accounts.py
"""
Credential store: registration and password checks.

Passwords are stored as werkzeug salted hashes. ``authenticate`` tells
``UnknownUsername`` and ``BadPassword`` apart so the reason can be logged;
the login route shows the same message for both.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.errors import BadPassword, DuplicateUsername, UnknownUsername, ValidationError
from app.models.user import USERNAME_MAX_LENGTH, User

logger = logging.getLogger(__name__)


def register(db: Session, username: str, password: str) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required.")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters.")

    # Check if user exists
    if db.query(User).filter(User.username == username).first():
        raise DuplicateUsername()

    user = User(username=username, password=generate_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration of the same name
        db.rollback()
        raise DuplicateUsername()
    db.refresh(user)

    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    username = (username or "").strip()
    user = db.query(User).filter(User.username == username).first()
    if not user:
        logger.info("Login failed: unknown username %r", username)
        raise UnknownUsername()
    if not check_password_hash(user.password, password or ""):
        logger.info("Login failed: bad password for user id=%s", user.id)
        raise BadPassword()
    return user
