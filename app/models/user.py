from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.models.database import Base

USERNAME_MAX_LENGTH = 50


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(USERNAME_MAX_LENGTH), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # werkzeug hash, never plaintext
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # One user → many folders / files / sessions
    folders = relationship("Folder", back_populates="owner")
    files = relationship("FileMeta", back_populates="owner")
    sessions = relationship("UserSession", back_populates="user")
