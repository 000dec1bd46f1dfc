# app/models/folder.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.models.database import Base

FOLDER_NAME_MAX_LENGTH = 255


class Folder(Base):
    __tablename__ = "folders"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(FOLDER_NAME_MAX_LENGTH), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    owner = relationship("User", back_populates="folders")
    # Deleting a folder deletes the file rows it holds
    files = relationship("FileMeta", back_populates="folder", cascade="all")
