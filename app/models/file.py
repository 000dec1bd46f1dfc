# app/models/file.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from app.models.database import Base

class FileMeta(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    original_name = Column(String, nullable=False)   # Name user uploaded
    storage_key = Column(String, nullable=False)     # Key in the blob store
    mime_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)           # Size in bytes
    url = Column(String, nullable=False)             # Where the blob can be fetched
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL means the file lives in the default bucket
    folder_id = Column(Integer, ForeignKey("folders.id", ondelete="CASCADE"), nullable=True, index=True)

    owner = relationship("User", back_populates="files")
    folder = relationship("Folder", back_populates="files")
