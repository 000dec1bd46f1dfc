# app/services/resources.py
"""
Folder and file operations, always scoped by owner.

Every query filters on ``owner_id`` as part of the lookup itself, so a row
that belongs to someone else looks exactly like a row that does not exist:
both raise ``NotFound``.

Files uploaded without a folder live in the default bucket, represented by
``folder_id IS NULL``. Pass ``DEFAULT_BUCKET`` to mean it.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.models.file import FileMeta
from app.models.folder import FOLDER_NAME_MAX_LENGTH, Folder

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = None

RECENT_UPLOAD_WINDOW = timedelta(days=7)


def _clean_folder_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Folder name is required.")
    if len(name) > FOLDER_NAME_MAX_LENGTH:
        raise ValidationError(f"Folder name must be at most {FOLDER_NAME_MAX_LENGTH} characters.")
    return name


# --- folders ---

def create_folder(db: Session, owner_id: int, name: str) -> Folder:
    folder = Folder(name=_clean_folder_name(name), owner_id=owner_id)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def list_folders(db: Session, owner_id: int) -> list[Folder]:
    return (
        db.query(Folder)
        .filter(Folder.owner_id == owner_id)
        .order_by(Folder.created_at.desc(), Folder.id.desc())
        .all()
    )


def get_folder(db: Session, owner_id: int, folder_id: int) -> Folder:
    folder = (
        db.query(Folder)
        .filter(Folder.id == folder_id, Folder.owner_id == owner_id)
        .first()
    )
    if not folder:
        raise NotFound("Folder not found.")
    return folder


def rename_folder(db: Session, owner_id: int, folder_id: int, new_name: str) -> Folder:
    folder = get_folder(db, owner_id, folder_id)
    folder.name = _clean_folder_name(new_name)
    db.commit()
    db.refresh(folder)
    return folder


def delete_folder(db: Session, owner_id: int, folder_id: int) -> list[str]:
    """
    Delete a folder together with the files it contains.

    Folder and file rows go in a single transaction. Returns the storage
    keys of the removed files so the caller can clear them from the blob
    store once the commit has succeeded.
    """
    folder = get_folder(db, owner_id, folder_id)
    storage_keys = [file.storage_key for file in folder.files]
    try:
        # Folder.files cascades, so the file rows go with it
        db.delete(folder)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted folder %s of user %s with %d files", folder_id, owner_id, len(storage_keys))
    return storage_keys


# --- files ---

def record_file(
    db: Session,
    owner_id: int,
    folder_id: int | None,
    *,
    original_name: str,
    storage_key: str,
    mime_type: str,
    size: int,
    url: str,
) -> FileMeta:
    if folder_id is not DEFAULT_BUCKET:
        folder_id = get_folder(db, owner_id, folder_id).id

    meta = FileMeta(
        owner_id=owner_id,
        folder_id=folder_id,
        original_name=original_name,
        storage_key=storage_key,
        mime_type=mime_type,
        size=size,
        url=url,
    )
    db.add(meta)
    db.commit()
    db.refresh(meta)
    return meta


def get_file(db: Session, owner_id: int, file_id: int) -> FileMeta:
    file = (
        db.query(FileMeta)
        .filter(FileMeta.id == file_id, FileMeta.owner_id == owner_id)
        .first()
    )
    if not file:
        raise NotFound("File not found.")
    return file


def list_files(db: Session, owner_id: int, folder_id: int | None) -> list[FileMeta]:
    query = db.query(FileMeta).filter(FileMeta.owner_id == owner_id)
    if folder_id is DEFAULT_BUCKET:
        query = query.filter(FileMeta.folder_id.is_(None))
    else:
        query = query.filter(FileMeta.folder_id == folder_id)
    return query.order_by(FileMeta.uploaded_at.desc(), FileMeta.id.desc()).all()


def storage_summary(db: Session, owner_id: int) -> dict:
    all_files_query = db.query(FileMeta).filter(FileMeta.owner_id == owner_id)

    total_files = all_files_query.count()
    total_storage = all_files_query.with_entities(func.sum(FileMeta.size)).scalar() or 0
    since = datetime.utcnow() - RECENT_UPLOAD_WINDOW
    recent_files = all_files_query.filter(FileMeta.uploaded_at >= since).count()

    return {
        "total_files": total_files,
        "total_storage": total_storage,
        "recent_files": recent_files,
    }
