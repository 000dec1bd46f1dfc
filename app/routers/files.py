# app/routers/files.py
import asyncio
import logging

from fastapi import APIRouter, Depends, File as FastAPIFile, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import UploadRejected, ValidationError
from app.deps import get_current_user
from app.models.database import get_db
from app.models.file import FileMeta
from app.models.user import User
from app.services import resources
from app.services.resources import DEFAULT_BUCKET
from app.services.storage import BlobStore, get_blob_store, guess_mime_type
from app.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def discard_late_upload(store: BlobStore, task: asyncio.Future):
    """Done-callback for an upload that finished after its request gave up on it."""
    if task.cancelled() or task.exception() is not None:
        return None
    blob = task.result()
    logger.warning("Removing blob %s stored after its upload timed out", blob.storage_key)
    return task.get_loop().run_in_executor(None, store.delete, blob.storage_key)


async def store_upload(
    upload: UploadFile | None,
    user: User,
    folder_id: int | None,
    db: Session,
    store: BlobStore,
) -> FileMeta:
    """Push the uploaded bytes to the blob store, then record the file for ``user``."""
    if upload is None or not upload.filename:
        raise ValidationError("No file selected.")

    # fail before touching the blob store if the folder isn't ours
    if folder_id is not DEFAULT_BUCKET:
        resources.get_folder(db, user.id, folder_id)

    # never buffer more than the limit plus one byte
    store.check_size(upload.size)
    content = await upload.read(store.max_upload_bytes + 1)
    store.check_size(len(content))
    mime_type = guess_mime_type(upload.filename, upload.content_type)

    pending = asyncio.ensure_future(
        asyncio.to_thread(store.upload, content, mime_type, upload.filename, user.id)
    )
    try:
        blob = await asyncio.wait_for(
            asyncio.shield(pending),
            timeout=get_settings().upload_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.error("Upload of %r for user %s timed out", upload.filename, user.id)
        # the worker thread keeps running; drop whatever it stores
        pending.add_done_callback(lambda task: discard_late_upload(store, task))
        raise UploadRejected() from e

    try:
        meta = resources.record_file(
            db,
            user.id,
            folder_id,
            original_name=upload.filename,
            storage_key=blob.storage_key,
            mime_type=mime_type,
            size=len(content),
            url=blob.url,
        )
    except Exception:
        db.rollback()
        await asyncio.to_thread(store.delete, blob.storage_key)
        raise

    logger.info("User %s uploaded %r as file %s", user.id, meta.original_name, meta.id)
    return meta


# --- upload into a folder ---
@router.post("/folders/{folder_id}/upload")
async def upload_to_folder(
    folder_id: int,
    file: UploadFile | None = FastAPIFile(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    await store_upload(file, user, folder_id, db, store)
    return RedirectResponse(url=f"/folders/{folder_id}", status_code=303)


# --- upload without a folder (default bucket) ---
@router.get("/upload", response_class=HTMLResponse)
def upload_page(request: Request, user: User = Depends(get_current_user)):
    return templates.TemplateResponse(request, "upload.html", {"user": user})


@router.post("/upload")
async def upload_loose_file(
    file: UploadFile | None = FastAPIFile(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    await store_upload(file, user, DEFAULT_BUCKET, db, store)
    return RedirectResponse(url="/dashboard", status_code=303)


# --- file details ---
@router.get("/files/{file_id}", response_class=HTMLResponse)
def file_detail(
    file_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    file = resources.get_file(db, user.id, file_id)
    return templates.TemplateResponse(request, "file_detail.html", {"user": user, "file": file})
