# app/routers/folders.py
import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.deps import get_current_user
from app.models.database import get_db
from app.models.user import User
from app.services import resources
from app.services.resources import DEFAULT_BUCKET
from app.services.storage import BlobStore, get_blob_store
from app.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


# --- dashboard: folders + loose files ---
@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "folders": resources.list_folders(db, user.id),
            "files": resources.list_files(db, user.id, DEFAULT_BUCKET),
            "stats": resources.storage_summary(db, user.id),
        },
    )


@router.get("/folders", response_class=HTMLResponse)
def list_folders(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return templates.TemplateResponse(
        request,
        "folders.html",
        {"user": user, "folders": resources.list_folders(db, user.id)},
    )


@router.get("/folders/create", response_class=HTMLResponse)
def create_folder_page(request: Request, user: User = Depends(get_current_user)):
    return templates.TemplateResponse(request, "folder_form.html", {"user": user, "folder": None})


@router.post("/folders/create")
def create_folder(
    request: Request,
    name: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        resources.create_folder(db, user.id, name)
    except ValidationError as e:
        return templates.TemplateResponse(
            request,
            "folder_form.html",
            {"user": user, "folder": None, "error": e.message},
            status_code=e.status_code,
        )
    return RedirectResponse(url="/folders", status_code=303)


@router.get("/folders/{folder_id}", response_class=HTMLResponse)
def folder_detail(
    folder_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    folder = resources.get_folder(db, user.id, folder_id)
    return templates.TemplateResponse(
        request,
        "folder_detail.html",
        {"user": user, "folder": folder, "files": resources.list_files(db, user.id, folder.id)},
    )


@router.get("/folders/{folder_id}/edit", response_class=HTMLResponse)
def edit_folder_page(
    folder_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    folder = resources.get_folder(db, user.id, folder_id)
    return templates.TemplateResponse(request, "folder_form.html", {"user": user, "folder": folder})


@router.post("/folders/{folder_id}/edit")
def edit_folder(
    folder_id: int,
    request: Request,
    name: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        resources.rename_folder(db, user.id, folder_id, name)
    except ValidationError as e:
        folder = resources.get_folder(db, user.id, folder_id)
        return templates.TemplateResponse(
            request,
            "folder_form.html",
            {"user": user, "folder": folder, "error": e.message},
            status_code=e.status_code,
        )
    return RedirectResponse(url="/folders", status_code=303)


@router.post("/folders/{folder_id}/delete")
def delete_folder(
    folder_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    storage_keys = resources.delete_folder(db, user.id, folder_id)

    # rows are gone; blobs are cleaned up best-effort
    failed = [key for key in storage_keys if not store.delete(key)]
    if failed:
        logger.warning("Folder %s deleted but %d blobs were left behind", folder_id, len(failed))

    return RedirectResponse(url="/folders", status_code=303)
