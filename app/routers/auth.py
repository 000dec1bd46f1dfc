from fastapi import APIRouter, Request, Form, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import AuthFailure, Conflict, ValidationError
from app.deps import get_optional_user, get_session_token
from app.models.database import get_db
from app.models.user import User
from app.services import accounts, sessions
from app.templating import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home(request: Request, user: User | None = Depends(get_optional_user)):
    if user:
        return RedirectResponse(url="/dashboard", status_code=303)
    return templates.TemplateResponse(request, "home.html")


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request):
    return templates.TemplateResponse(request, "register.html")


@router.post("/register")
def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        accounts.register(db, username, password)
    except (ValidationError, Conflict) as e:
        return templates.TemplateResponse(
            request,
            "register.html",
            {"error": e.message, "username": username},
            status_code=e.status_code,
        )
    return RedirectResponse(url="/login", status_code=303)


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html")


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = accounts.authenticate(db, username, password)
    except AuthFailure:
        # same message whether the username or the password was wrong
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": AuthFailure.message, "username": username},
            status_code=AuthFailure.status_code,
        )

    settings = get_settings()
    token = sessions.create_session(db, user.id)

    # login success → set the session cookie
    response = RedirectResponse(url="/dashboard", status_code=303)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    sessions.destroy_session(db, get_session_token(request))
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(get_settings().session_cookie_name)
    return response
