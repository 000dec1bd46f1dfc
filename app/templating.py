# app/templating.py
from pathlib import Path

from fastapi.templating import Jinja2Templates

from app.core.formatting import format_bytes

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["filesize"] = format_bytes
