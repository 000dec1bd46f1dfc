import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.models.database import SessionLocal, init_db
from app.routers import auth, files, folders
from app.services.sessions import run_session_sweeper
from app.services.storage import get_blob_store
from app.templating import BASE_DIR

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    init_db()

    try:
        await asyncio.to_thread(get_blob_store().ensure_bucket)
        logger.info("Blob store bucket %s verified", settings.aws_s3_bucket_name)
    except Exception as e:
        # uploads will fail with UploadRejected until the bucket is reachable
        logger.error("Could not verify bucket %s: %s", settings.aws_s3_bucket_name, e)

    sweeper = asyncio.create_task(run_session_sweeper(SessionLocal, settings.session_sweep_seconds))

    yield

    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    logger.info("Shut down")


def create_application() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    register_exception_handlers(app)

    # include our routers
    app.include_router(auth.router)
    app.include_router(folders.router)
    app.include_router(files.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=not settings.is_production,
    )
