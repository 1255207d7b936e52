from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salesync import __version__
from salesync.core.config import settings
from salesync.core.errors import SyncValidationError, UpstreamUnavailableError
from salesync.core.logging import configure_logging, logger
from salesync.api.router import api_router
from salesync.db.session import engine
from salesync.db.base import Base
from salesync.db import models  # noqa: F401  registers tables on Base.metadata
from salesync.services.seed import seed_demo


def create_app() -> FastAPI:
    configure_logging(settings.ENV)
    app = FastAPI(title="Store Sales Sync", version=__version__)

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.exception_handler(SyncValidationError)
    def _validation_error(request: Request, exc: SyncValidationError):
        logger.warning("sync_request_rejected", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(UpstreamUnavailableError)
    def _upstream_error(request: Request, exc: UpstreamUnavailableError):
        logger.error("sync_upstream_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.on_event("startup")
    def _startup():
        # Ensure tables exist for dev-only convenience; in prod rely on alembic
        if settings.ENV == "dev":
            Base.metadata.create_all(bind=engine)
        if settings.SEED_DEMO and settings.ENV == "dev":
            seed_demo()

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app


app = create_app()
