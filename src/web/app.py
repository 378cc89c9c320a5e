"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cli.config_models import AppConfig
from cli.logging_config import setup_logging
from commits import BatchNotFoundError, CommitNotFoundError, CommitStoreError, InvalidTransitionError
from profiles import ProfileStoreError
from web.deps import get_config
from web.routes import commits, conversation, events, profile
from web.user_store import init_db

logger = structlog.get_logger()


async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def commit_not_found_handler(request: Request, exc: CommitNotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Commit not found"})


async def batch_not_found_handler(request: Request, exc: BatchNotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Batch not found"})


async def store_unavailable_handler(request: Request, exc: Exception):
    logger.warning("web.store_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "Store unavailable, retry later"})


async def health():
    return {"status": "ok"}


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the API; CORS and log level come from ``config`` (the shared config by default)."""
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(json_mode=True, level=os.getenv("LOG_LEVEL", config.logging.level))
        init_db()
        logger.info("web.startup", frontend_origin=config.web.frontend_origin)
        yield
        logger.info("web.shutdown")

    app = FastAPI(
        title="Profile Commits",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS: allow frontend origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.web.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routes
    app.include_router(conversation.router)
    app.include_router(commits.router)
    app.include_router(profile.router)
    app.include_router(events.router)

    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)
    app.add_exception_handler(CommitNotFoundError, commit_not_found_handler)
    app.add_exception_handler(BatchNotFoundError, batch_not_found_handler)
    app.add_exception_handler(CommitStoreError, store_unavailable_handler)
    app.add_exception_handler(ProfileStoreError, store_unavailable_handler)
    app.add_api_route("/api/health", health, methods=["GET"])
    return app


app = create_app()
