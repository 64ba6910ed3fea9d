from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import admin, auth, meetings, rooms, users
from .app_state import Services, build_services
from .config import settings
from .errors import TalksError

LOGGER = logging.getLogger("talks")
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


def create_app(services: Services | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = build_services(seed=settings.seed)
            LOGGER.info("🚀 %s ready", settings.app_name)
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TalksError)
    async def talks_error_handler(request: Request, exc: TalksError):
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.get("/healthz")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for module in (meetings, rooms, users, auth, admin):
        app.include_router(module.router, prefix="/api")

    return app


app = create_app()
