from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studio.api.v1.router import v1_router
from studio.config import settings
from studio.core.exceptions import StudioError, studio_error_handler
from studio.core.middleware import RequestLoggingMiddleware
from studio.services.bootstrap import Services, build_services

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _NAME_TO_LEVEL.get(settings.log_level.lower(), 20)
    ),
)

logger = structlog.get_logger()


def attach_services(app: FastAPI, services: Services) -> None:
    """Expose each service on app.state for the request dependencies."""
    app.state.locator = services.locator
    app.state.runtime_client = services.runtime
    app.state.supervisor = services.supervisor
    app.state.installer = services.installer
    app.state.pull_orchestrator = services.pulls
    app.state.catalog = services.catalog
    app.state.app_state = services.app_state
    app.state.reset_orchestrator = services.reset
    app.state.update_checker = services.updates


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    services = build_services()
    attach_services(app, services)

    runtime_status = await services.supervisor.detect()
    logger.info(
        "studio_backend_starting",
        runtime_host=settings.runtime_host,
        runtime_status=runtime_status.value,
        os_family=services.locator.os_family,
    )
    yield

    await services.close()
    logger.info("studio_backend_stopping")


app = FastAPI(
    title="Perspective Studio Backend",
    description="Local runtime supervisor and model catalog for Perspective Studio",
    version="0.1.0",
    lifespan=lifespan,
)

# Exception handler
app.add_exception_handler(StudioError, studio_error_handler)

# Middleware (Starlette: last-added = outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "perspective-studio-backend", "version": "0.1.0"}
