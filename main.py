# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Member Access Service
=====================
Member roster keyed by DNI, bulk member import with per-row reporting,
cooldown-gated access log and a fixed-capacity parking counter.

Port: 3000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from member_access.controllers import (
    access_controller, member_controller, parking_controller, system_controller,
)
from member_access.core.config import settings
from member_access.core.database import create_tables, engine
from member_access.core.dependencies import get_member_service, get_parking_service
from member_access.core.logging import get_logger
from member_access.middleware import MetricsMiddleware, RequestIDMiddleware
from member_access.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Create tables and the parking singleton at startup; dispose pool on shutdown."""
    if settings.STORAGE_BACKEND != "memory":
        try:
            create_tables(engine)
            logger.info("Database schema verified")
        except Exception as exc:
            logger.error("Database unavailable at startup, calls will fail: %s", exc)
    get_parking_service().initialize()
    get_member_service().seed_gauges()
    logger.info("%s v%s started backend=%s", settings.SERVICE_NAME,
                settings.SERVICE_VERSION, settings.STORAGE_BACKEND)
    yield
    engine.dispose()
    logger.info("Database connection pool disposed, shutting down")


app = FastAPI(
    title="Member Access Service",
    description="Member roster, bulk import, access gate and parking occupancy.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(access_controller.router)
app.include_router(parking_controller.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
