"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from akave_api import __version__
from akave_api.config import settings
from akave_api.errors import LaunchError, ParseError
from akave_api.models.responses import ErrorResponse
from akave_api.routers import buckets, files, health
from akave_api.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    log.info(
        "app.start",
        node_address=settings.akave_node_address,
        private_key_length=len(settings.akave_private_key),
        correlation=bool(settings.akave_account_address),
        max_concurrent_commands=settings.max_concurrent_commands,
    )
    yield


app = FastAPI(
    title="Akave IPC API",
    description="HTTP gateway over akavecli bucket and file operations",
    version=__version__,
    lifespan=lifespan,
)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(LaunchError)
async def launch_error_handler(request: Request, exc: LaunchError) -> JSONResponse:
    log.error("api.launch_error", path=request.url.path, error=str(exc))
    body = ErrorResponse(error=str(exc), error_type="LaunchError")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
    log.error(
        "api.parse_error",
        path=request.url.path,
        operation=exc.operation,
        output=exc.output[:500],
    )
    body = ErrorResponse(error=str(exc), error_type="ParseError")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=body.model_dump(),
    )


app.include_router(health.router)
app.include_router(buckets.router)
app.include_router(files.router)


def run() -> None:
    """Console entry-point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
