"""
HTTP routes for the log service.

Endpoints:
- GET    /             Banner
- POST   /logs         Create a log
- GET    /logs         List logs (optional ?search= and ?limit=)
- GET    /logs/{id}    Get one log
- PUT    /logs/{id}    Update a log
- DELETE /logs/{id}    Delete a log
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from .config import TermlogConfig
from .handlers import execute, status_for, to_envelope
from .models import Err, ErrorKind
from .service import LogService
from .store import EntryStore

logger = logging.getLogger(__name__)

BANNER = "Terminal Logger API Server"


class LogBody(BaseModel):
    """Create/update request body. Title is checked by the service, not here."""
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[list[str]] = None


def _respond(service: LogService, operation: str, arguments: dict[str, Any]) -> JSONResponse:
    result = execute(service, operation, arguments)
    if isinstance(result, Err) and result.kind != ErrorKind.VALIDATION:
        logger.warning("%s %s -> %s", operation, arguments.get("id", ""), result.message)
    return JSONResponse(to_envelope(result), status_code=status_for(result))


def create_router(service: LogService) -> APIRouter:
    """Create routes bound to a LogService instance."""
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    def banner() -> str:
        return BANNER

    @router.post("/logs")
    def create_log(body: LogBody):
        """Create a new log."""
        return _respond(service, "create", body.model_dump())

    @router.get("/logs")
    def list_logs(search: Optional[str] = None, limit: Optional[int] = None):
        """List all logs or search them by title."""
        return _respond(service, "list", {"search": search, "limit": limit})

    @router.get("/logs/{log_id}")
    def get_log(log_id: str):
        return _respond(service, "get", {"id": log_id})

    @router.put("/logs/{log_id}")
    def update_log(log_id: str, body: LogBody):
        return _respond(service, "update", {"id": log_id, **body.model_dump()})

    @router.delete("/logs/{log_id}")
    def delete_log(log_id: str):
        return _respond(service, "delete", {"id": log_id})

    return router


def create_app(config: TermlogConfig, store: Optional[EntryStore] = None) -> FastAPI:
    """Build the FastAPI application.

    The store is opened here and closed when the application shuts down.

    Args:
        config: Configuration (database location)
        store: Pre-built store, mostly for tests

    Returns:
        Configured FastAPI instance
    """
    service = LogService(store or EntryStore(config.get_database_path()))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Log service using %s", service.store.db_path)
        try:
            yield
        finally:
            service.close()
            logger.info("Store closed")

    app = FastAPI(title="termlog", lifespan=lifespan)
    app.state.service = service
    app.include_router(create_router(service))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        result = Err(ErrorKind.VALIDATION, f"Invalid request: {detail}")
        return JSONResponse(to_envelope(result), status_code=status_for(result))

    return app
