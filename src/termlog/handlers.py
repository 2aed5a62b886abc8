"""Operation dispatch over the log service, producing tagged results and envelopes."""

from __future__ import annotations

import logging
from typing import Any

from .errors import LogError, NotFoundError, PersistenceError, ValidationError
from .models import Err, ErrorKind, Ok, Result
from .service import LogService

logger = logging.getLogger(__name__)

OPERATIONS = ("create", "list", "get", "update", "delete")

# Generic messages for store failures, per operation
FAILURE_MESSAGES = {
    "create": "Failed to create log",
    "list": "Failed to fetch logs",
    "get": "Failed to fetch log",
    "update": "Failed to update log",
    "delete": "Failed to delete log",
}

HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERSISTENCE: 500,
    ErrorKind.TRANSPORT: 502,
}


def execute(service: LogService, operation: str, arguments: dict[str, Any]) -> Result:
    """Run one operation against the service.

    Args:
        service: The log service
        operation: One of OPERATIONS
        arguments: Operation arguments (id, title, content, tags, search, limit)

    Returns:
        Ok with an entry dict (or a list of them) on success, Err otherwise
    """
    try:
        if operation == "create":
            entry = service.create(
                title=arguments.get("title"),
                content=arguments.get("content"),
                tags=arguments.get("tags"),
            )
            return Ok(entry.to_dict(), message="Log created successfully")

        elif operation == "list":
            entries = service.list(
                search=arguments.get("search"),
                limit=arguments.get("limit"),
            )
            return Ok([e.to_dict() for e in entries])

        elif operation == "get":
            entry = service.get(arguments.get("id"))
            return Ok(entry.to_dict())

        elif operation == "update":
            entry = service.update(
                arguments.get("id"),
                title=arguments.get("title"),
                content=arguments.get("content"),
                tags=arguments.get("tags"),
            )
            return Ok(entry.to_dict(), message="Log updated successfully")

        elif operation == "delete":
            entry = service.delete(arguments.get("id"))
            return Ok(entry.to_dict(), message="Log deleted successfully")

        else:
            return Err(ErrorKind.VALIDATION, f"Unknown operation: {operation}")

    except ValidationError as e:
        return Err(ErrorKind.VALIDATION, str(e))

    except NotFoundError as e:
        return Err(ErrorKind.NOT_FOUND, str(e))

    except PersistenceError:
        return Err(ErrorKind.PERSISTENCE, FAILURE_MESSAGES[operation])

    except LogError:
        logger.exception("Operation %s failed", operation)
        return Err(ErrorKind.PERSISTENCE, FAILURE_MESSAGES[operation])

    except Exception:
        logger.exception("Unexpected error during %s", operation)
        return Err(ErrorKind.PERSISTENCE, FAILURE_MESSAGES[operation])


def to_envelope(result: Result) -> dict[str, Any]:
    """Render a result as the JSON envelope every response carries."""
    if isinstance(result, Ok):
        envelope: dict[str, Any] = {"success": True, "data": result.data}
        if result.message:
            envelope["message"] = result.message
        if isinstance(result.data, list):
            envelope["count"] = len(result.data)
        return envelope
    return {
        "success": False,
        "error": result.message,
        "error_type": result.kind.value,
    }


def status_for(result: Result) -> int:
    """HTTP status code for a result."""
    if isinstance(result, Ok):
        return 200
    return HTTP_STATUS[result.kind]
