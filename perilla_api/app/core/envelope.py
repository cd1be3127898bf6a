"""
The REST envelope.

Every API route answers with HTTP 200 and a JSON body of the form::

    {"status": "success", "payload": <value>}   # RESTResponse.send(value)
    {"status": "success"}                       # RESTResponse.end()
    {"status": "failed", "payload": <message>}  # RESTResponse.fail(message)

Handlers return a ``RESTResponse``.  Failures are raised as
:class:`~perilla_api.app.core.errors.PerillaError` (or come from
FastAPI's request validation) and are turned into the failure envelope
by the exception handlers installed with
``register_exception_handlers``.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, model_serializer

from .errors import PerillaError

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

# Human readable names for the request parts reported by FastAPI.
_LOCATIONS = {"query": "query", "body": "body", "path": "path", "header": "header"}


class RESTResponse(BaseModel):
    status: str
    payload: Optional[Any] = None

    @model_serializer(mode="wrap")
    def _omit_unset_payload(self, handler):
        data = handler(self)
        if "payload" not in self.model_fields_set:
            data.pop("payload", None)
        return data

    @classmethod
    def send(cls, value: Any) -> "RESTResponse":
        return cls(status=STATUS_SUCCESS, payload=jsonable_encoder(value))

    @classmethod
    def end(cls) -> "RESTResponse":
        return cls(status=STATUS_SUCCESS)

    @classmethod
    def fail(cls, message: Any) -> "RESTResponse":
        return cls(status=STATUS_FAILED, payload=message)


def normalize_validation_errors(errors: Iterable[Dict[str, Any]]) -> str:
    """Collapse pydantic/FastAPI validation errors into one message.

    ``[{"loc": ("query", "id"), ...}]`` becomes ``"Invalid query: id"``.
    Several errors are joined with ``", "``; duplicates are dropped.
    """
    messages: List[str] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATIONS:
            where = _LOCATIONS[loc[0]]
            field = ".".join(loc[1:])
        else:
            where = "request"
            field = ".".join(loc)
        message = f"Invalid {where}: {field}" if field else f"Invalid {where}"
        if message not in messages:
            messages.append(message)
    return ", ".join(messages) or "Invalid request"


def failure_response(message: str) -> JSONResponse:
    return JSONResponse(RESTResponse.fail(message).model_dump())


async def perilla_error_handler(request: Request, exc: PerillaError) -> JSONResponse:
    logger.info("%s %s failed: %s", request.method, request.url.path, exc.message)
    return failure_response(exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = normalize_validation_errors(exc.errors())
    logger.info("%s %s rejected: %s", request.method, request.url.path, message)
    return failure_response(message)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed", request.method, request.url.path)
    return failure_response(str(exc) or exc.__class__.__name__)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PerillaError, perilla_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    # Installed on the server error middleware: the client still gets the
    # failure envelope and the exception is re-raised to the server log.
    app.add_exception_handler(Exception, unexpected_error_handler)
