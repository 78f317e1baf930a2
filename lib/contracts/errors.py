"""Classified routing failures and their HTTP rendering.

Every failure the proxy router can detect is a subclass of
:class:`RoutingError` carrying its own ``status_code``.  The mapping to a
response lives in :func:`error_response` only; no other module builds error
responses or spells out status codes.
"""

from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse

from .routing import ErrorBody


class RoutingError(Exception):
    """Base class for failures detected while routing a request."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidBody(RoutingError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Invalid or missing JSON body in request")


class MissingDataField(RoutingError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Missing data field in request body")


class InvalidDataField(RoutingError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Invalid JSON in data field")


class MissingParameter(RoutingError):
    status_code = 400

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required parameter: {name}")
        self.name = name


class UnsupportedMethod(RoutingError):
    status_code = 405

    def __init__(self, method: str) -> None:
        super().__init__(f"Method {method} not supported")
        self.method = method


class RoutingNotFound(RoutingError):
    status_code = 404

    def __init__(self, customer_id: str, warehouse_id: Optional[str] = None) -> None:
        detail = f", warehouseId: {warehouse_id}" if warehouse_id else ""
        super().__init__(f"No routing found for customerId: {customer_id}{detail}")
        self.customer_id = customer_id
        self.warehouse_id = warehouse_id


class EndpointNotFound(RoutingError):
    status_code = 404

    def __init__(self, target_key: str) -> None:
        super().__init__(f"No endpoint found for target: {target_key}")
        self.target_key = target_key


def error_response(exc: BaseException) -> JSONResponse:
    """Render ``exc`` as the JSON error response callers receive.

    Classified errors use their own status and message.  Anything else is an
    internal failure: 500 with the exception text under ``message``.
    """

    if isinstance(exc, RoutingError):
        body = ErrorBody(error=exc.message)
        status = exc.status_code
    else:
        body = ErrorBody(error="Internal server error", message=str(exc))
        status = 500
    return JSONResponse(body.model_dump(exclude_none=True), status_code=status)


__all__ = [
    "RoutingError",
    "InvalidBody",
    "MissingDataField",
    "InvalidDataField",
    "MissingParameter",
    "UnsupportedMethod",
    "RoutingNotFound",
    "EndpointNotFound",
    "error_response",
]
