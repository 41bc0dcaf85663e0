"""
Structured REST errors.

Every error leaving the API has the same body::

    {"code": "...", "message": "...", "data": {"status": 400}}

Route code raises ``RestError``; the handlers registered by
``register_exception_handlers`` turn it (and request validation
failures) into JSON responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RestError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status: int,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.data = dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status, **self.data},
        }


def authorization_required_code(user) -> int:
    """401 for guests, 403 for a logged-in user lacking the capability."""
    return 403 if getattr(user, "is_logged_in", False) else 401


def _param_name(loc) -> str:
    # loc looks like ("query", "category_operator") or ("path", "product_id")
    parts = [str(p) for p in loc if p not in ("query", "path", "body", "header", "cookie")]
    return parts[0] if parts else ".".join(str(p) for p in loc)


def invalid_params_error(exc: RequestValidationError) -> RestError:
    params: Dict[str, str] = {}
    for err in exc.errors():
        name = _param_name(err.get("loc", ()))
        params.setdefault(name, err.get("msg", "Invalid parameter."))
    return RestError(
        "rest_invalid_param",
        "Invalid parameter(s): %s" % ", ".join(params),
        400,
        {"params": params},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RestError)
    async def rest_error_handler(request: Request, exc: RestError) -> JSONResponse:
        return JSONResponse(status_code=exc.status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = invalid_params_error(exc)
        return JSONResponse(status_code=error.status, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled application error", exc_info=exc)
        error = RestError("internal_server_error", "Internal Server Error", 500)
        return JSONResponse(status_code=error.status, content=error.to_dict())
