"""
Map failures onto the API's ``{"error": ...}`` bodies.
Handlers are registered once in ``install_error_handlers`` so routes stay thin.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent.core.errors import GenerationError, UnknownPersonaError


logger = logging.getLogger(__name__)

MSG_INVALID_BODY = "Invalid request body"


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


def invalid_body(details: List[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MSG_INVALID_BODY, "details": details},
    )


async def _on_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _validation_details(list(exc.errors()))
    logger.info("Rejected request body: %s", details)
    return invalid_body(details)


async def _on_unknown_persona(_request: Request, exc: UnknownPersonaError) -> JSONResponse:
    logger.info("Rejected request body: %s", exc)
    return invalid_body([{"loc": ["body", "persona"], "msg": str(exc), "type": "unknown_persona"}])


async def _on_generation_error(_request: Request, exc: GenerationError) -> JSONResponse:
    logger.warning("Generation failed: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


async def _on_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(UnknownPersonaError, _on_unknown_persona)
    app.add_exception_handler(GenerationError, _on_generation_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
