"""Outcome rendering — turns dispatched validation outcomes into responses.

Install on an application with ``install_validation(app)`` and route handlers
through ``ValidationRoute`` to catch handlers that collect errors but never
dispatch.
"""

import inspect
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.routing import APIRoute

from formguard.api.dependencies import get_locale
from formguard.api.pages import pages
from formguard.config import get_settings
from formguard.errors import (
    ForwardOutcome,
    Messages,
    PageOutcome,
    RedirectOutcome,
    StatusOutcome,
)
from formguard.exceptions import (
    ConstraintEvaluationError,
    DispatchError,
    UndispatchedErrorsError,
    ValidationFailed,
)
from formguard.messages import VALIDATED_VALUE
from formguard.validators import Violation

logger = structlog.get_logger()

# Request parts FastAPI puts first in an error location
_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _as_response(result: Any, status_code: int) -> Response:
    if isinstance(result, Response):
        return result
    if isinstance(result, str):
        return HTMLResponse(result, status_code=status_code)
    return JSONResponse(jsonable_encoder(result), status_code=status_code)


async def render_outcome(request: Request, outcome: Any, messages: Messages) -> Response:
    """Build the response for a dispatched outcome."""
    settings = get_settings()

    if isinstance(outcome, StatusOutcome):
        return JSONResponse(
            status_code=outcome.status_code or settings.BAD_REQUEST_STATUS,
            content=messages.to_dict(),
        )

    if isinstance(outcome, RedirectOutcome):
        url = request.url_for(outcome.route_name, **outcome.path_params)
        return RedirectResponse(str(url), status_code=settings.REDIRECT_STATUS)

    if isinstance(outcome, PageOutcome):
        renderer = pages.get(outcome.page)
        result = await _resolve(renderer(request, messages, **outcome.params))
        return _as_response(result, settings.PAGE_STATUS)

    if isinstance(outcome, ForwardOutcome):
        result = await _resolve(outcome.handler(request, **outcome.params))
        return _as_response(result, 200)

    raise DispatchError(f"Cannot render outcome of type {type(outcome).__name__}")


# ── Exception Handlers ──


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> Response:
    logger.info(
        "validation_outcome",
        path=request.url.path,
        outcome=exc.outcome.kind,
        errors=len(exc.messages.errors),
    )
    return await render_outcome(request, exc.outcome, exc.messages)


def _category(location: tuple) -> str:
    parts = list(location)
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    category = ""
    for part in parts:
        if isinstance(part, int):
            category += f"[{part}]"
        else:
            category = f"{category}.{part}" if category else str(part)
    return category


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    """Body/query parsing failures use the same payload as validation errors."""
    interpolator = request.app.state.validation_engine.interpolator
    locale = get_locale(request)

    violations = []
    for error in exc.errors():
        key = "conversion.missing" if error.get("type") == "missing" else "conversion.invalid"
        params = {VALIDATED_VALUE: error.get("input")}
        violations.append(Violation(
            category=_category(tuple(error.get("loc", ()))),
            message=interpolator.message(key, params, locale, default=error.get("msg")),
            code=key,
        ))

    logger.info("request_conversion_failed", path=request.url.path, errors=len(violations))
    return JSONResponse(
        status_code=get_settings().BAD_REQUEST_STATUS,
        content=Messages(violations).to_dict(),
    )


async def constraint_evaluation_handler(request: Request, exc: ConstraintEvaluationError) -> Response:
    """A validator collaborator failed: a fault, not a violation."""
    logger.error(
        "constraint_evaluation_error",
        path=request.url.path,
        kind=exc.kind,
        category=exc.category,
        error=str(exc.cause),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "constraint_evaluation_failed",
            "message": "Validation could not be completed. Please try again.",
            "constraint": exc.kind,
            "category": exc.category,
        },
    )


async def dispatch_error_handler(request: Request, exc: DispatchError) -> Response:
    logger.error("validation_dispatch_error", path=request.url.path, error=str(exc))
    content = {"error": "validation_dispatch_error", "message": str(exc)}
    if isinstance(exc, UndispatchedErrorsError):
        content["categories"] = exc.categories
    return JSONResponse(status_code=500, content=content)


def install_validation(app: FastAPI) -> None:
    """Register the validation exception handlers on an application."""
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ConstraintEvaluationError, constraint_evaluation_handler)
    app.add_exception_handler(DispatchError, dispatch_error_handler)


# ── Route Class ──


class ValidationRoute(APIRoute):
    """Fails requests whose handler collected errors without dispatching."""

    def get_route_handler(self):
        original_handler = super().get_route_handler()

        async def handler(request: Request) -> Response:
            response = await original_handler(request)
            collector = getattr(request.state, "error_collector", None)
            if collector is not None and collector.has_errors() and not collector.dispatcher.dispatched:
                raise UndispatchedErrorsError(collector.errors.categories())
            return response

        return handler
