"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.infra.rate_limit import RateLimitExceeded
from punchline_quiz.obs import logging as obs_logging
from punchline_quiz.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def get_request_id(request: Request, default: str = "unknown") -> str:
	rid = getattr(request.state, "request_id", None) or obs_logging.current_request_id()
	return rid or default


def as_http_error(exc: Exception, operation: str) -> HTTPException:
	"""Translate a service failure into the HTTP error raised by a route."""
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, DomainError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	if isinstance(exc, RateLimitExceeded):
		obs_metrics.inc_rate_limited(exc.kind)
		return HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate_limited")
	logger.exception("operation_failed", extra={"operation": operation})
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"failed_to_{operation}")


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {"detail": exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = {
			"detail": "validation_error",
			# pydantic error contexts may hold exception instances
			"errors": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
			"request_id": get_request_id(request),
		}
		return JSONResponse(status_code=422, content=payload)
