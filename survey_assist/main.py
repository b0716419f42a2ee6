from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from survey_assist import constants
from survey_assist.middleware import RequestContextMiddleware
from survey_assist.response import error_json
from survey_assist.routers import survey_chat
from survey_assist.validators.request import validation_evidence


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
	_configure_logging()
	app = FastAPI(
		title=constants.APP_NAME,
		version=constants.APP_VERSION,
	)
	_register_middleware(app)
	_register_handlers(app)
	app.include_router(survey_chat.router)
	return app


def _configure_logging() -> None:
	level_name = os.getenv("SURVEY_ASSIST_LOG_LEVEL", "INFO").strip().upper() or "INFO"
	level = logging.getLevelName(level_name)
	if not isinstance(level, int):
		level = logging.INFO
	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


def _register_middleware(app: FastAPI) -> None:
	# No GZip here: compression would buffer streamed introduction tokens.
	app.add_middleware(RequestContextMiddleware)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=constants.DEFAULT_CORS_ALLOW_ORIGINS,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.add_middleware(
		TrustedHostMiddleware,
		allowed_hosts=constants.DEFAULT_TRUSTED_HOSTS,
	)


def _register_handlers(app: FastAPI) -> None:
	@app.exception_handler(HTTPException)
	async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
		code = f"http_{exc.status_code}"
		message = _exc_message(exc.detail)
		evidence = None
		if isinstance(exc.detail, dict):
			detail_code = exc.detail.get("code")
			detail_message = exc.detail.get("message")
			detail_evidence = exc.detail.get("evidence")
			if isinstance(detail_code, str) and detail_code.strip():
				code = detail_code.strip()
			if isinstance(detail_message, str) and detail_message.strip():
				message = detail_message.strip()
			if isinstance(detail_evidence, list):
				evidence = [str(item) for item in detail_evidence]
		return error_json(exc.status_code, code=code, message=message, request=request, evidence=evidence)

	@app.exception_handler(StarletteHTTPException)
	async def handle_starlette_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
		return error_json(
			exc.status_code,
			code=f"http_{exc.status_code}",
			message=_exc_message(exc.detail),
			request=request,
		)

	@app.exception_handler(RequestValidationError)
	async def handle_request_validation_error(
		request: Request,
		exc: RequestValidationError,
	) -> JSONResponse:
		errors = exc.errors()
		logger.info("Rejected %s %s: %d validation issue(s).", request.method, request.url.path, len(errors))
		return error_json(
			400,
			code="validation_error",
			message="Invalid request body.",
			request=request,
			evidence=validation_evidence(errors),
		)

	@app.exception_handler(Exception)
	async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
		logger.exception("Unhandled error on %s %s", request.method, request.url.path)
		return error_json(500, code="internal_error", message="Internal server error.", request=request)


def _exc_message(detail: Any) -> str:
	if isinstance(detail, str):
		return detail
	if detail is None:
		return "Request failed."
	return str(detail)


app = create_app()
