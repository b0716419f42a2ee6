from __future__ import annotations

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(header_value: str | None) -> str:
	"""Reuse the caller's id when it is safe to echo into headers and bodies."""
	candidate = (header_value or "").strip()
	if _REQUEST_ID_PATTERN.match(candidate):
		return candidate
	return uuid.uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request: Request, call_next) -> Response:
		request_id = resolve_request_id(request.headers.get("X-Request-ID"))
		request.state.request_id = request_id
		started_at = time.perf_counter()
		response = await call_next(request)
		# For streamed introductions this is the time to the first byte, not the full stream.
		elapsed = time.perf_counter() - started_at
		response.headers["X-Request-ID"] = request_id
		response.headers["X-Process-Time"] = f"{elapsed:.6f}"
		streamed = response.headers.get("content-type", "").startswith("text/plain")
		logger.info(
			"%s %s -> %d request_id=%s streamed=%s in %.1fms",
			request.method,
			request.url.path,
			response.status_code,
			request_id,
			streamed,
			elapsed * 1000,
		)
		return response
