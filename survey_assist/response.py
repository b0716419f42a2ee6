from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _envelope(ok: bool, request: Optional[Request], **fields: Any) -> Dict[str, Any]:
	payload: Dict[str, Any] = {"ok": ok, "generated_at": now_iso()}
	request_id = getattr(request.state, "request_id", None) if request is not None else None
	if request_id:
		payload["request_id"] = request_id
	payload.update({key: value for key, value in fields.items() if value is not None})
	return payload


def success_response(*, request: Optional[Request] = None, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
	return _envelope(True, request, data=data)


def error_response(
	*,
	code: str,
	message: str,
	request: Optional[Request] = None,
	evidence: Optional[List[str]] = None,
) -> Dict[str, Any]:
	return _envelope(False, request, error={"code": code, "message": message, "evidence": evidence or []})


def error_json(
	status_code: int,
	*,
	code: str,
	message: str,
	request: Optional[Request] = None,
	evidence: Optional[List[str]] = None,
) -> JSONResponse:
	"""Error envelope as a response; used by the exception handlers and the survey-chat routes."""
	return JSONResponse(
		status_code=status_code,
		content=error_response(code=code, message=message, request=request, evidence=evidence),
	)
