from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, Iterator, List, Literal, Type

from pydantic import BaseModel

from survey_assist.assistance.messages import MessageCatalog, catalog_for


ProviderMode = Literal["auto", "openai", "local"]

_DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
_DEFAULT_OPENAI_MODELS = "gpt-4o-mini,gpt-4o"
_DEFAULT_OPENAI_TIMEOUT_S = 30.0
_DEFAULT_LANGUAGE = "en"
_DEFAULT_STREAM_CHUNK_CHARS = 16
_TEXT_DELTA_EVENT = "response.output_text.delta"
_STREAM_FAILURE_EVENTS = {"error", "response.failed"}


class ProviderError(Exception):
	def __init__(self, *, status_code: int, code: str, message: str):
		super().__init__(message)
		self.status_code = status_code
		self.code = code
		self.message = message


def _unconfigured(message: str) -> ProviderError:
	return ProviderError(status_code=503, code="assistant_provider_unconfigured", message=message)


def provider_mode() -> ProviderMode:
	mode = os.getenv("SURVEY_ASSIST_PROVIDER_MODE", "auto").strip().lower() or "auto"
	if mode not in {"auto", "openai", "local"}:
		raise _unconfigured("SURVEY_ASSIST_PROVIDER_MODE must be one of: auto, openai, local.")
	return mode  # type: ignore[return-value]


def resolved_provider_mode(configured_mode: ProviderMode) -> ProviderMode:
	if configured_mode == "local":
		return "local"
	if configured_mode == "openai":
		return "openai"
	has_openai_key = bool(os.getenv("OPENAI_API_KEY", "").strip())
	return "openai" if has_openai_key else "local"


def openai_timeout() -> float:
	raw = os.getenv("SURVEY_ASSIST_OPENAI_TIMEOUT_S", "").strip()
	if not raw:
		return _DEFAULT_OPENAI_TIMEOUT_S
	try:
		value = float(raw)
	except ValueError as exc:
		raise _unconfigured("SURVEY_ASSIST_OPENAI_TIMEOUT_S must be numeric.") from exc
	if value <= 0:
		raise _unconfigured("SURVEY_ASSIST_OPENAI_TIMEOUT_S must be greater than zero.")
	return value


def target_language() -> MessageCatalog:
	raw = os.getenv("SURVEY_ASSIST_LANGUAGE", _DEFAULT_LANGUAGE).strip() or _DEFAULT_LANGUAGE
	try:
		return catalog_for(raw)
	except ValueError as exc:
		raise _unconfigured(str(exc)) from exc


def default_model() -> str:
	return os.getenv("SURVEY_ASSIST_OPENAI_MODEL", _DEFAULT_OPENAI_MODEL).strip() or _DEFAULT_OPENAI_MODEL


def model_allowlist() -> List[str]:
	raw = os.getenv("SURVEY_ASSIST_OPENAI_MODELS", _DEFAULT_OPENAI_MODELS).strip()
	models = [item.strip() for item in raw.split(",") if item.strip()]
	model = default_model()
	if model not in models:
		models.insert(0, model)
	return list(dict.fromkeys(models))


def resolve_model(requested_model: str | None) -> str:
	allowlist = model_allowlist()
	if requested_model and requested_model.strip():
		candidate = requested_model.strip()
		if candidate not in allowlist:
			raise ProviderError(
				status_code=400,
				code="assistant_invalid_model",
				message=f"Model '{candidate}' is not in SURVEY_ASSIST_OPENAI_MODELS allowlist.",
			)
		return candidate
	return default_model()


def list_models() -> Dict[str, object]:
	configured_mode = provider_mode()
	effective_mode = resolved_provider_mode(configured_mode)
	openai_key_present = bool(os.getenv("OPENAI_API_KEY", "").strip())
	provider_ready = True
	warnings: List[str] = []
	if configured_mode == "openai" and not openai_key_present:
		provider_ready = False
		warnings.append("OpenAI API key not configured. Set OPENAI_API_KEY.")
	return {
		"models": model_allowlist(),
		"default_model": default_model(),
		"provider_mode": configured_mode,
		"effective_provider_mode": effective_mode,
		"provider_ready": provider_ready,
		"provider_warnings": warnings,
		"language": target_language().code,
	}


def _openai_api_key() -> str:
	key = os.getenv("OPENAI_API_KEY", "").strip()
	if not key:
		raise _unconfigured("OpenAI API key not configured. Set OPENAI_API_KEY.")
	return key


def _build_openai_client(*, api_key: str, timeout_s: float):
	try:
		from openai import OpenAI
	except ImportError as exc:
		raise _unconfigured("OpenAI SDK not installed. Add 'openai' dependency.") from exc
	# Single attempt per request: a failed call degrades to the fallback path instead of retrying.
	return OpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)


def _openai_client():
	return _build_openai_client(api_key=_openai_api_key(), timeout_s=openai_timeout())


def _openai_error(exc: Exception) -> ProviderError:
	if isinstance(exc, ProviderError):
		return exc
	name = exc.__class__.__name__
	if isinstance(exc, TimeoutError) or name == "APITimeoutError":
		return ProviderError(
			status_code=504,
			code="assistant_provider_timeout",
			message="Assistant provider timed out.",
		)
	return ProviderError(
		status_code=502,
		code="assistant_provider_error",
		message="Assistant provider request failed.",
	)


def _extract_response_text(response: Any) -> str:
	output_text = getattr(response, "output_text", None)
	if isinstance(output_text, str) and output_text.strip():
		return output_text.strip()

	output = getattr(response, "output", None)
	if not isinstance(output, list):
		return ""
	parts: List[str] = []
	for item in output:
		content = getattr(item, "content", None)
		if content is None and isinstance(item, dict):
			content = item.get("content")
		if not isinstance(content, list):
			continue
		for chunk in content:
			text = getattr(chunk, "text", None)
			if text is None and isinstance(chunk, dict):
				text = chunk.get("text")
			if isinstance(text, str) and text.strip():
				parts.append(text.strip())
	return "\n".join(parts).strip()


def _extract_json_object(raw: str) -> Dict[str, Any]:
	candidate = raw.strip()
	if candidate.startswith("```"):
		candidate = re.sub(r"^```[a-zA-Z]*\s*", "", candidate)
		candidate = re.sub(r"\s*```$", "", candidate)
	start = candidate.find("{")
	end = candidate.rfind("}")
	if start == -1 or end == -1 or end <= start:
		raise ProviderError(
			status_code=502,
			code="assistant_provider_error",
			message="Assistant provider returned invalid JSON content.",
		)
	try:
		parsed = json.loads(candidate[start : end + 1])
	except json.JSONDecodeError as exc:
		raise ProviderError(
			status_code=502,
			code="assistant_provider_error",
			message="Assistant provider returned invalid JSON content.",
		) from exc
	if not isinstance(parsed, dict):
		raise ProviderError(
			status_code=502,
			code="assistant_provider_error",
			message="Assistant provider returned an unexpected payload shape.",
		)
	return parsed


def _json_schema_format(schema: Type[BaseModel]) -> Dict[str, Any]:
	return {
		"format": {
			"type": "json_schema",
			"name": schema.__name__,
			"schema": schema.model_json_schema(by_alias=True),
			"strict": False,
		}
	}


def _local_object(schema: Type[BaseModel]) -> Dict[str, Any]:
	# Offline mode never asks for assistance.
	catalog = target_language()
	payload = {
		"needsAssistance": False,
		"confidence": 1.0,
		"feedback": catalog.confidence_gated_feedback,
		"assistanceType": "none",
		"reasoningType": "satisfactory",
	}
	return schema.model_validate(payload).model_dump(by_alias=True, exclude_none=True)


def generate_object(
	*,
	model: str,
	system: str,
	prompt: str,
	schema: Type[BaseModel],
	temperature: float,
) -> Dict[str, Any]:
	"""Structured generation: one model call whose output is a JSON object for ``schema``."""
	if resolved_provider_mode(provider_mode()) == "local":
		return _local_object(schema)

	client = _openai_client()
	try:
		response = client.responses.create(
			model=model,
			instructions=system,
			input=prompt,
			temperature=temperature,
			text=_json_schema_format(schema),
		)
	except Exception as exc:  # pragma: no cover - exercised by targeted tests.
		raise _openai_error(exc) from exc

	raw = _extract_response_text(response)
	if not raw:
		raise ProviderError(
			status_code=502,
			code="assistant_provider_error",
			message="Assistant provider returned an empty response.",
		)
	return _extract_json_object(raw)


def _coerce_event_dict(event: Any) -> Dict[str, Any]:
	if isinstance(event, dict):
		return event
	for attr in ("model_dump", "dict"):
		method = getattr(event, attr, None)
		if callable(method):
			try:
				value = method()
			except TypeError:
				continue
			if isinstance(value, dict):
				return value
	return {}


def _event_type(event: Any) -> str:
	value = getattr(event, "type", None)
	if value is None and isinstance(event, dict):
		value = event.get("type")
	return value if isinstance(value, str) else ""


def _extract_stream_delta(event: Any) -> str:
	value = getattr(event, "delta", None)
	if isinstance(value, str) and value:
		return value
	data = _coerce_event_dict(event)
	value = data.get("delta")
	if isinstance(value, str) and value:
		return value
	return ""


def _chunk_text(text: str, size: int = _DEFAULT_STREAM_CHUNK_CHARS) -> List[str]:
	cleaned = text.strip()
	if not cleaned:
		return []
	chunks: List[str] = []
	for i in range(0, len(cleaned), size):
		chunks.append(cleaned[i : i + size])
	return chunks


def _iter_stream_deltas(stream: Any) -> Iterator[str]:
	try:
		for event in stream:
			event_type = _event_type(event)
			if event_type in _STREAM_FAILURE_EVENTS:
				raise ProviderError(
					status_code=502,
					code="assistant_provider_error",
					message="Assistant provider stream failed.",
				)
			if event_type and event_type != _TEXT_DELTA_EVENT:
				continue
			delta = _extract_stream_delta(event)
			if delta:
				yield delta
	except ProviderError:
		raise
	except Exception as exc:
		raise _openai_error(exc) from exc
	finally:
		close = getattr(stream, "close", None)
		if callable(close):
			close()


def open_text_stream(
	*,
	model: str,
	system: str,
	messages: List[Dict[str, str]],
	temperature: float,
	max_output_tokens: int,
) -> Iterator[str]:
	"""Streaming generation: the upstream request is sent before this returns."""
	if resolved_provider_mode(provider_mode()) == "local":
		return iter(_chunk_text(target_language().local_introduction))

	client = _openai_client()
	try:
		stream = client.responses.create(
			model=model,
			instructions=system,
			input=messages,
			temperature=temperature,
			max_output_tokens=max_output_tokens,
			stream=True,
		)
	except Exception as exc:  # pragma: no cover - exercised by targeted tests.
		raise _openai_error(exc) from exc
	return _iter_stream_deltas(stream)
