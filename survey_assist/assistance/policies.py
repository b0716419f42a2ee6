from __future__ import annotations

from typing import Optional, Tuple

from survey_assist import constants
from survey_assist.assistance.messages import POSITIVE_MARKERS, MessageCatalog
from survey_assist.assistance.types import (
	AssistanceConfig,
	AssistanceConfigOverrides,
	EvaluationVerdict,
)


_ELLIPSIS = "…"


def sanitize(text: object, max_chars: int = constants.SANITIZE_DEFAULT_CHARS) -> str:
	"""Collapse whitespace, escape backslashes and double quotes, trim and truncate for prompt interpolation."""
	if text is None:
		return ""
	collapsed = " ".join(str(text).split())
	cleaned = collapsed.replace("\\", "\\\\").replace('"', '\\"')
	if len(cleaned) <= max_chars:
		return cleaned
	cut = cleaned[:max_chars]
	# An odd run of trailing backslashes is half of an escape pair.
	trailing = len(cut) - len(cut.rstrip("\\"))
	if trailing % 2:
		cut = cut[:-1]
	return cut + _ELLIPSIS


def merge_config(overrides: Optional[AssistanceConfigOverrides]) -> AssistanceConfig:
	"""Overlay caller-supplied fields on the defaults.

	Each supplied top-level field replaces its default; unsupplied fields keep the
	default. ``triggers`` is replaced as a whole when supplied. Explicit zero values
	for ``max_retries`` and ``confidence_threshold`` are kept.
	"""
	defaults = AssistanceConfig()
	if overrides is None:
		return defaults
	return AssistanceConfig(
		enabled=defaults.enabled if overrides.enabled is None else overrides.enabled,
		assistance_type=(
			defaults.assistance_type if overrides.assistance_type is None else overrides.assistance_type
		),
		max_retries=defaults.max_retries if overrides.max_retries is None else overrides.max_retries,
		confidence_threshold=(
			defaults.confidence_threshold
			if overrides.confidence_threshold is None
			else overrides.confidence_threshold
		),
		prompt=overrides.prompt if overrides.prompt and overrides.prompt.strip() else defaults.prompt,
		triggers=defaults.triggers if overrides.triggers is None else overrides.triggers,
	)


def retries_exhausted(retry_count: int, config: AssistanceConfig) -> bool:
	return retry_count >= config.max_retries


def _terminal_verdict(feedback: str, *, confidence: float) -> EvaluationVerdict:
	return EvaluationVerdict(
		needs_assistance=False,
		confidence=confidence,
		feedback=feedback,
		assistance_type="none",
		reasoning_type="satisfactory",
	)


def retry_exhausted_verdict(catalog: MessageCatalog) -> EvaluationVerdict:
	return _terminal_verdict(catalog.retry_exhausted_feedback, confidence=1.0)


def assistance_disabled_verdict(catalog: MessageCatalog) -> EvaluationVerdict:
	return _terminal_verdict(catalog.assistance_disabled_feedback, confidence=1.0)


def fallback_verdict(catalog: MessageCatalog) -> EvaluationVerdict:
	return _terminal_verdict(catalog.fallback_feedback, confidence=0.5)


def apply_confidence_gate(
	verdict: EvaluationVerdict,
	threshold: float,
	catalog: MessageCatalog,
) -> Tuple[EvaluationVerdict, bool]:
	if verdict.confidence >= threshold:
		return verdict, False
	gated = verdict.model_copy(
		update={
			"needs_assistance": False,
			"assistance_type": "none",
			"feedback": catalog.confidence_gated_feedback,
			"suggestions": None,
		}
	)
	return gated, True


def has_positive_framing(feedback: str) -> bool:
	lowered = feedback.lower()
	return any(marker in lowered for marker in POSITIVE_MARKERS)


def ensure_encouraging_feedback(verdict: EvaluationVerdict, catalog: MessageCatalog) -> EvaluationVerdict:
	if not verdict.needs_assistance:
		return verdict
	feedback = verdict.feedback.strip()
	if has_positive_framing(feedback):
		return verdict
	return verdict.model_copy(update={"feedback": (catalog.encouraging_prefix + feedback).strip()})
