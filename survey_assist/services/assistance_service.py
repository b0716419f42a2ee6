from __future__ import annotations

import logging
import time
from typing import Iterator

from survey_assist.assistance import policies
from survey_assist.assistance.evaluator import AssistanceEvaluator, EvaluatorHooks
from survey_assist.assistance.introducer import IntroducerHooks, QuestionIntroducer
from survey_assist.assistance.messages import DEFAULT_CATALOG
from survey_assist.assistance.types import (
	EvaluationOutcome,
	EvaluationRequest,
	EvaluationResult,
	IntroductionRequest,
)
from survey_assist.services import provider_service


logger = logging.getLogger(__name__)


def evaluate(request: EvaluationRequest) -> EvaluationResult:
	started_at = time.perf_counter()
	try:
		catalog = provider_service.target_language()
		model = provider_service.default_model()
	except provider_service.ProviderError as exc:
		logger.error("Evaluation provider misconfigured (%s): %s", exc.code, exc.message)
		return EvaluationResult(
			verdict=policies.fallback_verdict(DEFAULT_CATALOG),
			outcome=EvaluationOutcome.ERROR_FALLBACK,
			config=policies.merge_config(request.question.config),
		)

	evaluator = AssistanceEvaluator(
		EvaluatorHooks(generate_object=provider_service.generate_object),
		catalog=catalog,
		model=model,
	)
	result = evaluator.evaluate(request)
	logger.info(
		"Evaluated answer question=%s outcome=%s needs_assistance=%s retry_count=%d model=%s duration_ms=%d",
		request.question.id or "<unknown>",
		result.outcome.value,
		result.verdict.needs_assistance,
		request.retry_count,
		model,
		int((time.perf_counter() - started_at) * 1000),
	)
	return result


def open_introduction(request: IntroductionRequest, *, model: str | None = None) -> Iterator[str]:
	"""Resolve the model and start streaming; raises ProviderError before any token is produced."""
	catalog = provider_service.target_language()
	resolved_model = provider_service.resolve_model(model)
	introducer = QuestionIntroducer(
		IntroducerHooks(open_stream=provider_service.open_text_stream),
		catalog=catalog,
		model=resolved_model,
	)
	stream = introducer.open(request)
	logger.info(
		"Introduction stream opened model=%s history_turns=%d first=%s last=%s",
		resolved_model,
		len(request.messages),
		request.question.is_first,
		request.question.is_last,
	)
	return stream
