from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from survey_assist import constants
from survey_assist.assistance import policies
from survey_assist.assistance.formatter import format_answer
from survey_assist.assistance.messages import MessageCatalog
from survey_assist.assistance.prompts import EVALUATION_INSTRUCTION, compose_evaluation_prompt
from survey_assist.assistance.types import (
	AssistanceConfig,
	EvaluationOutcome,
	EvaluationRequest,
	EvaluationResult,
	EvaluationVerdict,
	GenerateObjectFn,
)


logger = logging.getLogger(__name__)


@dataclass
class EvaluatorHooks:
	generate_object: GenerateObjectFn


class AssistanceEvaluator:
	"""Decides whether an answer needs clarification before the respondent moves on.

	Terminal states: retry exhausted and assistance disabled (no model call),
	confidence gated, model verdict, and error fallback. Any failure after the
	model call is started resolves to the fallback verdict so the survey is never
	blocked.
	"""

	def __init__(self, hooks: EvaluatorHooks, *, catalog: MessageCatalog, model: str):
		self._hooks = hooks
		self._catalog = catalog
		self._model = model

	def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
		config = policies.merge_config(request.question.config)

		if policies.retries_exhausted(request.retry_count, config):
			return EvaluationResult(
				verdict=policies.retry_exhausted_verdict(self._catalog),
				outcome=EvaluationOutcome.RETRY_EXHAUSTED,
				config=config,
			)
		if not config.enabled:
			return EvaluationResult(
				verdict=policies.assistance_disabled_verdict(self._catalog),
				outcome=EvaluationOutcome.ASSISTANCE_DISABLED,
				config=config,
			)

		try:
			verdict, outcome = self._evaluate_with_model(request, config)
		except Exception:
			logger.warning(
				"Answer evaluation failed for question %s; returning fallback verdict.",
				request.question.id or "<unknown>",
				exc_info=True,
			)
			return EvaluationResult(
				verdict=policies.fallback_verdict(self._catalog),
				outcome=EvaluationOutcome.ERROR_FALLBACK,
				config=config,
			)
		return EvaluationResult(verdict=verdict, outcome=outcome, config=config)

	def _evaluate_with_model(
		self,
		request: EvaluationRequest,
		config: AssistanceConfig,
	) -> Tuple[EvaluationVerdict, EvaluationOutcome]:
		formatted = format_answer(request.answer, request.question.question_type, self._catalog)
		system_prompt = compose_evaluation_prompt(
			request.question,
			config,
			request.survey_context,
			formatted,
			request.retry_count,
			self._catalog,
		)
		raw = self._hooks.generate_object(
			model=self._model,
			system=system_prompt,
			prompt=EVALUATION_INSTRUCTION,
			schema=EvaluationVerdict,
			temperature=constants.EVALUATION_TEMPERATURE,
		)
		verdict = EvaluationVerdict.model_validate(raw)

		verdict, gated = policies.apply_confidence_gate(verdict, config.confidence_threshold, self._catalog)
		if gated:
			return verdict, EvaluationOutcome.CONFIDENCE_GATED
		return policies.ensure_encouraging_feedback(verdict, self._catalog), EvaluationOutcome.MODEL_VERDICT
