from survey_assist.assistance.evaluator import AssistanceEvaluator, EvaluatorHooks
from survey_assist.assistance.introducer import IntroducerHooks, QuestionIntroducer
from survey_assist.assistance.types import (
	EvaluationOutcome,
	EvaluationRequest,
	EvaluationResult,
	EvaluationVerdict,
	IntroductionRequest,
)

__all__ = [
	"AssistanceEvaluator",
	"EvaluationOutcome",
	"EvaluationRequest",
	"EvaluationResult",
	"EvaluationVerdict",
	"EvaluatorHooks",
	"IntroducerHooks",
	"IntroductionRequest",
	"QuestionIntroducer",
]
