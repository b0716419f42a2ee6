from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from survey_assist import constants


AssistanceKind = Literal["all", "clarification", "validation", "enhancement"]
VerdictAssistanceType = Literal["clarification", "validation", "enhancement", "none"]
ReasoningType = Literal["too_short", "missing_detail", "unclear", "inconsistent", "satisfactory"]
MessageRole = Literal["user", "assistant", "system"]

GenerateObjectFn = Callable[..., Dict[str, Any]]
OpenStreamFn = Callable[..., Iterator[str]]


class EvaluationOutcome(str, Enum):
	RETRY_EXHAUSTED = "retry_exhausted"
	ASSISTANCE_DISABLED = "assistance_disabled"
	CONFIDENCE_GATED = "confidence_gated"
	MODEL_VERDICT = "model_verdict"
	ERROR_FALLBACK = "error_fallback"


class EvaluationVerdict(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	needs_assistance: bool = Field(
		...,
		alias="needsAssistance",
		description="Whether the answer needs improvement or clarification",
	)
	confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence score from 0-1 for this evaluation")
	feedback: str = Field(..., description="Friendly, encouraging feedback message for the respondent")
	suggestions: Optional[List[str]] = Field(
		default=None,
		description="Specific suggestions for improving the answer",
	)
	assistance_type: VerdictAssistanceType = Field(
		...,
		alias="assistanceType",
		description="Type of assistance needed",
	)
	reasoning_type: ReasoningType = Field(
		...,
		alias="reasoningType",
		description="Why assistance is or is not needed",
	)


@dataclass(frozen=True)
class AssistanceTriggers:
	short_answers: bool = True
	incomplete_data: bool = True
	inconsistent_data: bool = False


@dataclass(frozen=True)
class AssistanceConfig:
	enabled: bool = True
	assistance_type: AssistanceKind = "all"
	max_retries: int = constants.DEFAULT_MAX_RETRIES
	confidence_threshold: float = constants.DEFAULT_CONFIDENCE_THRESHOLD
	prompt: Optional[str] = None
	triggers: AssistanceTriggers = field(default_factory=AssistanceTriggers)


@dataclass(frozen=True)
class AssistanceConfigOverrides:
	"""Caller-supplied partial config; ``None`` means the field was not supplied."""

	enabled: Optional[bool] = None
	assistance_type: Optional[AssistanceKind] = None
	max_retries: Optional[int] = None
	confidence_threshold: Optional[float] = None
	prompt: Optional[str] = None
	triggers: Optional[AssistanceTriggers] = None


@dataclass(frozen=True)
class SurveyCategory:
	name: str
	description: Optional[str] = None


@dataclass(frozen=True)
class SurveyContext:
	title: str
	description: Optional[str] = None
	current_category: Optional[SurveyCategory] = None


@dataclass(frozen=True)
class QuestionSpec:
	text: str
	question_type: str
	id: Optional[str] = None
	subtitle: Optional[str] = None
	category_id: Optional[str] = None
	config: Optional[AssistanceConfigOverrides] = None


@dataclass(frozen=True)
class EvaluationRequest:
	question: QuestionSpec
	answer: Any
	survey_context: SurveyContext
	retry_count: int = 0
	previous_answers: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class EvaluationResult:
	verdict: EvaluationVerdict
	outcome: EvaluationOutcome
	config: AssistanceConfig

	@property
	def model_called(self) -> bool:
		return self.outcome in {
			EvaluationOutcome.CONFIDENCE_GATED,
			EvaluationOutcome.MODEL_VERDICT,
			EvaluationOutcome.ERROR_FALLBACK,
		}


@dataclass(frozen=True)
class ChatMessage:
	role: MessageRole
	content: str

	def as_dict(self) -> Dict[str, str]:
		return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class IntroductionQuestion:
	text: str
	subtitle: Optional[str] = None
	question_type: Optional[str] = None
	is_first: bool = False
	is_last: bool = False
	index: Optional[int] = None
	total: Optional[int] = None


@dataclass(frozen=True)
class IntroductionRequest:
	question: IntroductionQuestion
	survey_title: str
	survey_description: Optional[str] = None
	messages: List[ChatMessage] = field(default_factory=list)
