from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from survey_assist import constants
from survey_assist.assistance.types import (
	AssistanceConfigOverrides,
	AssistanceTriggers,
	ChatMessage,
	EvaluationRequest,
	IntroductionQuestion,
	IntroductionRequest,
	QuestionSpec,
	SurveyCategory,
	SurveyContext,
)


class ApiError(BaseModel):
	model_config = ConfigDict(extra="forbid")

	code: str
	message: str
	evidence: List[str] = Field(default_factory=list)


class ApiEnvelope(BaseModel):
	model_config = ConfigDict(extra="allow")

	ok: bool
	generated_at: str
	request_id: Optional[str] = None
	data: Optional[Dict[str, Any]] = None
	error: Optional[ApiError] = None


class AssistanceTriggersPayload(BaseModel):
	model_config = ConfigDict(extra="ignore")

	short_answers: bool = False
	incomplete_data: bool = False
	inconsistent_data: bool = False


class AssistanceConfigPayload(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	enabled: Optional[bool] = None
	assistance_type: Optional[Literal["all", "clarification", "validation", "enhancement"]] = None
	max_retries: Optional[int] = Field(default=None, ge=0, alias="maxRetries")
	confidence_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)
	prompt: Optional[str] = Field(default=None, max_length=constants.MESSAGE_CONTENT_MAX_CHARS)
	triggers: Optional[AssistanceTriggersPayload] = None

	def to_overrides(self) -> AssistanceConfigOverrides:
		triggers = None
		if self.triggers is not None:
			triggers = AssistanceTriggers(
				short_answers=self.triggers.short_answers,
				incomplete_data=self.triggers.incomplete_data,
				inconsistent_data=self.triggers.inconsistent_data,
			)
		return AssistanceConfigOverrides(
			enabled=self.enabled,
			assistance_type=self.assistance_type,
			max_retries=self.max_retries,
			confidence_threshold=self.confidence_threshold,
			prompt=self.prompt,
			triggers=triggers,
		)


class EvaluationQuestionPayload(BaseModel):
	model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

	id: Optional[str] = None
	question_text: str = Field(..., min_length=1)
	question_subtitle: Optional[str] = None
	question_type: str = Field(..., min_length=1, max_length=64)
	ai_assistance_config: Optional[AssistanceConfigPayload] = None
	category_id: Optional[str] = None


class SurveyCategoryPayload(BaseModel):
	model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

	name: str = Field(..., min_length=1)
	description: Optional[str] = None


class SurveyContextPayload(BaseModel):
	model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)

	title: str = Field(..., min_length=1)
	description: Optional[str] = None
	current_category: Optional[SurveyCategoryPayload] = Field(default=None, alias="currentCategory")


class AssistanceRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", populate_by_name=True)

	question: EvaluationQuestionPayload
	answer: Any = Field(default=None, description="The respondent's answer to evaluate.")
	previous_answers: Optional[Dict[str, Any]] = Field(
		default=None,
		alias="previousAnswers",
		description="Previous answers for context.",
	)
	survey_context: SurveyContextPayload = Field(..., alias="surveyContext")
	retry_count: int = Field(
		default=0,
		ge=0,
		alias="retryCount",
		description="How many assistance cycles already happened for this question.",
	)

	def to_domain(self) -> EvaluationRequest:
		question = self.question
		context = self.survey_context
		category = None
		if context.current_category is not None:
			category = SurveyCategory(
				name=context.current_category.name,
				description=context.current_category.description,
			)
		config = question.ai_assistance_config
		return EvaluationRequest(
			question=QuestionSpec(
				id=question.id,
				text=question.question_text,
				subtitle=question.question_subtitle,
				question_type=question.question_type,
				category_id=question.category_id,
				config=config.to_overrides() if config is not None else None,
			),
			answer=self.answer,
			survey_context=SurveyContext(
				title=context.title,
				description=context.description,
				current_category=category,
			),
			retry_count=self.retry_count,
			previous_answers=self.previous_answers,
		)


class IntroductionMessagePayload(BaseModel):
	model_config = ConfigDict(extra="ignore")

	role: Literal["user", "assistant", "system"] = "user"
	content: str = Field(..., min_length=1, max_length=constants.MESSAGE_CONTENT_MAX_CHARS)


class IntroductionQuestionPayload(BaseModel):
	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	question_text: str = Field(..., min_length=1)
	question_subtitle: Optional[str] = None
	question_type: Optional[str] = None
	options: Any = None
	is_required: Optional[bool] = None
	id: Any = None
	survey_id: Any = None
	order_index: Any = None
	is_first: Optional[bool] = Field(default=None, alias="isFirst")
	is_last: Optional[bool] = Field(default=None, alias="isLast")
	index: Optional[int] = Field(default=None, ge=0)
	total: Optional[int] = Field(default=None, ge=1)


class IntroductionRequestPayload(BaseModel):
	model_config = ConfigDict(extra="forbid", populate_by_name=True)

	messages: List[IntroductionMessagePayload] = Field(default_factory=list)
	current_question: IntroductionQuestionPayload = Field(..., alias="currentQuestion")
	survey_title: str = Field(..., min_length=1, alias="surveyTitle")
	survey_description: Optional[str] = Field(default=None, alias="surveyDescription")
	model: Optional[str] = Field(default=None, max_length=100, description="Optional model override from allowlist.")

	def to_domain(self) -> IntroductionRequest:
		question = self.current_question
		return IntroductionRequest(
			question=IntroductionQuestion(
				text=question.question_text,
				subtitle=question.question_subtitle,
				question_type=question.question_type,
				is_first=bool(question.is_first),
				is_last=bool(question.is_last),
				index=question.index,
				total=question.total,
			),
			survey_title=self.survey_title,
			survey_description=self.survey_description,
			messages=[ChatMessage(role=message.role, content=message.content) for message in self.messages],
		)


class AssistantModelsData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	models: List[str] = Field(default_factory=list)
	default_model: str
	provider_mode: Literal["auto", "openai", "local"]
	effective_provider_mode: Literal["openai", "local"]
	provider_ready: bool = True
	provider_warnings: List[str] = Field(default_factory=list)
	language: str
