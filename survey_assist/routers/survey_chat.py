from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from survey_assist.assistance.types import EvaluationVerdict
from survey_assist.response import error_json, success_response
from survey_assist.schemas import ApiEnvelope, AssistanceRequest, AssistantModelsData, IntroductionRequestPayload
from survey_assist.services import assistance_service, provider_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/survey-chat", tags=["survey-chat"])


@router.get("/models", response_model=ApiEnvelope)
def models(request: Request):
	try:
		catalog = provider_service.list_models()
	except provider_service.ProviderError as exc:
		raise HTTPException(
			status_code=exc.status_code,
			detail={"code": exc.code, "message": exc.message},
		) from exc
	data = AssistantModelsData.model_validate(catalog).model_dump()
	return success_response(request=request, data=data)


@router.post(
	"/assistance",
	response_model=EvaluationVerdict,
	response_model_by_alias=True,
	response_model_exclude_none=True,
)
def assistance(payload: AssistanceRequest):
	result = assistance_service.evaluate(payload.to_domain())
	return result.verdict


@router.post("")
def introduce(request: Request, payload: IntroductionRequestPayload):
	try:
		stream = assistance_service.open_introduction(payload.to_domain(), model=payload.model)
	except provider_service.ProviderError as exc:
		if exc.code == "assistant_invalid_model":
			raise HTTPException(
				status_code=400,
				detail={"code": exc.code, "message": exc.message},
			) from exc
		logger.error("Introduction stream could not be started (%s): %s", exc.code, exc.message)
		return error_json(500, code="introduction_unavailable", message="Internal server error.", request=request)

	return StreamingResponse(
		stream,
		media_type="text/plain; charset=utf-8",
		headers={
			"Cache-Control": "no-cache",
			"X-Accel-Buffering": "no",
		},
	)
