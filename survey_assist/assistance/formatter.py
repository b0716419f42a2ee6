from __future__ import annotations

import json
from typing import Any, List

from survey_assist import constants
from survey_assist.assistance.messages import DEFAULT_CATALOG, MessageCatalog


_TEXT_TYPES = {"input", "textarea"}
_CHOICE_TYPES = {"select", "radio"}


def _is_empty(answer: Any) -> bool:
	if answer is None:
		return True
	if isinstance(answer, str):
		return not answer.strip()
	if isinstance(answer, (list, tuple, dict)):
		return len(answer) == 0
	return False


def _scalar_text(value: Any) -> str:
	if isinstance(value, (list, tuple)):
		return ", ".join(str(item) for item in value)
	return str(value)


def _image_comments(answer: Any, catalog: MessageCatalog) -> str:
	if not isinstance(answer, (list, tuple)):
		return catalog.no_images
	comments: List[str] = []
	for item in answer:
		comment = item.get("comment") if isinstance(item, dict) else None
		if isinstance(comment, str) and comment.strip():
			comments.append(" ".join(comment.split()))
		else:
			comments.append(catalog.no_comment)
	return catalog.images_label.format(count=len(answer), comments="; ".join(comments))


def _serialized(answer: Any) -> str:
	if isinstance(answer, (dict, list, tuple)):
		try:
			text = json.dumps(answer, ensure_ascii=False, separators=(",", ":"), default=str)
		except (TypeError, ValueError):
			text = str(answer)
	else:
		text = str(answer)
	return text[: constants.ANSWER_OBJECT_MAX_CHARS]


def format_answer(answer: Any, question_type: str, catalog: MessageCatalog = DEFAULT_CATALOG) -> str:
	"""Render a raw answer as a short string for the evaluation prompt. Never raises."""
	if _is_empty(answer):
		return catalog.no_answer

	kind = (question_type or "").strip().lower()
	if kind in _TEXT_TYPES:
		text = str(answer).strip()
	elif kind == "number":
		text = catalog.number_label.format(value=answer)
	elif kind in _CHOICE_TYPES:
		text = catalog.selected_label.format(value=_scalar_text(answer))
	elif kind == "image_upload_comment":
		text = _image_comments(answer, catalog)
	elif kind == "range":
		text = catalog.rating_label.format(value=answer)
	elif kind == "video_upload":
		text = catalog.video_uploaded if answer else catalog.no_video
	else:
		text = _serialized(answer)

	return (text or catalog.no_answer)[: constants.ANSWER_MAX_CHARS]
