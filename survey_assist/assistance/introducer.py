from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List

from survey_assist import constants
from survey_assist.assistance.messages import MessageCatalog
from survey_assist.assistance.policies import sanitize
from survey_assist.assistance.prompts import compose_introduction_prompt
from survey_assist.assistance.types import ChatMessage, IntroductionRequest, OpenStreamFn


logger = logging.getLogger(__name__)

_ALLOWED_ROLES = {"user", "assistant"}


@dataclass
class IntroducerHooks:
	open_stream: OpenStreamFn


def filter_messages(messages: Iterable[ChatMessage]) -> List[ChatMessage]:
	"""Keep user/assistant turns only, sanitized; the system prompt is server-owned."""
	safe: List[ChatMessage] = []
	for message in messages:
		if message.role not in _ALLOWED_ROLES:
			continue
		content = sanitize(message.content, constants.SANITIZE_MESSAGE_CHARS)
		if not content:
			continue
		safe.append(ChatMessage(role=message.role, content=content))
	return safe


class QuestionIntroducer:
	def __init__(self, hooks: IntroducerHooks, *, catalog: MessageCatalog, model: str):
		self._hooks = hooks
		self._catalog = catalog
		self._model = model

	def open(self, request: IntroductionRequest) -> Iterator[str]:
		"""Start the upstream stream now and return an iterator over its text deltas.

		Initiation failures raise here, before any bytes are produced.
		"""
		upstream = self._hooks.open_stream(
			model=self._model,
			system=compose_introduction_prompt(request, self._catalog),
			messages=[message.as_dict() for message in filter_messages(request.messages)],
			temperature=constants.INTRODUCTION_TEMPERATURE,
			max_output_tokens=constants.INTRODUCTION_MAX_OUTPUT_TOKENS,
		)
		return self._forward(upstream)

	def _forward(self, upstream: Iterator[str]) -> Iterator[str]:
		try:
			for delta in upstream:
				if delta:
					yield delta
		except Exception:
			logger.error("Question introduction stream aborted by upstream error.", exc_info=True)
			raise
		finally:
			close = getattr(upstream, "close", None)
			if callable(close):
				close()
