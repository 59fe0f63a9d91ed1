from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol

import anyio
import google.generativeai as genai

from app.errors import BackendError


logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


def build_system_directive(job_title: str, max_follow_ups: int = 3) -> str:
	return (
		f'You are an expert technical interviewer for a job titled "{job_title}".\n'
		"Your goal is to run a mock interview made of several questions that assess the candidate's skills for this role.\n"
		"Ask one question at a time. Focus on practical, scenario-based questions and dive deep into their responses.\n"
		f"Ask at most {max_follow_ups} follow-up questions on any one answer, then move on to the next question.\n"
		"When the interview has covered enough ground, stop asking questions and give the candidate structured feedback: "
		"strengths, areas to improve, and an overall assessment.\n"
		"Maintain a professional and encouraging tone.\n"
		"If the user response is empty for the first question, start with a general introductory question.\n"
		"If the user response is empty for subsequent questions, prompt them to provide more details "
		"or ask if they'd like to move to the next question.\n"
		"Keep responses concise and direct."
	)


class CompletionClient(Protocol):
	def start_context(self, prior_turns: List[Dict[str, Any]], system_directive: str) -> Any:
		...

	def send_and_stream(self, context: Any, message: str) -> AsyncIterator[Any]:
		...


class GeminiCompletionClient:
	"""Streaming chat against Gemini through the blocking ``google.generativeai`` SDK.

	SDK calls run in worker threads; the stream is pulled one chunk per thread hop
	so callers consume it lazily.
	"""

	def __init__(self, api_key: str, model_name: str) -> None:
		genai.configure(api_key=api_key)
		self._model_name = model_name

	@property
	def model_name(self) -> str:
		return self._model_name

	def start_context(self, prior_turns: List[Dict[str, Any]], system_directive: str) -> Any:
		try:
			model = genai.GenerativeModel(self._model_name, system_instruction=system_directive)
			return model.start_chat(history=prior_turns)
		except Exception as exc:
			raise BackendError(f"could not open chat context: {exc}") from exc

	async def send_and_stream(self, context: Any, message: str) -> AsyncIterator[Any]:
		try:
			response = await anyio.to_thread.run_sync(
				lambda: context.send_message(message, stream=True)
			)
			iterator = iter(response)
			while True:
				chunk = await anyio.to_thread.run_sync(next, iterator, _END_OF_STREAM)
				if chunk is _END_OF_STREAM:
					break
				yield chunk
		except BackendError:
			raise
		except Exception as exc:
			raise BackendError(f"completion stream failed: {exc}") from exc


def build_completion_client(api_key: Optional[str], model_name: str) -> GeminiCompletionClient:
	if not api_key:
		raise BackendError("GOOGLE_API_KEY is not set")
	logger.info("Gemini completion client ready (model=%s)", model_name)
	return GeminiCompletionClient(api_key=api_key, model_name=model_name)
