from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from typing import List, Optional

from app.errors import BackendError, StorageError
from app.models import Role, Turn
from app.services.chunks import accumulate_reply
from app.services.llm_service import CompletionClient, build_system_directive
from app.services.session_locks import SessionLocks
from app.services.session_store import SessionStore
from app.services.turn_formatter import format_history_for_gemini


logger = logging.getLogger(__name__)

OPENING_SENTINEL = "start a mock interview"


@dataclass(frozen=True)
class TurnResult:
	session_id: str
	reply: str
	history: List[Turn]


def effective_message(user_response: str, is_first_turn: bool) -> str:
	"""The text forwarded to the model and recorded as the user turn."""
	if is_first_turn and user_response == "":
		return OPENING_SENTINEL
	return user_response


class InterviewEngine:
	"""Runs one interview turn: load or create, ask the model, persist.

	Each call issues exactly one completion request and, on success, exactly one
	upsert. A backend failure leaves the stored session untouched.
	"""

	def __init__(
		self,
		store: SessionStore,
		completion_client: CompletionClient,
		*,
		max_follow_ups: int = 3,
		session_locks: Optional[SessionLocks] = None,
	) -> None:
		self._store = store
		self._client = completion_client
		self._max_follow_ups = max_follow_ups
		self._locks = session_locks

	@property
	def store(self) -> SessionStore:
		return self._store

	async def handle_turn(self, session_id: str, job_title: str, user_response: str) -> TurnResult:
		guard = self._locks.hold(session_id) if self._locks is not None else nullcontext()
		async with guard:
			return await self._run_turn(session_id, job_title, user_response)

	async def _run_turn(self, session_id: str, job_title: str, user_response: str) -> TurnResult:
		try:
			session = await self._store.load_or_create(session_id, job_title)
		except StorageError:
			raise
		except Exception as exc:
			raise StorageError(f"Database load failed for {session_id}: {exc}") from exc

		is_first_turn = len(session.history) == 0
		message = effective_message(user_response, is_first_turn)
		prior_turns = format_history_for_gemini(session.history)

		try:
			context = self._client.start_context(
				prior_turns,
				build_system_directive(job_title, self._max_follow_ups),
			)
			session.append(Role.USER, message)
			reply = await accumulate_reply(self._client.send_and_stream(context, message))
		except BackendError:
			logger.exception("Completion backend failed for sessionId: %s", session_id)
			raise
		except Exception as exc:
			logger.exception("Completion backend failed for sessionId: %s", session_id)
			raise BackendError(str(exc)) from exc

		session.append(Role.MODEL, reply)

		try:
			saved = await self._store.upsert(session)
		except StorageError:
			raise
		except Exception as exc:
			raise StorageError(f"Database save failed for {session_id}: {exc}") from exc

		return TurnResult(session_id=saved.session_id, reply=reply, history=list(saved.history))
