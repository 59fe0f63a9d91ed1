from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import anyio
import pytest

from app.config import Settings
from app.models import InterviewSession
from app.services.interview_engine import InterviewEngine, OPENING_SENTINEL
from app.services.session_store import SessionStore


def canned_reply(message: str) -> str:
	if message == OPENING_SENTINEL:
		return "Tell me about yourself."
	if message == "I build APIs.":
		return "Which API did you enjoy building most?"
	return "Thank you for your response. What's next?"


def word_chunks(text: str) -> List[Any]:
	chunks: List[Any] = [SimpleNamespace(text=(lambda w=word: w + " ")) for word in text.split(" ")]
	chunks.append(SimpleNamespace(text=lambda: ""))
	return chunks


class FakeStore(SessionStore):
	def __init__(self) -> None:
		self.documents: Dict[str, dict] = {}
		self.find_calls: List[str] = []
		self.upserts: List[InterviewSession] = []
		self.load_error: Optional[Exception] = None
		self.save_error: Optional[Exception] = None

	def seed(self, session_id: str, job_title: str, turns: List[tuple]) -> None:
		self.documents[session_id] = {
			"sessionId": session_id,
			"jobTitle": job_title,
			"history": [{"role": role, "text": text} for role, text in turns],
		}

	async def find_by_key(self, session_id: str) -> Optional[InterviewSession]:
		self.find_calls.append(session_id)
		if self.load_error is not None:
			raise self.load_error
		doc = self.documents.get(session_id)
		if doc is None:
			return None
		return InterviewSession.from_document(copy.deepcopy(doc))

	async def upsert(self, session: InterviewSession) -> InterviewSession:
		if self.save_error is not None:
			raise self.save_error
		session.touch()
		self.upserts.append(session)
		self.documents[session.session_id] = session.to_document()
		return session


class FakeCompletionClient:
	def __init__(self, reply: Callable[[str], str] = canned_reply, delay: float = 0.0) -> None:
		self._reply = reply
		self._delay = delay
		self.contexts: List[Dict[str, Any]] = []
		self.messages: List[str] = []
		self.error: Optional[Exception] = None
		self.chunks: Optional[List[Any]] = None

	def start_context(self, prior_turns, system_directive):
		context = {"history": copy.deepcopy(prior_turns), "system_directive": system_directive}
		self.contexts.append(context)
		return context

	async def send_and_stream(self, context, message):
		self.messages.append(message)
		if self.error is not None:
			raise self.error
		if self._delay:
			await anyio.sleep(self._delay)
		for chunk in self.chunks if self.chunks is not None else word_chunks(self._reply(message)):
			yield chunk


@pytest.fixture
def anyio_backend():
	return "asyncio"


@pytest.fixture
def store() -> FakeStore:
	return FakeStore()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
	return FakeCompletionClient()


@pytest.fixture
def engine(store, completion_client) -> InterviewEngine:
	return InterviewEngine(store, completion_client)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
	return Settings(
		_env_file=None,
		db_connection_string=f"file://{tmp_path / 'sessions'}",
		google_api_key="test-key",
		analytics_path=str(tmp_path / "audit.jsonl"),
	)
