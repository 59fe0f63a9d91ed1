from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
import json
import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlparse

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.errors import StorageError
from app.models import InterviewSession


logger = logging.getLogger(__name__)


class SessionStore(ABC):
	"""Durable storage for one interview session record per ``sessionId``."""

	@abstractmethod
	async def find_by_key(self, session_id: str) -> Optional[InterviewSession]:
		...

	@abstractmethod
	async def upsert(self, session: InterviewSession) -> InterviewSession:
		...

	async def load_or_create(self, session_id: str, job_title: str) -> InterviewSession:
		"""Return the stored session with ``job_title`` refreshed, or a new unsaved one."""
		session = await self.find_by_key(session_id)
		if session is None:
			logger.info("New chat session created for sessionId: %s", session_id)
			return InterviewSession(session_id=session_id, job_title=job_title)
		session.job_title = job_title
		return session

	async def close(self) -> None:
		return None


class MongoSessionStore(SessionStore):
	def __init__(self, collection: AsyncIOMotorCollection, client: Optional[AsyncIOMotorClient] = None) -> None:
		self._collection = collection
		self._client = client

	@classmethod
	def from_uri(cls, uri: str, database: str, collection: str) -> "MongoSessionStore":
		client = AsyncIOMotorClient(uri)
		db = client.get_default_database(default=database)
		return cls(db[collection], client=client)

	async def ensure_indexes(self) -> None:
		try:
			await self._collection.create_index("sessionId", unique=True)
		except PyMongoError as exc:
			raise StorageError(f"Database index setup failed: {exc}") from exc

	async def find_by_key(self, session_id: str) -> Optional[InterviewSession]:
		try:
			doc = await self._collection.find_one({"sessionId": session_id})
		except PyMongoError as exc:
			raise StorageError(f"Database lookup failed for {session_id}: {exc}") from exc
		if doc is None:
			return None
		return InterviewSession.from_document(doc)

	async def upsert(self, session: InterviewSession) -> InterviewSession:
		session.touch()
		try:
			await self._collection.replace_one(
				{"sessionId": session.session_id},
				session.to_document(),
				upsert=True,
			)
		except PyMongoError as exc:
			raise StorageError(f"Database save failed for {session.session_id}: {exc}") from exc
		return session

	async def close(self) -> None:
		if self._client is not None:
			self._client.close()


class FileSessionStore(SessionStore):
	"""One JSON file per session under a directory, for local development."""

	def __init__(self, data_dir: Path | str) -> None:
		self._data_dir = Path(data_dir)
		self._lock = asyncio.Lock()
		try:
			self._data_dir.mkdir(parents=True, exist_ok=True)
		except OSError as exc:
			raise StorageError(f"Cannot create session directory {self._data_dir}: {exc}") from exc

	def _session_path(self, session_id: str) -> Path:
		# Percent-encoding is injective and keeps separators out of the filename
		return self._data_dir / f"{quote(session_id, safe='')}.json"

	def _serialize(self, session: InterviewSession) -> dict:
		data = session.to_document()
		# Convert datetimes to isoformat
		data["createdAt"] = session.created_at.isoformat()
		data["updatedAt"] = session.updated_at.isoformat()
		for entry, turn in zip(data["history"], session.history):
			entry["timestamp"] = turn.timestamp.isoformat()
		return data

	async def find_by_key(self, session_id: str) -> Optional[InterviewSession]:
		path = self._session_path(session_id)
		if not path.exists():
			return None
		try:
			with path.open("r", encoding="utf-8") as f:
				raw = json.load(f)
		except (OSError, ValueError) as exc:
			raise StorageError(f"Database read failed for {session_id}: {exc}") from exc
		if raw.get("sessionId") != session_id:
			raise StorageError(f"Session file {path.name} holds {raw.get('sessionId')!r}, expected {session_id!r}")
		return InterviewSession.from_document(raw)

	async def upsert(self, session: InterviewSession) -> InterviewSession:
		session.touch()
		path = self._session_path(session.session_id)
		tmp_path = path.with_suffix(".json.tmp")
		async with self._lock:
			try:
				with tmp_path.open("w", encoding="utf-8") as f:
					json.dump(self._serialize(session), f, ensure_ascii=False, indent=2)
				os.replace(tmp_path, path)
			except OSError as exc:
				raise StorageError(f"Database write failed for {session.session_id}: {exc}") from exc
		return session


def build_session_store(connection_string: Optional[str], database: str, collection: str) -> SessionStore:
	if not connection_string:
		raise StorageError("DB_CONNECTION_STRING is not set")
	parsed = urlparse(connection_string)
	if parsed.scheme in ("mongodb", "mongodb+srv"):
		return MongoSessionStore.from_uri(connection_string, database, collection)
	if parsed.scheme == "file":
		return FileSessionStore(parsed.netloc + parsed.path)
	raise StorageError(f"Unsupported DB_CONNECTION_STRING scheme: {parsed.scheme or '(none)'}")
