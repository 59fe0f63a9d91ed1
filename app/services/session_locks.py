from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class SessionLocks:
	"""One ``asyncio.Lock`` per session id, released from the registry when idle."""

	def __init__(self) -> None:
		self._locks: Dict[str, asyncio.Lock] = {}
		self._waiters: Dict[str, int] = {}

	def __len__(self) -> int:
		return len(self._locks)

	@asynccontextmanager
	async def hold(self, session_id: str) -> AsyncIterator[None]:
		lock = self._locks.setdefault(session_id, asyncio.Lock())
		self._waiters[session_id] = self._waiters.get(session_id, 0) + 1
		try:
			async with lock:
				yield
		finally:
			self._waiters[session_id] -= 1
			if self._waiters[session_id] == 0:
				del self._waiters[session_id]
				del self._locks[session_id]
