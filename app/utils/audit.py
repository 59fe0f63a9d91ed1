from __future__ import annotations

import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any
import asyncio


logger = logging.getLogger(__name__)


class JsonlAuditor:
	"""Append-only JSON lines record of interview turns and failures."""

	def __init__(self, path: Optional[str] = None) -> None:
		self._path = Path(path) if path else None
		self._lock = asyncio.Lock()

	def configure(self, path: Optional[str]) -> None:
		self._path = Path(path) if path else None

	@property
	def enabled(self) -> bool:
		return self._path is not None

	async def log(self, record: Dict[str, Any]) -> None:
		if not self._path:
			return
		line = json.dumps({"ts": datetime.utcnow().isoformat(), **record}, ensure_ascii=False, default=str)
		async with self._lock:
			try:
				self._path.parent.mkdir(parents=True, exist_ok=True)
				with self._path.open("a", encoding="utf-8") as f:
					f.write(line + "\n")
			except OSError:
				# Audit lines are best-effort
				logger.exception("Could not write audit record to %s", self._path)

	async def log_turn(self, session_id: str, job_title: str, turn_count: int, reply: str) -> None:
		await self.log({
			"type": "interview_turn",
			"session_id": session_id,
			"job_title": job_title,
			"turn_count": turn_count,
			"reply_chars": len(reply),
		})

	async def log_error(self, session_id: Optional[str], kind: str, detail: str) -> None:
		await self.log({
			"type": "interview_error",
			"session_id": session_id,
			"kind": kind,
			"detail": detail,
		})
