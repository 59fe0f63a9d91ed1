from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List


class Role(str, Enum):
	USER = "user"
	MODEL = "model"


@dataclass(frozen=True)
class Turn:
	role: Role
	text: str
	timestamp: datetime = field(default_factory=datetime.utcnow)

	def to_document(self) -> dict:
		return {"role": self.role.value, "text": self.text, "timestamp": self.timestamp}

	@classmethod
	def from_document(cls, data: Dict[str, Any]) -> "Turn":
		timestamp = data.get("timestamp")
		if isinstance(timestamp, str):
			timestamp = datetime.fromisoformat(timestamp)
		elif not isinstance(timestamp, datetime):
			# Records written before timestamps were stored carry none
			timestamp = datetime.utcnow()
		return cls(role=Role(data["role"]), text=data.get("text", ""), timestamp=timestamp)


@dataclass
class InterviewSession:
	session_id: str
	job_title: str
	history: List[Turn] = field(default_factory=list)
	created_at: datetime = field(default_factory=datetime.utcnow)
	updated_at: datetime = field(default_factory=datetime.utcnow)

	def append(self, role: Role, text: str) -> Turn:
		turn = Turn(role=role, text=text)
		self.history.append(turn)
		return turn

	def touch(self) -> None:
		self.updated_at = datetime.utcnow()

	def to_document(self) -> dict:
		"""Persisted layout: one document per session, camelCase keys."""
		return {
			"sessionId": self.session_id,
			"jobTitle": self.job_title,
			"history": [t.to_document() for t in self.history],
			"createdAt": self.created_at,
			"updatedAt": self.updated_at,
		}

	@classmethod
	def from_document(cls, data: Dict[str, Any]) -> "InterviewSession":
		now = datetime.utcnow()
		created_at = data.get("createdAt") or now
		updated_at = data.get("updatedAt") or created_at
		if isinstance(created_at, str):
			created_at = datetime.fromisoformat(created_at)
		if isinstance(updated_at, str):
			updated_at = datetime.fromisoformat(updated_at)
		return cls(
			session_id=data["sessionId"],
			job_title=data.get("jobTitle", ""),
			history=[Turn.from_document(t) for t in data.get("history", [])],
			created_at=created_at,
			updated_at=updated_at,
		)
