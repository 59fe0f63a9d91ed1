from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from app.models import Turn


class InterviewIn(BaseModel):
	"""Request body of ``POST /api/interview``.

	Fields are optional here so that an absent field yields the 400 envelope
	instead of FastAPI's 422. ``userResponse`` may be ``""``.
	"""
	model_config = ConfigDict(populate_by_name=True)

	session_id: Optional[str] = Field(default=None, alias="sessionId")
	job_title: Optional[str] = Field(default=None, alias="jobTitle")
	user_response: Optional[str] = Field(default=None, alias="userResponse")

	def is_complete(self) -> bool:
		return bool(self.session_id) and bool(self.job_title) and self.user_response is not None


class TurnOut(BaseModel):
	role: str
	text: str
	timestamp: datetime

	@classmethod
	def from_turn(cls, turn: Turn) -> "TurnOut":
		return cls(role=turn.role.value, text=turn.text, timestamp=turn.timestamp)


class InterviewOut(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	session_id: str = Field(..., alias="sessionId")
	response: str
	history: List[TurnOut]


class ErrorOut(BaseModel):
	error: str
