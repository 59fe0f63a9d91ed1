from typing import Optional

from fastapi import APIRouter, Depends, Request

from app.errors import InterviewError, RequestValidationFailed
from app.schemas import InterviewIn, InterviewOut, TurnOut
from app.services.interview_engine import InterviewEngine
from app.utils.audit import JsonlAuditor


router = APIRouter()


def get_engine(request: Request) -> InterviewEngine:
	return request.app.state.engine


def get_auditor(request: Request) -> JsonlAuditor:
	return request.app.state.auditor


@router.post("/interview", response_model=InterviewOut, response_model_by_alias=True)
async def interview_turn(
	payload: Optional[InterviewIn] = None,
	engine: InterviewEngine = Depends(get_engine),
	auditor: JsonlAuditor = Depends(get_auditor),
):
	if payload is None or not payload.is_complete():
		raise RequestValidationFailed("missing request field")

	try:
		result = await engine.handle_turn(payload.session_id, payload.job_title, payload.user_response)
	except InterviewError as exc:
		await auditor.log_error(payload.session_id, type(exc).__name__, str(exc))
		raise

	await auditor.log_turn(result.session_id, payload.job_title, len(result.history), result.reply)
	return InterviewOut(
		session_id=result.session_id,
		response=result.reply,
		history=[TurnOut.from_turn(t) for t in result.history],
	)
