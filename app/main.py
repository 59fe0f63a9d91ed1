from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from app.config import Settings, settings as default_settings
from app.errors import ConfigurationError, InterviewError, RequestValidationFailed
from app.routers.interview import router as interview_router
from app.services.interview_engine import InterviewEngine
from app.services.llm_service import build_completion_client
from app.services.session_locks import SessionLocks
from app.services.session_store import MongoSessionStore, build_session_store
from app.utils.audit import JsonlAuditor
from app.utils.logging import configure_logging


logger = logging.getLogger(__name__)


async def _build_engine(cfg: Settings) -> InterviewEngine:
	missing = cfg.missing_credentials()
	if missing:
		raise ConfigurationError(f"Refusing to start, missing settings: {', '.join(missing)}")
	store = build_session_store(cfg.db_connection_string, cfg.mongo_database, cfg.mongo_collection)
	if isinstance(store, MongoSessionStore):
		await store.ensure_indexes()
		logger.info("Successfully connected to MongoDB!")
	client = build_completion_client(cfg.google_api_key, cfg.gemini_model)
	return InterviewEngine(
		store,
		client,
		max_follow_ups=cfg.interview_max_follow_ups,
		session_locks=SessionLocks() if cfg.serialize_sessions else None,
	)


def create_app(cfg: Optional[Settings] = None, engine: Optional[InterviewEngine] = None) -> FastAPI:
	"""Build the API. Pass ``engine`` to skip building storage and Gemini clients."""
	cfg = cfg or default_settings
	configure_logging(cfg.log_level)

	@asynccontextmanager
	async def lifespan(app: FastAPI) -> AsyncIterator[None]:
		owned = app.state.engine is None
		if owned:
			app.state.engine = await _build_engine(cfg)
		logger.info("Backend server running on http://%s:%s", cfg.host, cfg.port)
		logger.info("CORS allowed origins: %s", ", ".join(cfg.cors_allow_origins))
		try:
			yield
		finally:
			if owned:
				await app.state.engine.store.close()

	app = FastAPI(title="Mock Interview Backend", version="0.1.0", lifespan=lifespan)
	app.state.engine = engine
	app.state.auditor = JsonlAuditor(cfg.analytics_path)

	# CORS
	app.add_middleware(
		CORSMiddleware,
		allow_origins=cfg.cors_allow_origins,
		# Browsers reject credentialed responses for wildcard origins
		allow_credentials=False if cfg.cors_allow_origins == ["*"] else True,
		allow_methods=["*"],
		allow_headers=["*"],
		max_age=3600,
	)

	@app.exception_handler(InterviewError)
	async def interview_error_handler(request: Request, exc: InterviewError) -> JSONResponse:
		if exc.status_code >= 500:
			logger.error("Error in %s: %s: %s", request.url.path, type(exc).__name__, exc)
		return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

	@app.exception_handler(RequestValidationError)
	async def body_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
		# Absent, non-JSON or mistyped bodies get the same envelope as missing fields
		return JSONResponse(
			status_code=RequestValidationFailed.status_code,
			content={"error": RequestValidationFailed.public_message},
		)

	@app.get("/health")
	async def health() -> JSONResponse:
		return JSONResponse({
			"status": "ok",
			"version": app.version,
			"engine": app.state.engine is not None,
			"llm": {"provider": "gemini", "model": cfg.gemini_model, "configured": bool(cfg.google_api_key)},
			"database": {"configured": bool(cfg.db_connection_string)},
		})

	# Routers
	app.include_router(interview_router, prefix="/api", tags=["interview"])
	return app


def run() -> None:
	import uvicorn

	uvicorn.run("app.main:create_app", factory=True, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
	run()
