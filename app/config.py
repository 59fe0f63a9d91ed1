from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List
from dotenv import load_dotenv


# Ensure .env is loaded eagerly
load_dotenv(dotenv_path=".env")


class Settings(BaseSettings):
	# Server
	host: str = "0.0.0.0"
	port: int = 3000
	cors_allow_origins: List[str] = [
		"http://localhost:5173",
		"https://lively-coast-026e29100.6.azurestaticapps.net",
		"https://mock-interview-frontend-react-mongo.vercel.app",
	]

	# Storage: mongodb:// or mongodb+srv:// for MongoDB, file://<dir> for local JSON files
	db_connection_string: str | None = None
	mongo_database: str = "mock_interview"  # used when the URI names no database
	mongo_collection: str = "chatsessions"

	# Google Gemini
	google_api_key: str | None = None
	gemini_model: str = "gemini-1.5-flash"

	# Interview behaviour
	interview_max_follow_ups: int = 3
	serialize_sessions: bool = False  # per-session lock; off keeps last-writer-wins

	# Logging
	log_level: str = "INFO"
	analytics_path: str | None = None  # e.g., logs/interview.jsonl

	@field_validator("interview_max_follow_ups")
	@classmethod
	def clamp_follow_ups(cls, v: int) -> int:
		return max(0, v)

	@field_validator("cors_allow_origins", mode="before")
	@classmethod
	def parse_cors_origins(cls, v):
		# Allow environment variable override
		if isinstance(v, str):
			return [origin.strip() for origin in v.split(",") if origin.strip()]
		return v

	def missing_credentials(self) -> List[str]:
		missing: List[str] = []
		if not self.db_connection_string:
			missing.append("DB_CONNECTION_STRING")
		if not self.google_api_key:
			missing.append("GOOGLE_API_KEY")
		return missing

	class Config:
		env_file = ".env"
		env_file_encoding = "utf-8"


settings = Settings()
