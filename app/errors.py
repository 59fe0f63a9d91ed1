from __future__ import annotations


MISSING_FIELDS_MESSAGE = "Missing sessionId, jobTitle, or userResponse in request body."
STORAGE_FAILURE_MESSAGE = "Failed to access chat session in database."
BACKEND_FAILURE_MESSAGE = (
	"Failed to process interview request or get AI response. "
	"Please check backend logs for details."
)


class InterviewError(Exception):
	"""Base class for failures reported to HTTP callers as ``{"error": ...}``."""

	status_code: int = 500
	public_message: str = BACKEND_FAILURE_MESSAGE


class RequestValidationFailed(InterviewError):
	status_code = 400
	public_message = MISSING_FIELDS_MESSAGE


class StorageError(InterviewError):
	public_message = STORAGE_FAILURE_MESSAGE


class BackendError(InterviewError):
	public_message = BACKEND_FAILURE_MESSAGE


class ConfigurationError(RuntimeError):
	"""Raised at startup when a required setting is absent."""
