"""CORS behaviour of the interview API for allowed and foreign origins."""
from fastapi.testclient import TestClient

from app.main import create_app


FRONTEND_ORIGIN = "https://mock-interview-frontend-react-mongo.vercel.app"


def _client(test_settings, engine):
	return TestClient(create_app(test_settings, engine=engine))


def test_cors_preflight(test_settings, engine):
	headers = {
		"Origin": FRONTEND_ORIGIN,
		"Access-Control-Request-Method": "POST",
		"Access-Control-Request-Headers": "Content-Type",
	}

	response = _client(test_settings, engine).options("/api/interview", headers=headers)

	assert response.status_code == 200
	assert response.headers["access-control-allow-origin"] == FRONTEND_ORIGIN
	assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_actual_request(test_settings, engine):
	response = _client(test_settings, engine).post(
		"/api/interview",
		headers={"Origin": FRONTEND_ORIGIN},
		json={"sessionId": "cors-1", "jobTitle": "Engineer", "userResponse": ""},
	)

	assert response.status_code == 200
	assert response.headers["access-control-allow-origin"] == FRONTEND_ORIGIN


def test_cors_rejects_unknown_origin(test_settings, engine):
	headers = {
		"Origin": "https://evil.example.com",
		"Access-Control-Request-Method": "POST",
	}

	response = _client(test_settings, engine).options("/api/interview", headers=headers)

	assert response.status_code == 400
	assert "access-control-allow-origin" not in response.headers
