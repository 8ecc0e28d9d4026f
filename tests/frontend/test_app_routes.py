"""Tests for the Flask surface: route guard, auth endpoints and pages."""

import pytest

from frontend.app import create_app


class TestGuard:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_protected_page_redirects_to_login(self, client):
        response = client.get("/profile")
        assert response.status_code == 302
        assert response.headers["Location"] == "/auth/login?callbackUrl=%2Fprofile"

    def test_protected_api_gets_json_401(self, client):
        response = client.get("/api/profile/summary")
        assert response.status_code == 401
        assert response.get_json()["redirect"] == "/auth/login?callbackUrl=%2Fapi%2Fprofile%2Fsummary"

    def test_static_files_are_not_guarded(self, client):
        assert client.get("/static/logo.png").status_code == 404

    def test_signed_in_user_skips_login_page(self, signed_in_client):
        response = signed_in_client.get("/auth/login")
        assert response.status_code == 302
        assert response.headers["Location"] == "/profile"

    def test_login_page_keeps_callback(self, client):
        response = client.get("/auth/login?callbackUrl=/jobs")
        assert response.get_json() == {"page": "login", "callbackUrl": "/jobs"}

    def test_index_reports_session(self, signed_in_client):
        data = signed_in_client.get("/").get_json()
        assert data["authenticated"] is True
        assert data["user"]["id"] == "u1"


class TestAuthApi:
    def test_login_sets_session_cookies(self, client, backend):
        backend.on("POST", "/auth/login", json={
            "accessToken": "tok123",
            "user": {"id": "u1", "name": "Jo", "email": "a@b.com"},
        })

        response = client.post("/api/auth/login", json={"email": "a@b.com", "password": "secret"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["redirect"] == "/profile"
        assert client.get_cookie("token").value == "tok123"
        assert client.get_cookie("user") is not None
        set_cookies = response.headers.getlist("Set-Cookie")
        assert all("HttpOnly" in c and "SameSite=Strict" in c for c in set_cookies)

    def test_login_honours_callback(self, client, backend):
        backend.on("POST", "/auth/login", json={"accessToken": "tok123", "user": {"id": "u1"}})

        response = client.post(
            "/api/auth/login",
            json={"email": "a@b.com", "password": "secret", "callbackUrl": "/jobs"},
        )

        assert response.get_json()["redirect"] == "/jobs"

    def test_login_requires_fields(self, client, backend):
        response = client.post("/api/auth/login", json={"email": "a@b.com"})
        assert response.status_code == 400
        assert backend.requests == []

    def test_login_rejected(self, client, backend):
        backend.on("POST", "/auth/login", status=401, json={"message": "Invalid credentials"})

        response = client.post("/api/auth/login", json={"email": "a@b.com", "password": "nope"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid credentials"
        assert client.get_cookie("token") is None

    def test_signup(self, client, backend):
        backend.on("POST", "/auth/register", status=201, json={"message": "User created"})

        response = client.post("/api/auth/signup", json={"name": "Jo", "email": "a@b.com", "password": "pw"})

        assert response.status_code == 201
        assert response.get_json()["redirect"] == "/auth/login"

    def test_logout_clears_cookies(self, signed_in_client, backend):
        backend.on("POST", "/auth/logout", json={"message": "Logged out"})

        response = signed_in_client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.get_json()["redirect"] == "/"
        assert signed_in_client.get_cookie("token") is None
        assert signed_in_client.get_cookie("user") is None


class TestPages:
    def test_profile(self, signed_in_client, backend):
        backend.on("GET", "/users/education", json={"educations": [
            {"_id": "e1", "degree": "BSc", "university": "X", "startDate": "2020-01-01T00:00:00Z"},
        ]})
        backend.on("GET", "/users/experience", json=[])

        response = signed_in_client.get("/profile")

        assert response.status_code == 200
        data = response.get_json()
        assert data["user"]["name"] == "Jo Tester"
        assert data["educations"][0]["startDate"] == "2020-01"
        assert data["experiences"] == []
        assert data["errors"] == []
        assert backend.requests[0].headers["Authorization"] == "Bearer tok123"

    def test_expired_session_on_profile(self, signed_in_client, backend):
        backend.on("GET", "/users/education", status=401)
        backend.on("GET", "/users/experience", status=401)

        response = signed_in_client.get("/profile")

        assert response.status_code == 302
        assert response.headers["Location"] == "/auth/login"
        assert signed_in_client.get_cookie("token") is None

    def test_jobs_with_filters(self, client, backend):
        backend.on("GET", "/jobs", json={"jobs": [
            {"_id": "j1", "title": "Backend Intern", "city": "Berlin", "industry": "Software"},
            {"_id": "j2", "title": "Designer", "city": "Paris", "industry": "Media"},
        ]})

        response = client.get("/jobs?location=berlin")

        assert response.status_code == 200
        data = response.get_json()
        assert data["count"] == 1
        assert data["jobs"][0]["id"] == "j1"

    def test_jobs_backend_failure(self, client, backend):
        backend.on("GET", "/jobs", status=500, json={"message": "Database unavailable"})

        response = client.get("/jobs")

        assert response.status_code == 502
        assert response.get_json()["error"] == "Database unavailable"


class TestAppFactory:
    def test_production_requires_secret_key(self, settings):
        production = settings.model_copy(update={"environment": "production", "flask_secret_key": None})
        with pytest.raises(ValueError, match="FLASK_SECRET_KEY"):
            create_app(production)

    def test_production_rejects_plain_http_backend(self, settings):
        production = settings.model_copy(
            update={"environment": "production", "flask_secret_key": "s3cret", "api_base_url": "http://api.test"}
        )
        with pytest.raises(ValueError, match="https"):
            create_app(production)

    def test_development_generates_secret_key(self, settings):
        app = create_app(settings.model_copy(update={"flask_secret_key": None}))
        assert app.secret_key
