"""
Shared fixtures for the web frontend tests.

The Flask app talks to the stub backend through the injected transport;
session state travels in the test client's cookie jar.
"""

import json

import pytest

from frontend.app import create_app

TEST_USER = {"id": "u1", "name": "Jo Tester", "email": "jo@example.com"}


@pytest.fixture
def app(settings, backend):
    app = create_app(settings, transport=backend.transport)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Test client without a session."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def signed_in_client(client):
    """Test client carrying the session cookies."""
    client.set_cookie("token", "tok123")
    client.set_cookie("user", json.dumps(TEST_USER))
    return client
