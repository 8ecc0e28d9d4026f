"""Fixtures shared by the unit tests: a gateway wired to the stub backend."""

import pytest

from tintern.gateway.client import ApiGateway
from tintern.resources.applications import ApplicationsManager
from tintern.resources.education import EducationManager
from tintern.resources.experience import ExperienceManager


@pytest.fixture
def auth_failures():
    """AuthFailure values passed to the gateway's handler."""
    return []


@pytest.fixture
def gateway(authed_store, settings, backend, auth_failures):
    return ApiGateway(
        authed_store,
        settings,
        transport=backend.transport,
        auth_failure_handler=auth_failures.append,
    )


@pytest.fixture
def education(gateway, settings):
    return EducationManager(gateway, settings)


@pytest.fixture
def experience(gateway, settings):
    return ExperienceManager(gateway, settings)


@pytest.fixture
def applications(gateway, settings):
    return ApplicationsManager(gateway, settings)
