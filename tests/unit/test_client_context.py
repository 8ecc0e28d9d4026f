"""End-to-end tests through the client context: one store, one gateway, one navigator."""

import asyncio

import pytest

from tintern.client import ClientContext
from tintern.navigation.guard import AuthState, GuardAction
from tintern.session.storage import FileStorage, MemoryStorage

TEST_TOKEN = "tok123"
TEST_USER = {"id": "u1", "name": "Jo Tester", "email": "jo@example.com"}


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def context(settings, storage, navigator, backend):
    return ClientContext(settings, storage=storage, navigator=navigator, transport=backend.transport)


def sign_in(context):
    context.session_store.write(TEST_TOKEN, TEST_USER)
    context.init()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_async_context_manager_reads_session(self, settings, storage, navigator, backend):
        async with ClientContext(settings, storage=storage, navigator=navigator,
                                 transport=backend.transport) as context:
            assert context.guard.state == AuthState.UNAUTHENTICATED
        assert context.gateway._client.is_closed

    def test_guard_waits_until_init(self, context):
        assert context.guard.decide("/profile").action == GuardAction.LOADING
        context.init()
        assert context.guard.decide("/profile").is_redirect

    def test_defaults_to_file_storage(self, settings):
        context = ClientContext(settings)
        assert isinstance(context.session_store.storage, FileStorage)


class TestLoginScenario:
    @pytest.mark.asyncio
    async def test_login_then_authenticated_calls(self, context, backend, navigator):
        backend.on("POST", "/auth/login", json={
            "accessToken": "tok123",
            "user": {"id": "u1", "name": "Jo", "email": "a@b.com"},
        })
        backend.on("GET", "/users/education", json=[])
        context.init()

        outcome = await context.auth.login("a@b.com", "secret")
        await context.education.fetch_all()

        assert outcome.success
        assert context.session_store.read().token == "tok123"
        assert navigator.current == "/profile"
        assert backend.calls("GET", "/users/education")[0].headers["Authorization"] == "Bearer tok123"
        assert context.visit("/profile").action == GuardAction.PROCEED


class TestSessionExpiry:
    @pytest.mark.asyncio
    async def test_401_clears_session_and_redirects_to_login(self, context, backend, navigator):
        backend.on("GET", "/users/education", status=401, json={"message": "jwt expired"})
        sign_in(context)

        result = await context.education.fetch_all()

        assert result.auth_failed
        assert context.session_store.read().token is None
        assert context.session_store.read().user is None
        assert context.guard.state == AuthState.UNAUTHENTICATED
        assert navigator.history == ["/auth/login"]

    @pytest.mark.asyncio
    async def test_concurrent_401s_redirect_once(self, context, backend, navigator):
        backend.on("GET", "/users/education", status=401)
        backend.on("GET", "/users/experience", status=401)
        backend.on("GET", "/application", status=401)
        sign_in(context)

        await asyncio.gather(
            context.education.fetch_all(),
            context.experience.fetch_all(),
            context.applications.fetch_all(),
        )

        assert navigator.history == ["/auth/login"]

    @pytest.mark.asyncio
    async def test_next_session_loss_redirects_again(self, context, backend, navigator):
        backend.on("GET", "/users/education", status=401)
        sign_in(context)
        await context.education.fetch_all()

        sign_in(context)
        await context.education.fetch_all()

        assert navigator.history == ["/auth/login", "/auth/login"]

    def test_visit_protected_route_without_session(self, context, navigator):
        context.init()

        decision = context.visit("/profile")

        assert decision.is_redirect
        assert navigator.current == "/auth/login?callbackUrl=%2Fprofile"


class TestSwipeDeck:
    @pytest.mark.asyncio
    async def test_right_swipe_saves_through_backend(self, context, backend):
        backend.on("POST", "/jobs/save/j1", json={"message": "Job saved"})
        sign_in(context)
        deck = context.swipe_deck([{"_id": "j1", "title": "Backend Intern"}])

        assert await deck.drag_end(80) == "right"
        assert len(backend.calls("POST", "/jobs/save/j1")) == 1
        assert deck.favorites[0]["_id"] == "j1"
