"""
Authenticated Request Gateway.

The single chokepoint for backend calls:
- injects `Authorization: Bearer <token>` read from the Session Store on
  every call (never cached across calls, so a logout mid-flight is seen by
  the next call)
- sends JSON unless the payload is multipart, in which case the transport
  picks the content type and boundary
- maps responses to typed results; a 401 clears the session and notifies
  the registered auth-failure handler instead of raising

Transport failures raise TransportError. Idempotent methods are retried
with exponential backoff first; POST is never retried.
"""

from typing import Any, Callable, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from tintern.common.config import ClientSettings, get_settings
from tintern.common.errors import ApiError, AuthenticationError, TransportError
from tintern.common.logger import get_logger
from tintern.gateway.results import AuthFailure, Failure, GatewayResult, Success
from tintern.session.store import SessionStore

logger = get_logger(__name__, scope="gateway")

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS"})

AuthFailureHandler = Callable[[AuthFailure], None]


def _parse_json(response: httpx.Response) -> Any:
    """Parsed JSON body, or None if the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


class ApiGateway:
    """Stateless request helper bound to one backend host."""

    def __init__(
        self,
        session_store: SessionStore,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        auth_failure_handler: Optional[AuthFailureHandler] = None,
    ):
        self.session_store = session_store
        self.settings = settings or get_settings()
        self.auth_failure_handler = auth_failure_handler
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_root,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_headers(
        self, multipart: bool, extra: Optional[Dict[str, str]], authenticated: bool = True
    ) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if not multipart:
            headers["Content-Type"] = "application/json"
        token = self.session_store.token if authenticated else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        attempts = self.settings.transport_retry_attempts if method in IDEMPOTENT_METHODS else 1
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=0.5, max=self.settings.transport_retry_max_wait),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.info(
                            f"Retrying {method} {endpoint} "
                            f"(attempt {attempt.retry_state.attempt_number}/{attempts})"
                        )
                    return await self._client.request(method, endpoint, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{method} {endpoint} transport failure: {type(e).__name__}: {e}")
            raise TransportError(method, endpoint, e) from e

    async def call(
        self,
        endpoint: str,
        method: Optional[str] = None,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> GatewayResult:
        """
        Send one request and classify the answer.

        Args:
            endpoint: Path relative to the API root (e.g. "/users/education")
            method: HTTP method; defaults to POST when a body or files are
                given, GET otherwise
            body: JSON-serializable request body
            headers: Extra headers, applied last
            files: Multipart files (httpx format); suppresses the JSON
                content type
            form: Extra multipart form fields sent with `files`
            params: Query string parameters
            authenticated: False for credential endpoints (login, signup):
                no bearer header, and a 401 is an ordinary Failure that
                leaves the session alone

        Returns:
            Success, AuthFailure or Failure

        Raises:
            TransportError: no response was received
        """
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        multipart = files is not None
        method = (method or ("POST" if body is not None or multipart else "GET")).upper()

        kwargs: Dict[str, Any] = {"headers": self._build_headers(multipart, headers, authenticated)}
        if params:
            kwargs["params"] = params
        if multipart:
            kwargs["files"] = files
            if form:
                kwargs["data"] = form
        elif body is not None:
            kwargs["json"] = body

        logger.debug(f"{method} {endpoint}")
        response = await self._send(method, endpoint, **kwargs)
        return self._classify(method, endpoint, response, authenticated)

    def _classify(
        self, method: str, endpoint: str, response: httpx.Response, authenticated: bool = True
    ) -> GatewayResult:
        status = response.status_code

        if status == 401 and authenticated:
            body = _parse_json(response)
            message = "User is not authenticated"
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
            logger.warning(f"{method} {endpoint} -> 401, clearing session")
            self.session_store.clear()
            result = AuthFailure(message=message)
            if self.auth_failure_handler is not None:
                self.auth_failure_handler(result)
            return result

        if not response.is_success:
            error = ApiError.from_response(status, _parse_json(response))
            logger.warning(f"{method} {endpoint} -> {status}: {error.message}")
            return Failure(error)

        if status == 204 or not response.content:
            return Success(data=None, status=status)

        data = _parse_json(response)
        if data is None:
            logger.warning(f"{method} {endpoint} -> {status} with a non-JSON body")
            return Failure(ApiError(status, "Invalid response from server"))
        return Success(data=data, status=status)

    async def request(self, endpoint: str, **kwargs) -> Any:
        """
        Like call(), but unwraps the result.

        Returns the parsed body on success; raises AuthenticationError on a
        401 (after the session was cleared) and ApiError otherwise.
        """
        result = await self.call(endpoint, **kwargs)
        if isinstance(result, Success):
            return result.data
        if isinstance(result, AuthFailure):
            raise AuthenticationError(result.message)
        raise result.error
