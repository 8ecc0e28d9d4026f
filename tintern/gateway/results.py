"""Typed outcomes of a gateway call."""

from dataclasses import dataclass
from typing import Any, Union

from tintern.common.errors import ApiError


@dataclass(frozen=True)
class Success:
    """2xx response with its parsed JSON body (None for an empty body)."""
    data: Any
    status: int = 200
    ok = True


@dataclass(frozen=True)
class AuthFailure:
    """401 response. The session has already been cleared."""
    message: str = "User is not authenticated"
    status: int = 401
    ok = False


@dataclass(frozen=True)
class Failure:
    """Any other non-2xx response."""
    error: ApiError
    ok = False

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message


GatewayResult = Union[Success, AuthFailure, Failure]
