"""Session data: bearer token plus a denormalized user summary."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SessionUser(BaseModel):
    """
    Cached user summary.

    Display only: authorization is always decided by the backend from the
    token, never from these fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", validation_alias=AliasChoices("id", "Id", "_id", "userId"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "userName"))
    email: str = Field(default="", validation_alias=AliasChoices("email", "userEmail"))
    phone: Optional[str] = Field(default=None, validation_alias=AliasChoices("phone", "userPhone"))
    has_cv: bool = Field(default=False, alias="hasCV", validation_alias=AliasChoices("hasCV", "has_cv"))
    profile_picture_url: Optional[str] = None

    def to_storage(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def merged(self, updates: Dict[str, Any]) -> "SessionUser":
        """Overlay backend-echoed fields, keeping the current id."""
        data = self.model_dump(by_alias=True)
        data.update({k: v for k, v in updates.items() if v is not None})
        data["id"] = self.id or str(data.get("id") or "")
        return SessionUser.model_validate(data)


@dataclass(frozen=True)
class Session:
    """Snapshot of the persisted session."""
    token: Optional[str] = None
    user: Optional[SessionUser] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


EMPTY_SESSION = Session()
