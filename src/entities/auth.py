from collections.abc import Mapping
from typing import Any, Optional

from pydantic import Field

from .model import BaseModel


class User(BaseModel):
    """Local account as known to the identity store."""

    id: str
    username: str
    email: Optional[str] = None


class AuthResult(BaseModel):
    """Outcome of the host's OAuth2 authentication flow.

    `user` is None while the account record has not been created yet
    (new signup). `extra` carries provider data, including `wb_user` once
    the extractor has enriched it.
    """

    user: Optional[User] = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def wb_user(self) -> Optional[dict]:
        wb_user = self.extra.get("wb_user")
        return dict(wb_user) if isinstance(wb_user, Mapping) else None
