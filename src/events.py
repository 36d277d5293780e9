from typing import Any, Literal, Optional, Union

from pydantic import Field, RootModel

from entities.auth import User
from entities.model import BaseModel


class AuthenticatedEvent(BaseModel):
    """Sent by the host once its OAuth2 flow has produced an authentication result.

    `token_params` are the raw parameters of the provider's token response,
    `extra` is the extra data the base flow already collected and `user` is
    the resolved local account, absent during signup.
    """

    action: Literal["after_authenticate"]
    token_params: dict[str, Any] = Field(default_factory=dict)
    extra: Optional[dict[str, Any]] = None
    user: Optional[User] = None


class UserCreatedEvent(BaseModel):
    action: Literal["user_created"]
    user: User


Event = RootModel[
    Union[
        AuthenticatedEvent,
        UserCreatedEvent,
    ]
]
