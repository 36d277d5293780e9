from typing import Optional

from .model import BaseModel


class SubscriptionEntry(BaseModel):
    """One entry of a subscription list, with its status already coerced to int."""

    status: int = 0


class Subscriptions(BaseModel):
    insider: tuple[SubscriptionEntry, ...] = ()

    @property
    def insider_active(self) -> bool:
        return bool(self.insider) and self.insider[0].status == 1


class WbUser(BaseModel):
    """Typed view of the `wb_user` payload sent by the WB CMS provider."""

    subscriptions: Subscriptions = Subscriptions()
    login_name: Optional[str] = None
