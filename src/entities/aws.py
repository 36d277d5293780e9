from typing import Optional

from .model import BaseModel


class SSOGroup(BaseModel):
    name: str
    id: str
    description: Optional[str] = None
    identity_store_id: str


class GroupMembership(BaseModel):
    user_principal_id: str
    group_id: str
    group_name: str
    identity_store_id: str
    membership_id: str
