"""Group membership persistence in AWS IAM Identity Store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import config
import entities
from entities.auth import User

if TYPE_CHECKING:
    from mypy_boto3_identitystore import IdentityStoreClient
    from mypy_boto3_identitystore import type_defs as idc_type_defs

logger = config.get_logger(service="identity_store")


def get_group_by_name(identity_store_id: str, group_name: str, identity_store_client: IdentityStoreClient) -> entities.aws.SSOGroup | None:
    try:
        response = identity_store_client.get_group_id(
            IdentityStoreId=identity_store_id,
            AlternateIdentifier={"UniqueAttribute": {"AttributePath": "displayName", "AttributeValue": group_name}},
        )
    except identity_store_client.exceptions.ResourceNotFoundException:
        logger.info("Group not found", extra={"group_name": group_name})
        return None
    return entities.aws.SSOGroup(
        id=response["GroupId"],
        identity_store_id=response["IdentityStoreId"],
        name=group_name,
    )


def describe_group(identity_store_id: str, group_id: str, identity_store_client: IdentityStoreClient) -> entities.aws.SSOGroup:
    group = identity_store_client.describe_group(IdentityStoreId=identity_store_id, GroupId=group_id)
    logger.debug("Group described", extra={"group": group})
    return entities.aws.SSOGroup(
        id=group["GroupId"],
        identity_store_id=group["IdentityStoreId"],
        name=group.get("DisplayName") or group["GroupId"],
        description=group.get("Description"),
    )


def list_user_group_memberships(
    identity_store_id: str, user_id: str, identity_store_client: IdentityStoreClient
) -> list[entities.aws.GroupMembership]:
    memberships = []
    group_names: dict[str, str] = {}
    paginator = identity_store_client.get_paginator("list_group_memberships_for_member")
    for page in paginator.paginate(IdentityStoreId=identity_store_id, MemberId={"UserId": user_id}):
        for membership in page["GroupMemberships"]:
            group_id = membership.get("GroupId")
            membership_id = membership.get("MembershipId")
            if not group_id or not membership_id:
                continue
            if group_id not in group_names:
                group_names[group_id] = describe_group(identity_store_id, group_id, identity_store_client).name
            memberships.append(
                entities.aws.GroupMembership(
                    user_principal_id=user_id,
                    group_id=group_id,
                    group_name=group_names[group_id],
                    identity_store_id=identity_store_id,
                    membership_id=membership_id,
                )
            )
    return memberships


def get_membership_id(identity_store_id: str, group_id: str, user_id: str, identity_store_client: IdentityStoreClient) -> str | None:
    try:
        response = identity_store_client.get_group_membership_id(
            IdentityStoreId=identity_store_id,
            GroupId=group_id,
            MemberId={"UserId": user_id},
        )
    except identity_store_client.exceptions.ResourceNotFoundException:
        return None
    return response["MembershipId"]


def add_user_to_group(
    identity_store_id: str, group_id: str, user_id: str, identity_store_client: IdentityStoreClient
) -> idc_type_defs.CreateGroupMembershipResponseTypeDef:
    response = identity_store_client.create_group_membership(
        IdentityStoreId=identity_store_id,
        GroupId=group_id,
        MemberId={"UserId": user_id},
    )
    logger.info("User added to the group", extra={"group_id": group_id, "user_id": user_id})
    return response


def remove_user_from_group(identity_store_id: str, membership_id: str, identity_store_client: IdentityStoreClient) -> None:
    identity_store_client.delete_group_membership(IdentityStoreId=identity_store_id, MembershipId=membership_id)
    logger.info("User removed from the group", extra={"membership_id": membership_id})


class IdentityStoreGroupStore:
    """`group_sync.GroupStore` backed by Identity Store.

    `User.id` is the Identity Store user principal id.
    """

    def __init__(self, identity_store_client: IdentityStoreClient, identity_store_id: str) -> None:
        self._client = identity_store_client
        self._identity_store_id = identity_store_id

    def find_group(self, name: str) -> Optional[entities.aws.SSOGroup]:
        return get_group_by_name(self._identity_store_id, name, self._client)

    def group_names_for(self, user: User) -> frozenset[str]:
        memberships = list_user_group_memberships(self._identity_store_id, user.id, self._client)
        return frozenset(m.group_name for m in memberships)

    def add(self, group: entities.aws.SSOGroup, user: User) -> None:
        try:
            add_user_to_group(self._identity_store_id, group.id, user.id, self._client)
        except self._client.exceptions.ConflictException:
            # Membership was created concurrently, the desired state holds
            logger.info("User already in the group", extra={"group_id": group.id, "user_id": user.id})

    def remove(self, group: entities.aws.SSOGroup, user: User) -> None:
        membership_id = get_membership_id(self._identity_store_id, group.id, user.id, self._client)
        if membership_id is None:
            logger.info("User not in the group, nothing to remove", extra={"group_id": group.id, "user_id": user.id})
            return
        remove_user_from_group(self._identity_store_id, membership_id, self._client)
