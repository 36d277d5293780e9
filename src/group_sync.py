"""Subscription-driven reconciliation of insider / non-insider membership.

**Feature: wb-cms-oauth2-group-sync**

A user ends a sync in exactly one of the two groups: `insider` when the
first insider subscription has status 1, `non-insider` otherwise. Only the
missing add and the stale remove are issued, so repeating a sync with the
same payload changes nothing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol

import config
from entities.auth import User
from entities.aws import SSOGroup
from errors import MembershipUpdateError
from subscription import parse_wb_user

logger = config.get_logger(service="group_sync")


class GroupStore(Protocol):
    def find_group(self, name: str) -> Optional[SSOGroup]:
        ...

    def group_names_for(self, user: User) -> frozenset[str]:
        ...

    def add(self, group: SSOGroup, user: User) -> None:
        ...

    def remove(self, group: SSOGroup, user: User) -> None:
        ...


@dataclass(frozen=True)
class GroupSyncSettings:
    """Runtime switches for group sync."""

    enabled: bool
    verbose: bool = False
    insider_group_name: str = "insider"
    non_insider_group_name: str = "non-insider"

    @staticmethod
    def from_config(cfg: config.Config) -> "GroupSyncSettings":
        return GroupSyncSettings(
            enabled=cfg.group_sync_enabled,
            verbose=cfg.oauth2_debug_auth,
            insider_group_name=cfg.insider_group_name,
            non_insider_group_name=cfg.non_insider_group_name,
        )


@dataclass(frozen=True)
class MembershipChange:
    action: Literal["add", "remove"]
    group: SSOGroup

    def inverse(self) -> "MembershipChange":
        return MembershipChange(action="remove" if self.action == "add" else "add", group=self.group)


@dataclass(frozen=True)
class GroupSyncResult:
    """Audit record of one sync."""

    user_id: str
    username: str
    active: bool
    before: frozenset[str]
    after: frozenset[str]
    changes: tuple[MembershipChange, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def plan_membership_changes(
    active: bool,
    current_group_names: frozenset[str],
    insider: SSOGroup,
    non_insider: SSOGroup,
) -> list[MembershipChange]:
    """Compute the minimal changes that move a user into the target group.

    The add comes before the remove so that a failure between the two never
    leaves the user outside both groups.
    """
    target, other = (insider, non_insider) if active else (non_insider, insider)
    changes: list[MembershipChange] = []
    if target.name not in current_group_names:
        changes.append(MembershipChange(action="add", group=target))
    if other.name in current_group_names:
        changes.append(MembershipChange(action="remove", group=other))
    return changes


def _format_groups(names: frozenset[str]) -> str:
    return ", ".join(sorted(names)) or "(none)"


class GroupSyncService:
    """Applies the subscription decision to a user's group memberships.

    Stateless apart from its collaborators, so one instance is built per
    process and shared by the lifecycle hooks.
    """

    def __init__(self, group_store: GroupStore, settings: GroupSyncSettings) -> None:
        self._store = group_store
        self._settings = settings

    def sync_user(self, user: Optional[User], wb_user: Optional[Mapping[str, Any]]) -> Optional[GroupSyncResult]:
        if user is None or wb_user is None:
            return None
        if not self._settings.enabled:
            return None

        insider, non_insider = self._fetch_groups()
        if insider is None or non_insider is None:
            self._log_groups_missing(insider, non_insider)
            return None

        active = parse_wb_user(wb_user).subscriptions.insider_active
        before = self._store.group_names_for(user)

        changes = plan_membership_changes(active, before, insider, non_insider)
        self._apply(user, changes)

        after = self._store.group_names_for(user) if changes else before
        result = GroupSyncResult(
            user_id=user.id,
            username=user.username,
            active=active,
            before=before,
            after=after,
            changes=tuple(changes),
        )
        self._log_sync_result(result)
        return result

    def _fetch_groups(self) -> tuple[Optional[SSOGroup], Optional[SSOGroup]]:
        return (
            self._store.find_group(self._settings.insider_group_name),
            self._store.find_group(self._settings.non_insider_group_name),
        )

    def _apply_change(self, user: User, change: MembershipChange) -> None:
        if change.action == "add":
            self._store.add(change.group, user)
        else:
            self._store.remove(change.group, user)

    def _apply(self, user: User, changes: list[MembershipChange]) -> None:
        applied: list[MembershipChange] = []
        for change in changes:
            try:
                self._apply_change(user, change)
            except Exception as e:
                logger.exception(
                    f"Failed to {change.action} user {user.username} {'to' if change.action == 'add' else 'from'} group {change.group.name}",
                    extra={"user_id": user.id, "group_id": change.group.id},
                )
                self._revert(user, applied)
                raise MembershipUpdateError(
                    f"Group sync for user {user.username} failed on {change.action} {change.group.name}"
                ) from e
            applied.append(change)

    def _revert(self, user: User, applied: list[MembershipChange]) -> None:
        for change in reversed(applied):
            undo = change.inverse()
            try:
                self._apply_change(user, undo)
                logger.info(
                    f"Reverted {change.action} of group {change.group.name} for user {user.username}",
                    extra={"user_id": user.id, "group_id": change.group.id},
                )
            except Exception:
                logger.exception(
                    f"Failed to revert {change.action} of group {change.group.name} for user {user.username}",
                    extra={"user_id": user.id, "group_id": change.group.id},
                )

    def _log_groups_missing(self, insider: Optional[SSOGroup], non_insider: Optional[SSOGroup]) -> None:
        if not self._settings.verbose:
            return
        logger.warning(
            "[WB CMS] Group Sync: required groups missing. No changes applied. Create both groups and retry.",
            extra={
                "insider_group": self._settings.insider_group_name,
                "insider_group_found": insider is not None,
                "non_insider_group": self._settings.non_insider_group_name,
                "non_insider_group_found": non_insider is not None,
            },
        )

    def _log_sync_result(self, result: GroupSyncResult) -> None:
        if not self._settings.verbose:
            return
        status = "ACTIVE (status=1)" if result.active else "INACTIVE/NONE (status!=1 or missing)"
        logger.info(
            f"[WB CMS] Group Sync Applied. User: {result.username} (id={result.user_id}). Subscription: {status}. "
            f"Before: {_format_groups(result.before)}. After: {_format_groups(result.after)}",
            extra={
                "operation": "group_sync",
                "user_id": result.user_id,
                "active": result.active,
                "before": result.before,
                "after": result.after,
                "changes": [f"{c.action}:{c.group.name}" for c in result.changes],
            },
        )
