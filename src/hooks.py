"""Lifecycle hooks registered with the host identity framework.

**Feature: wb-cms-oauth2-group-sync**

`after_authenticate` runs when the OAuth2 flow completes. Existing users
are synced right away; for a signup in progress the payload is staged by
email. `on_user_created` picks the staged payload up once the account
record is committed.

Both hooks are no-ops while the feature is disabled, and neither lets a
failure escape into the host's login or signup flow.
"""

from __future__ import annotations

from typing import Protocol

import config
from entities.auth import AuthResult, User
from errors import handle_errors
from group_sync import GroupSyncService, GroupSyncSettings
from pending_signup import PendingSignupCache
from subscription import lookup
from utils import mask_email, normalize_email

logger = config.get_logger(service="hooks")


class PostAuthenticateHook(Protocol):
    def after_authenticate(self, result: AuthResult) -> AuthResult:
        ...


class UserCreatedHook(Protocol):
    def on_user_created(self, user: User) -> None:
        ...


class GroupSyncLifecycle(PostAuthenticateHook, UserCreatedHook):
    def __init__(
        self,
        settings: GroupSyncSettings,
        group_sync: GroupSyncService,
        pending_cache: PendingSignupCache,
    ) -> None:
        self._settings = settings
        self._group_sync = group_sync
        self._pending_cache = pending_cache

    def _log_info(self, message: str, **extra: object) -> None:
        if self._settings.verbose:
            logger.info(f"[WB CMS] {message}", extra=extra)

    def after_authenticate(self, result: AuthResult) -> AuthResult:
        if self._settings.enabled:
            self._sync_after_authenticate(result)
        return result

    @handle_errors
    def _sync_after_authenticate(self, result: AuthResult) -> None:
        wb_user = result.wb_user
        if wb_user is None:
            return

        user = result.user
        if user is not None:
            self._group_sync.sync_user(user, wb_user)
            self._log_info(
                f"Synced existing user {user.username} ({mask_email(user.email or '')}) via OAuth2",
                user_id=user.id,
            )
            return

        email = normalize_email(lookup(wb_user, "loginName"))
        if email is None:
            return
        self._pending_cache.stage(email, wb_user)
        self._log_info(f"Cached wb_user for pending signup (email={mask_email(email)})")

    @handle_errors
    def on_user_created(self, user: User) -> None:
        if not self._settings.enabled:
            return

        email = normalize_email(user.email)
        if email is None:
            return
        wb_user = self._pending_cache.resolve(email)
        if wb_user is None:
            return

        try:
            self._group_sync.sync_user(user, wb_user)
        finally:
            # Single use: no retry is attempted for a failed sync
            self._pending_cache.clear(email)

        self._log_info(
            f"Applied cached wb_user after signup for {user.username} ({mask_email(email)})",
            user_id=user.id,
        )
