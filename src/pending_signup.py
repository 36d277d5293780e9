"""Staging area for payloads of users who authenticated before their account existed."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import config
from plugin_store import PluginStore
from utils import mask_email, normalize_email

logger = config.get_logger(service="pending_signup")

PENDING_KEY_PREFIX = "pending_"


def pending_key(email: object) -> Optional[str]:
    normalized = normalize_email(email)
    if normalized is None:
        return None
    return f"{PENDING_KEY_PREFIX}{normalized}"


class PendingSignupCache:
    """One pending payload per normalized email. A later `stage` overwrites."""

    def __init__(self, store: PluginStore, namespace: str = config.DEFAULT_PLUGIN_STORE_NAMESPACE) -> None:
        self._store = store
        self._namespace = namespace

    def stage(self, email: str, payload: Mapping[str, Any]) -> None:
        key = pending_key(email)
        if key is None:
            raise ValueError("Cannot stage a pending signup without an email")
        self._store.set(self._namespace, key, dict(payload))
        logger.debug("Staged pending signup payload", extra={"email": mask_email(key[len(PENDING_KEY_PREFIX) :])})

    def resolve(self, email: Optional[str]) -> Optional[dict]:
        key = pending_key(email)
        if key is None:
            return None
        payload = self._store.get(self._namespace, key)
        return payload if isinstance(payload, dict) else None

    def clear(self, email: Optional[str]) -> None:
        key = pending_key(email)
        if key is None:
            return
        self._store.remove(self._namespace, key)
