"""Subscription evaluation for WB CMS payloads.

The provider payload is untrusted and its shape varies between providers
and releases. Everything here degrades to "not active" on malformed input
and never raises.

Expected shape of the subscriptions object::

    {"insider": [{"status": 1, ...}, ...], ...}
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from typing import Any

from entities.subscription import SubscriptionEntry, Subscriptions, WbUser
# Leading digit runs longer than 18 give 0
_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d{1,18})(?!\d)")

_MISSING = object()


def _key_name(key: object) -> object:
    if isinstance(key, enum.Enum):
        return _key_name(key.value)
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="replace")
    return key


def lookup(data: Mapping, key: str, default: Any = None) -> Any:  # noqa: ANN401
    """Read `key` from a loosely keyed mapping.

    The plain string key wins unless it is missing, None or False. Otherwise any other
    spelling of the same key (bytes, str-valued Enum) is tried.
    """
    value = data.get(key, _MISSING)
    if value is not _MISSING and value is not None and value is not False:
        return value
    for candidate, candidate_value in data.items():
        if candidate is key or isinstance(candidate, str) and not isinstance(candidate, enum.Enum):
            continue
        if _key_name(candidate) == key:
            return candidate_value
    return default if value is _MISSING else value


def coerce_status(value: object) -> int:
    """Best-effort integer conversion of a status value.

    >>> coerce_status("1"), coerce_status(" 2x"), coerce_status("abc"), coerce_status(None)
    (1, 2, 0, 0)
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError):
            return 0
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        return int(match.group(1)) if match else 0
    return 0


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def parse_entry(raw: object) -> SubscriptionEntry:
    if not isinstance(raw, Mapping):
        return SubscriptionEntry()
    return SubscriptionEntry(status=coerce_status(lookup(raw, "status")))


def parse_subscriptions(raw: object) -> Subscriptions:
    if not isinstance(raw, Mapping):
        return Subscriptions()
    insider = lookup(raw, "insider")
    if not _is_sequence(insider):
        return Subscriptions()
    return Subscriptions(insider=tuple(parse_entry(entry) for entry in insider))


def parse_wb_user(raw: object) -> WbUser:
    if not isinstance(raw, Mapping):
        return WbUser()
    login_name = lookup(raw, "loginName")
    return WbUser(
        subscriptions=parse_subscriptions(lookup(raw, "subscriptions")),
        login_name=login_name if isinstance(login_name, str) else None,
    )


def subscription_active(subscriptions: object) -> bool:
    """True iff the first `insider` entry has status exactly 1."""
    return parse_subscriptions(subscriptions).insider_active
