"""Extraction of the WB CMS user payload from an OAuth2 token response.

The provider attaches its user record, subscriptions included, as a `user`
parameter of the token response. The host's OAuth2 strategy asks every
registered `ExtraDataEnricher` for the `extra` data it stores on the
authentication result.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Optional, Protocol

from pydantic import BaseModel as PydanticBaseModel

from config import get_logger
from subscription import lookup

logger = get_logger(service="extractor")

WB_USER_KEY = "wb_user"
TOKEN_USER_PARAM = "user"


class ExtraDataEnricher(Protocol):
    def extra(self, base_extra: Optional[Mapping[str, Any]], token_params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        ...


def _to_plain_dict(raw: object) -> Optional[dict]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, PydanticBaseModel):
        return raw.model_dump()
    if dataclasses.is_dataclass(raw) and not isinstance(raw, type):
        return dataclasses.asdict(raw)
    if isinstance(raw, (str, bytes, bytearray)):
        return None
    try:
        return dict(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def extract_wb_user(token_params: Optional[Mapping[str, Any]]) -> Optional[dict]:
    """Return the provider's user record as a plain dict, or None if absent or unusable."""
    if not isinstance(token_params, Mapping):
        return None
    raw_user = lookup(token_params, TOKEN_USER_PARAM)
    if raw_user is None:
        return None
    return _to_plain_dict(raw_user)


class OAuth2ExtraEnricher(ExtraDataEnricher):
    """Adds `wb_user` to the extra data produced by the base OAuth2 flow."""

    def __init__(self, verbose: bool = False) -> None:
        self._verbose = verbose

    def extra(self, base_extra: Optional[Mapping[str, Any]], token_params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        data = dict(base_extra or {})
        wb_user = extract_wb_user(token_params)
        if wb_user is not None:
            data[WB_USER_KEY] = wb_user

        if self._verbose:
            if wb_user is not None:
                logger.info("[WB CMS] extra: wb_user extracted")
            else:
                logger.info("[WB CMS] extra: wb_user missing in token params")

        return data
