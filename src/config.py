import os
import re
from typing import Optional

from aws_lambda_powertools import Logger
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

import entities

DEFAULT_PLUGIN_STORE_NAMESPACE = "dm_wb_cms_oauth2_group_sync"

NAMESPACE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,127}$")


def get_logger(service: Optional[str] = None, level: Optional[str] = None) -> Logger:
    kwargs = {
        "json_default": entities.json_default,
        "level": level or os.environ.get("LOG_LEVEL", "INFO"),
    }
    if service:
        kwargs["service"] = service
    return Logger(**kwargs)


class Config(BaseSettings):
    model_config = SettingsConfigDict(frozen=True)

    # Gates every hook and the reconciler
    group_sync_enabled: bool = False
    # Gates diagnostic and audit log lines only
    oauth2_debug_auth: bool = False

    insider_group_name: str = "insider"
    non_insider_group_name: str = "non-insider"

    identity_store_id: str

    plugin_store_bucket_name: str
    plugin_store_namespace: str = DEFAULT_PLUGIN_STORE_NAMESPACE

    log_level: str = "INFO"

    @field_validator("insider_group_name", "non_insider_group_name")
    @classmethod
    def group_name_is_not_blank(cls, v: str) -> str:  # noqa: ANN101
        v = v.strip()
        if not v:
            raise ValueError("group name must not be blank")
        return v

    @field_validator("plugin_store_namespace")
    @classmethod
    def namespace_is_valid(cls, v: str) -> str:  # noqa: ANN101
        if not NAMESPACE_PATTERN.match(v):
            raise ValueError(f"Invalid plugin store namespace: {v}")
        return v

    @model_validator(mode="after")
    def group_names_differ(self) -> "Config":  # noqa: ANN101
        if self.insider_group_name == self.non_insider_group_name:
            raise ValueError("insider and non-insider group names must differ")
        return self


_config: Optional[Config] = None


def get_config() -> Config:
    global _config  # noqa: PLW0603
    if _config is None:
        _config = Config()  # type: ignore # noqa: PGH003
    return _config
