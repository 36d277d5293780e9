import os
from unittest.mock import MagicMock

import boto3
import pytest

from entities.auth import User
from group_sync import GroupSyncService, GroupSyncSettings
from hooks import GroupSyncLifecycle
from pending_signup import PendingSignupCache
from plugin_store import PluginStore

from .utils import InMemoryGroupStore, build_s3_client


def pytest_sessionstart(session):  # noqa: ANN201, ARG001, ANN001
    mock_env = {
        "group_sync_enabled": "true",
        "oauth2_debug_auth": "true",
        "identity_store_id": "d-1111111111",
        "plugin_store_bucket_name": "test-plugin-store",
        "plugin_store_namespace": "dm_wb_cms_oauth2_group_sync",
        "log_level": "DEBUG",
        "AWS_DEFAULT_REGION": "us-east-1",
    }
    os.environ |= mock_env

    boto3.setup_default_session(region_name="us-east-1")



@pytest.fixture
def group_store() -> InMemoryGroupStore:
    return InMemoryGroupStore()


@pytest.fixture
def sync_settings() -> GroupSyncSettings:
    return GroupSyncSettings(enabled=True, verbose=True)


@pytest.fixture
def disabled_settings() -> GroupSyncSettings:
    return GroupSyncSettings(enabled=False, verbose=True)


@pytest.fixture
def group_sync(group_store, sync_settings) -> GroupSyncService:
    return GroupSyncService(group_store=group_store, settings=sync_settings)


@pytest.fixture
def s3_client() -> MagicMock:
    return build_s3_client()


@pytest.fixture
def plugin_store(s3_client) -> PluginStore:
    return PluginStore(s3_client, "test-plugin-store")


@pytest.fixture
def pending_cache(plugin_store) -> PendingSignupCache:
    return PendingSignupCache(plugin_store)


@pytest.fixture
def lifecycle(sync_settings, group_sync, pending_cache) -> GroupSyncLifecycle:
    return GroupSyncLifecycle(settings=sync_settings, group_sync=group_sync, pending_cache=pending_cache)


@pytest.fixture
def user() -> User:
    return User(id="user-1", username="jdoe", email="John.Doe@Example.com")


@pytest.fixture
def active_wb_user() -> dict:
    return {
        "loginName": " John.Doe@Example.com ",
        "subscriptions": {"insider": [{"status": 1, "plan": "annual"}]},
    }


@pytest.fixture
def inactive_wb_user() -> dict:
    return {
        "loginName": "john.doe@example.com",
        "subscriptions": {"insider": [{"status": "0"}]},
    }
