"""Lambda entry point invoked by the host identity framework.

Service objects are built once per container and reused across
invocations.
"""

from typing import Any

import boto3
from pydantic import ValidationError

import config
from entities.auth import AuthResult
from errors import ConfigurationError
from events import AuthenticatedEvent, Event, UserCreatedEvent
from extractor import OAuth2ExtraEnricher
from group_sync import GroupSyncService, GroupSyncSettings
from hooks import GroupSyncLifecycle
from identity_store import IdentityStoreGroupStore
from pending_signup import PendingSignupCache
from plugin_store import PluginStore

logger = config.get_logger(service="handler")

try:
    cfg = config.get_config()
except ValidationError as e:
    raise ConfigurationError("Invalid group sync configuration") from e

session = boto3.Session()
identity_store_client = session.client("identitystore")
s3_client = session.client("s3")

settings = GroupSyncSettings.from_config(cfg)
enricher = OAuth2ExtraEnricher(verbose=settings.verbose)
group_sync = GroupSyncService(
    group_store=IdentityStoreGroupStore(identity_store_client, cfg.identity_store_id),
    settings=settings,
)
lifecycle = GroupSyncLifecycle(
    settings=settings,
    group_sync=group_sync,
    pending_cache=PendingSignupCache(PluginStore(s3_client, cfg.plugin_store_bucket_name), cfg.plugin_store_namespace),
)


def handle_authenticated(event: AuthenticatedEvent) -> dict[str, Any]:
    extra = enricher.extra(event.extra, event.token_params)
    result = lifecycle.after_authenticate(AuthResult(user=event.user, extra=extra))
    return result.dict()


def handle_user_created(event: UserCreatedEvent) -> dict[str, Any]:
    lifecycle.on_user_created(event.user)
    return {"status": "ok"}


def lambda_handler(event: dict, __) -> dict[str, Any]:  # type: ignore # noqa: ANN001, PGH003
    try:
        parsed_event = Event.model_validate(event).root
    except ValidationError as e:
        logger.warning("Got unexpected event:", extra={"event": event, "exception": e})
        raise e

    match parsed_event:
        case AuthenticatedEvent():
            logger.info("Handling AuthenticatedEvent", extra={"has_user": parsed_event.user is not None})
            return handle_authenticated(parsed_event)

        case UserCreatedEvent():
            logger.info("Handling UserCreatedEvent", extra={"user_id": parsed_event.user.id})
            return handle_user_created(parsed_event)
