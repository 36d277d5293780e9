from unittest.mock import MagicMock

from entities.auth import User
from entities.aws import SSOGroup


class InMemoryGroupStore:
    """GroupStore keeping memberships in a dict, with optional injected failures."""

    def __init__(self, group_names: tuple[str, ...] = ("insider", "non-insider")) -> None:
        self.groups = {name: SSOGroup(id=f"group-{name}", name=name, identity_store_id="d-1111111111") for name in group_names}
        self.memberships: dict[str, set[str]] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()

    def find_group(self, name: str) -> SSOGroup | None:
        return self.groups.get(name)

    def group_names_for(self, user: User) -> frozenset[str]:
        return frozenset(self.memberships.get(user.id, set()))

    def add(self, group: SSOGroup, user: User) -> None:
        self.calls.append(("add", group.name, user.id))
        if ("add", group.name) in self.fail_on:
            raise RuntimeError(f"store unavailable while adding to {group.name}")
        self.memberships.setdefault(user.id, set()).add(group.name)

    def remove(self, group: SSOGroup, user: User) -> None:
        self.calls.append(("remove", group.name, user.id))
        if ("remove", group.name) in self.fail_on:
            raise RuntimeError(f"store unavailable while removing from {group.name}")
        self.memberships.setdefault(user.id, set()).discard(group.name)


def build_s3_client() -> MagicMock:
    """S3 client mock backed by a dict, enough for PluginStore."""
    objects: dict[tuple[str, str], bytes] = {}
    client = MagicMock()
    client.exceptions = MagicMock()
    client.exceptions.NoSuchKey = type("NoSuchKey", (Exception,), {})
    client.exceptions.NoSuchBucket = type("NoSuchBucket", (Exception,), {})

    def put_object(Bucket: str, Key: str, Body: bytes, **_: object) -> dict:  # noqa: N803
        objects[(Bucket, Key)] = Body
        return {}

    def get_object(Bucket: str, Key: str) -> dict:  # noqa: N803
        if (Bucket, Key) not in objects:
            raise client.exceptions.NoSuchKey()
        body = objects[(Bucket, Key)]
        return {"Body": MagicMock(read=lambda: body)}

    def delete_object(Bucket: str, Key: str) -> dict:  # noqa: N803
        objects.pop((Bucket, Key), None)
        return {}

    client.put_object.side_effect = put_object
    client.get_object.side_effect = get_object
    client.delete_object.side_effect = delete_object
    client.objects = objects
    return client
