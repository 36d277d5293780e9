"""Namespaced durable key/value store kept in S3.

Each value is a JSON document at `<namespace>/<key>.json` in one bucket.
The key is percent-encoded, so any string, an email with `/` included,
maps to a single object name. Unlike a cache, a failed read or write is not hidden: S3 errors propagate
to the caller. Only a missing object is reported as None.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

import config
from config import NAMESPACE_PATTERN

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = config.get_logger(service="plugin_store")

# Maximum size for a serialized value (in bytes)
MAX_VALUE_SIZE = 400 * 1024

# Maximum key length, leaves room for the namespace within S3's 1024 byte limit
MAX_KEY_LENGTH = 512

# Pattern for validating S3 bucket names
BUCKET_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")

# Characters kept as is in object names, everything else is percent-encoded
_KEY_SAFE_CHARS = "@+._-"


def _validate_bucket_name(bucket_name: str) -> str:
    """Validate S3 bucket name to prevent injection attacks.

    Raises:
        ValueError: If the bucket name format is invalid
    """
    if not isinstance(bucket_name, str):
        raise ValueError(f"Bucket name must be a string, got {type(bucket_name)}")

    if not BUCKET_NAME_PATTERN.match(bucket_name):
        raise ValueError(f"Invalid S3 bucket name format: {bucket_name}")

    return bucket_name


def _validate_namespace(namespace: str) -> str:
    if not isinstance(namespace, str) or not NAMESPACE_PATTERN.match(namespace):
        raise ValueError(f"Invalid plugin store namespace: {namespace!r}")
    return namespace


def _encode_key(key: str) -> str:
    """Validate a store key and percent-encode it into one object name segment.

    Raises:
        ValueError: If the key is empty, reserved or too long once encoded
    """
    if not isinstance(key, str) or not key:
        raise ValueError(f"Plugin store key must be a non-empty string, got {key!r}")
    if key in (".", ".."):
        raise ValueError(f"Plugin store key is reserved: {key!r}")
    encoded = quote(key, safe=_KEY_SAFE_CHARS)
    if len(encoded) > MAX_KEY_LENGTH:
        raise ValueError("Plugin store key exceeds maximum length")
    return encoded


def _serialize(value: Any) -> bytes:  # noqa: ANN401
    """Serialize a value to JSON bytes.

    Raises:
        ValueError: If the value is not JSON serializable or too large
    """
    try:
        serialized = json.dumps(value).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Value contains non-serializable content: {e}") from e

    if len(serialized) > MAX_VALUE_SIZE:
        raise ValueError(f"Value size ({len(serialized)} bytes) exceeds maximum allowed size ({MAX_VALUE_SIZE} bytes)")

    return serialized


class PluginStore:
    def __init__(self, s3_client: S3Client, bucket_name: str) -> None:
        self._s3 = s3_client
        self._bucket_name = _validate_bucket_name(bucket_name)

    @staticmethod
    def object_key(namespace: str, key: str) -> str:
        return f"{_validate_namespace(namespace)}/{_encode_key(key)}.json"

    def set(self, namespace: str, key: str, value: Any) -> None:  # noqa: ANN401
        object_key = self.object_key(namespace, key)
        body = _serialize(value)
        self._s3.put_object(
            Bucket=self._bucket_name,
            Key=object_key,
            Body=body,
            ContentType="application/json",
            ServerSideEncryption="AES256",
        )
        logger.debug("Stored plugin store value", extra={"namespace": namespace, "size": len(body)})

    def get(self, namespace: str, key: str) -> Optional[Any]:
        object_key = self.object_key(namespace, key)
        try:
            response = self._s3.get_object(Bucket=self._bucket_name, Key=object_key)
        except self._s3.exceptions.NoSuchKey:
            logger.debug("Plugin store miss", extra={"namespace": namespace})
            return None
        return json.loads(response["Body"].read().decode("utf-8"))

    def remove(self, namespace: str, key: str) -> None:
        object_key = self.object_key(namespace, key)
        self._s3.delete_object(Bucket=self._bucket_name, Key=object_key)
        logger.debug("Removed plugin store value", extra={"namespace": namespace})
