"""
Runtime settings, read from the environment.
"""

import os
from dataclasses import dataclass

from .attachments import DEFAULT_BUCKET, SIGNED_URL_TTL, SMALL_FILE_LIMIT

DEFAULT_STORE_PATH = "~/.offer_engine/store.json"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    host: str = "127.0.0.1"
    port: int = 8080
    store_path: str = DEFAULT_STORE_PATH  # empty: in-memory store
    object_storage: str = "s3"  # "s3" or "none"
    bucket: str = DEFAULT_BUCKET
    user_id: str = "anonymous"
    s3_endpoint_url: str | None = None
    aws_region: str | None = None
    small_file_limit: int = SMALL_FILE_LIMIT
    signed_url_ttl: int = SIGNED_URL_TTL
    upload_large_only: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        object_storage = os.environ.get("OFFER_OBJECT_STORAGE", "s3").strip().lower()
        if object_storage not in ("s3", "none"):
            raise ValueError(f"Invalid OFFER_OBJECT_STORAGE: {object_storage}. Must be 's3' or 'none'")
        return cls(
            environment=os.environ.get("OFFER_ENGINE_ENV", "dev"),
            host=os.environ.get("HOST", "127.0.0.1"),
            port=_env_int("PORT", 8080),
            store_path=os.environ.get("OFFER_STORE_PATH", DEFAULT_STORE_PATH),
            object_storage=object_storage,
            bucket=os.environ.get("OFFER_BUCKET", DEFAULT_BUCKET),
            user_id=os.environ.get("OFFER_USER_ID", "anonymous"),
            s3_endpoint_url=os.environ.get("OFFER_S3_ENDPOINT_URL") or None,
            aws_region=os.environ.get("AWS_REGION") or None,
            small_file_limit=_env_int("OFFER_SMALL_FILE_LIMIT", SMALL_FILE_LIMIT),
            signed_url_ttl=_env_int("OFFER_SIGNED_URL_TTL", SIGNED_URL_TTL),
            upload_large_only=_env_bool("OFFER_UPLOAD_LARGE_ONLY", False),
        )
