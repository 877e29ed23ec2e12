"""Storage backends: the local key-value store and remote object storage."""

from .kv import InMemoryStore, JsonFileStore, KeyValueStore
from .objects import ObjectStorage, S3ObjectStorage, StorageError

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "ObjectStorage",
    "S3ObjectStorage",
    "StorageError",
]
