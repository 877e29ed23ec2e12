"""Object storage for attachment uploads."""

import logging
from abc import ABC, abstractmethod

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """An object storage call failed (permission, network, quota, ...)."""


class ObjectStorage(ABC):
    """The four object storage operations attachments depend on."""

    @abstractmethod
    def list_buckets(self) -> list[str]:
        pass

    @abstractmethod
    def create_bucket(self, name: str, public: bool = False) -> None:
        pass

    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        pass

    @abstractmethod
    def create_signed_url(self, bucket: str, path: str, ttl_seconds: int) -> str:
        pass


class S3ObjectStorage(ObjectStorage):
    """ObjectStorage over S3 (or any S3-compatible endpoint)."""

    def __init__(self, s3_client=None, region_name: str | None = None, endpoint_url: str | None = None):
        """Initialize S3 storage.

        Args:
            s3_client: Optional S3 client (for testing)
            region_name: AWS region for buckets created here
            endpoint_url: S3-compatible endpoint override
        """
        self._client = s3_client
        self.region_name = region_name
        self.endpoint_url = endpoint_url

    @property
    def s3_client(self):
        # created on first use
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region_name, endpoint_url=self.endpoint_url)
        return self._client

    def list_buckets(self) -> list[str]:
        try:
            response = self.s3_client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Could not list buckets: {e}") from e
        return [b["Name"] for b in response.get("Buckets", [])]

    def create_bucket(self, name: str, public: bool = False) -> None:
        params = {"Bucket": name}
        if self.region_name and self.region_name != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region_name}
        try:
            self.s3_client.create_bucket(**params)
            if not public:
                self.s3_client.put_public_access_block(
                    Bucket=name,
                    PublicAccessBlockConfiguration={
                        "BlockPublicAcls": True,
                        "IgnorePublicAcls": True,
                        "BlockPublicPolicy": True,
                        "RestrictPublicBuckets": True,
                    },
                )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Could not create bucket {name}: {e}") from e
        logger.info(f"Created {'public' if public else 'private'} bucket {name}")

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        try:
            self.s3_client.put_object(Bucket=bucket, Key=path, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Upload of s3://{bucket}/{path} failed: {e}") from e
        logger.info(f"Stored attachment at s3://{bucket}/{path}")

    def create_signed_url(self, bucket: str, path: str, ttl_seconds: int) -> str:
        try:
            url = self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Could not sign s3://{bucket}/{path}: {e}") from e
        logger.info(f"Generated presigned URL for {path}, expires in {ttl_seconds}s")
        return url
