"""
Tests for the storage backends.

The boto3 client is a MagicMock; no AWS calls are made.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from offer_engine.storage import JsonFileStore, S3ObjectStorage, StorageError


def client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, operation)


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.list_buckets.return_value = {"Buckets": [{"Name": "offers"}, {"Name": "logs"}]}
    client.generate_presigned_url.return_value = "https://offers.s3.amazonaws.com/u/d/1-a.pdf?X-Amz-Signature=abc"
    return client


@pytest.fixture
def storage(s3_client):
    return S3ObjectStorage(s3_client=s3_client)


class TestS3ObjectStorage:

    def test_list_buckets(self, storage):
        assert storage.list_buckets() == ["offers", "logs"]

    def test_upload(self, storage, s3_client):
        storage.upload("offers", "u/d/1-a.pdf", b"%PDF", "application/pdf")
        s3_client.put_object.assert_called_once_with(
            Bucket="offers", Key="u/d/1-a.pdf", Body=b"%PDF", ContentType="application/pdf"
        )

    def test_signed_url(self, storage, s3_client):
        url = storage.create_signed_url("offers", "u/d/1-a.pdf", 604800)

        assert url.startswith("https://offers.s3.amazonaws.com/")
        s3_client.generate_presigned_url.assert_called_once_with(
            "get_object", Params={"Bucket": "offers", "Key": "u/d/1-a.pdf"}, ExpiresIn=604800
        )

    def test_private_bucket_blocks_public_access(self, storage, s3_client):
        storage.create_bucket("offers")

        s3_client.create_bucket.assert_called_once_with(Bucket="offers")
        s3_client.put_public_access_block.assert_called_once()

    def test_bucket_outside_us_east_1(self, s3_client):
        S3ObjectStorage(s3_client=s3_client, region_name="eu-west-1").create_bucket("offers", public=True)

        s3_client.create_bucket.assert_called_once_with(
            Bucket="offers", CreateBucketConfiguration={"LocationConstraint": "eu-west-1"}
        )
        s3_client.put_public_access_block.assert_not_called()

    def test_client_errors_become_storage_errors(self, storage, s3_client):
        s3_client.put_object.side_effect = client_error("PutObject")
        with pytest.raises(StorageError):
            storage.upload("offers", "p", b"", "text/plain")

        s3_client.list_buckets.side_effect = client_error("ListBuckets")
        with pytest.raises(StorageError):
            storage.list_buckets()

        s3_client.generate_presigned_url.side_effect = client_error("GetObject")
        with pytest.raises(StorageError):
            storage.create_signed_url("offers", "p", 60)


class TestJsonFileStore:
    """Local file store the drafts live in between runs."""

    def test_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "store.json")
        assert store.get("k") is None

        store.set("k", "v")
        store.set("other", "w")
        store.remove("k")

        reopened = JsonFileStore(tmp_path / "nested" / "store.json")
        assert reopened.get("k") is None
        assert reopened.get("other") == "w"

    def test_rejects_non_string_values(self, tmp_path):
        with pytest.raises(TypeError):
            JsonFileStore(tmp_path / "store.json").set("k", 1)
