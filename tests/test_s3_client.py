"""Tests for the object store client with mocked S3."""

from unittest.mock import MagicMock, patch

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from moto import mock_aws
from pydantic import ValidationError as PydanticValidationError

from bucket_tools.core.config import StoreSettings
from bucket_tools.core.exceptions import StoreError, TransportError, ValidationError
from bucket_tools.objectstorage.clients import (
    ObjectStoreClient,
    S3ClientConfig,
    S3ClientManager,
)
from bucket_tools.objectstorage.transfer import TransferUnit
from bucket_tools.schemas import TransferOutcome


def make_client(bucket="test-bucket"):
    return ObjectStoreClient(
        S3ClientConfig(
            bucket=bucket,
            public_base_url="https://cdn.example.com/",
            access_key_id="test_key",
            secret_access_key="test_secret",
            region_name="us-east-1",
        )
    )


class TestS3ClientConfig:
    """Test client configuration."""

    def test_from_settings(self):
        store = StoreSettings(
            access_key_id="key",
            secret_access_key="secret",
            default_region="eu-west-1",
            bucket="media",
            url="https://media.example.com",
            endpoint_url="https://minio.local:9000",
            _env_file=None,
        )

        config = S3ClientConfig.from_settings(store)

        assert config.bucket == "media"
        assert config.region_name == "eu-west-1"
        assert config.public_base_url == "https://media.example.com"
        assert config.endpoint_url == "https://minio.local:9000"

    def test_extra_fields_forbidden(self):
        with pytest.raises(PydanticValidationError):
            S3ClientConfig(bucket="b", public_base_url="u", unknown="x")

    def test_profile_not_accepted(self):
        """Test credentials come only from the store settings, not CLI profiles."""
        with pytest.raises(PydanticValidationError):
            S3ClientConfig(bucket="b", public_base_url="u", aws_profile="dev")

    @patch("bucket_tools.objectstorage.clients.s3_client.boto3")
    def test_explicit_credentials(self, mock_boto3):
        """Test the client is built from the configured keys and endpoint."""
        config = S3ClientConfig(
            bucket="media",
            public_base_url="https://media.example.com",
            access_key_id="key",
            secret_access_key="secret",
            session_token="token",
            region_name="eu-west-1",
            endpoint_url="https://minio.local:9000",
        )

        S3ClientManager(config).client

        mock_boto3.client.assert_called_once_with(
            "s3",
            region_name="eu-west-1",
            endpoint_url="https://minio.local:9000",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            aws_session_token="token",
        )
        mock_boto3.Session.assert_not_called()

    @patch("bucket_tools.objectstorage.clients.s3_client.boto3")
    def test_default_credential_chain(self, mock_boto3):
        config = S3ClientConfig(bucket="media", public_base_url="u")

        S3ClientManager(config).client

        mock_boto3.client.assert_called_once_with("s3", region_name="us-east-1")

    def test_public_url(self):
        assert make_client().public_url("videos/a.mp4") == (
            "https://cdn.example.com/videos/a.mp4"
        )


@mock_aws
class TestObjectStoreClient:
    """Test the object store client against a mocked bucket."""

    def setup_method(self, method):
        """Set up test environment."""
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        self.s3_client.create_bucket(Bucket="test-bucket")

        self.s3_client.put_object(
            Bucket="test-bucket", Key="data/file1.txt", Body=b"content1"
        )
        self.s3_client.put_object(
            Bucket="test-bucket", Key="data/file2.txt", Body=b"content2content2"
        )
        self.s3_client.put_object(
            Bucket="test-bucket", Key="data/subdir/file3.txt", Body=b"content3"
        )

        self.client = make_client()

    def test_list_objects(self):
        """Test a single page with sizes and timestamps."""
        page = self.client.list_objects(prefix="data/")

        assert [listed.key for listed in page.objects] == [
            "data/file1.txt",
            "data/file2.txt",
            "data/subdir/file3.txt",
        ]
        assert page.objects[1].size == 16
        assert page.objects[0].last_modified is not None
        assert not page.is_truncated
        assert page.next_marker is None

    def test_list_objects_truncated_marker(self):
        """Test the last key is used as marker when NextMarker is absent."""
        page = self.client.list_objects(prefix="data/", max_keys=2)

        assert page.is_truncated
        assert page.next_marker == "data/file2.txt"

        rest = self.client.list_objects(prefix="data/", marker=page.next_marker)
        assert [listed.key for listed in rest.objects] == ["data/subdir/file3.txt"]

    def test_list_objects_with_delimiter(self):
        page = self.client.list_objects(prefix="data/", delimiter="/")

        assert page.common_prefixes == ("data/subdir/",)
        assert len(page.objects) == 2

    def test_list_missing_bucket(self):
        """Test a rejected request becomes a StoreError with the code."""
        client = make_client(bucket="missing-bucket")

        with pytest.raises(StoreError) as excinfo:
            client.list_objects(prefix="data/")

        assert excinfo.value.code == "NoSuchBucket"

    def test_presign_get(self):
        url = self.client.presign("data/file1.txt", expires_in=300)

        assert "data/file1.txt" in url
        assert "test-bucket" in url

    def test_presign_put(self):
        url = self.client.presign("data/new.txt", method="put")

        assert "data/new.txt" in url

    def test_presign_invalid_method(self):
        with pytest.raises(ValidationError, match="Invalid presign method"):
            self.client.presign("data/file1.txt", method="delete")

    def test_presign_invalid_expiry(self):
        with pytest.raises(ValidationError):
            self.client.presign("data/file1.txt", expires_in=0)

    def test_put_object(self):
        """Test uploads store the body and content type."""
        self.client.put_object("up/a.mp4", b"video", "video/mp4")

        response = self.s3_client.get_object(Bucket="test-bucket", Key="up/a.mp4")
        assert response["Body"].read() == b"video"
        assert response["ContentType"] == "video/mp4"

    def test_delete_object(self):
        self.client.delete_object("data/file1.txt")

        page = self.client.list_objects(prefix="data/")
        assert "data/file1.txt" not in [listed.key for listed in page.objects]

    def test_delete_objects(self):
        """Test batch delete reports each deleted key."""
        result = self.client.delete_objects(["data/file1.txt", "data/file2.txt"])

        assert sorted(result.deleted) == ["data/file1.txt", "data/file2.txt"]
        assert result.errors == ()

    def test_delete_objects_empty(self):
        result = self.client.delete_objects([])

        assert result.deleted == ()
        assert result.errors == ()

    def test_delete_objects_too_many(self):
        """Test more than 1000 keys are refused before any request."""
        with pytest.raises(ValidationError):
            self.client.delete_objects([f"k{i}" for i in range(1001)])

    def test_download_through_presigned_url(self, tmp_path):
        """Test the transfer unit fetches a presigned URL end to end."""
        unit = TransferUnit(self.client, download_root=tmp_path)

        result = unit.download_one("data/file2.txt", "file2.txt")

        assert result.outcome is TransferOutcome.SUCCESS
        assert (tmp_path / "file2.txt").read_bytes() == b"content2content2"


class TestErrorTranslation:
    """Test botocore errors are translated at the client boundary."""

    def test_transport_error(self):
        client = make_client()
        mock_s3 = MagicMock()
        mock_s3.list_objects.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.invalid"
        )
        client.client_manager._client = mock_s3

        with pytest.raises(TransportError, match="list_objects failed"):
            client.list_objects(prefix="data/")

    def test_max_keys_clamped(self):
        client = make_client()
        mock_s3 = MagicMock()
        mock_s3.list_objects.return_value = {"Contents": [], "IsTruncated": False}
        client.client_manager._client = mock_s3

        client.list_objects(prefix="data/", max_keys=5000)

        _, kwargs = mock_s3.list_objects.call_args
        assert kwargs["MaxKeys"] == 1000
        assert kwargs["Prefix"] == "data/"
        assert "Marker" not in kwargs
