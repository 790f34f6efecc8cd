"""Test configuration and fixtures for bucket-tools."""

import io
from datetime import datetime, timezone
from typing import Optional

import pytest
import requests

from bucket_tools.core.exceptions import StoreError, TransportError
from bucket_tools.schemas import (
    BatchDeleteResult,
    DeleteError,
    ListedObject,
    ListPage,
)

FAKE_BASE_URL = "https://fake-store.test"


class FakeObjectStore:
    """In-memory object store with the same surface as ObjectStoreClient.

    Listing follows S3 marker semantics: keys are returned in sorted order,
    starting after the marker, at most ``max_keys`` per page.
    """

    bucket = "fake-bucket"

    def __init__(self, objects: Optional[dict[str, bytes]] = None):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.content_types: dict[str, str] = {}
        self.list_calls: list[dict] = []
        self.presigned: list[str] = []
        self.delete_batches: list[list[str]] = []
        self.deleted_keys: list[str] = []
        self.fail_presign: set[str] = set()
        self.fail_delete: set[str] = set()
        self.fail_listing_after: Optional[int] = None
        self.fail_batches = False

    def list_objects(self, prefix="", delimiter=None, max_keys=1000, marker=None):
        self.list_calls.append(
            {
                "prefix": prefix,
                "delimiter": delimiter,
                "max_keys": max_keys,
                "marker": marker,
            }
        )
        if (
            self.fail_listing_after is not None
            and len(self.list_calls) > self.fail_listing_after
        ):
            raise TransportError("list_objects failed: connection reset")

        keys = sorted(
            key
            for key in self.objects
            if key.startswith(prefix) and (marker is None or key > marker)
        )
        objects: list[str] = []
        common_prefixes: list[str] = []
        last_entry = None
        is_truncated = False
        for key in keys:
            rest = key[len(prefix):]
            common = None
            if delimiter and delimiter in rest:
                common = prefix + rest.split(delimiter, 1)[0] + delimiter
                if common in common_prefixes:
                    continue
            if len(objects) + len(common_prefixes) >= max_keys:
                is_truncated = True
                break
            if common is not None:
                common_prefixes.append(common)
                last_entry = common
            else:
                objects.append(key)
                last_entry = key

        return ListPage(
            objects=tuple(
                ListedObject(
                    key=key,
                    size=len(self.objects[key]),
                    last_modified=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
                )
                for key in objects
            ),
            common_prefixes=tuple(common_prefixes),
            is_truncated=is_truncated,
            next_marker=last_entry if is_truncated else None,
        )

    def presign(self, key, expires_in=3600, method="get"):
        if key in self.fail_presign:
            raise StoreError("presign failed: AccessDenied", code="AccessDenied")
        url = f"{FAKE_BASE_URL}/{key}?method={method}&expires={expires_in}"
        self.presigned.append(key)
        return url

    def put_object(self, key, body, content_type):
        data = body if isinstance(body, bytes) else body.read()
        self.objects[key] = data
        self.content_types[key] = content_type

    def delete_object(self, key):
        if key in self.fail_delete:
            raise StoreError("delete_object failed: AccessDenied", code="AccessDenied")
        self.objects.pop(key, None)
        self.deleted_keys.append(key)

    def delete_objects(self, keys):
        self.delete_batches.append(list(keys))
        if self.fail_batches:
            raise StoreError(
                "delete_objects failed: InternalError", code="InternalError"
            )
        deleted, errors = [], []
        for key in keys:
            if key in self.fail_delete:
                errors.append(
                    DeleteError(key=key, code="AccessDenied", message="Access Denied")
                )
            else:
                self.objects.pop(key, None)
                self.deleted_keys.append(key)
                deleted.append(key)
        return BatchDeleteResult(deleted=tuple(deleted), errors=tuple(errors))

    def public_url(self, key):
        return f"{FAKE_BASE_URL}/{key}"


class FakeResponse:
    def __init__(self, status_code, body=b"", fail_midway=False):
        self.status_code = status_code
        self.body = body
        self.fail_midway = fail_midway

    def iter_content(self, chunk_size=1):
        stream = io.BytesIO(self.body)
        while True:
            chunk = stream.read(max(1, min(chunk_size, 4)))
            if not chunk:
                break
            yield chunk
            if self.fail_midway:
                raise requests.exceptions.ChunkedEncodingError("connection broken")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Serves presigned URLs issued by a FakeObjectStore."""

    def __init__(self, store: FakeObjectStore):
        self.store = store
        self.requests: list[dict] = []
        self.error_keys: set[str] = set()
        self.broken_keys: set[str] = set()
        self.status_overrides: dict[str, int] = {}

    def get(self, url, stream=False, timeout=None, verify=True):
        key = url[len(FAKE_BASE_URL) + 1:].split("?", 1)[0]
        self.requests.append({"key": key, "timeout": timeout, "verify": verify})
        if key in self.error_keys:
            raise requests.exceptions.ConnectionError("connection refused")
        if key in self.status_overrides:
            return FakeResponse(self.status_overrides[key])
        if key not in self.store.objects:
            return FakeResponse(404)
        return FakeResponse(
            200, self.store.objects[key], fail_midway=key in self.broken_keys
        )


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def download_root(temp_dir):
    """Download root inside the temporary directory."""
    root = temp_dir / "downloads"
    root.mkdir()
    return root


@pytest.fixture
def fake_store():
    """Empty in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def make_store():
    """Factory for in-memory stores pre-populated with objects."""
    return FakeObjectStore


@pytest.fixture
def fake_session(fake_store):
    """HTTP session serving the fake store's presigned URLs."""
    return FakeSession(fake_store)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials and store settings for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_BUCKET", "test-bucket")
    monkeypatch.setenv("AWS_URL", "https://cdn.example.com")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)


@pytest.fixture
def sample_file(temp_dir):
    """A 200-byte file to upload."""
    path = temp_dir / "clip.mp4"
    path.write_bytes(b"x" * 200)
    return path
