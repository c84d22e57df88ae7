"""
Integration Tests for the Storage Backends
"""

import pytest
from minio.error import InvalidResponseError
from urllib3.exceptions import MaxRetryError

from claimdesk.api.config import Settings
from claimdesk.core.exceptions import StorageError
from claimdesk.services.storage import LocalFileStorage, MinioFileStorage, build_file_storage

KEYS = {"SECRET_KEY": "a" * 32, "JWT_SECRET_KEY": "b" * 32}


@pytest.mark.integration
class TestLocalFileStorage:
    async def test_write_read_delete(self, tmp_path):
        storage = LocalFileStorage(tmp_path / "documents")

        path = await storage.write("abc.pdf", b"%PDF")

        assert (tmp_path / "documents" / "abc.pdf").read_bytes() == b"%PDF"
        assert await storage.read(path) == b"%PDF"

        await storage.delete(path)
        assert not (tmp_path / "documents" / "abc.pdf").exists()

    async def test_delete_missing_is_not_an_error(self, tmp_path):
        await LocalFileStorage(tmp_path).delete("missing.pdf")

    async def test_read_missing_raises(self, tmp_path):
        with pytest.raises(StorageError):
            await LocalFileStorage(tmp_path).read("missing.pdf")

    async def test_path_traversal_rejected(self, tmp_path):
        storage = LocalFileStorage(tmp_path / "documents")

        with pytest.raises(StorageError, match="escapes"):
            await storage.write("../outside.pdf", b"x")
        assert not (tmp_path / "outside.pdf").exists()


class UnreachableMinioClient:
    """Minio client double whose every call fails as if the server were down."""

    def _refuse(self, *args, **kwargs):
        raise MaxRetryError(None, "/claimdesk-documents", reason="connection refused")

    bucket_exists = make_bucket = put_object = get_object = remove_object = _refuse


class ErrorResponseMinioClient(UnreachableMinioClient):
    def get_object(self, bucket, path):
        raise InvalidResponseError(503, "text/plain", "Service Unavailable")


@pytest.mark.integration
class TestMinioFileStorage:
    async def test_unreachable_server_raises_storage_error(self):
        storage = MinioFileStorage(UnreachableMinioClient(), "claimdesk-documents")

        with pytest.raises(StorageError, match="Failed to write a.pdf"):
            await storage.write("a.pdf", b"x")
        with pytest.raises(StorageError, match="Failed to read a.pdf"):
            await storage.read("a.pdf")
        with pytest.raises(StorageError, match="Failed to delete a.pdf"):
            await storage.delete("a.pdf")

    async def test_error_response_raises_storage_error(self):
        storage = MinioFileStorage(ErrorResponseMinioClient(), "claimdesk-documents")

        with pytest.raises(StorageError, match="Failed to read"):
            await storage.read("a.pdf")
