"""
File Storage Backends.

Claim documents are written through the ``FileStorage`` interface:
byte-stream write given a name, read given a path, delete given a path.

- LocalFileStorage: a directory on disk
- MinioFileStorage: an S3-compatible MinIO bucket
  Source: https://min.io/docs/minio/linux/developers/python/API.html

Both clients are blocking; calls run in a worker thread via anyio.
Backend failures surface as ``StorageError``.
"""

from io import BytesIO
from pathlib import Path
from threading import Event
from typing import Any, Callable, Protocol

from anyio import get_cancelled_exc_class, to_thread
from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

from claimdesk.api.config import Settings
from claimdesk.core.exceptions import StorageError
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)


class FileStorage(Protocol):
    """Blob store used by the document service."""

    async def write(self, name: str, data: bytes, content_type: str | None = None) -> str:
        """Store ``data`` under ``name`` and return the path to read it back."""
        ...

    async def read(self, path: str) -> bytes: ...

    async def delete(self, path: str) -> None:
        """Remove the blob; deleting a missing blob is not an error."""
        ...


class ThreadedFileStorage:
    """
    Runs a blocking client in worker threads.

    Calls are abandoned when the caller is cancelled (e.g. by a timeout), so
    a hung backend cannot hold up the request. A write that completes after
    its caller gave up removes its own blob.

    Source: https://anyio.readthedocs.io/en/stable/threads.html
    """

    backend_errors: tuple[type[Exception], ...] = (OSError,)

    async def _run(self, action: str, target: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await to_thread.run_sync(func, *args, abandon_on_cancel=True)
        except self.backend_errors as err:
            raise StorageError(f"Failed to {action} {target}: {err}") from err

    async def write(self, name: str, data: bytes, content_type: str | None = None) -> str:
        abandoned = Event()
        try:
            return await self._run(
                "write", name, self._write_unless_abandoned, name, data, content_type, abandoned
            )
        except get_cancelled_exc_class():
            abandoned.set()
            raise

    async def read(self, path: str) -> bytes:
        return await self._run("read", path, self._read_sync, path)

    async def delete(self, path: str) -> None:
        await self._run("delete", path, self._delete_sync, path)

    def _write_unless_abandoned(
        self, name: str, data: bytes, content_type: str | None, abandoned: Event
    ) -> str:
        path = self._write_sync(name, data, content_type)
        if abandoned.is_set():
            try:
                self._delete_sync(path)
            except (StorageError, *self.backend_errors) as err:
                logger.error(f"Orphaned blob left in storage: {path} ({err})")
            else:
                logger.warning(f"Removed blob written after its upload timed out: {path}")
        return path

    def _write_sync(self, name: str, data: bytes, content_type: str | None) -> str:
        raise NotImplementedError

    def _read_sync(self, path: str) -> bytes:
        raise NotImplementedError

    def _delete_sync(self, path: str) -> None:
        raise NotImplementedError


class LocalFileStorage(ThreadedFileStorage):
    """Stores files in a single directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        candidate = (self.root / path).resolve()
        if not candidate.is_relative_to(self.root):
            raise StorageError(f"Path escapes storage root: {path}")
        return candidate

    # ------------------------------------------------------------------
    # Blocking helpers (run via anyio.to_thread)
    # ------------------------------------------------------------------

    def _write_sync(self, name: str, data: bytes, content_type: str | None) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self._resolve(name)
        target.write_bytes(data)
        logger.info(f"Stored file: {target}")
        return name

    def _read_sync(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def _delete_sync(self, path: str) -> None:
        self._resolve(path).unlink(missing_ok=True)
        logger.info(f"Deleted file: {path}")


class MinioFileStorage(ThreadedFileStorage):
    """Stores files as objects in one MinIO bucket."""

    # S3 error responses, plus the urllib3 errors raised when the server is unreachable
    backend_errors = (MinioException, HTTPError, OSError)

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket
        self._bucket_checked = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "MinioFileStorage":
        client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
        )
        logger.info(f"MinIO client initialized: {settings.MINIO_ENDPOINT}")
        return cls(client, settings.MINIO_BUCKET_DOCUMENTS)

    # ------------------------------------------------------------------
    # Blocking helpers (run via anyio.to_thread)
    # ------------------------------------------------------------------

    def _ensure_bucket_sync(self) -> None:
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created bucket: {self.bucket}")
        self._bucket_checked = True

    def _write_sync(self, name: str, data: bytes, content_type: str | None) -> str:
        self._ensure_bucket_sync()
        self.client.put_object(
            self.bucket,
            name,
            BytesIO(data),
            len(data),
            content_type=content_type or "application/octet-stream",
        )
        logger.info(f"Uploaded object: {self.bucket}/{name}")
        return name

    def _read_sync(self, path: str) -> bytes:
        response = self.client.get_object(self.bucket, path)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def _delete_sync(self, path: str) -> None:
        self.client.remove_object(self.bucket, path)
        logger.info(f"Deleted object: {self.bucket}/{path}")


def build_file_storage(settings: Settings) -> FileStorage:
    """Select the storage backend named by ``STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "minio":
        return MinioFileStorage.from_settings(settings)
    return LocalFileStorage(settings.STORAGE_LOCAL_DIR)
