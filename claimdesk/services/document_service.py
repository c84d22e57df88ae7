"""
Claim Document Service.

Stores uploaded bytes through a ``FileStorage`` backend and keeps one
``Document`` metadata row per file.

Provides:
- Upload with extension-based type detection and size limits
- Download of stored content
- Deletion of a single document or every document of a claim

Storage calls are bounded by a timeout. A blob written for a row that
then fails to flush is removed again.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePath
from uuid import UUID, uuid4

import anyio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.core.clock import Clock
from claimdesk.core.enums import DocumentType
from claimdesk.core.exceptions import (
    ClaimDeskError,
    ClaimNotFoundError,
    DocumentNotFoundError,
    InvalidDocumentError,
    StorageError,
    UnsupportedDocumentTypeError,
)
from claimdesk.models.claim import Claim
from claimdesk.models.document import Document
from claimdesk.services.base import BaseService
from claimdesk.services.storage import FileStorage
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_TIMEOUT_SECONDS = 30.0

EXTENSION_TYPES: dict[str, DocumentType] = {
    "pdf": DocumentType.PDF,
    "jpg": DocumentType.JPG,
    "jpeg": DocumentType.JPG,
    "png": DocumentType.PNG,
    "doc": DocumentType.DOC,
    "docx": DocumentType.DOCX,
}


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot; empty when there is none."""
    return PurePath(filename).suffix.lstrip(".").lower()


def classify_document(filename: str) -> DocumentType:
    """
    Map a filename to its DocumentType by extension (case-insensitive).

    Raises:
        UnsupportedDocumentTypeError: Missing or unrecognized extension
    """
    document_type = EXTENSION_TYPES.get(file_extension(filename))
    if document_type is None:
        allowed = ", ".join(sorted(EXTENSION_TYPES))
        raise UnsupportedDocumentTypeError(
            f"Unsupported file type for {filename!r}; allowed: {allowed}"
        )
    return document_type


@dataclass
class UploadedFile:
    """An attachment received with a request."""

    filename: str
    data: bytes
    content_type: str | None = None


class DocumentService(BaseService):
    """Document metadata plus blob storage."""

    def __init__(
        self,
        session: AsyncSession,
        storage: FileStorage,
        clock: Clock | None = None,
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(session, clock)
        self.storage = storage
        self.max_size_bytes = max_size_bytes
        self.timeout_seconds = timeout_seconds

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload(
        self,
        claim_id: UUID,
        filename: str,
        data: bytes,
        content_type: str | None = None,
        uploaded_by: UUID | None = None,
    ) -> Document:
        """
        Store a file for a claim.

        Raises:
            ClaimNotFoundError: Unknown claim
            UnsupportedDocumentTypeError: Extension is not an accepted type
            InvalidDocumentError: Empty file or over the size limit
            StorageError: Backend failure or timeout
        """
        if await self.session.get(Claim, claim_id) is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")

        document_type = classify_document(filename)

        if not data:
            raise InvalidDocumentError(f"File {filename!r} is empty")
        if len(data) > self.max_size_bytes:
            raise InvalidDocumentError(
                f"File {filename!r} is {len(data)} bytes; limit is {self.max_size_bytes}"
            )

        stored_name = f"{uuid4().hex}.{file_extension(filename)}"
        try:
            with anyio.fail_after(self.timeout_seconds):
                path = await self.storage.write(stored_name, data, content_type)
        except TimeoutError as err:
            # The abandoned write may still land; the backend removes it when it does
            await self._discard_blob(stored_name)
            raise StorageError(f"Timed out storing {filename!r}") from err

        document = Document(
            id=uuid4(),
            claim_id=claim_id,
            stored_name=stored_name,
            original_filename=filename,
            storage_path=path,
            document_type=document_type,
            file_size=len(data),
            content_type=content_type,
            uploaded_by_id=uploaded_by,
            uploaded_at=self.clock.now(),
        )
        self.session.add(document)
        try:
            await self._flush()
        except ClaimDeskError:
            await self._discard_blob(path)
            raise

        logger.info(f"Uploaded {filename} ({document_type.value}, {len(data)} bytes) to claim {claim_id}")
        return document

    async def _discard_blob(self, path: str) -> None:
        """Best-effort removal of a blob whose metadata row was not saved."""
        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.storage.delete(path)
        except (StorageError, TimeoutError) as err:
            logger.error(f"Orphaned blob left in storage: {path} ({err})")

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get(self, document_id: UUID) -> Document:
        document = await self.session.get(Document, document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        return document

    async def list_by_claim(self, claim_id: UUID) -> Sequence[Document]:
        result = await self.session.execute(
            select(Document)
            .where(Document.claim_id == claim_id)
            .order_by(Document.uploaded_at)
        )
        return result.scalars().all()

    async def read_content(self, document_id: UUID) -> bytes:
        document = await self.get(document_id)
        try:
            with anyio.fail_after(self.timeout_seconds):
                return await self.storage.read(document.storage_path)
        except TimeoutError as err:
            raise StorageError(f"Timed out reading {document.original_filename!r}") from err

    # =========================================================================
    # Delete Operations
    # =========================================================================

    async def delete(self, document_id: UUID) -> None:
        """
        Remove the blob, then the metadata row.

        Raises:
            StorageError: The blob could not be removed; the row is kept
        """
        document = await self.get(document_id)
        try:
            with anyio.fail_after(self.timeout_seconds):
                await self.storage.delete(document.storage_path)
        except TimeoutError as err:
            raise StorageError(f"Timed out deleting {document.original_filename!r}") from err

        await self.session.delete(document)
        await self._flush()
        logger.info(f"Deleted document {document.original_filename} from claim {document.claim_id}")

    async def delete_by_claim(self, claim_id: UUID) -> int:
        """Delete every document of a claim. Returns the number removed."""
        documents = await self.list_by_claim(claim_id)
        for document in documents:
            await self.delete(document.id)
        return len(documents)
