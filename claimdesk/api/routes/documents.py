"""
Document Routes

Provides:
- Document upload for an existing claim
- Document listing, metadata and download
- Document deletion (administrators)
"""

import unicodedata
from collections.abc import Sequence
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response

from claimdesk.api.config import settings
from claimdesk.api.deps import get_claims_service, get_document_service, require_permission
from claimdesk.api.routes.claims import ensure_can_view, is_claim_party
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import (
    CLAIMS_MANAGE,
    DOCUMENTS_DELETE,
    DOCUMENTS_READ,
    DOCUMENTS_UPLOAD,
    has_permission,
)
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.document import Document
from claimdesk.models.user import User
from claimdesk.schemas.document import DocumentResponse
from claimdesk.services.claims_service import ClaimsService
from claimdesk.services.document_service import DocumentService
from claimdesk.utils.errors import PermissionDeniedError, to_http_exception

router = APIRouter(prefix="/documents", tags=["Documents"])


def content_disposition(filename: str) -> str:
    """
    Attachment header carrying any filename.

    Headers are latin-1, so the plain ``filename`` gets an ASCII fallback and
    the real name travels percent-encoded in ``filename*``.

    Source: https://datatracker.ietf.org/doc/html/rfc6266#section-4.3
    """
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = "".join(c for c in ascii_name if c.isprintable() and c not in '"\\') or "download"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.post(
    "/claims/{claim_id}",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    claim_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(require_permission(DOCUMENTS_UPLOAD)),
    claims: ClaimsService = Depends(get_claims_service),
    documents: DocumentService = Depends(get_document_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Document:
    """Attach a PDF, image or Word document to a claim."""
    data = await file.read(settings.upload_max_size_bytes + 1)
    try:
        claim = await claims.get_claim(claim_id)
        if not is_claim_party(claim, current_user) and not has_permission(
            current_user.role, CLAIMS_MANAGE
        ):
            raise PermissionDeniedError("Not your claim")
        document = await documents.upload(
            claim.id,
            file.filename or "unnamed",
            data,
            file.content_type,
            uploaded_by=current_user.id,
        )
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return document


@router.get("/claims/{claim_id}", response_model=list[DocumentResponse])
async def list_claim_documents(
    claim_id: UUID,
    current_user: User = Depends(require_permission(DOCUMENTS_READ)),
    claims: ClaimsService = Depends(get_claims_service),
    documents: DocumentService = Depends(get_document_service),
) -> Sequence[Document]:
    try:
        claim = await claims.get_claim(claim_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    ensure_can_view(claim, current_user)
    return await documents.list_by_claim(claim.id)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    current_user: User = Depends(require_permission(DOCUMENTS_READ)),
    claims: ClaimsService = Depends(get_claims_service),
    documents: DocumentService = Depends(get_document_service),
) -> Document:
    try:
        document = await documents.get(document_id)
        ensure_can_view(await claims.get_claim(document.claim_id), current_user)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return document


@router.get("/{document_id}/download")
async def download_document(
    document_id: UUID,
    current_user: User = Depends(require_permission(DOCUMENTS_READ)),
    claims: ClaimsService = Depends(get_claims_service),
    documents: DocumentService = Depends(get_document_service),
) -> Response:
    try:
        document = await documents.get(document_id)
        ensure_can_view(await claims.get_claim(document.claim_id), current_user)
        content = await documents.read_content(document.id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    return Response(
        content=content,
        media_type=document.content_type or "application/octet-stream",
        headers={"Content-Disposition": content_disposition(document.original_filename)},
    )


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(DOCUMENTS_DELETE))],
)
async def delete_document(
    document_id: UUID,
    documents: DocumentService = Depends(get_document_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    try:
        await documents.delete(document_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
