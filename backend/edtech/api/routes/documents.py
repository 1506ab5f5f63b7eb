"""API routes for document upload and management."""

import logging
from uuid import UUID

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from edtech.api.deps import Controller, CurrentProfile, Repository
from edtech.config import get_settings
from edtech.schemas.documents import DocumentListResponse, DocumentRead

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/", response_model=DocumentListResponse)
async def list_documents(
    profile: CurrentProfile,
    controller: Controller,
):
    """List the user's documents with the plan limits that apply to them."""
    documents = await controller.repository.list_documents(profile.id)
    limits = controller.limits_for(profile)
    return DocumentListResponse(
        documents=[DocumentRead.from_record(d) for d in documents],
        total=len(documents),
        max_docs=limits.max_docs,
        max_size_bytes=limits.max_size_bytes,
    )


@router.post("/", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def upload_document(
    profile: CurrentProfile,
    controller: Controller,
    file: UploadFile = File(...),
):
    """
    Upload a PDF, DOCX or TXT file.

    Flow:
    1. Plan quota is checked (document count first, then size)
    2. Text is extracted; the file bytes are discarded
    3. The document record is stored

    Quota denials return 403, unreadable files 400. Nothing is stored in
    either case. Files over the hard upload ceiling still get the plan
    verdict first, so a user at their document limit hears about the count.
    """
    data = await file.read(settings.max_upload_size_bytes + 1)
    if len(data) > settings.max_upload_size_bytes:
        await controller.check_upload(profile, len(data))
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File exceeds the maximum upload size.",
        )

    document = await controller.upload_document(profile, file.filename or "untitled.txt", data)
    return DocumentRead.from_record(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    profile: CurrentProfile,
    repository: Repository,
):
    """Delete one of the user's documents."""
    deleted = await repository.delete_document(profile.id, document_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    logger.info("Document %s deleted by %s", document_id, profile.id)
    return None
