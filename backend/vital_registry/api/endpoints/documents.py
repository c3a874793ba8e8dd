from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.database import get_db
from vital_registry.core.exceptions import NotFoundError, ValidationError
from vital_registry.models.user import REVIEWER_ROLES
from vital_registry.modules.auth.dependencies import get_current_user
from vital_registry.schemas.document import DocumentMeta, DocumentResponse
from vital_registry.services.blob_store import blob_store
from vital_registry.services.document_service import DocumentService, check_upload
from vital_registry.services.identity_cache import CurrentUser
from vital_registry.services.registration_service import RegistrationService, kind_config

router = APIRouter()


@router.post("/upload", response_model=DocumentResponse)
async def upload_document(
    document: UploadFile = File(..., description="JPEG, PNG or PDF (max 5MB)"),
    application_id: str = Form(..., alias="applicationId"),
    application_type: str = Form(..., alias="applicationType"),
    document_type: str = Form(..., alias="documentType"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a supporting document for an application.

    The file is:
    1. Validated (MIME type allow-list, 5MB size limit)
    2. Written to the blob store
    3. Recorded against (applicationId, applicationType)
    """
    content = await document.read()
    if not content:
        raise ValidationError("No file uploaded", field="document")

    # Validate before touching storage
    check_upload(document.content_type, len(content))
    kind = kind_config(application_type).kind

    record = await RegistrationService(db).get_by_application_id(kind, application_id)
    if record is None or (
        current_user.role not in REVIEWER_ROLES and str(record.submitted_by) != current_user.id
    ):
        raise NotFoundError("Application", application_id)

    file_path = await blob_store.save(content, document.filename)
    meta = DocumentMeta(
        document_type=document_type,
        file_name=document.filename or "document",
        file_path=file_path,
        file_size=len(content),
        mime_type=document.content_type,
    )
    try:
        stored = await DocumentService(db).attach(application_id, kind, meta, current_user.id)
    except Exception:
        await blob_store.delete(file_path)
        raise
    return DocumentResponse.model_validate(stored)


@router.get("/{application_id}/{application_type}", response_model=List[DocumentResponse])
async def list_documents(
    application_id: str,
    application_type: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Documents attached to an application; non-reviewers only see their own uploads"""
    uploaded_by = None if current_user.role in REVIEWER_ROLES else current_user.id
    documents = await DocumentService(db).list_for_application(
        application_id, application_type, uploaded_by=uploaded_by
    )
    return [DocumentResponse.model_validate(d) for d in documents]
