"""
Document Association Service - metadata for uploaded supporting documents.

Documents reference an application by ``(application_id, application_type)``
and are never modified after upload.
"""

from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.config import settings
from vital_registry.core.exceptions import InvalidFileTypeError, FileTooLargeError
from vital_registry.core.logging_config import logger
from vital_registry.models.document import Document
from vital_registry.models.registration import RegistrationKind
from vital_registry.schemas.document import DocumentMeta
from vital_registry.services.registration_service import kind_config


def check_upload(mime_type: Optional[str], size: int) -> None:
    """
    Raises:
        InvalidFileTypeError: MIME type outside the allow-list
        FileTooLargeError: size above MAX_UPLOAD_SIZE
    """
    allowed = settings.ALLOWED_MIME_TYPES
    if (mime_type or "").lower() not in allowed:
        raise InvalidFileTypeError(mime_type or "unknown", allowed)
    if size > settings.MAX_UPLOAD_SIZE:
        raise FileTooLargeError(size, settings.MAX_UPLOAD_SIZE)


class DocumentService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def attach(
        self,
        application_id: str,
        application_type: Union[RegistrationKind, str],
        meta: DocumentMeta,
        uploader_id: str,
    ) -> Document:
        """Record a stored file against an application"""
        check_upload(meta.mime_type, meta.file_size)
        kind = kind_config(application_type).kind

        document = Document(
            application_id=application_id,
            application_type=kind,
            document_type=meta.document_type,
            file_name=meta.file_name,
            file_path=meta.file_path,
            file_size=meta.file_size,
            mime_type=meta.mime_type,
            uploaded_by=str(uploader_id),
        )
        self.db.add(document)
        await self.db.commit()
        await self.db.refresh(document)

        logger.info(
            f"Document {document.id} ({meta.document_type}) attached to {kind.value} {application_id}"
        )
        return document

    async def list_for_application(
        self,
        application_id: str,
        application_type: Union[RegistrationKind, str],
        uploaded_by: Optional[str] = None,
    ) -> List[Document]:
        """Documents for one application, oldest first; optionally only one uploader's"""
        kind = kind_config(application_type).kind
        query = select(Document).where(
            Document.application_id == application_id,
            Document.application_type == kind,
        )
        if uploaded_by is not None:
            query = query.where(Document.uploaded_by == str(uploaded_by))
        result = await self.db.execute(query.order_by(Document.created_at, Document.id))
        return list(result.scalars().all())
