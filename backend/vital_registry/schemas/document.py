from pydantic import Field
from typing import Optional
from datetime import datetime

from vital_registry.models.registration import RegistrationKind
from vital_registry.schemas.base import CamelModel


class DocumentMeta(CamelModel):
    """What the upload endpoint learned about a stored file"""
    document_type: str = Field(..., min_length=1, max_length=64)
    file_name: str
    file_path: str
    file_size: int
    mime_type: str


class DocumentResponse(CamelModel):
    id: int
    application_id: str
    application_type: RegistrationKind
    document_type: str
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_by: str
    created_at: datetime
