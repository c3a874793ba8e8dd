from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Index
from datetime import datetime

from vital_registry.core.database import Base
from vital_registry.core.types import GUID, value_enum
from vital_registry.models.registration import RegistrationKind


class Document(Base):
    """
    Metadata for an uploaded supporting document.

    Points at an application through (application_id, application_type)
    rather than a foreign key; the file bytes live in the blob store.
    """
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(String(32), nullable=False)
    application_type = Column(value_enum(RegistrationKind, "registration_kind"), nullable=False)
    document_type = Column(String(64), nullable=False)  # medical_certificate, parent_id, next_of_kin_id

    # File details
    file_name = Column(String(500), nullable=False)
    file_path = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=True)  # in bytes
    mime_type = Column(String(100), nullable=True)

    uploaded_by = Column(GUID, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_documents_application", "application_id", "application_type"),
    )

    def __repr__(self):
        return f"<Document {self.file_name}>"
