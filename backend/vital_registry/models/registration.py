from sqlalchemy import Column, String, DateTime, Date, Integer, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import declared_attr
from datetime import datetime
import enum

from vital_registry.core.database import Base
from vital_registry.core.types import GUID, value_enum


class ApplicationStatus(str, enum.Enum):
    """Registration workflow status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApplicationStatus.PENDING


class RegistrationKind(str, enum.Enum):
    """Kinds of vital event that can be registered"""
    BIRTH = "birth"
    DEATH = "death"


class RegistrationMixin:
    """Workflow columns shared by birth and death registrations"""

    id = Column(Integer, primary_key=True, autoincrement=True)
    # BR2026001 / DR2026001 format, assigned once at creation
    application_id = Column(String(32), unique=True, index=True, nullable=False)

    status = Column(
        value_enum(ApplicationStatus, "application_status"),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True,
    )
    review_notes = Column(Text, nullable=True)
    certificate_number = Column(String(64), unique=True, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def submitted_by(cls):
        return Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def reviewed_by(cls):
        return Column(GUID, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint(
                "(status = 'approved' AND certificate_number IS NOT NULL) OR "
                "(status != 'approved' AND certificate_number IS NULL)",
                name=f"ck_{cls.__tablename__}_certificate_iff_approved",
            ),
        )


class BirthRegistration(RegistrationMixin, Base):
    """Birth registration application"""
    __tablename__ = "birth_registrations"

    # Child information
    child_name = Column(String(255), nullable=False)
    child_sex = Column(String(16), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    time_of_birth = Column(String(16), nullable=True)
    place_of_birth = Column(String(255), nullable=False)

    # Father information
    father_name = Column(String(255), nullable=False)
    father_national_id = Column(String(64), nullable=False)
    father_date_of_birth = Column(Date, nullable=True)
    father_occupation = Column(String(255), nullable=True)

    # Mother information
    mother_name = Column(String(255), nullable=False)
    mother_national_id = Column(String(64), nullable=False)
    mother_date_of_birth = Column(Date, nullable=True)
    mother_occupation = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<BirthRegistration {self.application_id} {self.status}>"


class DeathRegistration(RegistrationMixin, Base):
    """Death registration application"""
    __tablename__ = "death_registrations"

    # Deceased information
    deceased_name = Column(String(255), nullable=False)
    date_of_death = Column(Date, nullable=False)
    time_of_death = Column(String(16), nullable=True)
    place_of_death = Column(String(255), nullable=False)
    cause_of_death = Column(Text, nullable=False)

    # Next of kin information
    next_of_kin_name = Column(String(255), nullable=False)
    next_of_kin_relationship = Column(String(64), nullable=False)
    next_of_kin_contact = Column(String(64), nullable=False)
    next_of_kin_national_id = Column(String(64), nullable=True)

    def __repr__(self):
        return f"<DeathRegistration {self.application_id} {self.status}>"


class ApplicationSequence(Base):
    """Atomic per-prefix, per-year counter backing application ids"""
    __tablename__ = "application_sequences"

    name = Column(String(32), primary_key=True)  # e.g. "BR2026"
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<ApplicationSequence {self.name}={self.value}>"
