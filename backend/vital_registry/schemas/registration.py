from pydantic import ConfigDict, Field
from typing import Annotated, Optional, Literal
from datetime import date, datetime

from vital_registry.models.registration import ApplicationStatus
from vital_registry.schemas.base import CamelModel

RequiredText = Annotated[str, Field(min_length=1, max_length=255)]


class RegistrationPayload(CamelModel):
    """Submitted form fields; workflow fields such as status are never read from input"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class BirthRegistrationCreate(RegistrationPayload):
    # Child information
    child_name: RequiredText
    child_sex: Literal["male", "female"]
    date_of_birth: date
    time_of_birth: Optional[str] = Field(None, max_length=16)
    place_of_birth: RequiredText

    # Father information
    father_name: RequiredText
    father_national_id: str = Field(..., min_length=1, max_length=64)
    father_date_of_birth: Optional[date] = None
    father_occupation: Optional[str] = Field(None, max_length=255)

    # Mother information
    mother_name: RequiredText
    mother_national_id: str = Field(..., min_length=1, max_length=64)
    mother_date_of_birth: Optional[date] = None
    mother_occupation: Optional[str] = Field(None, max_length=255)


class DeathRegistrationCreate(RegistrationPayload):
    # Deceased information
    deceased_name: RequiredText
    date_of_death: date
    time_of_death: Optional[str] = Field(None, max_length=16)
    place_of_death: RequiredText
    cause_of_death: str = Field(..., min_length=1)

    # Next of kin information
    next_of_kin_name: RequiredText
    next_of_kin_relationship: str = Field(..., min_length=1, max_length=64)
    next_of_kin_contact: str = Field(..., min_length=1, max_length=64)
    next_of_kin_national_id: Optional[str] = Field(None, max_length=64)


class StatusUpdate(CamelModel):
    status: ApplicationStatus
    review_notes: Optional[str] = None


class RegistrationWorkflow(CamelModel):
    id: int
    application_id: str
    submitted_by: str
    status: ApplicationStatus
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    certificate_number: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class BirthRegistrationResponse(RegistrationWorkflow):
    child_name: str
    child_sex: str
    date_of_birth: date
    time_of_birth: Optional[str] = None
    place_of_birth: str
    father_name: str
    father_national_id: str
    father_date_of_birth: Optional[date] = None
    father_occupation: Optional[str] = None
    mother_name: str
    mother_national_id: str
    mother_date_of_birth: Optional[date] = None
    mother_occupation: Optional[str] = None


class DeathRegistrationResponse(RegistrationWorkflow):
    deceased_name: str
    date_of_death: date
    time_of_death: Optional[str] = None
    place_of_death: str
    cause_of_death: str
    next_of_kin_name: str
    next_of_kin_relationship: str
    next_of_kin_contact: str
    next_of_kin_national_id: Optional[str] = None


class VerificationResult(CamelModel):
    valid: bool
    type: Optional[str] = None
    application_id: Optional[str] = None
    issued_date: Optional[datetime] = None
    issuing_office: Optional[str] = None


class RegistrationStats(CamelModel):
    pending_applications: int
    this_month_registrations: int
    total_births: int
    total_deaths: int
    approved_this_calendar_month: int
