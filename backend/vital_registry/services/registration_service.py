"""
Registration Repository - birth and death applications.

Both kinds share one workflow:

    pending --approve--> approved (certificate number issued)
    pending --reject---> rejected

Approved and rejected are terminal. The transition is a single conditional
UPDATE guarded by ``status = 'pending'``, so two reviewers racing on the same
application cannot both win, and a certificate number is written in the same
statement that sets ``approved``.

Application ids (``BR2026001``) come from the ``application_sequences``
counter, incremented atomically per kind and per year.
"""

import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.exceptions import (
    ValidationError,
    NotFoundError,
    InvalidTransitionError,
    ConflictError,
)
from vital_registry.core.logging_config import logger, set_application_id
from vital_registry.models.registration import (
    ApplicationSequence,
    ApplicationStatus,
    BirthRegistration,
    DeathRegistration,
    RegistrationKind,
)
from vital_registry.models.user import REVIEWER_ROLES
from vital_registry.schemas.registration import BirthRegistrationCreate, DeathRegistrationCreate

CERTIFICATE_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
CERTIFICATE_SUFFIX_LENGTH = 4
MAX_CERTIFICATE_ATTEMPTS = 5

Registration = Union[BirthRegistration, DeathRegistration]


@dataclass(frozen=True)
class KindConfig:
    kind: RegistrationKind
    application_prefix: str
    certificate_prefix: str
    certificate_label: str
    model: Type[Registration]
    create_schema: Type[BaseModel]


KINDS: Dict[RegistrationKind, KindConfig] = {
    RegistrationKind.BIRTH: KindConfig(
        kind=RegistrationKind.BIRTH,
        application_prefix="BR",
        certificate_prefix="BC",
        certificate_label="Birth Certificate",
        model=BirthRegistration,
        create_schema=BirthRegistrationCreate,
    ),
    RegistrationKind.DEATH: KindConfig(
        kind=RegistrationKind.DEATH,
        application_prefix="DR",
        certificate_prefix="DC",
        certificate_label="Death Certificate",
        model=DeathRegistration,
        create_schema=DeathRegistrationCreate,
    ),
}


def kind_config(kind: Union[RegistrationKind, str]) -> KindConfig:
    try:
        return KINDS[RegistrationKind(kind)]
    except ValueError:
        raise ValidationError(
            f"Invalid application type '{kind}'. Must be one of: birth, death",
            field="applicationType",
        )


def generate_certificate_number(prefix: str) -> str:
    """<prefix><epoch milliseconds><4 chars of 0-9A-Z>"""
    suffix = "".join(
        secrets.choice(CERTIFICATE_SUFFIX_ALPHABET) for _ in range(CERTIFICATE_SUFFIX_LENGTH)
    )
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


def is_certificate_collision(exc: IntegrityError) -> bool:
    """True when the unique index on certificate_number rejected the write"""
    return "certificate_number" in str(exc.orig)


def format_validation_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "body"
        errors.append({"field": field, "message": err.get("msg", "Invalid value")})
    return errors


class RegistrationService:
    """Persistence and workflow for birth and death registrations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Creation ====================

    async def next_application_id(self, kind: Union[RegistrationKind, str]) -> str:
        """Reserve the next ``<prefix><year><seq>`` id for this kind"""
        config = kind_config(kind)
        name = f"{config.application_prefix}{datetime.utcnow().year}"

        dialect = self.db.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        await self.db.execute(
            insert(ApplicationSequence)
            .values(name=name, value=0)
            .on_conflict_do_nothing(index_elements=["name"])
        )
        result = await self.db.execute(
            update(ApplicationSequence)
            .where(ApplicationSequence.name == name)
            .values(value=ApplicationSequence.value + 1)
            .returning(ApplicationSequence.value)
        )
        seq = result.scalar_one()
        return f"{name}{seq:03d}"

    async def create_registration(
        self,
        kind: Union[RegistrationKind, str],
        payload: Union[Dict[str, Any], BaseModel],
        submitter_id: str,
    ) -> Registration:
        """
        Validate and persist a new application with status ``pending``.

        Raises:
            ValidationError: payload is missing required fields or has bad values
        """
        config = kind_config(kind)
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(by_alias=True)

        try:
            data = config.create_schema.model_validate(payload or {})
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {config.kind.value} registration",
                errors=format_validation_errors(e),
            )

        try:
            application_id = await self.next_application_id(config.kind)
            record = config.model(
                **data.model_dump(),
                application_id=application_id,
                submitted_by=str(submitter_id),
                status=ApplicationStatus.PENDING,
                certificate_number=None,
            )
            self.db.add(record)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(record)

        set_application_id(record.application_id)
        logger.log_workflow_event(
            "submitted",
            record.application_id,
            config.kind.value,
            submitted_by=str(submitter_id),
        )
        return record

    async def create_birth_registration(self, payload: Dict[str, Any], submitter_id: str) -> BirthRegistration:
        return await self.create_registration(RegistrationKind.BIRTH, payload, submitter_id)

    async def create_death_registration(self, payload: Dict[str, Any], submitter_id: str) -> DeathRegistration:
        return await self.create_registration(RegistrationKind.DEATH, payload, submitter_id)

    # ==================== Workflow ====================

    async def update_status(
        self,
        kind: Union[RegistrationKind, str],
        registration_id: int,
        new_status: Union[ApplicationStatus, str],
        reviewer_id: str,
        notes: Optional[str] = None,
    ) -> Registration:
        """
        Approve or reject a pending application.

        Raises:
            ValidationError: ``new_status`` is not approved/rejected
            NotFoundError: no application with that id
            InvalidTransitionError: application already approved or rejected
        """
        config = kind_config(kind)
        model = config.model

        try:
            status = ApplicationStatus(new_status)
        except ValueError:
            status = None
        if status is None or not status.is_terminal:
            raise ValidationError(
                f"Invalid status '{new_status}'. Must be one of: approved, rejected",
                field="status",
            )

        for attempt in range(1, MAX_CERTIFICATE_ATTEMPTS + 1):
            certificate_number = (
                generate_certificate_number(config.certificate_prefix)
                if status is ApplicationStatus.APPROVED else None
            )
            try:
                result = await self.db.execute(
                    update(model)
                    .where(model.id == registration_id, model.status == ApplicationStatus.PENDING)
                    .values(
                        status=status,
                        reviewed_by=str(reviewer_id),
                        review_notes=notes,
                        certificate_number=certificate_number,
                        updated_at=datetime.utcnow(),
                    )
                )
                await self.db.commit()
                break
            except IntegrityError as e:
                await self.db.rollback()
                if status is not ApplicationStatus.APPROVED or not is_certificate_collision(e):
                    raise
                logger.warning(
                    f"Certificate number collision on {config.kind.value} {registration_id}, "
                    f"retrying ({attempt}/{MAX_CERTIFICATE_ATTEMPTS})"
                )
        else:
            raise ConflictError("Could not allocate a unique certificate number")

        if result.rowcount == 0:
            record = await self.get_by_id(config.kind, registration_id)
            if record is None:
                raise NotFoundError(model.__name__, registration_id)
            raise InvalidTransitionError(record.status.value, status.value)

        record = await self.get_by_id(config.kind, registration_id)
        set_application_id(record.application_id)
        logger.log_workflow_event(
            status.value,
            record.application_id,
            config.kind.value,
            reviewed_by=str(reviewer_id),
            certificate_number=record.certificate_number,
        )
        return record

    # ==================== Queries ====================

    async def get_by_id(self, kind: Union[RegistrationKind, str], registration_id: int) -> Optional[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model)
            .where(model.id == registration_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_application_id(
        self, kind: Union[RegistrationKind, str], application_id: str
    ) -> Optional[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model).where(model.application_id == application_id)
        )
        return result.scalar_one_or_none()

    async def get_by_certificate_number(
        self, kind: Union[RegistrationKind, str], certificate_number: str
    ) -> Optional[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model).where(model.certificate_number == certificate_number)
        )
        return result.scalar_one_or_none()

    async def get_by_status(
        self, kind: Union[RegistrationKind, str], status: Union[ApplicationStatus, str]
    ) -> List[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model)
            .where(model.status == ApplicationStatus(status))
            .order_by(model.created_at.desc(), model.id.desc())
        )
        return list(result.scalars().all())

    async def get_all(self, kind: Union[RegistrationKind, str]) -> List[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model).order_by(model.created_at.desc(), model.id.desc())
        )
        return list(result.scalars().all())

    async def get_for_submitter(self, kind: Union[RegistrationKind, str], user_id: str) -> List[Registration]:
        model = kind_config(kind).model
        result = await self.db.execute(
            select(model)
            .where(model.submitted_by == str(user_id))
            .order_by(model.created_at.desc(), model.id.desc())
        )
        return list(result.scalars().all())

    async def list_visible(self, kind: Union[RegistrationKind, str], user) -> List[Registration]:
        """Reviewers see every application; everyone else sees their own"""
        if user.role in REVIEWER_ROLES:
            return await self.get_all(kind)
        return await self.get_for_submitter(kind, user.id)

    async def get_pending_applications(self) -> List[Tuple[RegistrationKind, Registration]]:
        """Pending applications of both kinds, newest first"""
        pending = []
        for kind in KINDS:
            pending.extend((kind, record) for record in await self.get_by_status(kind, ApplicationStatus.PENDING))
        pending.sort(key=lambda item: (item[1].created_at, item[1].id), reverse=True)
        return pending
