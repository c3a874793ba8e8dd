"""
Shared routes for birth and death registrations.

Both kinds expose the same surface; ``create_registration_router`` builds it
for one kind:

    POST   /                              submit (any signed-in user)
    GET    /                              list (own submissions, or all for reviewers)
    GET    /application/{application_id}  lookup by application id
    GET    /{registration_id}             lookup by numeric id
    PATCH  /{registration_id}/status      approve/reject (admin, registrar)
"""

from typing import Any, Dict, List, Type

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vital_registry.core.database import get_db
from vital_registry.core.exceptions import NotFoundError
from vital_registry.models.registration import RegistrationKind
from vital_registry.models.user import REVIEWER_ROLES
from vital_registry.modules.auth.dependencies import get_current_user, require_roles
from vital_registry.schemas.registration import RegistrationWorkflow, StatusUpdate
from vital_registry.services.identity_cache import CurrentUser
from vital_registry.services.registration_service import RegistrationService, kind_config


def can_view(user: CurrentUser, record) -> bool:
    return user.role in REVIEWER_ROLES or str(record.submitted_by) == user.id


def create_registration_router(kind: RegistrationKind, response_model: Type[RegistrationWorkflow]) -> APIRouter:
    router = APIRouter()
    resource = kind_config(kind).model.__name__

    @router.post("", response_model=response_model)
    async def create_registration(
        payload: Dict[str, Any] = Body(...),
        current_user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ):
        record = await RegistrationService(db).create_registration(kind, payload, current_user.id)
        return response_model.model_validate(record)

    @router.get("", response_model=List[response_model])
    async def list_registrations(
        current_user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ):
        records = await RegistrationService(db).list_visible(kind, current_user)
        return [response_model.model_validate(r) for r in records]

    @router.get("/application/{application_id}", response_model=response_model)
    async def get_by_application_id(
        application_id: str,
        current_user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ):
        record = await RegistrationService(db).get_by_application_id(kind, application_id)
        if record is None or not can_view(current_user, record):
            raise NotFoundError(resource, application_id)
        return response_model.model_validate(record)

    @router.get("/{registration_id}", response_model=response_model)
    async def get_registration(
        registration_id: int,
        current_user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ):
        record = await RegistrationService(db).get_by_id(kind, registration_id)
        if record is None or not can_view(current_user, record):
            raise NotFoundError(resource, registration_id)
        return response_model.model_validate(record)

    @router.patch("/{registration_id}/status", response_model=response_model)
    async def update_status(
        registration_id: int,
        body: StatusUpdate,
        reviewer: CurrentUser = Depends(require_roles(*REVIEWER_ROLES)),
        db: AsyncSession = Depends(get_db)
    ):
        """Approve (issues a certificate number) or reject a pending application"""
        record = await RegistrationService(db).update_status(
            kind,
            registration_id,
            body.status,
            reviewer.id,
            body.review_notes,
        )
        return response_model.model_validate(record)

    return router
