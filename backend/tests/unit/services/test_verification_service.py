"""
Unit Tests for certificate verification
"""
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch, AsyncMock

import pytest

from conftest import birth_payload, death_payload
from vital_registry.models.registration import ApplicationStatus, RegistrationKind
from vital_registry.services.registration_service import RegistrationService
from vital_registry.services.verification_service import VerificationService


class TestVerify:

    @pytest.mark.asyncio
    async def test_unknown_number(self, db_session):
        assert await VerificationService(db_session).verify("BC0000000000000ZZZZ") == {"valid": False}

    @pytest.mark.asyncio
    async def test_blank_number(self, db_session):
        assert await VerificationService(db_session).verify("   ") == {"valid": False}

    @pytest.mark.asyncio
    async def test_approved_birth_certificate(self, db_session, test_user, registrar_user):
        registrations = RegistrationService(db_session)
        record = await registrations.create_birth_registration(birth_payload(), test_user.id)
        approved = await registrations.update_status(
            RegistrationKind.BIRTH, record.id, "approved", registrar_user.id
        )

        result = await VerificationService(db_session).verify(approved.certificate_number)

        assert result["valid"] is True
        assert result["type"] == "Birth Certificate"
        assert result["application_id"] == record.application_id
        assert result["issuing_office"] == "Accra Registry"
        assert result["issued_date"] is not None

    @pytest.mark.asyncio
    async def test_approved_death_certificate(self, db_session, test_user, admin_user):
        registrations = RegistrationService(db_session)
        record = await registrations.create_death_registration(death_payload(), test_user.id)
        approved = await registrations.update_status(
            RegistrationKind.DEATH, record.id, "approved", admin_user.id
        )

        result = await VerificationService(db_session).verify(approved.certificate_number)

        assert result["valid"] is True
        assert result["type"] == "Death Certificate"

    @pytest.mark.asyncio
    async def test_application_id_is_not_a_certificate_number(self, db_session, test_user, registrar_user):
        registrations = RegistrationService(db_session)
        record = await registrations.create_birth_registration(birth_payload(), test_user.id)
        await registrations.update_status(RegistrationKind.BIRTH, record.id, "rejected", registrar_user.id)

        assert await VerificationService(db_session).verify(record.application_id) == {"valid": False}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ApplicationStatus.PENDING, ApplicationStatus.REJECTED])
    async def test_unapproved_record_with_matching_number_reveals_nothing(self, db_session, status):
        record = SimpleNamespace(
            status=status,
            certificate_number="BC1700000000000ABCD",
            application_id=f"BR{datetime.utcnow().year}001",
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
        )
        service = VerificationService(db_session)

        with patch.object(
            service.registrations,
            "get_by_certificate_number",
            AsyncMock(side_effect=lambda kind, number: record if kind == RegistrationKind.BIRTH else None),
        ) as lookup:
            result = await service.verify("BC1700000000000ABCD")

        assert result == {"valid": False}
        assert lookup.await_count == len(RegistrationKind)
