"""
Unit Tests for document upload and listing
"""
from pathlib import Path

import pytest

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


def upload_form(application_id: str, application_type: str = "birth", document_type: str = "medical_certificate"):
    return {
        "applicationId": application_id,
        "applicationType": application_type,
        "documentType": document_type,
    }


@pytest.fixture
async def birth_application(client, login, test_user, birth_form):
    await login(test_user)
    response = await client.post("/api/birth-registrations", json=birth_form())
    assert response.status_code == 200
    return response.json()


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_pdf(self, client, birth_application, test_user):
        response = await client.post(
            "/api/documents/upload",
            files={"document": ("birth-notice.pdf", PDF_BYTES, "application/pdf")},
            data=upload_form(birth_application["applicationId"]),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["applicationId"] == birth_application["applicationId"]
        assert body["applicationType"] == "birth"
        assert body["fileName"] == "birth-notice.pdf"
        assert body["fileSize"] == len(PDF_BYTES)
        assert body["uploadedBy"] == str(test_user.id)
        assert "filePath" not in body

    @pytest.mark.asyncio
    async def test_file_written_to_blob_store(self, client, birth_application, db_session):
        from sqlalchemy import select
        from vital_registry.models.document import Document

        await client.post(
            "/api/documents/upload",
            files={"document": ("id.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
            data=upload_form(birth_application["applicationId"], document_type="parent_id"),
        )

        document = (await db_session.execute(select(Document))).scalar_one()
        assert Path(document.file_path).read_bytes() == b"\x89PNG\r\n\x1a\nfake"
        assert Path(document.file_path).suffix == ".png"

    @pytest.mark.asyncio
    async def test_oversized_file(self, client, birth_application):
        response = await client.post(
            "/api/documents/upload",
            files={"document": ("scan.pdf", b"0" * (6 * 1024 * 1024), "application/pdf")},
            data=upload_form(birth_application["applicationId"]),
        )

        assert response.status_code == 413
        assert response.json()["code"] == "FILE_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_executable_rejected(self, client, birth_application):
        response = await client.post(
            "/api/documents/upload",
            files={"document": ("setup.exe", b"MZ\x90\x00", "application/x-msdownload")},
            data=upload_form(birth_application["applicationId"]),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    @pytest.mark.asyncio
    async def test_missing_file(self, client, birth_application):
        response = await client.post(
            "/api/documents/upload",
            data=upload_form(birth_application["applicationId"]),
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_application(self, client, login, test_user):
        await login(test_user)

        response = await client.post(
            "/api/documents/upload",
            files={"document": ("scan.pdf", PDF_BYTES, "application/pdf")},
            data=upload_form("BR1999999"),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_someone_elses_application(self, client, login, birth_application, user_factory):
        stranger = await user_factory()
        await login(stranger)

        response = await client.post(
            "/api/documents/upload",
            files={"document": ("scan.pdf", PDF_BYTES, "application/pdf")},
            data=upload_form(birth_application["applicationId"]),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_session(self, client):
        response = await client.post(
            "/api/documents/upload",
            files={"document": ("scan.pdf", PDF_BYTES, "application/pdf")},
            data=upload_form("BR2026001"),
        )

        assert response.status_code == 401


class TestList:

    @pytest.mark.asyncio
    async def test_list_for_application(self, client, login, birth_application, test_user, registrar_user):
        application_id = birth_application["applicationId"]
        for name in ("a.pdf", "b.pdf"):
            await client.post(
                "/api/documents/upload",
                files={"document": (name, PDF_BYTES, "application/pdf")},
                data=upload_form(application_id),
            )

        own = await client.get(f"/api/documents/{application_id}/birth")
        await login(registrar_user)
        reviewer = await client.get(f"/api/documents/{application_id}/birth")
        other_kind = await client.get(f"/api/documents/{application_id}/death")

        assert [d["fileName"] for d in own.json()] == ["a.pdf", "b.pdf"]
        assert len(reviewer.json()) == 2
        assert other_kind.json() == []

    @pytest.mark.asyncio
    async def test_other_users_see_nothing(self, client, login, birth_application, user_factory):
        application_id = birth_application["applicationId"]
        await client.post(
            "/api/documents/upload",
            files={"document": ("a.pdf", PDF_BYTES, "application/pdf")},
            data=upload_form(application_id),
        )

        await login(await user_factory())
        response = await client.get(f"/api/documents/{application_id}/birth")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_invalid_application_type(self, client, login, test_user):
        await login(test_user)

        response = await client.get("/api/documents/BR2026001/marriage")

        assert response.status_code == 400
