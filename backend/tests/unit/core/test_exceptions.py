"""
Unit Tests for the exception hierarchy
"""
from vital_registry.core.exceptions import (
    RegistryError,
    AuthenticationError,
    InvalidCredentialsError,
    EmailNotVerifiedError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
    InvalidFileTypeError,
    FileTooLargeError,
    ConflictError,
    InvalidTransitionError,
    UpstreamError,
)


class TestStatusCodes:

    def test_authentication_errors_are_401(self):
        assert AuthenticationError().status_code == 401
        assert InvalidCredentialsError().status_code == 401
        assert EmailNotVerifiedError().status_code == 401

    def test_other_status_codes(self):
        assert AuthorizationError().status_code == 403
        assert NotFoundError("BirthRegistration", 1).status_code == 404
        assert ValidationError().status_code == 400
        assert InvalidFileTypeError("application/x-msdownload", ["application/pdf"]).status_code == 400
        assert FileTooLargeError(6 * 1024 * 1024, 5 * 1024 * 1024).status_code == 413
        assert ConflictError("Email already registered").status_code == 400
        assert InvalidTransitionError("approved", "rejected").status_code == 400
        assert UpstreamError().status_code == 500

    def test_all_derive_from_registry_error(self):
        for exc in (
            AuthenticationError(),
            AuthorizationError(),
            NotFoundError("Document", 1),
            ValidationError(),
            ConflictError("x"),
            InvalidTransitionError("approved", "approved"),
            UpstreamError(),
        ):
            assert isinstance(exc, RegistryError)


class TestMessages:

    def test_login_failures_are_distinct(self):
        assert InvalidCredentialsError().message == "Invalid email or password."
        assert EmailNotVerifiedError().message == "Email not verified."
        assert InvalidCredentialsError().code != EmailNotVerifiedError().code

    def test_default_auth_messages(self):
        assert AuthenticationError().message == "Unauthorized"
        assert AuthorizationError().message == "Insufficient permissions"

    def test_to_dict_merges_details(self):
        body = InvalidTransitionError("approved", "rejected").to_dict()

        assert body["code"] == "INVALID_TRANSITION"
        assert body["current_status"] == "approved"
        assert body["requested_status"] == "rejected"
        assert "approved" in body["message"]


class TestValidationError:

    def test_single_field(self):
        exc = ValidationError("Required", field="childName")

        assert exc.fields == ["childName"]
        assert exc.to_dict()["errors"] == [{"field": "childName", "message": "Required"}]

    def test_error_list(self):
        exc = ValidationError(errors=[
            {"field": "childName", "message": "Field required"},
            {"field": "dateOfBirth", "message": "Field required"},
        ])

        assert exc.fields == ["childName", "dateOfBirth"]

    def test_file_errors_name_the_document_field(self):
        assert InvalidFileTypeError("text/plain", ["application/pdf"]).fields == ["document"]
        assert FileTooLargeError(10, 5).fields == ["document"]
