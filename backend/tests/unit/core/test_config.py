"""
Unit Tests for settings parsing helpers
"""
from vital_registry.core.config import (
    settings,
    parse_cors_origins,
    parse_csv,
    parse_identity_roles,
)


class TestParsers:

    def test_parse_csv(self):
        assert parse_csv("image/jpeg, image/png ,application/pdf") == [
            "image/jpeg", "image/png", "application/pdf"
        ]

    def test_parse_csv_json_list(self):
        assert parse_csv('["public", "health_worker"]') == ["public", "health_worker"]

    def test_parse_csv_empty(self):
        assert parse_csv("") == []

    def test_parse_cors_origins(self):
        assert parse_cors_origins("http://a.test,http://b.test") == ["http://a.test", "http://b.test"]

    def test_parse_identity_roles(self):
        parsed = parse_identity_roles("Admin@Registry.gov.gh:admin, ops@registry.gov.gh:registrar")

        assert parsed == {
            "admin@registry.gov.gh": "admin",
            "ops@registry.gov.gh": "registrar",
        }

    def test_parse_identity_roles_skips_malformed(self):
        assert parse_identity_roles("no-role-here,x@y.gh:public") == {"x@y.gh": "public"}

    def test_parse_identity_roles_empty(self):
        assert parse_identity_roles("") == {}


class TestSettings:

    def test_defaults(self):
        assert settings.SESSION_COOKIE_NAME == "sid"
        assert settings.SESSION_MAX_AGE_SECONDS == 24 * 60 * 60
        assert settings.IDENTITY_CACHE_TTL_SECONDS == 300
        assert settings.MAX_UPLOAD_SIZE == 5 * 1024 * 1024
        assert settings.ISSUING_OFFICE == "Accra Registry"

    def test_allowed_mime_types(self):
        assert settings.ALLOWED_MIME_TYPES == ["image/jpeg", "image/png", "application/pdf"]

    def test_self_registration_roles(self):
        assert settings.SELF_REGISTRATION_ROLES == ["public", "health_worker"]

    def test_links(self):
        assert settings.get_verification_url("abc").endswith("/verify?token=abc")
        assert settings.get_password_reset_url("abc").endswith("/reset-password?token=abc")
