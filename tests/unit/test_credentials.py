"""
Unit Tests - Export Credentials
"""
import pytest

from marketplace_reports.reporting.credentials import ExportAuthorizer, hash_password, verify_password
from marketplace_reports.reporting.exceptions import CredentialLookupError, InvalidCredentialsError


class TestPasswordHashing:
    """Tests for hash_password and verify_password"""

    def test_verify(self):
        encoded = hash_password("hunter2", iterations=1000)

        assert encoded.startswith("pbkdf2_sha256$1000$")
        assert verify_password("hunter2", encoded)
        assert not verify_password("hunter3", encoded)

    def test_plaintext_never_stored(self):
        assert "hunter2" not in hash_password("hunter2", iterations=1000)

    def test_salted(self):
        assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)
        assert hash_password("same", iterations=1000, salt=b"x" * 16) == hash_password(
            "same", iterations=1000, salt=b"x" * 16
        )

    @pytest.mark.parametrize("encoded", [
        None,
        "",
        "hunter2",
        "md5$1000$00$00",
        "pbkdf2_sha256$many$00$00",
        "pbkdf2_sha256$1000$zz$00",
        "pbkdf2_sha256$0$00$00",
        "pbkdf2_sha256$-5$00$00",
        "pbkdf2_sha256$99999999999999999999999$00$00",
    ])
    def test_malformed_hash_rejected(self, encoded):
        assert not verify_password("hunter2", encoded)


class TestExportAuthorizer:
    """Tests for ExportAuthorizer"""

    async def test_valid_login(self, fake_repository, admin_credentials):
        authorizer = ExportAuthorizer(fake_repository)

        await authorizer.authorize(admin_credentials["email"], admin_credentials["password"])

    async def test_wrong_password(self, fake_repository, admin_credentials):
        authorizer = ExportAuthorizer(fake_repository)

        with pytest.raises(InvalidCredentialsError, match="Invalid admin password"):
            await authorizer.authorize(admin_credentials["email"], "nope")

    async def test_unknown_admin(self, fake_repository, admin_credentials):
        authorizer = ExportAuthorizer(fake_repository)

        with pytest.raises(InvalidCredentialsError):
            await authorizer.authorize("someone@example.com", admin_credentials["password"])

    async def test_unusable_stored_hash(self, fake_repository, admin_credentials):
        fake_repository.admins[admin_credentials["email"]] = "pbkdf2_sha256$0$00$00"
        authorizer = ExportAuthorizer(fake_repository)

        with pytest.raises(InvalidCredentialsError):
            await authorizer.authorize(admin_credentials["email"], admin_credentials["password"])

    async def test_lookup_failure(self, fake_repository, admin_credentials):
        fake_repository.fail_on = {"fetch_admin_password_hash"}
        authorizer = ExportAuthorizer(fake_repository)

        with pytest.raises(CredentialLookupError, match="Unable to verify admin credentials"):
            await authorizer.authorize(admin_credentials["email"], admin_credentials["password"])
