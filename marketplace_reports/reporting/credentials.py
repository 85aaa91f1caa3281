"""
Export Credential Check

Admin passwords are stored as PBKDF2-HMAC-SHA256 strings:

    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

Plaintext passwords are never stored or compared.
"""

import hashlib
import hmac
import secrets
from typing import Optional

import structlog

from marketplace_reports.config import get_settings
from .exceptions import CredentialLookupError, InvalidCredentialsError
from .repository import ReportRepository

logger = structlog.get_logger(__name__)
settings = get_settings()

ALGORITHM = "pbkdf2_sha256"
MAX_ITERATIONS = 10_000_000


def hash_password(password: str, iterations: Optional[int] = None, salt: Optional[bytes] = None) -> str:
    """Hash a password for storage in admin.password_hash."""
    iterations = iterations or settings.security.password_hash_iterations
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """Check a password against a stored hash. Malformed hashes never verify."""
    if not encoded:
        return False
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
        rounds = int(iterations)
    except ValueError:
        return False
    if not 1 <= rounds <= MAX_ITERATIONS:
        return False

    candidate = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(candidate, expected)


class ExportAuthorizer:
    """Gate for the PDF export: the caller must present a valid admin login."""

    def __init__(self, repository: ReportRepository):
        self.repository = repository

    async def authorize(self, email: str, password: str) -> None:
        """
        Raises:
            CredentialLookupError: the admin table could not be queried
            InvalidCredentialsError: unknown admin or wrong password
        """
        try:
            encoded = await self.repository.fetch_admin_password_hash(email)
        except Exception as e:
            logger.error("Admin credential lookup failed", error=str(e), error_type=type(e).__name__)
            raise CredentialLookupError("Unable to verify admin credentials") from e

        if not verify_password(password, encoded):
            logger.warning("Rejected report export", email=email)
            raise InvalidCredentialsError("Invalid admin password")

        logger.info("Report export authorized", email=email)
