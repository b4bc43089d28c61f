"""
SSP Realty - Authentication Module
====================================
Single-admin authentication for the write side of the API.

Security model:
- Exactly one administrator, configured at startup (email + bcrypt hash)
- No stored hash means login is disabled for the whole process
- JWT tokens (HS256) assert {email, role: "admin"} and expire 24h after issue
- Tokens are stateless: no server-side store, no revocation. Rotating the
  admin password does not invalidate tokens that were already issued.

Components:
    CredentialVerifier -> checks an email/password pair against the admin
    TokenService       -> issues and verifies bearer tokens
    require_admin      -> FastAPI dependency (the auth gate) that rejects
                          requests without a valid bearer token and hands
                          the decoded claims to the route handler
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from realty_api.config import AdminIdentity
from realty_api.errors import AuthError, AuthFailure


logger = logging.getLogger(__name__)

# JWT configuration
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24
ADMIN_ROLE = "admin"

# bcrypt only hashes the first 72 bytes; longer input is rejected outright.
BCRYPT_MAX_PASSWORD_BYTES = 72

# Security scheme for FastAPI dependency injection
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminClaims:
    """Identity decoded from a verified token."""
    email: str
    role: str = ADMIN_ROLE


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh bcrypt salt.

    Args:
        password: The plaintext password.

    Returns:
        The bcrypt hash as text, ready for ADMIN_PASSWORD_HASH.

    Raises:
        ValueError: If password is empty or longer than
                    BCRYPT_MAX_PASSWORD_BYTES once encoded.
    """
    if not password:
        raise ValueError("Password must not be empty.")
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes.")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class CredentialVerifier:
    """
    Checks submitted credentials against the configured admin identity.

    Raw passwords are never compared; bcrypt.checkpw re-hashes the candidate
    with the stored salt and compares in constant time.
    """

    def __init__(self, admin: AdminIdentity):
        self.admin = admin

    def verify(self, email: str | None, password: str | None) -> AdminIdentity:
        """
        Verify an email/password pair.

        Args:
            email:    Submitted email. Missing counts as a mismatch.
            password: Submitted plaintext password. Missing counts as a mismatch.

        Returns:
            The admin identity on success.

        Raises:
            AuthError: CONFIGURATION_MISSING when no hash is configured,
                       INVALID_CREDENTIALS on any mismatch.
        """
        if not self.admin.login_enabled:
            raise AuthError(AuthFailure.CONFIGURATION_MISSING)

        if not email or not password or email != self.admin.email:
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)

        try:
            matches = bcrypt.checkpw(
                password.encode("utf-8"),
                self.admin.password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.error("bcrypt rejected the admin password check: %s", e)
            matches = False

        if not matches:
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)
        return self.admin


class TokenService:
    """
    Issues and verifies signed, time-limited admin tokens.

    Attributes:
        secret: HMAC signing key held by the server.
        clock:  Returns the current UTC time; used for iat/exp on issue.
    """

    def __init__(
        self,
        secret: str,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.secret = secret
        self.clock = clock

    def issue(self, identity: AdminIdentity) -> str:
        """Generate a token for the admin, valid for JWT_EXPIRATION_HOURS."""
        now = self.clock()
        payload = {
            "email": identity.email,
            "role": ADMIN_ROLE,
            "iat": now,
            "exp": now + timedelta(hours=JWT_EXPIRATION_HOURS),
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> AdminClaims:
        """
        Verify signature and expiry of a token.

        Args:
            token: The JWT string from the Authorization header.

        Returns:
            The decoded admin claims.

        Raises:
            AuthError: EXPIRED if the token is past its exp,
                       INVALID_TOKEN for any other defect.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except ExpiredSignatureError:
            raise AuthError(AuthFailure.EXPIRED)
        except JWTError:
            raise AuthError(AuthFailure.INVALID_TOKEN)

        email = payload.get("email")
        if not email or payload.get("role") != ADMIN_ROLE:
            raise AuthError(AuthFailure.INVALID_TOKEN)
        return AdminClaims(email=email)


def require_admin(token_service: TokenService):
    """
    Create a FastAPI dependency that enforces admin authentication.

    Usage in routes:
        admin = require_admin(token_service)

        @router.put("/team/{member_id}")
        async def update_member(member_id: str, claims: AdminClaims = Depends(admin)): ...

    Args:
        token_service: The TokenService used for verification.

    Returns:
        A FastAPI dependency returning AdminClaims. Missing or non-Bearer
        headers raise AuthError(NO_TOKEN); the handler never runs.
    """
    async def _verify(
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ) -> AdminClaims:
        if credentials is None or not credentials.credentials:
            raise AuthError(AuthFailure.NO_TOKEN)
        return token_service.verify(credentials.credentials)

    return _verify
