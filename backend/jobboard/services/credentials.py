"""
Short-lived signed access credentials (JWT, HS256).

Claims:
- sub: identity id (string)
- iat: issued-at, float epoch seconds (microsecond precision so a credential
  issued right after a revocation is never mistaken for an older one)
- exp: issued-at + configured TTL

Expiry is checked here against an explicit ``now`` rather than by PyJWT's
own clock, so callers and tests control time.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt
from jwt.exceptions import DecodeError, InvalidSignatureError, InvalidTokenError

from jobboard.config import settings
from jobboard.database_types import utcnow
from jobboard.errors import CredentialBadSignature, CredentialExpired, CredentialMalformed


@dataclass(frozen=True)
class CredentialClaims:
    """Verified contents of an access credential"""
    subject_id: int
    issued_at: datetime
    expires_at: datetime


class CredentialCodec:
    """Issues and verifies access credentials with a symmetric key."""

    REQUIRED_CLAIMS = ["sub", "iat", "exp"]

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl: timedelta = timedelta(minutes=15)):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(self, subject_id: int, issued_at: Optional[datetime] = None) -> str:
        """
        Create a signed credential for ``subject_id``.

        Args:
            subject_id: Identity id to embed as the subject
            issued_at: Issue instant (aware UTC); defaults to now

        Returns:
            str: The encoded credential
        """
        issued_at = issued_at or utcnow()
        expires_at = issued_at + self.ttl
        payload = {
            "sub": str(subject_id),
            "iat": issued_at.timestamp(),
            "exp": expires_at.timestamp(),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, credential: str, now: Optional[datetime] = None) -> CredentialClaims:
        """
        Verify signature, structure and expiry of a credential.

        Raises:
            CredentialBadSignature: Signature does not match the server key
            CredentialMalformed: Not a JWT, or required claims missing/invalid
            CredentialExpired: ``now`` is past the expiry claim
        """
        now = now or utcnow()
        try:
            payload = jwt.decode(
                credential,
                self._secret_key,
                algorithms=[self._algorithm],
                options={
                    "require": self.REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except InvalidSignatureError:
            raise CredentialBadSignature("Access credential signature is invalid.")
        except (DecodeError, InvalidTokenError):
            raise CredentialMalformed("Access credential is malformed.")

        try:
            subject_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(float(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(float(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            raise CredentialMalformed("Access credential is malformed.")

        if now > expires_at:
            raise CredentialExpired("Access credential has expired.")

        return CredentialClaims(subject_id=subject_id, issued_at=issued_at, expires_at=expires_at)


@lru_cache(maxsize=1)
def get_credential_codec() -> CredentialCodec:
    """Codec configured from settings (shared, stateless)."""
    return CredentialCodec(
        secret_key=settings.secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(minutes=settings.access_token_ttl_minutes),
    )
