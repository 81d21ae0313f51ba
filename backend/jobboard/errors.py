"""
Typed error taxonomy for the job board core.

Every error carries a stable machine-readable ``kind``, a human message and
the HTTP status it maps to. Services raise these unmodified; the single
exception handler in ``jobboard.main`` renders them as
``{"kind": ..., "detail": ...}``.
"""


class JobBoardError(Exception):
    """Base class for all domain errors surfaced to the request boundary"""
    kind = "ERROR"
    status_code = 500

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


# Authentication (401 / 403)

class BadCredentials(JobBoardError):
    """Unknown email or wrong password (never says which)"""
    kind = "BAD_CREDENTIALS"
    status_code = 401


class AccountDeactivated(JobBoardError):
    kind = "ACCOUNT_DEACTIVATED"
    status_code = 403


class InvalidCredential(JobBoardError):
    """Access credential missing, expired, malformed, forged or revoked"""
    kind = "INVALID_CREDENTIAL"
    status_code = 401


class CredentialExpired(InvalidCredential):
    kind = "CREDENTIAL_EXPIRED"


class CredentialMalformed(InvalidCredential):
    kind = "CREDENTIAL_MALFORMED"


class CredentialBadSignature(InvalidCredential):
    kind = "CREDENTIAL_BAD_SIGNATURE"


class SessionNotFound(JobBoardError):
    kind = "SESSION_NOT_FOUND"
    status_code = 401


class SessionExpired(JobBoardError):
    kind = "SESSION_EXPIRED"
    status_code = 401


class SessionRevoked(JobBoardError):
    kind = "SESSION_REVOKED"
    status_code = 401


# Authorization and state machines (403)

class Unauthorized(JobBoardError):
    """Role, ownership or company-membership check failed"""
    kind = "UNAUTHORIZED"
    status_code = 403


class IllegalStateTransition(JobBoardError):
    """Raised when a state machine guard rejects a transition"""
    kind = "ILLEGAL_STATE_TRANSITION"
    status_code = 403


# Everything else

class RateLimited(JobBoardError):
    kind = "RATE_LIMITED"
    status_code = 429


class DuplicateResource(JobBoardError):
    kind = "DUPLICATE_RESOURCE"
    status_code = 409


class NotFound(JobBoardError):
    kind = "NOT_FOUND"
    status_code = 404


class ValidationFailed(JobBoardError):
    kind = "VALIDATION_FAILED"
    status_code = 400
