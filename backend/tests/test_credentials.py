"""
Tests for the access credential codec.

Validates:
- Issued credentials verify and carry subject + issue instant
- Expiry is judged against the caller's clock
- Tampered, foreign-key and garbage credentials are rejected by kind
"""
from datetime import timedelta

import jwt
import pytest

from jobboard.database_types import utcnow
from jobboard.errors import (
    CredentialBadSignature,
    CredentialExpired,
    CredentialMalformed,
    InvalidCredential,
)
from jobboard.services.credentials import CredentialCodec

SECRET = "test-secret-key-with-enough-bytes-1234"


@pytest.fixture
def codec() -> CredentialCodec:
    return CredentialCodec(SECRET, ttl=timedelta(minutes=15))


def test_issue_then_verify_returns_claims(codec):
    issued_at = utcnow()
    token = codec.issue(42, issued_at=issued_at)

    claims = codec.verify(token, now=issued_at + timedelta(minutes=1))

    assert claims.subject_id == 42
    assert abs((claims.issued_at - issued_at).total_seconds()) < 0.001
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_issued_at_keeps_sub_second_precision(codec):
    """Two credentials a few milliseconds apart must not share an issue instant."""
    first = utcnow()
    second = first + timedelta(milliseconds=5)

    a = codec.verify(codec.issue(1, issued_at=first), now=second)
    b = codec.verify(codec.issue(1, issued_at=second), now=second)

    assert a.issued_at < b.issued_at


def test_verify_at_exact_expiry_is_still_valid(codec):
    issued_at = utcnow()
    token = codec.issue(1, issued_at=issued_at)

    claims = codec.verify(token, now=issued_at + timedelta(minutes=15))
    assert claims.subject_id == 1


def test_expired_credential_is_rejected(codec):
    issued_at = utcnow()
    token = codec.issue(1, issued_at=issued_at)

    with pytest.raises(CredentialExpired):
        codec.verify(token, now=issued_at + timedelta(minutes=15, seconds=1))


def test_credential_signed_with_other_key_is_rejected(codec):
    other = CredentialCodec("a-completely-different-secret-key-5678")
    token = other.issue(1)

    with pytest.raises(CredentialBadSignature):
        codec.verify(token)


def test_tampered_payload_is_rejected(codec):
    token = codec.issue(1)
    header, payload, signature = token.split(".")
    forged = codec.issue(2).split(".")[1]

    with pytest.raises(CredentialBadSignature):
        codec.verify(f"{header}.{forged}.{signature}")


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", "Bearer xyz"])
def test_garbage_is_malformed(codec, garbage):
    with pytest.raises(CredentialMalformed):
        codec.verify(garbage)


def test_missing_claims_are_malformed(codec):
    token = jwt.encode({"sub": "1"}, SECRET, algorithm="HS256")

    with pytest.raises(CredentialMalformed):
        codec.verify(token)


def test_non_numeric_subject_is_malformed(codec):
    now = utcnow()
    token = jwt.encode(
        {"sub": "alice", "iat": now.timestamp(), "exp": (now + timedelta(minutes=5)).timestamp()},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(CredentialMalformed):
        codec.verify(token, now=now)


def test_all_rejections_share_the_invalid_credential_base(codec):
    with pytest.raises(InvalidCredential):
        codec.verify("nope")
