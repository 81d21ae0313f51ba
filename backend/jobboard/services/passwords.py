"""Password hashing (argon2id)."""
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False on mismatch or on a hash this hasher cannot read.
    """
    try:
        return _hasher.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHash):
        return False
