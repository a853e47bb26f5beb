"""Password Hashing — argon2id hashes for account credentials.

Invariants:
    - Plaintext never stored, never logged
    - verify_password returns False on mismatch or malformed hash (never raises)

Design Decisions:
    - argon2-cffi PasswordHasher with library defaults: parameters travel inside the hash,
      check_needs_rehash() upgrades them on next successful login
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return _hasher.check_needs_rehash(password_hash)
