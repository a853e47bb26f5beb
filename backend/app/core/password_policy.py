"""Password Policy — pure strength validation for account passwords.

Invariants:
    - Rules: >= 8 chars, one uppercase, one lowercase, one digit, one special char
    - strength is STRONG with 0 failures, MEDIUM with <= 2, WEAK otherwise
    - Pure: never sees the hash, never touches the DB
"""

import re
from dataclasses import dataclass, field

from app.core.domain_types import PasswordStrength

MIN_LENGTH = 8

_RULES: tuple[tuple[str, str], ...] = (
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"\d", "Password must contain at least one number"),
    (r"[^A-Za-z0-9]", "Password must contain at least one special character"),
)


@dataclass
class PasswordCheck:
    is_valid: bool
    strength: PasswordStrength
    errors: list[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordCheck:
    errors: list[str] = []
    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long")
    for pattern, message in _RULES:
        if not re.search(pattern, password):
            errors.append(message)

    if not errors:
        strength = PasswordStrength.STRONG
    elif len(errors) <= 2:
        strength = PasswordStrength.MEDIUM
    else:
        strength = PasswordStrength.WEAK
    return PasswordCheck(is_valid=not errors, strength=strength, errors=errors)
