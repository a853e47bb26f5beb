"""Organization Identifiers — pure formatting and validation of PREFIX-YEAR-RANDOM keys.

Invariants:
    - Format: {PREFIX}-{YYYY}-{9 uppercase base36 chars}, e.g. GW-2024-K3J9X0Q1Z
    - PREFIX is one or more uppercase ASCII letters
    - YEAR is the current calendar year at generation time
    - Pure functions: no DB access, no IO (existence check lives in services)

Design Decisions:
    - secrets.choice over random: identifiers are externally visible keys, not guessable sequences
    - Randomness injectable (rng parameter): deterministic tests without monkeypatching
"""

import re
import secrets
import string
from collections.abc import Callable
from datetime import datetime, timezone

from app.core.domain_types import OrganizationId

BASE36_ALPHABET = string.digits + string.ascii_uppercase
RANDOM_PART_LENGTH = 9

ORGANIZATION_ID_PATTERN = re.compile(r"^[A-Z]+-\d{4}-[A-Z0-9]{9}$")


def random_part(
    length: int = RANDOM_PART_LENGTH,
    rng: Callable[[str], str] = secrets.choice,
) -> str:
    """Uppercase base36 string of the given length."""
    return "".join(rng(BASE36_ALPHABET) for _ in range(length))


def format_candidate(
    prefix: str,
    year: int | None = None,
    suffix: str | None = None,
) -> OrganizationId:
    """Build one candidate identifier. Uniqueness is NOT checked here."""
    if not re.fullmatch(r"[A-Z]+", prefix):
        raise ValueError(f"invalid organization id prefix: {prefix!r}")
    year = year if year is not None else datetime.now(timezone.utc).year
    suffix = suffix if suffix is not None else random_part()
    return OrganizationId(f"{prefix}-{year}-{suffix}")


def is_well_formed(value: str, prefix: str | None = None) -> bool:
    """True when value already follows PREFIX-YEAR-RANDOM (optionally a given prefix)."""
    if not ORGANIZATION_ID_PATTERN.match(value):
        return False
    return prefix is None or value.split("-", 1)[0] == prefix
