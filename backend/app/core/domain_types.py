"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - OrganizationId is the human-readable church key (PREFIX-YEAR-RANDOM), never a UUID
    - UserId, CampusId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and store as plain strings
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

OrganizationId = NewType("OrganizationId", str)
UserId = NewType("UserId", UUID)
CampusId = NewType("CampusId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Platform role stored on the user row. Drives capability lookup."""
    SUPER_ADMIN = "SUPER_ADMIN"
    CHURCH_ADMIN = "CHURCH_ADMIN"
    PASTOR = "PASTOR"
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class MembershipRole(str, Enum):
    """Role of a user inside one church (church_members.role)."""
    ADMIN = "ADMIN"
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class NotificationType(str, Enum):
    """In-app notification kinds."""
    SYSTEM = "SYSTEM"
    EVENT = "EVENT"
    MEMBER = "MEMBER"
    LIFE_GROUP = "LIFE_GROUP"
    PATHWAY = "PATHWAY"
    ANNOUNCEMENT = "ANNOUNCEMENT"


class ThemePreference(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class PasswordStrength(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class Capability(str, Enum):
    """Fixed set of things a caller may be allowed to do within one organization."""
    ADMINISTER_ORGANIZATION = "administer_organization"
    MANAGE_ROLES = "manage_roles"
    MANAGE_CAMPUSES = "manage_campuses"
    MANAGE_PATHWAYS = "manage_pathways"
    VIEW_MEMBERS = "view_members"
