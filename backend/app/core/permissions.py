"""Capabilities — fixed role-to-capability table and the single authorization check.

Invariants:
    - Every UserRole has an entry in ROLE_CAPABILITIES (MEMBER maps to the empty set)
    - The platform operator holds every capability over every organization
    - A non-operator passes only for its own organization AND a capability its role holds
    - Pure: the Principal is resolved by the API layer, this module never reads the DB

Design Decisions:
    - One declarative check (ensure_capability) instead of per-route role comparisons
    - frozenset values: table is immutable at runtime, membership test is O(1)
"""

from dataclasses import dataclass

from app.core.domain_types import Capability, OrganizationId, UserId, UserRole
from app.core.errors import ErrorContext, ForbiddenError

_ALL = frozenset(Capability)

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.SUPER_ADMIN: _ALL,
    UserRole.CHURCH_ADMIN: _ALL - {
        Capability.ADMINISTER_ORGANIZATION, Capability.MANAGE_ROLES,
    },
    UserRole.PASTOR: frozenset({
        Capability.MANAGE_PATHWAYS, Capability.VIEW_MEMBERS,
    }),
    UserRole.LEADER: frozenset({Capability.VIEW_MEMBERS}),
    UserRole.MEMBER: frozenset(),
}


@dataclass(frozen=True)
class Principal:
    """Resolved caller of a request."""
    user_id: UserId | None
    role: UserRole | None
    organization_id: OrganizationId | None
    is_operator: bool = False

    @classmethod
    def operator(cls) -> "Principal":
        return cls(user_id=None, role=None, organization_id=None, is_operator=True)


def capabilities_for(role: UserRole | None) -> frozenset[Capability]:
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES[role]


def has_capability(
    principal: Principal,
    capability: Capability,
    organization_id: str | None,
) -> bool:
    if principal.is_operator:
        return True
    if organization_id is None or principal.organization_id != organization_id:
        return False
    return capability in capabilities_for(principal.role)


def ensure_capability(
    principal: Principal,
    capability: Capability,
    organization_id: str | None,
) -> None:
    """Raise ForbiddenError unless principal may exercise capability on organization_id."""
    if not has_capability(principal, capability, organization_id):
        raise ForbiddenError(
            f"Missing capability {capability.value}",
            context=ErrorContext(
                user_id=str(principal.user_id) if principal.user_id else None,
                organization_id=organization_id,
            ),
        )
