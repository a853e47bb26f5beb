"""Capabilities — role table and the single authorization check.

Tests:
    - Every role has an entry; MEMBER holds nothing
    - Operator passes for any organization, even None
    - Non-operators pass only on their own organization with a held capability
"""

import uuid

import pytest

from app.core.domain_types import Capability, OrganizationId, UserId, UserRole
from app.core.errors import ForbiddenError
from app.core.permissions import (
    ROLE_CAPABILITIES, Principal, capabilities_for, ensure_capability, has_capability,
)

ORG = OrganizationId("GW-2024-K3J9X0Q1Z")


def _principal(role: UserRole, org=ORG) -> Principal:
    return Principal(user_id=UserId(uuid.uuid4()), role=role, organization_id=org)


def test_every_role_has_entry():
    assert set(ROLE_CAPABILITIES) == set(UserRole)
    assert capabilities_for(UserRole.MEMBER) == frozenset()
    assert capabilities_for(None) == frozenset()


def test_super_admin_holds_everything():
    assert capabilities_for(UserRole.SUPER_ADMIN) == frozenset(Capability)


def test_operator_passes_everywhere():
    op = Principal.operator()
    for capability in Capability:
        assert has_capability(op, capability, "any-org")
        assert has_capability(op, capability, None)


def test_own_organization_with_capability_passes():
    ensure_capability(
        _principal(UserRole.SUPER_ADMIN), Capability.ADMINISTER_ORGANIZATION, ORG,
    )


def test_other_organization_is_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_capability(
            _principal(UserRole.SUPER_ADMIN), Capability.ADMINISTER_ORGANIZATION, "other",
        )
    assert exc_info.value.http_status == 403


@pytest.mark.parametrize("role, capability, allowed", [
    (UserRole.CHURCH_ADMIN, Capability.MANAGE_CAMPUSES, True),
    (UserRole.CHURCH_ADMIN, Capability.MANAGE_ROLES, False),
    (UserRole.PASTOR, Capability.MANAGE_PATHWAYS, True),
    (UserRole.PASTOR, Capability.MANAGE_CAMPUSES, False),
    (UserRole.LEADER, Capability.VIEW_MEMBERS, True),
    (UserRole.MEMBER, Capability.VIEW_MEMBERS, False),
])
def test_role_table(role, capability, allowed):
    assert has_capability(_principal(role), capability, ORG) is allowed


def test_user_without_organization_never_passes():
    principal = _principal(UserRole.SUPER_ADMIN, org=None)
    assert not has_capability(principal, Capability.VIEW_MEMBERS, None)
