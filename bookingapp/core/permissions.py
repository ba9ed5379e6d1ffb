# bookingapp/core/permissions.py
"""
Staff permission resolution.

A staff member's permissions come from the first resolver that has an answer:
  1. the provider-defined custom role assigned to them
  2. permissions granted directly on the staff record
  3. the defaults for their built-in role (owner, manager, staff)
"""
from typing import Callable, FrozenSet, List, Optional

from bookingapp.db.models.staff import Staff

VIEW_SCHEDULE = "view_schedule"
MANAGE_SCHEDULE = "manage_schedule"
MANAGE_BOOKINGS = "manage_bookings"
MANAGE_WAITLIST = "manage_waitlist"
MANAGE_STAFF = "manage_staff"

ALL_PERMISSIONS = frozenset({VIEW_SCHEDULE, MANAGE_SCHEDULE, MANAGE_BOOKINGS, MANAGE_WAITLIST, MANAGE_STAFF})

ROLE_DEFAULTS = {
    "owner": ALL_PERMISSIONS,
    "manager": frozenset({VIEW_SCHEDULE, MANAGE_SCHEDULE, MANAGE_BOOKINGS, MANAGE_WAITLIST}),
    "staff": frozenset({VIEW_SCHEDULE}),
}

PermissionResolver = Callable[[Staff], Optional[FrozenSet[str]]]


def from_custom_role(staff: Staff) -> Optional[FrozenSet[str]]:
    if staff.custom_role is None:
        return None
    return frozenset(staff.custom_role.permissions or [])


def from_direct_grant(staff: Staff) -> Optional[FrozenSet[str]]:
    if staff.permissions is None:
        return None
    return frozenset(staff.permissions)


def from_role_default(staff: Staff) -> Optional[FrozenSet[str]]:
    return ROLE_DEFAULTS.get(staff.role or "staff", frozenset())


RESOLVERS: List[PermissionResolver] = [from_custom_role, from_direct_grant, from_role_default]


def resolve_permissions(staff: Staff) -> FrozenSet[str]:
    for resolver in RESOLVERS:
        permissions = resolver(staff)
        if permissions is not None:
            return permissions
    return frozenset()


def has_permission(staff: Optional[Staff], permission: str) -> bool:
    if staff is None or not staff.is_active:
        return False
    return permission in resolve_permissions(staff)
