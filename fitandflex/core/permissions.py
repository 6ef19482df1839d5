"""Role based authorization expressed as a typed permission table.

Routes never embed role lists. They ask whether a role may perform an
``Action`` on a ``Resource`` through :func:`is_authorized`, which is a pure
lookup and therefore trivially testable.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Mapping, Optional, Tuple


class RoleName(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    BRANCH_ADMIN = "BRANCH_ADMIN"
    USER = "USER"
    INSTRUCTOR = "INSTRUCTOR"


ROLE_DESCRIPTIONS: Mapping[RoleName, str] = {
    RoleName.SUPER_ADMIN: "Full access to every branch and setting",
    RoleName.BRANCH_ADMIN: "Manages users, classes and payments of one branch",
    RoleName.USER: "Gym member who books classes and pays memberships",
    RoleName.INSTRUCTOR: "Teaches classes and follows attendance",
}


class Resource(str, Enum):
    BRANCH = "branch"
    ROLE = "role"
    USER = "user"
    CLASS = "class"
    SCHEDULE = "schedule"
    RESERVATION = "reservation"
    SUBSCRIPTION = "subscription"
    PRODUCT = "product"
    PAYMENT = "payment"
    MEMBERSHIP = "membership"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CANCEL = "cancel"
    # Lifecycle operations reserved to staff (attendance, refunds, status changes, stats)
    MANAGE = "manage"


Permission = Tuple[Resource, Action]

_ADMINS: FrozenSet[RoleName] = frozenset({RoleName.SUPER_ADMIN, RoleName.BRANCH_ADMIN})
_MEMBERS: FrozenSet[RoleName] = _ADMINS | {RoleName.USER}
_STAFF: FrozenSet[RoleName] = _ADMINS | {RoleName.INSTRUCTOR}
_EVERYONE: FrozenSet[RoleName] = frozenset(RoleName)
_SUPER: FrozenSet[RoleName] = frozenset({RoleName.SUPER_ADMIN})

POLICY: Mapping[Permission, FrozenSet[RoleName]] = {
    (Resource.BRANCH, Action.READ): _EVERYONE,
    (Resource.BRANCH, Action.CREATE): _SUPER,
    (Resource.BRANCH, Action.UPDATE): _SUPER,
    (Resource.BRANCH, Action.DELETE): _SUPER,
    (Resource.ROLE, Action.READ): _ADMINS,
    (Resource.USER, Action.READ): _EVERYONE,
    (Resource.USER, Action.CREATE): _ADMINS,
    (Resource.USER, Action.UPDATE): _EVERYONE,
    (Resource.USER, Action.DELETE): _ADMINS,
    (Resource.USER, Action.MANAGE): _ADMINS,
    (Resource.CLASS, Action.READ): _EVERYONE,
    (Resource.CLASS, Action.CREATE): _ADMINS,
    (Resource.CLASS, Action.UPDATE): _ADMINS,
    (Resource.CLASS, Action.DELETE): _ADMINS,
    (Resource.SCHEDULE, Action.READ): _EVERYONE,
    (Resource.SCHEDULE, Action.CREATE): _ADMINS,
    (Resource.SCHEDULE, Action.UPDATE): _ADMINS,
    (Resource.SCHEDULE, Action.DELETE): _ADMINS,
    (Resource.RESERVATION, Action.READ): _MEMBERS | _STAFF,
    (Resource.RESERVATION, Action.CREATE): _MEMBERS,
    (Resource.RESERVATION, Action.CANCEL): _MEMBERS,
    (Resource.RESERVATION, Action.UPDATE): _ADMINS,
    (Resource.RESERVATION, Action.DELETE): _ADMINS,
    (Resource.RESERVATION, Action.MANAGE): _STAFF,
    (Resource.SUBSCRIPTION, Action.READ): _MEMBERS | _STAFF,
    (Resource.SUBSCRIPTION, Action.CREATE): _MEMBERS,
    (Resource.SUBSCRIPTION, Action.CANCEL): _MEMBERS,
    (Resource.SUBSCRIPTION, Action.DELETE): _ADMINS,
    (Resource.SUBSCRIPTION, Action.MANAGE): _STAFF,
    (Resource.PRODUCT, Action.READ): _EVERYONE,
    (Resource.PRODUCT, Action.CREATE): _ADMINS,
    (Resource.PRODUCT, Action.UPDATE): _ADMINS,
    (Resource.PRODUCT, Action.DELETE): _ADMINS,
    (Resource.PAYMENT, Action.READ): _MEMBERS,
    (Resource.PAYMENT, Action.CREATE): _MEMBERS,
    (Resource.PAYMENT, Action.UPDATE): _ADMINS,
    (Resource.PAYMENT, Action.DELETE): _ADMINS,
    (Resource.PAYMENT, Action.MANAGE): _ADMINS,
    (Resource.MEMBERSHIP, Action.READ): _MEMBERS,
    (Resource.MEMBERSHIP, Action.CREATE): _ADMINS,
    (Resource.MEMBERSHIP, Action.UPDATE): _ADMINS,
    (Resource.MEMBERSHIP, Action.DELETE): _ADMINS,
    (Resource.MEMBERSHIP, Action.MANAGE): _ADMINS,
}


def parse_role(value: Optional[str]) -> Optional[RoleName]:
    if value is None:
        return None
    try:
        return RoleName(value.upper())
    except ValueError:
        return None


def is_authorized(role: Optional[RoleName | str], resource: Resource, action: Action) -> bool:
    """Return True when ``role`` may perform ``action`` on ``resource``."""
    if not isinstance(role, RoleName):
        role = parse_role(role)
    if role is None:
        return False
    return role in POLICY.get((resource, action), frozenset())


def is_admin(role: Optional[RoleName | str]) -> bool:
    if not isinstance(role, RoleName):
        role = parse_role(role)
    return role in _ADMINS


__all__ = [
    "Action",
    "Permission",
    "POLICY",
    "Resource",
    "ROLE_DESCRIPTIONS",
    "RoleName",
    "is_admin",
    "is_authorized",
    "parse_role",
]
