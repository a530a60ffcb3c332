"""Roles and permissions of the platform.

Roles form a closed set and each one maps to a fixed set of permissions.
Callers check a permission once, at the application boundary, instead of
comparing role strings in every view.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Role(models.TextChoices):
    ANONYMOUS = "anonymous", _("Visiteur")
    CLIENT = "client", _("Client")
    PARTNER = "partner", _("Partenaire propriétaire")
    MEMBER = "member", _("Employé")
    MANAGER = "manager", _("Gestionnaire")
    EXECUTIVE = "executive", _("Direction")
    ADMIN = "admin", _("Administrateur")
    SUPERUSER = "superuser", _("Superutilisateur")


class Permission(str, Enum):
    VIEW_AVAILABILITY = "view_availability"
    CREATE_RESERVATION = "create_reservation"
    VIEW_OWN_RESERVATIONS = "view_own_reservations"
    CANCEL_OWN_RESERVATION = "cancel_own_reservation"
    VIEW_PROPERTY_RESERVATIONS = "view_property_reservations"
    MANAGE_PROPERTY_RESERVATIONS = "manage_property_reservations"
    VIEW_ALL_RESERVATIONS = "view_all_reservations"
    MANAGE_RESERVATIONS = "manage_reservations"


_GUEST = frozenset({
    Permission.VIEW_AVAILABILITY,
    Permission.CREATE_RESERVATION,
    Permission.VIEW_OWN_RESERVATIONS,
    Permission.CANCEL_OWN_RESERVATION,
})
_STAFF = _GUEST | {Permission.VIEW_ALL_RESERVATIONS}
_MANAGEMENT = _STAFF | {Permission.MANAGE_RESERVATIONS}

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ANONYMOUS: frozenset({Permission.VIEW_AVAILABILITY}),
    Role.CLIENT: _GUEST,
    Role.PARTNER: frozenset({
        Permission.VIEW_AVAILABILITY,
        Permission.VIEW_PROPERTY_RESERVATIONS,
        Permission.MANAGE_PROPERTY_RESERVATIONS,
    }),
    Role.MEMBER: _STAFF,
    Role.MANAGER: frozenset(_MANAGEMENT),
    Role.EXECUTIVE: frozenset(_STAFF),
    Role.ADMIN: frozenset(_MANAGEMENT),
    Role.SUPERUSER: frozenset(Permission),
}


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(Role(role), frozenset())


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation."""

    user_id: Any
    role: Role

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls(user_id=None, role=Role.ANONYMOUS)

    @classmethod
    def system(cls) -> "Actor":
        """Scheduled jobs acting on behalf of the platform."""
        return cls(user_id=None, role=Role.SUPERUSER)

    @classmethod
    def from_user(cls, user) -> "Actor":
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        if getattr(user, "is_superuser", False):
            return cls(user_id=user.pk, role=Role.SUPERUSER)
        return cls(user_id=user.pk, role=Role(user.role))

    @property
    def is_authenticated(self) -> bool:
        return self.role != Role.ANONYMOUS

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)
