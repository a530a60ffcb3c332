"""Tests for roles, permissions and actors."""

from __future__ import annotations

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from apps.users.models import User
from apps.users.roles import ROLE_PERMISSIONS, Actor, Permission, Role, has_permission


class RolePermissionTests(TestCase):
    def test_every_role_has_a_permission_set(self) -> None:
        self.assertEqual(set(ROLE_PERMISSIONS), set(Role))

    def test_guests_book_but_do_not_manage(self) -> None:
        self.assertTrue(has_permission(Role.CLIENT, Permission.CREATE_RESERVATION))
        self.assertTrue(has_permission(Role.CLIENT, Permission.CANCEL_OWN_RESERVATION))
        self.assertFalse(has_permission(Role.CLIENT, Permission.MANAGE_RESERVATIONS))

    def test_anonymous_only_views_availability(self) -> None:
        self.assertEqual(ROLE_PERMISSIONS[Role.ANONYMOUS], frozenset({Permission.VIEW_AVAILABILITY}))

    def test_partners_manage_their_properties_only(self) -> None:
        self.assertTrue(has_permission(Role.PARTNER, Permission.MANAGE_PROPERTY_RESERVATIONS))
        self.assertFalse(has_permission(Role.PARTNER, Permission.VIEW_ALL_RESERVATIONS))
        self.assertFalse(has_permission(Role.PARTNER, Permission.CREATE_RESERVATION))

    def test_management_roles(self) -> None:
        for role in (Role.MANAGER, Role.ADMIN, Role.SUPERUSER):
            self.assertTrue(has_permission(role, Permission.MANAGE_RESERVATIONS), role)
        for role in (Role.MEMBER, Role.EXECUTIVE):
            self.assertTrue(has_permission(role, Permission.VIEW_ALL_RESERVATIONS), role)
            self.assertFalse(has_permission(role, Permission.MANAGE_RESERVATIONS), role)

    def test_role_values_are_accepted(self) -> None:
        self.assertTrue(has_permission("manager", Permission.MANAGE_RESERVATIONS))


class ActorTests(TestCase):
    def test_actor_from_user(self) -> None:
        user = User.objects.create_user(email="client@example.dz", password="ClientPass123")

        actor = Actor.from_user(user)

        self.assertEqual(actor.user_id, user.pk)
        self.assertEqual(actor.role, Role.CLIENT)
        self.assertTrue(actor.is_authenticated)
        self.assertTrue(user.can(Permission.CREATE_RESERVATION))

    def test_superuser_gets_superuser_role(self) -> None:
        admin = User.objects.create_superuser(email="root@example.dz", password="RootPass123")

        self.assertEqual(Actor.from_user(admin).role, Role.SUPERUSER)

    def test_anonymous_user(self) -> None:
        actor = Actor.from_user(AnonymousUser())

        self.assertFalse(actor.is_authenticated)
        self.assertFalse(actor.can(Permission.CREATE_RESERVATION))
        self.assertTrue(actor.can(Permission.VIEW_AVAILABILITY))

    def test_phone_is_normalized(self) -> None:
        user = User.objects.create_user(email="phone@example.dz", phone="+213 555-000-444")

        self.assertEqual(user.phone, "+213555000444")
