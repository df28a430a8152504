from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_VIEW,
    CAP_SHIPPING_SYNC,
    HasAnyCapability,
    HasCapability,
    IsAdmin,
    IsBackOffice,
    effective_capabilities_for,
)

User = get_user_model()


class _View:
    required_capability = None
    required_any_capabilities = None


class PermissionRoleTests(TestCase):
    """
    Role + capability permissions.

    GUARANTEES:
    - admin and super_admin manage orders
    - manager can view but not manage
    - customers and anonymous users are denied everywhere
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.super_admin = User.objects.create_user(
            email="root@example.com", password="pass", role="super_admin"
        )
        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass", role="admin"
        )
        self.manager = User.objects.create_user(
            email="manager@example.com", password="pass", role="manager"
        )
        self.customer = User.objects.create_user(
            email="customer@example.com", password="pass", role="customer"
        )

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user or AnonymousUser()
        return request

    def _manage_view(self):
        view = _View()
        view.required_capability = CAP_ORDERS_MANAGE
        return view

    # --------------------------------------------------
    # ADMIN ROLES
    # --------------------------------------------------

    def test_admin_roles_can_manage_orders(self):
        for user in (self.admin, self.super_admin):
            request = self._request_for(user)
            self.assertTrue(IsAdmin().has_permission(request, None))
            self.assertTrue(HasCapability().has_permission(request, self._manage_view()))

    # --------------------------------------------------
    # MANAGER
    # --------------------------------------------------

    def test_manager_can_view_but_not_manage(self):
        request = self._request_for(self.manager)

        view = _View()
        view.required_any_capabilities = {CAP_ORDERS_VIEW}

        self.assertTrue(IsBackOffice().has_permission(request, None))
        self.assertTrue(HasAnyCapability().has_permission(request, view))
        self.assertFalse(IsAdmin().has_permission(request, None))
        self.assertFalse(HasCapability().has_permission(request, self._manage_view()))

    # --------------------------------------------------
    # CUSTOMER / ANONYMOUS
    # --------------------------------------------------

    def test_customer_has_no_back_office_capabilities(self):
        request = self._request_for(self.customer)

        self.assertEqual(effective_capabilities_for(self.customer), set())
        self.assertFalse(IsBackOffice().has_permission(request, None))
        self.assertFalse(HasCapability().has_permission(request, self._manage_view()))

    def test_anonymous_user_denied_everywhere(self):
        request = self._request_for(None)

        self.assertFalse(IsAdmin().has_permission(request, None))
        self.assertFalse(IsBackOffice().has_permission(request, None))
        self.assertFalse(HasCapability().has_permission(request, self._manage_view()))

    def test_capability_permission_denies_when_view_declares_nothing(self):
        request = self._request_for(self.super_admin)

        self.assertFalse(HasCapability().has_permission(request, _View()))
        self.assertIn(CAP_SHIPPING_SYNC, effective_capabilities_for(self.super_admin))
