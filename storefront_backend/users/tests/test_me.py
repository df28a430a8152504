from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from permissions.roles import CAP_ORDERS_MANAGE, CAP_ORDERS_VIEW

User = get_user_model()


class MeViewTests(TestCase):
    """
    GUARANTEES:
    - anonymous -> 401
    - profile carries the role and its effective capabilities
    - JWT login works against the email field
    """

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("users:me")

    def test_anonymous_is_401(self):
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_manager_profile(self):
        user = User.objects.create_user(
            email="manager@example.com", password="pass", role="manager", first_name="Sara"
        )
        self.client.force_authenticate(user=user)

        res = self.client.get(self.url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["email"], "manager@example.com")
        self.assertEqual(res.data["role"], "manager")
        self.assertIn(CAP_ORDERS_VIEW, res.data["capabilities"])
        self.assertNotIn(CAP_ORDERS_MANAGE, res.data["capabilities"])

    def test_customer_has_no_capabilities(self):
        user = User.objects.create_user(email="c@example.com", password="pass", role="customer")
        self.client.force_authenticate(user=user)

        res = self.client.get(self.url)
        self.assertEqual(res.data["capabilities"], [])

    def test_jwt_login(self):
        User.objects.create_user(email="admin@example.com", password="pass", role="admin")

        res = self.client.post(
            reverse("users:jwt-create"),
            {"email": "admin@example.com", "password": "pass"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
        me = self.client.get(self.url)
        self.assertEqual(me.data["role"], "admin")
