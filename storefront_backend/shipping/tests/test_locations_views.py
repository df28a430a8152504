from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from shipping.models import Commune, StopDesk, Wilaya


class PublicLocationViewTests(TestCase):
    """
    GUARANTEES:
    - anonymous access, active rows only
    - communes / stop desks require a numeric ?wilaya=
    """

    def setUp(self):
        self.client = APIClient()
        alger = Wilaya.objects.create(id=16, name="Alger", slug="alger")
        Wilaya.objects.create(id=99, name="Old", slug="old", active=False)
        centre = Commune.objects.create(
            id=1601, wilaya=alger, name="Alger Centre", slug="alger-centre-16", has_stop_desk=True
        )
        Commune.objects.create(
            id=1602, wilaya=alger, name="Bab El Oued", slug="bab-el-oued-16", active=False
        )
        StopDesk.objects.create(
            id=160101, wilaya=alger, commune=centre, name="Agence Didouche", slug="agence-didouche-16"
        )

    def test_wilayas(self):
        res = self.client.get(reverse("shipping:wilaya-list"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([w["id"] for w in res.data], [16])

    def test_communes_by_wilaya(self):
        res = self.client.get(reverse("shipping:commune-list"), {"wilaya": 16})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([c["name"] for c in res.data], ["Alger Centre"])
        self.assertEqual(res.data[0]["wilaya_id"], 16)

    def test_stop_desks_by_wilaya(self):
        res = self.client.get(reverse("shipping:stopdesk-list"), {"wilaya": 16})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data[0]["commune_id"], 1601)

    def test_wilaya_param_required(self):
        for params in ({}, {"wilaya": "abc"}):
            with self.subTest(params=params):
                res = self.client.get(reverse("shipping:commune-list"), params)
                self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn("wilaya", res.data)
