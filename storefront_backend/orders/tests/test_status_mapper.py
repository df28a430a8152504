from django.test import SimpleTestCase

from orders.services.status_mapper import (
    FIELD_COD_STATUS,
    FIELD_STATUS,
    map_status,
    map_to_cod_status,
)


class StatusMapperTests(SimpleTestCase):
    """
    Requested status -> authoritative field + value.

    GUARANTEES:
    - COD table is exact, unknown input defaults to PENDING
    - non-COD input passes through unchanged onto `status`
    """

    COD_TABLE = {
        "PENDING": "PENDING",
        "CONFIRMED": "SUBMITTED",
        "SHIPPED": "DISPATCHED",
        "DELIVERED": "DELIVERED",
        "CANCELLED": "CANCELLED",
        "REFUNDED": "CANCELLED",
        "SUBMITTED": "SUBMITTED",
        "DISPATCHED": "DISPATCHED",
        "FAILED": "FAILED",
    }

    def test_cod_table(self):
        for requested, expected in self.COD_TABLE.items():
            with self.subTest(requested=requested):
                target = map_status(requested, is_cod=True)
                self.assertEqual(target.field, FIELD_COD_STATUS)
                self.assertEqual(target.value, expected)

    def test_cod_unknown_defaults_to_pending(self):
        for requested in ("", "PROCESSING", "confirmed", "RETURNED"):
            with self.subTest(requested=requested):
                self.assertEqual(map_to_cod_status(requested), "PENDING")

    def test_non_cod_is_identity(self):
        for requested in ("PENDING", "CONFIRMED", "SHIPPED", "REFUNDED"):
            with self.subTest(requested=requested):
                target = map_status(requested, is_cod=False)
                self.assertEqual(target.field, FIELD_STATUS)
                self.assertEqual(target.value, requested)
