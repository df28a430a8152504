# shipping/management/commands/sync_courier_locations.py

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from shipping.services.exceptions import CourierError
from shipping.services.location_sync import sync_locations, write_snapshot


class Command(BaseCommand):
    help = "Sync wilayas, communes and stop desks from the courier (inactive when missing)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--snapshot",
            dest="snapshot",
            default=None,
            help="Also write a JSON snapshot of the synced tables to this path.",
        )

    def handle(self, *args, **options):
        try:
            counts = sync_locations()
        except CourierError as exc:
            raise CommandError(f"Courier sync failed: {exc}") from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Synced {counts['wilayas']} wilayas, {counts['communes']} communes, "
                f"{counts['stopdesks']} stop desks"
            )
        )

        snapshot = options.get("snapshot")
        if snapshot:
            path = write_snapshot(snapshot)
            self.stdout.write(f"Snapshot written to {path}")
