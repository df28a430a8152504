# shipping/management/commands/check_parcel_statuses.py

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from shipping.services.status_checker import StatusChecker, get_status_check_stats


class Command(BaseCommand):
    help = "Poll the courier for every open tracked order and apply delivered transitions."

    def add_arguments(self, parser):
        parser.add_argument(
            "--delay",
            type=float,
            default=None,
            help="Seconds between courier calls (default: YALIDINE_POLL_DELAY_SECONDS).",
        )
        parser.add_argument(
            "--stats",
            action="store_true",
            help="Only print tracking stats, do not call the courier.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any order could not be checked.",
        )

    def handle(self, *args, **options):
        if options.get("stats"):
            stats = get_status_check_stats()
            for key, value in stats.items():
                self.stdout.write(f"{key}: {value}")
            return

        result = StatusChecker(delay=options.get("delay")).check_all_pending_orders()
        summary = result.as_summary()

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {result.checked} | updated {result.updated} | "
                f"delivered {result.delivered}"
            )
        )

        for error in summary["errors"]:
            self.stderr.write(self.style.WARNING(error))
        hidden = len(result.errors) - len(summary["errors"])
        if hidden > 0:
            self.stderr.write(self.style.WARNING(f"... and {hidden} more errors"))

        if options.get("strict") and result.errors:
            raise CommandError(f"{len(result.errors)} order(s) could not be checked")
