from django.core.management.base import BaseCommand
from django.utils import timezone
from offerings.models import Offering
from services.offering_lifecycle import live_q, release_elapsed_host_slots
import logging

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Release the host slot of offerings whose visibility window has elapsed."

    def add_arguments(self, parser):
        parser.add_argument(
            "--kind",
            choices=[Offering.KIND_PARTY, Offering.KIND_SOI],
            help="Only sweep offerings of this kind.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many offerings would be released without changing anything.",
        )

    def handle(self, *args, **options):
        kind = options["kind"]
        now = timezone.now()

        if options["dry_run"]:
            stale = Offering.objects.filter(holds_host_slot=True).exclude(live_q(now))
            if kind:
                stale = stale.filter(kind=kind)
            self.stdout.write(
                self.style.WARNING(f"DRY RUN: Would release {stale.count()} elapsed offerings.")
            )
            return

        released = release_elapsed_host_slots(now, kind=kind)
        logger.info(f"Sweep released {released} elapsed offerings")
        self.stdout.write(self.style.SUCCESS(f"Released {released} elapsed offerings."))
