from django.core.management.base import BaseCommand
from django.utils import timezone

from core.services import dashboard


class Command(BaseCommand):
    help = "Rebuild the cached doctor dashboard summary; broadcast a WebSocket refresh event."

    def handle(self, *args, **options):
        now = timezone.now()
        summary = dashboard.get_summary(refresh=True)
        dashboard.broadcast_records_changed(op='refresh')
        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {dashboard.CACHE_KEY} ({summary['totalMothersCount']} mothers) at {now}"))
