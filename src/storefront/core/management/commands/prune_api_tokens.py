"""Management command to delete stale API and password reset tokens."""

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db.models import Q
from django.utils import timezone

from storefront.core.models import ApiToken, PasswordResetToken


class Command(BaseCommand):
    help = "Delete API tokens unused for a number of days and expired password reset tokens"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=90,
            help="Delete API tokens not used for this many days (default: 90)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without deleting",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        cutoff = now - timedelta(days=options["days"])

        stale_tokens = ApiToken.objects.filter(
            Q(last_used_at__lt=cutoff) | Q(last_used_at__isnull=True, created_at__lt=cutoff)
        )
        expired_resets = PasswordResetToken.objects.filter(
            created_at__lt=now - timedelta(minutes=settings.PASSWORD_RESET_TIMEOUT_MINUTES)
        )

        if options["dry_run"]:
            self.stdout.write(f"Would delete {stale_tokens.count()} API tokens")
            self.stdout.write(f"Would delete {expired_resets.count()} password reset tokens")
            return

        deleted_tokens, _ = stale_tokens.delete()
        deleted_resets, _ = expired_resets.delete()

        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted_tokens} API tokens"))
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted_resets} password reset tokens"))
