"""
Flag PENDENTE properties past their due date as ATRASADO for every user.

Meant to run daily (cron or a scheduled job); the API exposes the same
refresh per user at POST /api/properties/refresh-overdue/.

Usage:
    python manage.py refresh_overdue [--dry-run]
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.properties.models import RuralProperty, PaymentStatus
from apps.properties.services import refresh_overdue_statuses


class Command(BaseCommand):
    help = 'Mark unpaid properties past their due date as ATRASADO'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be updated without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        today = timezone.localdate()

        stale = RuralProperty.objects.filter(
            payment_status=PaymentStatus.PENDENTE,
            due_date__lt=today,
        )
        count = stale.count()

        if count == 0:
            self.stdout.write(self.style.SUCCESS('No overdue properties to flag.'))
            return

        self.stdout.write(f'Found {count} overdue propert{"y" if count == 1 else "ies"}.')

        if dry_run:
            for prop in stale.select_related('user').order_by('due_date'):
                self.stdout.write(
                    f'  - {prop.owner_name} | {prop.farm_name or "-"} | '
                    f'due {prop.due_date:%d/%m/%Y} | {prop.user.email}'
                )
            self.stdout.write(self.style.WARNING('--dry-run mode: No changes made.'))
            return

        user_ids = stale.values_list('user_id', flat=True).distinct()
        updated = 0
        for user in get_user_model().objects.filter(id__in=list(user_ids)):
            updated += refresh_overdue_statuses(user=user, today=today)

        self.stdout.write(self.style.SUCCESS(f'Flagged {updated} propert{"y" if updated == 1 else "ies"} as ATRASADO.'))
