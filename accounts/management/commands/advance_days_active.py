from django.core.management.base import BaseCommand

from accounts.tasks import advance_days_active


class Command(BaseCommand):
    help = "Count one more active day for approved, unexpired members (normally run by Celery Beat)."

    def handle(self, *args, **options):
        self.stdout.write('Advancing active days...')
        count = advance_days_active()
        self.stdout.write(self.style.SUCCESS(f'✓ Updated {count} members'))
