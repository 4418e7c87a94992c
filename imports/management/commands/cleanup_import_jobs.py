"""
Management command to expire abandoned import jobs.

Drops the staging tables of draft and failed jobs older than the cutoff and
marks the jobs expired.

Usage:
    python manage.py cleanup_import_jobs --hours=24 --dry-run
    python manage.py cleanup_import_jobs --hours=24
"""

from django.core.management.base import BaseCommand, CommandError

from imports.services import cleanup_expired_jobs


class Command(BaseCommand):
    help = 'Expire abandoned import jobs and drop their staging tables'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=24,
            help='Expire jobs older than N hours (default: 24)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count the jobs without expiring them',
        )

    def handle(self, *args, **options):
        hours = options['hours']
        dry_run = options['dry_run']

        if hours < 0:
            raise CommandError('--hours must be >= 0')

        self.stdout.write(self.style.MIGRATE_HEADING('\n=== Import Job Cleanup ==='))
        self.stdout.write(f'Mode: {"DRY RUN" if dry_run else "LIVE"}')

        count = cleanup_expired_jobs(max_age_hours=hours, dry_run=dry_run)

        if dry_run:
            self.stdout.write(self.style.WARNING(f'Would expire {count} jobs'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Expired {count} jobs'))
