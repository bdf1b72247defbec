"""
Management command to import a Rapaport price list from a CSV file
"""
import os
from django.core.management.base import BaseCommand, CommandError
from django.conf import settings
from backend.pricing.models import RapaportPrice
from backend.pricing.rapaport import RapaportImportError, parse_rapaport_csv, import_price_rows


class Command(BaseCommand):
    help = "Imports Rapaport prices (shape,low_carat,high_carat,color,clarity,price_per_carat) from a CSV file"

    def add_arguments(self, parser):
        parser.add_argument(
            'csv_file',
            type=str,
            help='Path to the CSV file (relative paths are resolved from the project root)',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Replace the existing price list instead of appending to it',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        clear = options['clear']

        if not os.path.isabs(csv_file):
            csv_file = os.path.normpath(os.path.join(settings.BASE_DIR, '..', csv_file))

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("IMPORTING RAPAPORT PRICES FROM CSV"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"CSV File: {csv_file}")

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        with open(csv_file, 'r', encoding='utf-8-sig') as f:
            rows, errors, skipped = parse_rapaport_csv(f.read())

        for error in errors:
            self.stdout.write(self.style.WARNING(f"  Line {error['line']}: {error['error']}"))

        try:
            created, cleared = import_price_rows(rows, clear_existing=clear)
        except RapaportImportError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        if clear:
            self.stdout.write(self.style.WARNING(f"Prices Cleared: {cleared}"))
        self.stdout.write(f"Prices Created: {created}")
        self.stdout.write(f"Short Rows Skipped: {skipped}")
        if errors:
            self.stdout.write(self.style.ERROR(f"Rows Rejected: {len(errors)}"))
        self.stdout.write(f"Total Prices in Database: {RapaportPrice.objects.count()}")
        self.stdout.write(self.style.SUCCESS("=" * 80))
