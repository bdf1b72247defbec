"""
Management command to refresh exchange rates from GoldAPI (run from cron)
"""
from django.core.management.base import BaseCommand, CommandError
from backend.rates.goldapi import GoldAPIError, fetch_and_store_rates


class Command(BaseCommand):
    help = "Fetches USD/TRY and the 24K gold price from GoldAPI and stores them"

    def add_arguments(self, parser):
        parser.add_argument(
            '--api-key',
            type=str,
            default=None,
            help='GoldAPI key (defaults to the GOLDAPI_KEY setting)',
        )

    def handle(self, *args, **options):
        try:
            rate = fetch_and_store_rates(options['api_key'])
        except GoldAPIError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(
            f"USD/TRY: {rate.usd_try}  24K gold: {rate.gold_24k_per_gram} {rate.gold_24k_currency}/g"
        ))
