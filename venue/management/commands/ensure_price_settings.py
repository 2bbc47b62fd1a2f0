from django.core.management.base import BaseCommand

from venue.models import PriceSettings


class Command(BaseCommand):
    help = 'Create the price settings row if none exists (uses DEFAULT_PRICE_* env vars)'

    def handle(self, *args, **options):
        if PriceSettings.objects.exists():
            self.stdout.write('Price settings already exist, skipping.')
            return

        prices = PriceSettings.load()
        summary = ', '.join(f'{name}={getattr(prices, name)}' for name in PriceSettings.defaults())
        self.stdout.write(f'Price settings created: {summary}')
