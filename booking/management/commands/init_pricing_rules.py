from django.core.management.base import BaseCommand, CommandError

from booking.exceptions import InvalidRequestError
from booking.services import PricingService


class Command(BaseCommand):
    help = 'Создает тарифы по умолчанию (будни/выходные, день/ночь)'

    def handle(self, *args, **kwargs):
        try:
            rules = PricingService.initialize_default_rules()
        except InvalidRequestError as e:
            raise CommandError(e.message)

        for rule in rules:
            self.stdout.write(f'  {rule.day_type}/{rule.time_slot}: {rule.price_per_hour}')
        self.stdout.write(self.style.SUCCESS(f'Создано тарифов: {len(rules)}'))
