from django.core.management.base import BaseCommand
from booking.constants import COURT_ACTIVE, MAX_COURTS
from booking.models import Court


class Command(BaseCommand):
    help = 'Создает тестовые крикетные дорожки для системы бронирования'

    def handle(self, *args, **kwargs):
        courts = [
            {
                'name': 'Дорожка №1 (Турф)',
                'description': 'Дорожка с искусственным турфом и боулинг-машиной.',
                'features': ['turf', 'bowling_machine', 'floodlights'],
            },
            {
                'name': 'Дорожка №2 (Мат)',
                'description': 'Дорожка с матовым покрытием для тренировок отбивающих.',
                'features': ['mat', 'floodlights'],
            },
            {
                'name': 'Дорожка №3 (Крытая)',
                'description': 'Крытая дорожка с кондиционированием. Доступна в любую погоду.',
                'features': ['indoor', 'air_conditioning', 'bowling_machine'],
            },
            {
                'name': 'Дорожка №4 (Тренировочная)',
                'description': 'Дорожка для начинающих и занятий с тренером.',
                'features': ['mat', 'coaching'],
            },
        ]

        created_count = 0
        for court_data in courts:
            if Court.objects.count() >= MAX_COURTS:
                self.stdout.write(self.style.WARNING(f'Достигнут лимит кортов: {MAX_COURTS}'))
                break

            court, created = Court.objects.get_or_create(
                name=court_data['name'],
                defaults={
                    'description': court_data['description'],
                    'features': court_data['features'],
                    'status': COURT_ACTIVE,
                }
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'Создан корт: {court.name}'))
            else:
                self.stdout.write(self.style.WARNING(f'Корт уже существует: {court.name}'))

        self.stdout.write(self.style.SUCCESS(f'Создано {created_count} новых кортов'))
