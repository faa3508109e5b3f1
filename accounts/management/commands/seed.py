import datetime
import random

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from accounts.models import User
from kitchen.choices import (
    ApprovalStatus,
    BannerType,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    PlanType,
    RegistrationStatus,
    TimePreference,
    TimeSlot,
)
from kitchen.models import Banner, DailyMenu, MenuItem, Notification, Payment
from kitchen.rules import price_for
from member.models import DeliveryRequest, Feedback

DISHES = {
    "Kerala Matta Rice": [],
    "Sambar": [],
    "Avial": [],
    "Thoran": [],
    "Fish Curry": ["Egg Roast", "Kadala Curry"],
    "Chicken Curry": ["Paneer Curry", "Vegetable Stew"],
    "Appam": ["Chapati", "Idiyappam"],
    "Payasam": ["Fruit Salad"],
}


class Command(BaseCommand):
    help = 'Populates the database with demo members, menus and announcements. Member password = their phone number.'

    def add_arguments(self, parser):
        parser.add_argument('--members', type=int, default=30, help='Number of members to create')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for repeatable data')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('--- Populating Kerala Kitchen demo data ---'))

        fake = Faker('en_IN')
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        # 1. Clear existing data
        self.stdout.write('Clearing old data...')
        Feedback.objects.all().delete()
        DeliveryRequest.objects.all().delete()
        Payment.objects.all().delete()
        DailyMenu.objects.all().delete()
        MenuItem.objects.all().delete()
        Banner.objects.all().delete()
        Notification.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

        # 2. Admin
        if not User.objects.filter(email='admin@keralakitchen.com').exists():
            User.objects.create_user(
                username='admin@keralakitchen.com', email='admin@keralakitchen.com', password='admin123',
                role=User.Role.ADMIN, full_name='Kitchen Admin', status=RegistrationStatus.APPROVED,
                is_staff=True,
            )
        self.stdout.write("  Admin -> email: admin@keralakitchen.com | password: admin123")

        # 3. Members
        members = []
        today = timezone.localdate()
        for i in range(options['members']):
            phone = f"05{fake.unique.random_number(digits=8, fix_len=True)}"
            email = fake.unique.email()
            plan_type = random.choice([PlanType.MONTHLY, PlanType.YEARLY])
            joined = fake.date_between(start_date='-120d', end_date='today')
            status = random.choice(RegistrationStatus.values)
            user = User.objects.create_user(
                username=email, email=email, password=phone, phone=phone,
                role=User.Role.MEMBER, full_name=fake.name(), address=fake.address(),
                status=status,
                plan_type=plan_type,
                payment_status=random.choice(PaymentStatus.values),
                time_preference=random.choice(TimePreference.values),
                joined_date=joined,
                expiry_date=joined + datetime.timedelta(days=30 if plan_type == PlanType.MONTHLY else 365),
                days_active=max((today - joined).days, 0) if status == RegistrationStatus.APPROVED else 0,
            )
            members.append(user)
            if i < 2:
                self.stdout.write(f"  Member -> email: {email} | password: {phone}")
        self.stdout.write(self.style.SUCCESS(f'{len(members)} members created.'))

        # 4. Payments for whatever each member has paid so far
        for user in members:
            price = price_for(user.plan_type, user.payment_status)
            if price.paid:
                Payment.objects.create(
                    user=user, amount=price.paid, method=random.choice(PaymentMethod.values),
                    status=random.choice(['pending', 'confirmed']),
                    transaction_id=fake.bothify('TXN-####-????').upper(),
                )

        # 5. Menu items and the next few days of menus
        items = [
            MenuItem.objects.create(
                name=name, description=fake.sentence(nb_words=8), is_optional=bool(alternatives),
                alternatives=alternatives,
            )
            for name, alternatives in DISHES.items()
        ]
        for offset in range(0, 3):
            for slot in TimeSlot.values:
                menu = DailyMenu.objects.create(date=today + datetime.timedelta(days=offset), time_slot=slot)
                menu.items.set(random.sample(items, 5))
        self.stdout.write(self.style.SUCCESS(f'{len(items)} dishes and {DailyMenu.objects.count()} menus created.'))

        # 6. Requests, feedback and announcements
        for user in random.sample(members, min(5, len(members))):
            if user.time_preference == TimePreference.BOTH:
                continue
            DeliveryRequest.objects.create(
                user=user, current_time=user.estimated_delivery_time,
                requested_time_slot=random.choice(TimeSlot.values),
                requested_time=random.choice(['12:30 PM', '01:30 PM', '08:30 PM', '09:30 PM']),
                reason=random.choice(['Work schedule change', 'Moving house', 'Gym timings']),
            )
        for user in random.sample(members, min(8, len(members))):
            Feedback.objects.create(
                user=user, rating=random.randint(3, 5), message=fake.sentence(nb_words=12),
                status=random.choice(ApprovalStatus.values),
            )
        Banner.objects.create(title="Onam Sadya", content="Special Onam Sadya this Friday for all members!", type=BannerType.SUCCESS)
        Banner.objects.create(title="Road works", content="Deliveries in Al Nuaimiya may be 15 minutes late.", type=BannerType.WARNING, is_active=False)
        Notification.objects.create(title="Payment due", message="Monthly payments are due by the 5th.", type=NotificationType.INFO)

        self.stdout.write(self.style.SUCCESS('--- Demo data ready ---'))
