# core/management/commands/ensure_demo_users.py
import datetime

from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import Clinic, DoctorProfile, MotherProfile, User

DEMO_PASSWORD = "Demo#12345"

DEMO_SET = [
    ("mother@demo.local", User.ROLE_MOTHER, "Nimali", "Perera"),
    ("doctor@demo.local", User.ROLE_DOCTOR, "Kasun", "Silva"),
    ("clinic@demo.local", User.ROLE_CLINIC_USER, "Clinic", "Desk"),
]


class Command(BaseCommand):
    help = "Ensure one demo user per role exists with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default=DEMO_PASSWORD)

    @transaction.atomic
    def handle(self, *args, **opts):
        password = opts["password"]
        for email, role, first, last in DEMO_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "role": role, "first_name": first, "last_name": last},
            )
            # force password, role and active flag back to the demo values
            u.set_password(password)
            u.role = role
            u.is_active = True
            u.save()
            self._ensure_profile(u)
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))

    def _ensure_profile(self, user):
        if user.role == User.ROLE_MOTHER:
            MotherProfile.objects.get_or_create(
                user=user, defaults={"nic_number": "920123456V", "dob": datetime.date(1992, 1, 23)})
        elif user.role == User.ROLE_DOCTOR:
            DoctorProfile.objects.get_or_create(
                user=user, defaults={"license_number": "SLMC-DEMO-1", "specialty": "Obstetrics"})
        else:
            Clinic.objects.get_or_create(
                user=user, defaults={"name": "Demo Clinic", "location": "Colombo", "clinic_code": "DEMO-01"})
