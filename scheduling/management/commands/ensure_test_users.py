# scheduling/management/commands/ensure_test_users.py
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from scheduling.models import Doctor, UserProfile

SAMPLE_DOCTORS = [
    ("Dr. Anna Petrova", "anna.petrova@clinic.local", "Therapist"),
    ("Dr. Ivan Sokolov", "ivan.sokolov@clinic.local", "Cardiologist"),
]

# username, position, full name, index into SAMPLE_DOCTORS
TEST_SET = [
    ("nurse1", "nurse", "Maria Ivanova", None),
    ("doctor1", "doctor", SAMPLE_DOCTORS[0][0], 0),
    ("doctor2", "doctor", SAMPLE_DOCTORS[1][0], 1),
]


class Command(BaseCommand):
    help = "Ensure sample doctors and test users exist with password=123456 (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        User = get_user_model()
        doctors = []
        for full_name, email, specialty in SAMPLE_DOCTORS:
            doctor, _ = Doctor.objects.update_or_create(
                email=email, defaults={"full_name": full_name, "specialty": specialty},
            )
            doctors.append(doctor)
            self.stdout.write(self.style.SUCCESS(f"ok: doctor {full_name}"))

        for username, position, full_name, doctor_index in TEST_SET:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"password": make_password(opts["password"]), "is_active": True},
            )
            if not created:
                user.password = make_password(opts["password"])
                user.is_active = True
                user.save(update_fields=["password", "is_active"])
            UserProfile.objects.update_or_create(
                user=user,
                defaults={
                    "full_name": full_name,
                    "position": position,
                    "doctor": doctors[doctor_index] if doctor_index is not None else None,
                },
            )
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({position})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
