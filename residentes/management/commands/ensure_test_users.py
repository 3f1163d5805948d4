from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from residentes.models import User

TEST_SET = [
    ("residente", "resident", False),
    ("estudiante", "student", False),
    ("moderador", "resident", True),
]

class Command(BaseCommand):
    help = "Ensure test users exist and password=123456 (idempotent)."

    def handle(self, *args, **opts):
        for username, user_type, is_staff in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"user_type": user_type, "is_staff": is_staff,
                          "password": make_password("123456"), "is_active": True},
            )
            if not created:
                # reset password, activation and type
                u.password = make_password("123456")
                u.user_type = user_type
                u.is_staff = is_staff
                u.is_active = True
                u.save(update_fields=["password", "user_type", "is_staff", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({user_type})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
