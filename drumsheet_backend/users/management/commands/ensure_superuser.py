"""
PATH: users/management/commands/ensure_superuser.py

Idempotent admin bootstrap for hosts without a shell.

- Reads AUTO_ADMIN_EMAIL + AUTO_ADMIN_PASSWORD from env.
- Creates the admin if missing; otherwise re-asserts flags and password.
- Never prints the password.
"""

from __future__ import annotations

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from users.models import Profile


class Command(BaseCommand):
    help = "Create/update the storefront admin from env vars (idempotent)."

    def handle(self, *args, **options):
        email = (os.environ.get("AUTO_ADMIN_EMAIL") or "").strip()
        password = (os.environ.get("AUTO_ADMIN_PASSWORD") or "").strip()

        if not email or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()
            if user is None:
                user = User.objects.create_superuser(email=email, password=password)
                action = "created"
            else:
                user.role = User.ROLE_ADMIN
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.set_password(password)
                user.save()
                action = "updated"

            Profile.for_user(user)

        self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {email} ({action})"))
