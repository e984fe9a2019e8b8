# users/tests/test_ensure_superuser.py

import os
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from users.models import Profile

User = get_user_model()


class EnsureSuperuserCommandTests(TestCase):
    """
    GUARANTEES:
    - Missing env vars -> no-op
    - First run creates an admin with a profile
    - Re-runs promote and reset the existing account
    """

    def _run(self, **env):
        out = StringIO()
        with mock.patch.dict(os.environ, env):
            call_command("ensure_superuser", stdout=out)
        return out.getvalue()

    def test_skips_without_env(self):
        output = self._run(AUTO_ADMIN_EMAIL="", AUTO_ADMIN_PASSWORD="")
        self.assertIn("Skipping", output)
        self.assertFalse(User.objects.exists())

    def test_creates_admin(self):
        output = self._run(AUTO_ADMIN_EMAIL="owner@example.com", AUTO_ADMIN_PASSWORD="s3cret-pass")

        user = User.objects.get(email="owner@example.com")
        self.assertIn("created", output)
        self.assertTrue(user.is_admin)
        self.assertTrue(user.check_password("s3cret-pass"))
        self.assertTrue(Profile.objects.filter(user=user).exists())

    def test_promotes_existing_user(self):
        User.objects.create_user(email="owner@example.com", password="old")

        output = self._run(AUTO_ADMIN_EMAIL="owner@example.com", AUTO_ADMIN_PASSWORD="new-pass")

        user = User.objects.get(email="owner@example.com")
        self.assertIn("updated", output)
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.check_password("new-pass"))
