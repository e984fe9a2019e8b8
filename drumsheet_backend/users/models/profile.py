"""
PATH: users/models/profile.py

CUSTOMER PROFILE

One row per user. Holds the points balance ("credits", integer KRW) used by
the points payment method and cash purchases.

Rules:
- credits never goes below zero (DB check + wallet service guard)
- credits is only mutated by wallet services, always together with a
  CashTransaction ledger row
"""

from __future__ import annotations

from django.conf import settings
from django.db import models


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    credits = models.PositiveIntegerField(default=0)
    preferred_locale = models.CharField(max_length=10, blank=True, default="ko")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(credits__gte=0),
                name="profile_credits_non_negative",
            ),
        ]

    def __str__(self):
        return f"Profile<{self.user_id}> credits={self.credits}"

    @classmethod
    def for_user(cls, user) -> "Profile":
        profile, _ = cls.objects.get_or_create(user=user)
        return profile
