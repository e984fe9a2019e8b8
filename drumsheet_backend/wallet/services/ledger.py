"""
PATH: wallet/services/ledger.py

LOW-LEVEL BALANCE MUTATION

apply_credit_change() is the only code path that writes Profile.credits.

Rules:
- Caller must already be inside transaction.atomic (asserted by the
  select_for_update lock, which Django rejects in autocommit).
- Balance may never go negative -> InsufficientCreditError, nothing written.
- One CashTransaction per call; balance_after == new credits.
"""

from __future__ import annotations

import logging

from users.models import Profile
from wallet.models import CashTransaction
from wallet.services.exceptions import InsufficientCreditError

logger = logging.getLogger(__name__)


def lock_profile(user) -> Profile:
    Profile.objects.get_or_create(user=user)
    return Profile.objects.select_for_update().get(user=user)


def apply_credit_change(
    *,
    user,
    amount: int,
    transaction_type: str,
    bonus_amount: int = 0,
    description: str = "",
    sheet=None,
    order=None,
    created_by=None,
    profile: Profile | None = None,
) -> CashTransaction:
    profile = profile or lock_profile(user)

    amount = int(amount)
    bonus_amount = max(0, int(bonus_amount or 0))
    current = int(profile.credits or 0)
    new_balance = current + amount + bonus_amount

    if new_balance < 0:
        raise InsufficientCreditError(current_credits=current, required=-(amount + bonus_amount))

    profile.credits = new_balance
    profile.save(update_fields=["credits", "updated_at"])

    tx = CashTransaction.objects.create(
        user=user,
        transaction_type=transaction_type,
        amount=amount,
        bonus_amount=bonus_amount,
        balance_after=new_balance,
        description=description[:255],
        sheet=sheet,
        order=order,
        created_by=created_by or user,
    )

    logger.info(
        "Credit balance changed",
        extra={
            "user_id": str(user.pk),
            "transaction_type": transaction_type,
            "amount": amount,
            "bonus_amount": bonus_amount,
            "balance_after": new_balance,
        },
    )
    return tx
