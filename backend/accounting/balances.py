# accounting/balances.py
"""
Account registry operations.

Account.balance is a running total: every posted journal line moves it by
its signed delta (see Account.signed_delta). This module owns the only
write path to that column (apply_delta) plus the read helpers and the
verification that replays the line history against the running totals.
"""

from decimal import Decimal
from typing import Any, Dict, List
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import DecimalField, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.exceptions import ValidationError
from accounting.models import Account, JournalLine, ZERO
from accounting.write_barrier import write_context_allowed


logger = logging.getLogger(__name__)

MONEY_FIELD = DecimalField(max_digits=18, decimal_places=2)


def get_account(business_unit_id: int, account_code: str) -> Account:
    try:
        return Account.objects.get(business_unit_id=business_unit_id, code=account_code)
    except Account.DoesNotExist:
        raise ValidationError(f"Account {account_code} not found.")


def get_balance(business_unit_id: int, account_code: str) -> Decimal:
    """Current balance of an account; zero when it has no postings."""
    balance = Account.objects.filter(
        business_unit_id=business_unit_id,
        code=account_code,
    ).values_list("balance", flat=True).first()
    if balance is None:
        raise ValidationError(f"Account {account_code} not found.")
    return balance


def classify(business_unit_id: int, account_code: str) -> str:
    """Account type of an account, used for sign rules and report buckets."""
    account_type = Account.objects.filter(
        business_unit_id=business_unit_id,
        code=account_code,
    ).values_list("account_type", flat=True).first()
    if account_type is None:
        raise ValidationError(f"Account {account_code} not found.")
    return account_type


def lock_accounts(account_ids) -> Dict[int, Account]:
    """
    Lock account rows for the rest of the transaction.

    Rows are locked in primary key order so two postings touching the same
    accounts always queue in the same order instead of deadlocking.
    """
    accounts = Account.objects.select_for_update().filter(
        pk__in=set(account_ids),
    ).order_by("pk")
    return {account.pk: account for account in accounts}


def apply_delta(account_id: int, signed_amount: Decimal) -> None:
    """
    Increment an account's running balance.

    Only the posting engine calls this, inside the transaction that
    persists the journal line causing the delta.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("apply_delta must run inside the posting transaction.")
    if not write_context_allowed({"posting"}) and not getattr(settings, "TESTING", False):
        raise RuntimeError(
            "Account balances are written by the posting engine. "
            "apply_delta is only allowed within posting_writes_allowed()."
        )

    updated = Account.objects.filter(pk=account_id).update(
        balance=F("balance") + signed_amount,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise ValidationError(f"Account {account_id} not found.")


def account_transactions(account: Account, limit: int | None = None) -> List[Dict[str, Any]]:
    """Journal lines posted to an account, newest first."""
    lines = JournalLine.objects.filter(
        account=account,
    ).select_related("entry").order_by("-entry__posting_date", "-entry_id", "line_no")
    if limit:
        lines = lines[:limit]

    return [
        {
            "document_number": line.entry.document_number,
            "entry_id": line.entry_id,
            "posting_date": line.entry.posting_date,
            "remarks": line.entry.remarks,
            "description": line.description,
            "debit": line.debit,
            "credit": line.credit,
            "effect": account.signed_delta(line.debit, line.credit),
        }
        for line in lines
    ]


def verify_account_balances(business_unit_id: int) -> Dict[str, Any]:
    """
    Recompute every balance from the line history and compare.

    Returns:
        {
            "business_unit_id": 1,
            "total_accounts": 10,
            "verified": 10,
            "mismatches": [],
        }
    """
    accounts = Account.objects.filter(
        business_unit_id=business_unit_id,
    ).annotate(
        debit_total=Coalesce(Sum("journal_lines__debit"), ZERO, output_field=MONEY_FIELD),
        credit_total=Coalesce(Sum("journal_lines__credit"), ZERO, output_field=MONEY_FIELD),
    ).order_by("code")

    mismatches = []
    verified = 0
    total = 0

    for account in accounts:
        total += 1
        expected = account.signed_delta(account.debit_total, account.credit_total)
        if expected != account.balance:
            mismatches.append({
                "account_code": account.code,
                "running_balance": str(account.balance),
                "recomputed_balance": str(expected),
                "difference": str(account.balance - expected),
            })
        else:
            verified += 1

    if mismatches:
        logger.error(
            f"Balance verification found {len(mismatches)} mismatches "
            f"in business unit {business_unit_id}",
            extra={"business_unit_id": business_unit_id, "mismatches": len(mismatches)},
        )
    else:
        logger.info(f"Verified {verified} account balances in business unit {business_unit_id}")

    return {
        "business_unit_id": business_unit_id,
        "total_accounts": total,
        "verified": verified,
        "mismatches": mismatches,
    }
