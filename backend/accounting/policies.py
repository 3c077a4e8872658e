# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the engine's or the command's job.

Usage:
    from accounting.policies import can_approve_entry

    allowed, reason = can_approve_entry(actor, entry)
    if not allowed:
        return CommandResult.fail(reason)

Design Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples for clear error messages
3. Policies check ONE thing conceptually
4. Commands compose policies as needed
"""

from decimal import Decimal

from django.conf import settings


# =============================================================================
# Balance Policies
# =============================================================================

def balance_tolerance() -> Decimal:
    """Absolute difference between debits and credits still treated as balanced."""
    return Decimal(str(getattr(settings, "LEDGER_BALANCE_TOLERANCE", "0.01")))


def is_balanced(total_debit: Decimal, total_credit: Decimal) -> bool:
    return abs(total_debit - total_credit) < balance_tolerance()


# Money columns are DecimalField(max_digits=18, decimal_places=2).
MAX_AMOUNT = Decimal("1e16")


def within_amount_limit(amount: Decimal) -> bool:
    """True when amount fits a money column."""
    return abs(amount) < MAX_AMOUNT


# =============================================================================
# Business Unit Boundary
# =============================================================================

def check_business_unit_boundary(actor, entity) -> bool:
    """Verify entity belongs to the actor's business unit."""
    entity_unit_id = getattr(entity, "business_unit_id", None)
    return entity_unit_id == actor.business_unit.id


# =============================================================================
# Account Policies
# =============================================================================

def can_delete_account(actor, account) -> tuple[bool, str]:
    """
    Check if an account can be deleted.

    Rules:
    - Must belong to actor's business unit
    - Cannot have journal lines
    - Cannot be a designated default account
    """
    if not check_business_unit_boundary(actor, account):
        return False, "Cross-business-unit action denied."

    if account.journal_lines.exists():
        return False, "Cannot delete an account that has transactions."

    if account.default_roles.exists():
        return False, "Cannot delete a designated default account."

    return True, ""


def can_designate_default_account(role: str, account) -> tuple[bool, str]:
    """
    Receivable must be an Asset account, Payable a Liability account.
    """
    from accounting.models import Account, DefaultAccount

    expected = {
        DefaultAccount.Role.RECEIVABLE: Account.AccountType.ASSET,
        DefaultAccount.Role.PAYABLE: Account.AccountType.LIABILITY,
    }.get(role)
    if expected is None:
        return False, f"Unknown default account role: {role}."
    if account.account_type != expected:
        return False, f"{role.title()} account must be of type {expected}."
    return True, ""


# =============================================================================
# Journal Entry Policies
# =============================================================================

def can_approve_entry(actor, entry) -> tuple[bool, str]:
    """
    Check if a journal entry can be approved by the actor.

    Rules:
    - Must belong to actor's business unit
    - Must not be approved already
    - The author cannot approve their own entry (unless OWNER)
    """
    if not check_business_unit_boundary(actor, entry):
        return False, "Cross-business-unit action denied."

    if entry.approver_id:
        return False, "Journal entry is already approved."

    if entry.author_id == actor.user.id and not actor.is_owner:
        return False, "You cannot approve your own journal entry."

    return True, ""


# =============================================================================
# Period Policies
# =============================================================================

def can_create_period(business_unit_id: int, start_date, end_date) -> tuple[bool, str]:
    """
    Check a new OPEN period does not overlap another OPEN period.
    """
    from accounting.models import AccountingPeriod

    if end_date < start_date:
        return False, "Period end date must be on or after its start date."

    overlapping = AccountingPeriod.objects.filter(
        business_unit_id=business_unit_id,
        status=AccountingPeriod.Status.OPEN,
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).exists()
    if overlapping:
        return False, "An open accounting period already covers part of this date range."

    return True, ""


def can_close_period(period) -> tuple[bool, str]:
    """Only OPEN periods can be closed; CLOSED is terminal."""
    from accounting.models import AccountingPeriod

    if period.status != AccountingPeriod.Status.OPEN:
        return False, "Accounting period is already closed."
    return True, ""
