# accounting/commands.py
"""
Command layer for ledger operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and call the engine.

Pattern:
1. Validate permissions (require)
2. Apply business policies (can_*)
3. Perform the operation (engine call or model change)
4. Return CommandResult

Engine errors (accounting.exceptions) never escape a command: they are
returned as failed results carrying the error code and every message.
"""

import logging
import time

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting import ledger, numbering, periods
from accounting.exceptions import ConcurrencyError, LedgerError
from accounting.models import (
    Account,
    AccountingPeriod,
    DefaultAccount,
    JournalEntry,
    NumberingSeries,
)
from accounting.policies import (
    can_approve_entry,
    can_create_period,
    can_delete_account,
    can_designate_default_account,
)
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = post_journal_entry(actor, posting_date=..., lines=[...])
        if result.success:
            entry = result.data
        else:
            error_message = result.error
            all_messages = result.errors
    """

    def __init__(self, success: bool, data=None, error: str = None, errors=None, code: str = None):
        self.success = success
        self.data = data
        self.error = error
        self.errors = list(errors) if errors else ([error] if error else [])
        self.code = code

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, errors=None, code: str = "validation_error", data=None):
        return cls(success=False, data=data, error=error, errors=errors, code=code)

    @classmethod
    def from_error(cls, exc: LedgerError):
        errors = exc.errors
        return cls.fail(errors[0] if errors else str(exc), errors=errors, code=exc.code)


def run_with_retry(func, *args, **kwargs):
    """
    Call func, retrying from scratch when it loses a write conflict.

    Only retries when no outer transaction is open: inside an outer
    atomic block the conflict has already poisoned the caller's work.
    """
    attempts = max(1, int(getattr(settings, "LEDGER_POST_RETRY_ATTEMPTS", 3)))
    if transaction.get_connection().in_atomic_block:
        attempts = 1

    for attempt in range(1, attempts + 1):
        try:
            return func(*args, **kwargs)
        except ConcurrencyError:
            if attempt == attempts:
                raise
            logger.warning(f"{func.__name__} lost a write conflict, retrying ({attempt}/{attempts})")
            time.sleep(0.05 * attempt)


# =============================================================================
# Account Commands
# =============================================================================

@transaction.atomic
def create_account(
    actor: ActorContext,
    code: str,
    name: str,
    account_type: str,
    description: str = "",
) -> CommandResult:
    """
    Create a new account in the chart of accounts.

    The balance starts at zero and is only ever moved by postings.
    """
    require(actor, "accounts.manage")

    code = (code or "").strip()
    if not code:
        return CommandResult.fail("Account code is required.")
    if not (name or "").strip():
        return CommandResult.fail("Account name is required.")
    if account_type not in Account.AccountType.values:
        return CommandResult.fail(f"Unknown account type: {account_type}")

    if Account.objects.filter(business_unit=actor.business_unit, code=code).exists():
        return CommandResult.fail(f"Account code '{code}' already exists.")

    account = Account.objects.create(
        business_unit=actor.business_unit,
        code=code,
        name=name.strip(),
        account_type=account_type,
        description=description or "",
    )
    logger.info(f"Created account {account.code} in business unit {actor.business_unit.id}")
    return CommandResult.ok(account)


@transaction.atomic
def delete_account(actor: ActorContext, account_id: int) -> CommandResult:
    """Delete an account that has never been posted to."""
    require(actor, "accounts.manage")

    try:
        account = Account.objects.select_for_update().get(
            pk=account_id, business_unit=actor.business_unit
        )
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.", code="not_found")

    allowed, reason = can_delete_account(actor, account)
    if not allowed:
        return CommandResult.fail(reason)

    code = account.code
    account.delete()
    logger.info(f"Deleted account {code} in business unit {actor.business_unit.id}")
    return CommandResult.ok({"deleted": True, "code": code})


@transaction.atomic
def set_default_account(actor: ActorContext, role: str, account_code: str) -> CommandResult:
    """Designate the Receivable or Payable account used by derived postings."""
    require(actor, "accounts.manage")

    try:
        account = Account.objects.get(business_unit=actor.business_unit, code=account_code)
    except Account.DoesNotExist:
        return CommandResult.fail(f"Account {account_code} not found.", code="not_found")

    allowed, reason = can_designate_default_account(role, account)
    if not allowed:
        return CommandResult.fail(reason)

    default, _ = DefaultAccount.objects.update_or_create(
        business_unit=actor.business_unit,
        role=role,
        defaults={"account": account},
    )
    logger.info(f"Designated {account.code} as {role} in business unit {actor.business_unit.id}")
    return CommandResult.ok(default)


# =============================================================================
# Journal Entry Commands
# =============================================================================

def post_journal_entry(
    actor: ActorContext,
    posting_date,
    remarks: str = "",
    lines=None,
) -> CommandResult:
    """
    Post a manual journal entry.

    Args:
        actor: The actor context (user + business unit)
        posting_date: Date of the entry
        remarks: Free-text remarks
        lines: List of {"account_code", "debit", "credit", "description"}

    Returns:
        CommandResult with the posted JournalEntry or the engine's errors
    """
    require(actor, "journal.post")

    try:
        entry = run_with_retry(
            ledger.post_entry,
            business_unit_id=actor.business_unit.id,
            posting_date=posting_date,
            remarks=remarks,
            author_id=actor.user.id,
            lines=lines or [],
        )
    except LedgerError as exc:
        logger.info(
            f"Journal entry rejected in business unit {actor.business_unit.id}: "
            f"{exc.code} {exc.errors}"
        )
        return CommandResult.from_error(exc)

    return CommandResult.ok(entry)


@transaction.atomic
def approve_journal_entry(actor: ActorContext, entry_id: int) -> CommandResult:
    """
    Record the approver of a posted entry.

    Approval does not change lines or balances.
    """
    require(actor, "journal.approve")

    try:
        entry = JournalEntry.objects.select_for_update().get(
            pk=entry_id, business_unit=actor.business_unit
        )
    except JournalEntry.DoesNotExist:
        return CommandResult.fail("Journal entry not found.", code="not_found")

    allowed, reason = can_approve_entry(actor, entry)
    if not allowed:
        return CommandResult.fail(reason)

    entry.approver = actor.user
    entry.approved_at = timezone.now()
    with command_writes_allowed():
        entry.save(update_fields=["approver", "approved_at"])

    logger.info(f"Journal entry {entry.document_number} approved by user {actor.user.id}")
    return CommandResult.ok(entry)


# =============================================================================
# Period Commands
# =============================================================================

@transaction.atomic
def create_period(actor: ActorContext, name: str, start_date, end_date) -> CommandResult:
    """Open a new accounting period for the business unit."""
    require(actor, "periods.manage")

    if not (name or "").strip():
        return CommandResult.fail("Period name is required.")

    allowed, reason = can_create_period(actor.business_unit.id, start_date, end_date)
    if not allowed:
        return CommandResult.fail(reason)

    period = AccountingPeriod.objects.create(
        business_unit=actor.business_unit,
        name=name.strip(),
        start_date=start_date,
        end_date=end_date,
    )
    logger.info(f"Opened accounting period {period.name} in business unit {actor.business_unit.id}")
    return CommandResult.ok(period)


def _get_period(actor: ActorContext, period_id: int) -> AccountingPeriod | None:
    return AccountingPeriod.objects.filter(pk=period_id, business_unit=actor.business_unit).first()


def validate_period_close(actor: ActorContext, period_id: int) -> CommandResult:
    """Dry run of close_period: returns the PeriodCloseValidation."""
    require(actor, "periods.view")

    if _get_period(actor, period_id) is None:
        return CommandResult.fail("Accounting period not found.", code="not_found")

    return CommandResult.ok(periods.validate_for_close(period_id))


def close_period(actor: ActorContext, period_id: int) -> CommandResult:
    """
    Close an OPEN period.

    On failure the result data carries the validation so callers can show
    the blocking errors next to the warnings.
    """
    require(actor, "periods.close")

    period = _get_period(actor, period_id)
    if period is None:
        return CommandResult.fail("Accounting period not found.", code="not_found")

    try:
        period, validation = periods.close_period(period_id, closed_by=actor.user)
    except periods.PeriodCloseRejected as exc:
        result = CommandResult.from_error(exc)
        result.data = exc.validation
        return result
    except LedgerError as exc:
        return CommandResult.from_error(exc)

    return CommandResult.ok({"period": period, "validation": validation})


# =============================================================================
# Numbering Commands
# =============================================================================

def configure_numbering_series(
    actor: ActorContext,
    document_kind: str,
    prefix: str | None = None,
    next_number: int = 1,
) -> CommandResult:
    """Create or update the numbering series for a document kind."""
    require(actor, "numbering.manage")

    if document_kind not in NumberingSeries.DocumentKind.values:
        return CommandResult.fail(f"Unknown document kind: {document_kind}")
    if next_number < 1:
        return CommandResult.fail("Next number must be at least 1.")

    series, created = numbering.configure_series(
        actor.business_unit.id,
        document_kind,
        prefix=prefix,
        next_number_value=next_number,
    )
    logger.info(
        f"{'Created' if created else 'Updated'} numbering series {document_kind} "
        f"in business unit {actor.business_unit.id}"
    )
    return CommandResult.ok(series)
