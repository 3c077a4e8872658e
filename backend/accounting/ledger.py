# accounting/ledger.py
"""
Journal posting engine.

post_entry() is the single way a journal entry comes into existence:

1. Validate the candidate lines, collecting every violation
   (nothing is written and no number is allocated if any are found)
2. In one transaction:
   a. resolve and lock the OPEN accounting period for the posting date
   b. allocate the next JOURNAL_ENTRY number
   c. lock the referenced accounts and persist the entry with its lines
   d. apply each line's signed delta to its account balance

Any failure in step 2 rolls back the whole transaction, so an entry and
its balance effects are never observable separately.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
import logging

from django.db import IntegrityError, OperationalError, transaction

from accounting.balances import apply_delta, lock_accounts
from accounting.exceptions import (
    ConcurrencyError,
    ConfigurationError,
    PeriodClosedError,
    ValidationError,
)
from accounting.models import Account, JournalEntry, JournalLine, NumberingSeries, ZERO
from accounting.numbering import next_number
from accounting.periods import find_open_period
from accounting.policies import is_balanced, within_amount_limit
from accounting.write_barrier import posting_writes_allowed


logger = logging.getLogger(__name__)

MONEY_Q = Decimal("0.01")

# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


@dataclass(frozen=True)
class PostingLine:
    """A validated journal line: exactly one of debit/credit is non-zero."""
    account_code: str
    debit: Decimal
    credit: Decimal
    description: str = ""


def _parse_amount(value, line_no: int, errors: list[str]) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        errors.append(f"Line {line_no}: Invalid amount '{value}'")
        return None
    if not amount.is_finite():
        errors.append(f"Line {line_no}: Invalid amount '{value}'")
        return None
    if not within_amount_limit(amount):
        errors.append(f"Line {line_no}: Amount exceeds the maximum")
        return None
    try:
        rounded = amount.quantize(MONEY_Q)
    except InvalidOperation:
        errors.append(f"Line {line_no}: Invalid amount '{value}'")
        return None
    if amount != rounded:
        errors.append(f"Line {line_no}: Amount cannot have more than 2 decimal places")
    return amount


def validate_entry_lines(lines) -> list[PostingLine]:
    """
    Validate candidate lines and return them normalized.

    Each line is a mapping with `account_code`, `debit` and/or `credit`,
    and an optional `description`. A zero amount counts as absent.

    Raises:
        ValidationError: listing every violation found
    """
    lines = list(lines or [])
    errors: list[str] = []
    line_errors: list[str] = []
    parsed: list[PostingLine] = []
    total_debit = ZERO
    total_credit = ZERO

    for index, line in enumerate(lines, start=1):
        debit = _parse_amount(line.get("debit"), index, line_errors)
        credit = _parse_amount(line.get("credit"), index, line_errors)
        has_debit = bool(debit)
        has_credit = bool(credit)

        if not has_debit and not has_credit:
            line_errors.append(f"Line {index}: Must have either debit or credit amount")
        if has_debit and has_credit:
            line_errors.append(f"Line {index}: Cannot have both debit and credit amounts")
        if (has_debit and debit <= 0) or (has_credit and credit <= 0):
            line_errors.append(f"Line {index}: Amount must be greater than 0")

        account_code = str(line.get("account_code") or "").strip()
        if not account_code:
            line_errors.append(f"Line {index}: Account is required")

        total_debit += debit or ZERO
        total_credit += credit or ZERO
        parsed.append(PostingLine(
            account_code=account_code,
            debit=debit or ZERO,
            credit=credit or ZERO,
            description=str(line.get("description") or ""),
        ))

    if len(lines) < 2:
        errors.append("Journal entry must have at least 2 lines")

    if not (within_amount_limit(total_debit) and within_amount_limit(total_credit)):
        errors.append("Entry total exceeds the maximum")
    elif not is_balanced(total_debit, total_credit):
        errors.append(
            f"Entry is not balanced. Debits: {total_debit:.2f}, Credits: {total_credit:.2f}"
        )

    errors.extend(line_errors)
    if errors:
        raise ValidationError(errors)
    return parsed


def _coerce_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("Posting date is required (YYYY-MM-DD).")


def is_transaction_conflict(exc: Exception) -> bool:
    """Deadlock, serialization failure or lock timeout, as opposed to a broken query."""
    sqlstate = getattr(exc.__cause__, "sqlstate", None) or getattr(exc.__cause__, "pgcode", None)
    if sqlstate:
        return sqlstate in CONFLICT_SQLSTATES
    return "locked" in str(exc).lower()


def _resolve_accounts(business_unit_id: int, lines: list[PostingLine]) -> dict[str, Account]:
    codes = {line.account_code for line in lines}
    ids_by_code = dict(
        Account.objects.filter(
            business_unit_id=business_unit_id,
            code__in=codes,
        ).values_list("code", "pk")
    )
    missing = [
        f"Line {index}: Account {line.account_code} not found"
        for index, line in enumerate(lines, start=1)
        if line.account_code not in ids_by_code
    ]
    if missing:
        raise ValidationError(missing)

    locked = lock_accounts(ids_by_code.values())
    return {code: locked[pk] for code, pk in ids_by_code.items()}


def _post_validated_entry(
    business_unit_id: int,
    posting_date: date,
    remarks: str,
    author_id,
    lines: list[PostingLine],
    source_type: str,
    source_document: str,
) -> JournalEntry:
    period = find_open_period(business_unit_id, posting_date, lock=True)
    if period is None:
        raise PeriodClosedError(posting_date, business_unit_id)

    document_number = next_number(NumberingSeries.DocumentKind.JOURNAL_ENTRY, business_unit_id)
    accounts = _resolve_accounts(business_unit_id, lines)

    entry = JournalEntry.objects.create(
        business_unit_id=business_unit_id,
        document_number=document_number,
        posting_date=posting_date,
        remarks=remarks or "",
        author_id=author_id,
        period=period,
        source_type=source_type,
        source_document=source_document,
    )

    for line_no, line in enumerate(lines, start=1):
        account = accounts[line.account_code]
        JournalLine.objects.create(
            entry=entry,
            line_no=line_no,
            account=account,
            description=line.description,
            debit=line.debit,
            credit=line.credit,
        )
        apply_delta(account.pk, account.signed_delta(line.debit, line.credit))

    return entry


def post_entry(
    business_unit_id: int,
    posting_date,
    remarks: str,
    author_id,
    lines,
    source_type: str = "",
    source_document: str = "",
) -> JournalEntry:
    """
    Validate, persist and apply a journal entry as one unit of work.

    Args:
        business_unit_id: Business unit owning the books
        posting_date: Date of the entry (date or ISO string)
        remarks: Free-text remarks
        author_id: User id of the author (may be None for system postings)
        lines: Iterable of {"account_code", "debit", "credit", "description"}
        source_type / source_document: Traceability for derived postings

    Returns:
        The persisted JournalEntry with lines and accounts loaded

    Raises:
        ValidationError: malformed input or unknown account
        PeriodClosedError: no OPEN period covers posting_date
        ConfigurationError: no JOURNAL_ENTRY numbering series
        ConcurrencyError: the transaction lost a write conflict
    """
    errors = []
    validated = []
    try:
        validated = validate_entry_lines(lines)
    except ValidationError as exc:
        errors.extend(exc.errors)
    try:
        posting_date = _coerce_date(posting_date)
    except ValidationError as exc:
        errors.extend(exc.errors)
    if errors:
        raise ValidationError(errors)

    try:
        with transaction.atomic(), posting_writes_allowed():
            entry = _post_validated_entry(
                business_unit_id,
                posting_date,
                remarks,
                author_id,
                validated,
                source_type,
                source_document,
            )
    except OperationalError as exc:
        if not is_transaction_conflict(exc):
            raise
        logger.warning(
            f"Posting conflict in business unit {business_unit_id}: {exc}",
            extra={"business_unit_id": business_unit_id, "source_type": source_type},
        )
        raise ConcurrencyError(f"Concurrent update conflict, retry the posting: {exc}") from exc
    except IntegrityError as exc:
        raise ConfigurationError(
            f"Journal entry number already in use; check the numbering series: {exc}"
        ) from exc

    total = sum((line.debit for line in validated), ZERO)
    logger.info(
        f"Posted journal entry {entry.document_number} in business unit {business_unit_id}: "
        f"{len(validated)} lines, total {total:.2f}",
        extra={
            "business_unit_id": business_unit_id,
            "document_number": entry.document_number,
            "source_type": source_type,
            "total": f"{total:.2f}",
        },
    )

    return JournalEntry.objects.select_related(
        "period", "author", "approver",
    ).prefetch_related("lines__account").get(pk=entry.pk)
