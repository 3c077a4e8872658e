# tests/test_periods.py
"""
Tests for accounting periods: the posting gate, close validation and the
one-way OPEN -> CLOSED transition.
"""

from datetime import date
from decimal import Decimal
import threading

import pytest
from django.core.exceptions import PermissionDenied
from django.db import connection, connections, transaction

from accounting import commands, ledger as engine, periods
from accounting.exceptions import PeriodClosedError, ValidationError
from accounting.models import AccountingPeriod, JournalEntry, JournalLine
from financials.commands import create_ar_invoice
from helpers import POSTING_DATE, line


def _unbalanced_entry(business_unit, chart, period):
    """An entry that bypasses the engine, as found in legacy imported data."""
    entry = JournalEntry.objects.create(
        business_unit=business_unit,
        document_number="LEGACY-7",
        posting_date=date(2026, 2, 1),
        period=period,
    )
    JournalLine.objects.create(entry=entry, line_no=1, account=chart["1000"], debit=Decimal("100.00"))
    JournalLine.objects.create(entry=entry, line_no=2, account=chart["4000"], credit=Decimal("80.00"))
    return entry


# =============================================================================
# Period gate
# =============================================================================

@pytest.mark.django_db
def test_find_open_period(open_period, business_unit):
    assert periods.find_open_period(business_unit.id, date(2026, 7, 4)) == open_period
    assert periods.find_open_period(business_unit.id, date(2025, 12, 31)) is None


@pytest.mark.django_db
def test_closed_periods_are_not_found(open_period, business_unit):
    open_period.status = AccountingPeriod.Status.CLOSED
    open_period.save(update_fields=["status"])

    assert periods.find_open_period(business_unit.id, POSTING_DATE) is None


# =============================================================================
# Close validation
# =============================================================================

@pytest.mark.django_db
def test_clean_period_can_close_with_unapproved_warning(ledger, post, open_period):
    post([line("1000", debit="90.00"), line("4000", credit="90.00")])

    validation = periods.validate_for_close(open_period.id)

    assert validation.can_close
    assert validation.errors == []
    assert validation.warnings == ["1 journal entries have not been approved"]


@pytest.mark.django_db
def test_unbalanced_entry_blocks_close(ledger, business_unit, open_period):
    _unbalanced_entry(business_unit, ledger, open_period)

    validation = periods.validate_for_close(open_period.id)

    assert not validation.can_close
    assert validation.errors == [
        "Journal entry LEGACY-7 is not balanced. Debits: 100.00, Credits: 80.00"
    ]
    with pytest.raises(ValidationError):
        periods.close_period(open_period.id)

    open_period.refresh_from_db()
    assert open_period.status == AccountingPeriod.Status.OPEN


@pytest.mark.django_db
def test_open_invoices_are_warnings_only(ledger, receivable_default, actor, open_period):
    result = create_ar_invoice(
        actor,
        partner_code="C-CATERING",
        posting_date=POSTING_DATE,
        items=[{"account_code": "4000", "description": "Catering", "unit_price": "300.00"}],
    )
    assert result.success, result.errors

    validation = periods.validate_for_close(open_period.id)

    assert validation.can_close
    assert "1 A/R invoices are still open" in validation.warnings


@pytest.mark.django_db
def test_entries_outside_period_are_ignored(ledger, business_unit, open_period):
    earlier = AccountingPeriod.objects.create(
        business_unit=business_unit,
        name="FY2025",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
    )
    _unbalanced_entry(business_unit, ledger, open_period)

    assert periods.validate_for_close(earlier.id).can_close


# =============================================================================
# Closing
# =============================================================================

@pytest.mark.django_db
def test_close_is_one_way_and_gates_postings(ledger, post, open_period, user):
    post([line("1000", debit="15.00"), line("4000", credit="15.00")])

    closed, validation = periods.close_period(open_period.id, closed_by=user)

    assert validation.warnings == ["1 journal entries have not been approved"]
    assert closed.status == AccountingPeriod.Status.CLOSED
    assert closed.closed_by == user
    assert closed.closed_at is not None

    with pytest.raises(PeriodClosedError):
        post([line("1000", debit="15.00"), line("4000", credit="15.00")])

    with pytest.raises(ValidationError, match="already closed"):
        periods.close_period(open_period.id)


@pytest.mark.django_db
def test_close_command_returns_validation(ledger, post, actor, open_period):
    post([line("1000", debit="15.00"), line("4000", credit="15.00")])

    result = commands.close_period(actor, open_period.id)

    assert result.success
    assert result.data["period"].status == AccountingPeriod.Status.CLOSED
    assert result.data["validation"].warnings == ["1 journal entries have not been approved"]

    again = commands.close_period(actor, open_period.id)
    assert not again.success
    assert again.error == "Accounting period is already closed."


@pytest.mark.django_db
def test_close_command_reports_blocking_errors(ledger, business_unit, actor, open_period):
    _unbalanced_entry(business_unit, ledger, open_period)

    result = commands.close_period(actor, open_period.id)

    assert not result.success
    assert result.code == "validation_error"
    assert result.data.can_close is False
    assert result.errors == result.data.errors


@pytest.mark.django_db
def test_close_command_validates_once(ledger, post, actor, open_period, monkeypatch):
    post([line("1000", debit="15.00"), line("4000", credit="15.00")])
    calls = []
    validate = periods.validate_for_close

    def counted(period_id):
        calls.append(period_id)
        return validate(period_id)

    monkeypatch.setattr(periods, "validate_for_close", counted)

    assert commands.close_period(actor, open_period.id).success
    assert calls == [open_period.id]

    calls.clear()
    again = commands.close_period(actor, open_period.id)

    assert again.data.errors == ["Accounting period is already closed."]
    assert calls == [open_period.id]


@pytest.mark.django_db
def test_close_requires_permission(open_period, accountant_actor):
    with pytest.raises(PermissionDenied):
        commands.close_period(accountant_actor, open_period.id)


@pytest.mark.django_db
def test_validate_close_is_scoped_to_business_unit(open_period, second_business_unit, actor):
    other = AccountingPeriod.objects.create(
        business_unit=second_business_unit,
        name="FY2026",
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
    )

    result = commands.validate_period_close(actor, other.id)

    assert not result.success
    assert result.code == "not_found"


# =============================================================================
# Creating periods
# =============================================================================

@pytest.mark.django_db
def test_create_period_rejects_overlap_with_open_period(open_period, actor):
    result = commands.create_period(actor, "Q4 2026", date(2026, 10, 1), date(2026, 12, 31))

    assert not result.success
    assert result.error == "An open accounting period already covers part of this date range."


@pytest.mark.django_db
def test_create_period_after_close_of_overlapping(open_period, actor):
    open_period.status = AccountingPeriod.Status.CLOSED
    open_period.save(update_fields=["status"])

    result = commands.create_period(actor, "FY2026 adjustments", date(2026, 12, 1), date(2026, 12, 31))

    assert result.success
    assert result.data.status == AccountingPeriod.Status.OPEN


@pytest.mark.django_db
def test_create_adjacent_period(open_period, actor):
    result = commands.create_period(actor, "FY2027", date(2027, 1, 1), date(2027, 12, 31))

    assert result.success


@pytest.mark.django_db
def test_create_period_rejects_inverted_range(actor):
    result = commands.create_period(actor, "Broken", date(2026, 5, 1), date(2026, 4, 1))

    assert not result.success
    assert "end date" in result.error


# =============================================================================
# Posting vs. closing
# =============================================================================

@pytest.mark.django_db
def test_posting_lookup_can_lock_the_period(open_period, business_unit):
    with transaction.atomic():
        assert periods.find_open_period(business_unit.id, POSTING_DATE, lock=True) == open_period


@pytest.mark.skipif(
    connection.vendor != "postgresql",
    reason="Row locks need a database with concurrent connections",
)
@pytest.mark.django_db(transaction=True)
def test_close_waits_for_in_flight_posting(ledger, open_period, post, monkeypatch):
    posting_started = threading.Event()
    release_posting = threading.Event()
    failures = []
    apply_delta = engine.apply_delta

    def held_apply_delta(account_id, signed_amount):
        posting_started.set()
        release_posting.wait(timeout=10)
        apply_delta(account_id, signed_amount)

    monkeypatch.setattr(engine, "apply_delta", held_apply_delta)

    def worker(func):
        def run():
            try:
                func()
            except Exception as exc:
                failures.append(exc)
            finally:
                connections.close_all()
        return threading.Thread(target=run)

    poster = worker(lambda: post([line("1000", debit="10.00"), line("4000", credit="10.00")]))
    closer = worker(lambda: periods.close_period(open_period.id))

    poster.start()
    assert posting_started.wait(timeout=10)
    closer.start()
    closer.join(timeout=0.5)
    close_was_blocked = closer.is_alive()
    release_posting.set()
    poster.join(timeout=10)
    closer.join(timeout=10)

    assert close_was_blocked
    assert failures == []
    open_period.refresh_from_db()
    assert open_period.status == AccountingPeriod.Status.CLOSED
    assert JournalEntry.objects.get().period_id == open_period.id
