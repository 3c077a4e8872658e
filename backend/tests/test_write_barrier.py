# tests/test_write_barrier.py
"""
Tests for write barrier enforcement.
"""

from decimal import Decimal

import pytest
from django.db import transaction

from accounting.balances import apply_delta, get_balance
from accounting.models import Account, JournalEntry, NumberingSeries
from accounting.write_barrier import (
    bootstrap_writes_allowed,
    command_writes_allowed,
    current_write_context,
    posting_writes_allowed,
)
from helpers import POSTING_DATE, line


@pytest.mark.django_db
def test_direct_journal_entry_save_raises(settings, business_unit):
    settings.TESTING = False

    with pytest.raises(RuntimeError, match="Direct saves are only allowed"):
        JournalEntry.objects.create(
            business_unit=business_unit,
            document_number="JE-X",
            posting_date=POSTING_DATE,
        )


@pytest.mark.django_db
def test_numbering_series_requires_a_context(settings, business_unit):
    settings.TESTING = False

    with pytest.raises(RuntimeError, match="Direct saves are only allowed"):
        NumberingSeries.objects.create(
            business_unit=business_unit,
            document_kind=NumberingSeries.DocumentKind.JOURNAL_ENTRY,
            prefix="JE-",
        )

    with bootstrap_writes_allowed():
        series = NumberingSeries.objects.create(
            business_unit=business_unit,
            document_kind=NumberingSeries.DocumentKind.JOURNAL_ENTRY,
            prefix="JE-",
        )

    series.next_number = 99
    with pytest.raises(RuntimeError, match="Direct saves are only allowed"):
        series.save()

    with command_writes_allowed():
        series.save()

    series.refresh_from_db()
    assert series.next_number == 99


@pytest.mark.django_db
def test_balance_moves_only_inside_posting_context(settings, chart, business_unit):
    settings.TESTING = False
    cash = chart["1000"]

    with pytest.raises(RuntimeError, match="posting_writes_allowed"):
        apply_delta(cash.pk, Decimal("10.00"))

    with transaction.atomic(), posting_writes_allowed():
        apply_delta(cash.pk, Decimal("10.00"))

    assert get_balance(business_unit.id, "1000") == Decimal("10.00")


@pytest.mark.django_db(transaction=True)
def test_apply_delta_requires_a_transaction(chart):
    with pytest.raises(RuntimeError, match="posting transaction"):
        apply_delta(chart["1000"].pk, Decimal("10.00"))


@pytest.mark.django_db
def test_account_save_never_writes_balance(chart, ledger, post):
    stale = Account.objects.get(pk=chart["1000"].pk)
    post([line("1000", debit="45.00"), line("4000", credit="45.00")])

    stale.name = "Petty Cash"
    stale.save()

    stale.refresh_from_db()
    assert stale.name == "Petty Cash"
    assert stale.balance == Decimal("45.00")


@pytest.mark.django_db
def test_engine_posts_with_barrier_enforced(settings, ledger, post):
    settings.TESTING = False

    entry = post([line("1000", debit="20.00"), line("4000", credit="20.00")])

    assert entry.document_number == "JE-1"
    assert current_write_context() is None


def test_contexts_nest_and_unwind():
    with command_writes_allowed():
        with posting_writes_allowed():
            assert current_write_context() == "posting"
        assert current_write_context() == "command"
    assert current_write_context() is None
