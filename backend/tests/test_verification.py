# tests/test_verification.py
"""
Tests for balance verification (tasks and management commands) and the
setup_ledger bootstrap command.
"""

from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import BusinessUnit, BusinessUnitMembership
from accounts.permission_defaults import all_permission_codes, permissions_for_role
from accounting.balances import verify_account_balances
from accounting.models import Account, AccountingPeriod, DefaultAccount, NumberingSeries
from accounting.tasks import verify_account_balances as verify_task
from accounting.tasks import verify_all_business_units
from helpers import line


def _drift(account, amount):
    """Simulate a running balance that no longer matches its lines."""
    Account.objects.filter(pk=account.pk).update(balance=amount)


# =============================================================================
# Verification
# =============================================================================

@pytest.mark.django_db
def test_verification_passes_after_postings(ledger, post, business_unit):
    post([line("1000", debit="70.00"), line("4000", credit="70.00")])
    post([line("5100", debit="20.00"), line("1000", credit="20.00")])

    report = verify_account_balances(business_unit.id)

    assert report["total_accounts"] == len(ledger)
    assert report["verified"] == len(ledger)
    assert report["mismatches"] == []


@pytest.mark.django_db
def test_verification_reports_drift(ledger, post, business_unit):
    post([line("1000", debit="70.00"), line("4000", credit="70.00")])
    _drift(ledger["1000"], Decimal("75.00"))

    report = verify_account_balances(business_unit.id)

    assert report["mismatches"] == [{
        "account_code": "1000",
        "running_balance": "75.00",
        "recomputed_balance": "70.00",
        "difference": "5.00",
    }]


@pytest.mark.django_db
def test_verify_task(ledger, business_unit):
    report = verify_task(business_unit_id=business_unit.id)

    assert report["verified"] == len(ledger)


@pytest.mark.django_db
def test_verify_task_unknown_business_unit():
    assert verify_task(business_unit_id=424242) == {"error": "Business unit 424242 not found"}


@pytest.mark.django_db
def test_verify_all_business_units(ledger, business_unit, second_business_unit):
    _drift(ledger["4000"], Decimal("1.00"))

    summary = verify_all_business_units()

    assert summary["business_units_checked"] == 2
    assert summary["business_units_with_mismatches"] == [business_unit.id]


@pytest.mark.django_db
def test_verify_balances_command(ledger, business_unit):
    out = StringIO()
    call_command("verify_balances", "--business-unit", str(business_unit.id), stdout=out)

    assert "All balances verified." in out.getvalue()

    _drift(ledger["1010"], Decimal("3.00"))
    with pytest.raises(CommandError, match="1 balance mismatches found"):
        call_command("verify_balances", "--all", stdout=StringIO())


@pytest.mark.django_db
def test_verify_balances_command_requires_target():
    with pytest.raises(CommandError, match="Specify --business-unit"):
        call_command("verify_balances", stdout=StringIO())


# =============================================================================
# setup_ledger
# =============================================================================

@pytest.mark.django_db
def test_setup_ledger_bootstraps_business_unit(user):
    call_command(
        "setup_ledger", "Corner Cafe",
        "--seed-chart", "--open-year", "2026", "--owner-email", user.email,
        stdout=StringIO(),
    )

    unit = BusinessUnit.objects.get(name="Corner Cafe")
    assert NumberingSeries.objects.filter(business_unit=unit).count() == 5
    assert Account.objects.filter(business_unit=unit).count() == 15
    assert DefaultAccount.objects.get(business_unit=unit, role=DefaultAccount.Role.RECEIVABLE).account.code == "1200"
    assert DefaultAccount.objects.get(business_unit=unit, role=DefaultAccount.Role.PAYABLE).account.code == "2000"

    period = AccountingPeriod.objects.get(business_unit=unit)
    assert (period.name, period.start_date, period.end_date) == ("FY2026", date(2026, 1, 1), date(2026, 12, 31))

    membership = BusinessUnitMembership.objects.get(business_unit=unit, user=user)
    assert membership.role == BusinessUnitMembership.Role.OWNER


@pytest.mark.django_db
def test_setup_ledger_is_idempotent():
    call_command("setup_ledger", "Corner Cafe", "--seed-chart", "--open-year", "2026", stdout=StringIO())
    out = StringIO()
    call_command("setup_ledger", "Corner Cafe", "--seed-chart", "--open-year", "2026", stdout=out)

    unit = BusinessUnit.objects.get(name="Corner Cafe")
    assert NumberingSeries.objects.filter(business_unit=unit).count() == 5
    assert AccountingPeriod.objects.filter(business_unit=unit).count() == 1
    assert "Numbering series: 0 created" in out.getvalue()


@pytest.mark.django_db
def test_setup_ledger_unknown_owner():
    with pytest.raises(CommandError, match="User nobody@bistro.test not found"):
        call_command("setup_ledger", "Corner Cafe", "--owner-email", "nobody@bistro.test", stdout=StringIO())


# =============================================================================
# Permissions
# =============================================================================

def test_role_permissions():
    assert "journal.approve" not in permissions_for_role("ACCOUNTANT")
    assert "journal.post" not in permissions_for_role("VIEWER")
    assert permissions_for_role("UNKNOWN") == frozenset()
    assert permissions_for_role("OWNER") == all_permission_codes()
