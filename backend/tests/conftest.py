# tests/conftest.py
"""
Pytest fixtures for ledger tests.

- business_unit / second_business_unit: isolated books
- user + owner membership + actor: an OWNER ActorContext
- chart: a small restaurant chart of accounts
- open_period: an OPEN period covering 2026
- numbering: all five numbering series
- receivable_default / payable_default: designated A/R and A/P accounts
"""

from datetime import date

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import actor_for
from accounts.models import BusinessUnit, BusinessUnitMembership
from accounting.ledger import post_entry
from accounting.models import (
    Account,
    AccountingPeriod,
    DefaultAccount,
    NumberingSeries,
)
from accounting.write_barrier import bootstrap_writes_allowed
from financials.models import BankAccount
from helpers import POSTING_DATE, make_member


User = get_user_model()


@pytest.fixture(autouse=True, scope="session")
def _testing_settings():
    """Ensure test-only settings are enabled for the engine write guards."""
    settings.TESTING = True


# =============================================================================
# Business Unit & User Fixtures
# =============================================================================

@pytest.fixture
def business_unit(db):
    return BusinessUnit.objects.create(name="Main Street Bistro", currency="USD")


@pytest.fixture
def second_business_unit(db):
    return BusinessUnit.objects.create(name="Harbor Grill", currency="EUR")


@pytest.fixture
def user(db, business_unit):
    user = User.objects.create_user(
        email="owner@bistro.test",
        password="testpass123",
        name="Test Owner",
    )
    user.active_business_unit = business_unit
    user.save(update_fields=["active_business_unit"])
    return user


@pytest.fixture
def owner_membership(db, business_unit, user):
    return BusinessUnitMembership.objects.create(
        business_unit=business_unit,
        user=user,
        role=BusinessUnitMembership.Role.OWNER,
    )


@pytest.fixture
def actor(user, business_unit, owner_membership):
    """ActorContext for the owner of business_unit."""
    return actor_for(user, business_unit)


@pytest.fixture
def accountant_actor(db, business_unit):
    return make_member(business_unit, "accountant@bistro.test", BusinessUnitMembership.Role.ACCOUNTANT)


@pytest.fixture
def viewer_actor(db, business_unit):
    return make_member(business_unit, "viewer@bistro.test", BusinessUnitMembership.Role.VIEWER)


# =============================================================================
# Ledger Setup Fixtures
# =============================================================================

CHART = [
    ("1000", "Cash on Hand", Account.AccountType.ASSET),
    ("1010", "Bank Account", Account.AccountType.ASSET),
    ("1200", "Accounts Receivable", Account.AccountType.ASSET),
    ("1500", "Kitchen Equipment", Account.AccountType.ASSET),
    ("2000", "Accounts Payable", Account.AccountType.LIABILITY),
    ("3000", "Owner's Equity", Account.AccountType.EQUITY),
    ("4000", "Food Sales", Account.AccountType.REVENUE),
    ("4100", "Beverage Sales", Account.AccountType.REVENUE),
    ("5000", "Cost of Food Sold", Account.AccountType.EXPENSE),
    ("5100", "Wages Expense", Account.AccountType.EXPENSE),
]


@pytest.fixture
def chart(db, business_unit):
    """Chart of accounts keyed by code."""
    return {
        code: Account.objects.create(
            business_unit=business_unit,
            code=code,
            name=name,
            account_type=account_type,
        )
        for code, name, account_type in CHART
    }


@pytest.fixture
def open_period(db, business_unit):
    return AccountingPeriod.objects.create(
        business_unit=business_unit,
        name="FY2026",
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
    )


@pytest.fixture
def numbering(db, business_unit):
    """All five numbering series with their default prefixes."""
    with bootstrap_writes_allowed():
        return {
            kind: NumberingSeries.objects.create(
                business_unit=business_unit,
                document_kind=kind,
                prefix=prefix,
            )
            for kind, prefix in NumberingSeries.DEFAULT_PREFIXES.items()
        }


@pytest.fixture
def ledger(chart, open_period, numbering):
    """A business unit ready to post: chart, open period and numbering."""
    return chart


@pytest.fixture
def receivable_default(ledger, business_unit):
    return DefaultAccount.objects.create(
        business_unit=business_unit,
        role=DefaultAccount.Role.RECEIVABLE,
        account=ledger["1200"],
    )


@pytest.fixture
def payable_default(ledger, business_unit):
    return DefaultAccount.objects.create(
        business_unit=business_unit,
        role=DefaultAccount.Role.PAYABLE,
        account=ledger["2000"],
    )


@pytest.fixture
def bank_account(ledger, business_unit):
    return BankAccount.objects.create(
        business_unit=business_unit,
        name="Operating Account",
        bank_name="First Bank",
        gl_account=ledger["1010"],
    )


# =============================================================================
# Posting & API Fixtures
# =============================================================================

@pytest.fixture
def post(business_unit, user):
    """Post an entry in business_unit as the owner."""
    def _post(lines, posting_date=POSTING_DATE, remarks=""):
        return post_entry(
            business_unit_id=business_unit.id,
            posting_date=posting_date,
            remarks=remarks,
            author_id=user.id,
            lines=lines,
        )
    return _post


@pytest.fixture
def api_client(user, owner_membership):
    client = APIClient()
    client.force_authenticate(user=user)
    return client

