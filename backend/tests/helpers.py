# tests/helpers.py
"""Small builders shared by the ledger tests."""

from datetime import date

from django.contrib.auth import get_user_model

from accounts.authz import actor_for
from accounts.models import BusinessUnitMembership


POSTING_DATE = date(2026, 3, 15)


def line(account_code, debit=None, credit=None, description=""):
    return {"account_code": account_code, "debit": debit, "credit": credit, "description": description}


def balance_of(account):
    account.refresh_from_db()
    return account.balance


def make_member(business_unit, email, role):
    """Create a user with an active membership and return their ActorContext."""
    member = get_user_model().objects.create_user(email=email, password="testpass123", name=email.split("@")[0])
    member.active_business_unit = business_unit
    member.save(update_fields=["active_business_unit"])
    BusinessUnitMembership.objects.create(business_unit=business_unit, user=member, role=role)
    return actor_for(member, business_unit)
