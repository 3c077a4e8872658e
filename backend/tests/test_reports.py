# tests/test_reports.py
"""
Tests for trial balance, balance sheet, income statement and summary.
"""

from decimal import Decimal

import pytest

from accounting import reports
from accounting.balances import account_transactions
from financials.commands import create_ap_invoice
from helpers import POSTING_DATE, line


@pytest.fixture
def month_of_trading(ledger, post):
    """
    Owner funds the bank, buys kitchen equipment partly on credit,
    sells food and drinks for cash and records food cost.
    """
    post([line("1010", debit="10000.00"), line("3000", credit="10000.00")], remarks="Capital")
    post([
        line("1500", debit="4000.00"),
        line("1010", credit="2500.00"),
        line("2000", credit="1500.00"),
    ], remarks="Combi oven")
    post([
        line("1000", debit="800.00"),
        line("4000", credit="650.00"),
        line("4100", credit="150.00"),
    ], remarks="Weekend takings")
    post([line("5000", debit="300.00"), line("1000", credit="300.00")], remarks="Food cost")
    return ledger


def _row(rows, code):
    return next(row for row in rows if row["account_code"] == code)


@pytest.mark.django_db
def test_trial_balance_columns_and_totals(month_of_trading, business_unit):
    rows = reports.trial_balance(business_unit.id)

    assert [row["account_code"] for row in rows] == [
        "1000", "1010", "1200", "1500", "2000", "3000", "4000", "4100", "5000", "5100",
    ]
    assert _row(rows, "1010")["debit_balance"] == Decimal("7500.00")
    assert _row(rows, "1010")["credit_balance"] == Decimal("0.00")
    assert _row(rows, "4000")["credit_balance"] == Decimal("650.00")
    assert _row(rows, "5000")["debit_balance"] == Decimal("300.00")

    totals = reports.trial_balance_totals(rows)
    assert totals == {
        "total_debit": Decimal("12300.00"),
        "total_credit": Decimal("12300.00"),
        "is_balanced": True,
    }


@pytest.mark.django_db
def test_negative_balance_stays_in_its_column(ledger, post, business_unit):
    post([line("2000", debit="30.00"), line("1000", credit="30.00")])

    rows = reports.trial_balance(business_unit.id)

    assert _row(rows, "2000")["credit_balance"] == Decimal("-30.00")
    assert _row(rows, "2000")["debit_balance"] == Decimal("0.00")
    assert _row(rows, "1000")["debit_balance"] == Decimal("-30.00")
    assert reports.trial_balance_totals(rows)["is_balanced"]


@pytest.mark.django_db
def test_income_statement(month_of_trading, business_unit):
    statement = reports.income_statement(business_unit.id)

    assert [item["account_code"] for item in statement["revenue"]] == ["4000", "4100"]
    assert [item["account_code"] for item in statement["expenses"]] == ["5000", "5100"]
    assert statement["total_revenue"] == Decimal("800.00")
    assert statement["total_expenses"] == Decimal("300.00")
    assert statement["net_income"] == Decimal("500.00")
    assert statement["gross_profit"] == statement["net_income"]


@pytest.mark.django_db
def test_balance_sheet_equation(month_of_trading, business_unit):
    sheet = reports.balance_sheet(business_unit.id)

    assert sheet["total_assets"] == Decimal("12000.00")
    assert sheet["total_liabilities"] == Decimal("1500.00")
    assert sheet["retained_earnings"] == Decimal("500.00")
    assert sheet["total_equity"] == Decimal("10500.00")
    assert sheet["total_liabilities_and_equity"] == sheet["total_assets"]
    assert [item["account_code"] for item in sheet["current_assets"]] == ["1000", "1010", "1200", "1500"]
    assert sheet["non_current_assets"] == []


@pytest.mark.django_db
def test_financial_summary(month_of_trading, business_unit, actor, payable_default):
    result = create_ap_invoice(
        actor,
        partner_code="V-FARM",
        posting_date=POSTING_DATE,
        items=[{"account_code": "5000", "quantity": "1", "unit_price": "200.00"}],
    )
    assert result.success

    summary = reports.financial_summary(business_unit.id)

    assert summary["cash_on_hand"] == Decimal("500.00")
    assert summary["total_assets"] == Decimal("12000.00")
    assert summary["total_liabilities"] == Decimal("1700.00")
    assert summary["net_income"] == Decimal("300.00")
    assert summary["accounts_receivable"] == Decimal("0.00")
    assert summary["accounts_payable"] == Decimal("200.00")


@pytest.mark.django_db
def test_reports_are_scoped_to_business_unit(month_of_trading, second_business_unit):
    assert reports.trial_balance(second_business_unit.id) == []
    assert reports.income_statement(second_business_unit.id)["net_income"] == Decimal("0.00")


@pytest.mark.django_db
def test_account_transactions_newest_first(ledger, post):
    post([line("1000", debit="70.00", description="Dinner"), line("4000", credit="70.00")], remarks="Friday")
    post([line("5100", debit="20.00"), line("1000", credit="20.00")], remarks="Napkins")

    activity = account_transactions(ledger["1000"])

    assert [row["remarks"] for row in activity] == ["Napkins", "Friday"]
    assert [row["effect"] for row in activity] == [Decimal("-20.00"), Decimal("70.00")]
    assert activity[1]["description"] == "Dinner"
    assert len(account_transactions(ledger["1000"], limit=1)) == 1
