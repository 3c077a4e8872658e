# accounting/reports.py
"""
Financial reports over the current account balances.

All reports read the running Account.balance column (a snapshot, not a
point-in-time rebuild from journal lines). Amounts are Decimals; the
views turn them into strings.
"""

from decimal import Decimal
from typing import Any, Dict, List

from django.apps import apps
from django.db.models import F, Sum

from accounting.models import Account, ZERO
from accounting.policies import is_balanced


AccountType = Account.AccountType

DEBIT_COLUMN_TYPES = {AccountType.ASSET, AccountType.EXPENSE}


def _accounts(business_unit_id: int):
    return Account.objects.filter(business_unit_id=business_unit_id).order_by("code")


def _line_item(account: Account) -> Dict[str, Any]:
    return {
        "account_code": account.code,
        "account_name": account.name,
        "amount": account.balance,
    }


def _total(accounts) -> Decimal:
    return sum((account.balance for account in accounts), ZERO)


def trial_balance(business_unit_id: int) -> List[Dict[str, Any]]:
    """
    Every account with its balance in the debit or credit column.

    Asset and Expense balances go to the debit column, everything else to
    the credit column. A negative balance stays negative in its column.
    """
    rows = []
    for account in _accounts(business_unit_id):
        in_debit_column = account.account_type in DEBIT_COLUMN_TYPES
        rows.append({
            "account_code": account.code,
            "account_name": account.name,
            "account_type": account.account_type,
            "debit_balance": account.balance if in_debit_column else ZERO,
            "credit_balance": ZERO if in_debit_column else account.balance,
        })
    return rows


def trial_balance_totals(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    total_debit = sum((row["debit_balance"] for row in rows), ZERO)
    total_credit = sum((row["credit_balance"] for row in rows), ZERO)
    return {
        "total_debit": total_debit,
        "total_credit": total_credit,
        "is_balanced": is_balanced(total_debit, total_credit),
    }


def balance_sheet(business_unit_id: int) -> Dict[str, Any]:
    """
    Assets, liabilities and equity, with net income folded into equity.

    Current assets are those whose code starts with "1", current
    liabilities those whose code starts with "2".
    """
    by_type = {account_type: [] for account_type in AccountType.values}
    for account in _accounts(business_unit_id):
        by_type[account.account_type].append(account)

    assets = by_type[AccountType.ASSET]
    liabilities = by_type[AccountType.LIABILITY]
    equity = by_type[AccountType.EQUITY]

    retained_earnings = _total(by_type[AccountType.REVENUE]) - _total(by_type[AccountType.EXPENSE])
    total_assets = _total(assets)
    total_liabilities = _total(liabilities)
    total_equity = _total(equity) + retained_earnings

    return {
        "assets": [_line_item(a) for a in assets],
        "current_assets": [_line_item(a) for a in assets if a.code.startswith("1")],
        "non_current_assets": [_line_item(a) for a in assets if not a.code.startswith("1")],
        "liabilities": [_line_item(a) for a in liabilities],
        "current_liabilities": [_line_item(a) for a in liabilities if a.code.startswith("2")],
        "non_current_liabilities": [_line_item(a) for a in liabilities if not a.code.startswith("2")],
        "equity": [_line_item(a) for a in equity],
        "retained_earnings": retained_earnings,
        "total_assets": total_assets,
        "total_liabilities": total_liabilities,
        "total_equity": total_equity,
        "total_liabilities_and_equity": total_liabilities + total_equity,
    }


def income_statement(business_unit_id: int) -> Dict[str, Any]:
    """Revenue and expense accounts; net income = revenue - expenses."""
    revenue = []
    expenses = []
    for account in _accounts(business_unit_id).filter(
        account_type__in=[AccountType.REVENUE, AccountType.EXPENSE],
    ):
        if account.account_type == AccountType.REVENUE:
            revenue.append(account)
        else:
            expenses.append(account)

    total_revenue = _total(revenue)
    total_expenses = _total(expenses)
    net_income = total_revenue - total_expenses

    return {
        "revenue": [_line_item(a) for a in revenue],
        "expenses": [_line_item(a) for a in expenses],
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        # No cost-of-sales classification, so gross profit equals net income.
        "gross_profit": net_income,
        "net_income": net_income,
    }


def _outstanding(model_name: str, business_unit_id: int) -> Decimal:
    model = apps.get_model("financials", model_name)
    agg = model.objects.filter(
        business_unit_id=business_unit_id,
        status=model.Status.OPEN,
    ).aggregate(outstanding=Sum(F("total_amount") - F("amount_paid")))
    return agg["outstanding"] or ZERO


def financial_summary(business_unit_id: int) -> Dict[str, Any]:
    """Dashboard figures: totals per type, cash on hand, open A/R and A/P."""
    totals = {account_type: ZERO for account_type in AccountType.values}
    cash = ZERO
    for account in _accounts(business_unit_id):
        totals[account.account_type] += account.balance
        if account.account_type == AccountType.ASSET and (
            "cash" in account.name.lower() or account.code.startswith("1000")
        ):
            cash += account.balance

    return {
        "total_assets": totals[AccountType.ASSET],
        "total_liabilities": totals[AccountType.LIABILITY],
        "total_equity": totals[AccountType.EQUITY],
        "total_revenue": totals[AccountType.REVENUE],
        "total_expenses": totals[AccountType.EXPENSE],
        "net_income": totals[AccountType.REVENUE] - totals[AccountType.EXPENSE],
        "cash_on_hand": cash,
        "accounts_receivable": _outstanding("ARInvoice", business_unit_id),
        "accounts_payable": _outstanding("APInvoice", business_unit_id),
    }
