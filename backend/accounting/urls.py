# accounting/urls.py
"""
URL configuration for the ledger API.

Endpoints:
- /accounts/ - Chart of accounts, balances and account activity
- /default-accounts/ - Designated Receivable / Payable accounts
- /journal-entries/ - Posting and approval
- /periods/ - Accounting periods and period close
- /numbering-series/ - Document numbering
- /reports/ - Trial balance, balance sheet, income statement, summary
"""

from django.urls import path

from .views import (
    # Account views
    AccountListCreateView,
    AccountDetailView,
    AccountTransactionsView,
    AccountExportView,
    DefaultAccountView,
    # Journal entry views
    JournalEntryListCreateView,
    JournalEntryDetailView,
    JournalEntryApproveView,
    # Period and numbering views
    AccountingPeriodListCreateView,
    AccountingPeriodCloseView,
    NumberingSeriesView,
    # Report views
    TrialBalanceView,
    TrialBalanceExportView,
    BalanceSheetView,
    IncomeStatementView,
    FinancialSummaryView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Accounts
    # ==========================================================================
    path("accounts/", AccountListCreateView.as_view(), name="account-list-create"),
    path("accounts/export/", AccountExportView.as_view(), name="account-export"),
    path("accounts/<str:code>/", AccountDetailView.as_view(), name="account-detail"),
    path(
        "accounts/<str:code>/transactions/",
        AccountTransactionsView.as_view(),
        name="account-transactions",
    ),
    path("default-accounts/", DefaultAccountView.as_view(), name="default-accounts"),

    # ==========================================================================
    # Journal Entries
    # ==========================================================================
    path(
        "journal-entries/",
        JournalEntryListCreateView.as_view(),
        name="journal-entry-list-create",
    ),
    path(
        "journal-entries/<int:pk>/",
        JournalEntryDetailView.as_view(),
        name="journal-entry-detail",
    ),
    path(
        "journal-entries/<int:pk>/approve/",
        JournalEntryApproveView.as_view(),
        name="journal-entry-approve",
    ),

    # ==========================================================================
    # Periods & Numbering
    # ==========================================================================
    path("periods/", AccountingPeriodListCreateView.as_view(), name="period-list-create"),
    path("periods/<int:pk>/close/", AccountingPeriodCloseView.as_view(), name="period-close"),
    path("numbering-series/", NumberingSeriesView.as_view(), name="numbering-series"),

    # ==========================================================================
    # Reports
    # ==========================================================================
    path("reports/trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path(
        "reports/trial-balance/export/",
        TrialBalanceExportView.as_view(),
        name="trial-balance-export",
    ),
    path("reports/balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("reports/income-statement/", IncomeStatementView.as_view(), name="income-statement"),
    path("reports/summary/", FinancialSummaryView.as_view(), name="financial-summary"),
]
