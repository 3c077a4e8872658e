# accounting/tests/test_period_close_workflow.py
"""
Integration tests for a month of bookkeeping over the API.

These tests use API-level testing to verify the full lifecycle:
set up the ledger -> post entries and documents -> report -> close the
period -> postings into the closed period are refused.

Tests verify the API responses rather than direct database queries
to avoid transaction isolation issues between the API client and
test database connections.
"""
import csv
import io

from django.contrib.auth import get_user_model
from django.test import TransactionTestCase
from openpyxl import load_workbook
from rest_framework.test import APIClient

from accounts.models import BusinessUnit, BusinessUnitMembership


API = "/api/accounting"
FIN = "/api/financials"


class TestPeriodCloseFlow(TransactionTestCase):
    """
    Thin integration test (API-level):
    - Chart, numbering, period, designated Receivable, bank account
    - Manual JE + A/R invoice + incoming payment
    - Trial balance balanced
    - Close validation -> close -> 409 for new postings
    """

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()

        # 1) Create user
        self.user = User.objects.create_user(
            email="owner@bistro.test",
            password="pass12345",
            name="Owner",
        )

        # 2) Create business unit
        self.unit = BusinessUnit.objects.create(name="Main Street Bistro", currency="USD")

        # 3) Create OWNER membership
        BusinessUnitMembership.objects.create(
            user=self.user,
            business_unit=self.unit,
            role=BusinessUnitMembership.Role.OWNER,
            is_active=True,
        )

        # 4) Set active business unit
        self.user.active_business_unit = self.unit
        self.user.save(update_fields=["active_business_unit"])

        # 5) Authenticate
        self.client.force_authenticate(user=self.user)

        # 6) Chart of accounts via the API
        for code, name, account_type in [
            ("1000", "Cash on Hand", "ASSET"),
            ("1010", "Bank Account", "ASSET"),
            ("1200", "Accounts Receivable", "ASSET"),
            ("3000", "Owner's Equity", "EQUITY"),
            ("4000", "Food Sales", "REVENUE"),
            ("4200", "Catering Revenue", "REVENUE"),
            ("5000", "Cost of Food Sold", "EXPENSE"),
        ]:
            r = self.client.post(
                f"{API}/accounts/",
                {"code": code, "name": name, "account_type": account_type},
                format="json",
            )
            self.assertEqual(r.status_code, 201, r.data)

        # 7) Numbering series
        for kind in ["JOURNAL_ENTRY", "AR_INVOICE", "INCOMING_PAYMENT"]:
            r = self.client.post(f"{API}/numbering-series/", {"document_kind": kind}, format="json")
            self.assertEqual(r.status_code, 200, r.data)

        # 8) Period for March 2026
        r = self.client.post(
            f"{API}/periods/",
            {"name": "2026-03", "start_date": "2026-03-01", "end_date": "2026-03-31"},
            format="json",
        )
        self.assertEqual(r.status_code, 201, r.data)
        self.period_id = r.data["id"]

        # 9) Designated Receivable and a bank account
        r = self.client.put(
            f"{API}/default-accounts/",
            {"role": "RECEIVABLE", "account_code": "1200"},
            format="json",
        )
        self.assertEqual(r.status_code, 200, r.data)

        r = self.client.post(
            f"{FIN}/bank-accounts/",
            {"name": "Operating", "gl_account_code": "1010", "bank_name": "First Bank"},
            format="json",
        )
        self.assertEqual(r.status_code, 201, r.data)
        self.bank_account_id = r.data["id"]

    def _post_entry(self, posting_date, lines, remarks=""):
        return self.client.post(
            f"{API}/journal-entries/",
            {"posting_date": posting_date, "remarks": remarks, "lines": lines},
            format="json",
        )

    def test_month_end_close(self):
        """Post a month of activity, report, close, and verify the gate."""

        # 1) Owner capital and a day of food sales
        r = self._post_entry("2026-03-02", [
            {"account_code": "1010", "debit": "5000.00"},
            {"account_code": "3000", "credit": "5000.00"},
        ], remarks="Capital")
        self.assertEqual(r.status_code, 201, r.data)
        self.assertEqual(r.data["document_number"], "JE-1")
        capital_id = r.data["id"]

        r = self._post_entry("2026-03-07", [
            {"account_code": "1000", "debit": "640.00", "description": "Saturday"},
            {"account_code": "4000", "credit": "640.00"},
        ])
        self.assertEqual(r.status_code, 201, r.data)
        self.assertEqual(r.data["total_debit"], "640.00")

        # 2) Unbalanced entry is refused with every message
        r = self._post_entry("2026-03-08", [
            {"account_code": "1000", "debit": "100.00"},
            {"account_code": "4000", "credit": "90.00"},
        ])
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["code"], "validation_error")
        self.assertIn("Entry is not balanced. Debits: 100.00, Credits: 90.00", r.data["errors"])

        # 3) Catering invoice posts to Receivable
        r = self.client.post(f"{FIN}/ar-invoices/", {
            "partner_code": "C-WEDDING",
            "posting_date": "2026-03-14",
            "items": [
                {"account_code": "4200", "description": "Wedding buffet", "quantity": "60", "unit_price": "25.00"},
            ],
        }, format="json")
        self.assertEqual(r.status_code, 201, r.data)
        self.assertEqual(r.data["document_number"], "ARI-1")
        self.assertEqual(r.data["total_amount"], "1500.00")
        self.assertEqual(r.data["journal_entry_number"], "JE-3")
        invoice_id = r.data["id"]

        # 4) Deposit received against the invoice
        r = self.client.post(f"{FIN}/incoming-payments/", {
            "partner_code": "C-WEDDING",
            "payment_date": "2026-03-20",
            "amount": "500.00",
            "bank_account_id": self.bank_account_id,
            "invoice_id": invoice_id,
        }, format="json")
        self.assertEqual(r.status_code, 201, r.data)
        self.assertEqual(r.data["journal_entry_number"], "JE-4")

        r = self.client.get(f"{FIN}/ar-invoices/?status=open")
        self.assertEqual(len(r.data), 1)
        self.assertEqual(r.data[0]["amount_paid"], "500.00")

        # 5) Trial balance is balanced
        r = self.client.get(f"{API}/reports/trial-balance/")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data["is_balanced"])
        self.assertEqual(r.data["total_debit"], "7140.00")
        self.assertEqual(r.data["total_credit"], "7140.00")

        r = self.client.get(f"{API}/accounts/1200/")
        self.assertEqual(r.data["balance"], "1000.00")
        self.assertTrue(r.data["has_transactions"])

        r = self.client.get(f"{API}/reports/income-statement/")
        self.assertEqual(r.data["net_income"], "2140.00")

        r = self.client.get(f"{API}/reports/balance-sheet/")
        self.assertEqual(r.data["total_assets"], r.data["total_liabilities_and_equity"])

        # 6) Close validation: no errors, warnings for approvals and open invoice
        r = self.client.get(f"{API}/periods/{self.period_id}/close/")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data["can_close"])
        self.assertIn("4 journal entries have not been approved", r.data["warnings"])
        self.assertIn("1 A/R invoices are still open", r.data["warnings"])

        # 7) Approve the capital entry (OWNER may approve their own)
        r = self.client.post(f"{API}/journal-entries/{capital_id}/approve/")
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["approver"], self.user.id)

        # 8) Close the period
        r = self.client.post(f"{API}/periods/{self.period_id}/close/")
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["period"]["status"], "CLOSED")
        self.assertIn("3 journal entries have not been approved", r.data["validation"]["warnings"])

        # 9) Postings into the closed period are refused
        r = self._post_entry("2026-03-31", [
            {"account_code": "1000", "debit": "10.00"},
            {"account_code": "4000", "credit": "10.00"},
        ])
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.data["code"], "period_closed")

        r = self.client.post(f"{FIN}/ar-invoices/", {
            "partner_code": "C-WEDDING",
            "posting_date": "2026-03-31",
            "items": [{"account_code": "4200", "unit_price": "10.00"}],
        }, format="json")
        self.assertEqual(r.status_code, 409)
        r = self.client.get(f"{FIN}/ar-invoices/")
        self.assertEqual(len(r.data), 1)

        # 10) Closing is one-way
        r = self.client.post(f"{API}/periods/{self.period_id}/close/")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["detail"], "Accounting period is already closed.")

        # 11) The journal still lists every entry, newest first
        r = self.client.get(f"{API}/journal-entries/")
        self.assertEqual([e["document_number"] for e in r.data], ["JE-4", "JE-3", "JE-2", "JE-1"])

        r = self.client.get(f"{API}/journal-entries/?source_type=AR_INVOICE")
        self.assertEqual([e["remarks"] for e in r.data], ["A/R Invoice ARI-1"])

        r = self.client.get(f"{API}/journal-entries/?date_from=2026-03-10&date_to=2026-03-20")
        self.assertEqual([e["document_number"] for e in r.data], ["JE-4", "JE-3"])

        r = self.client.get(f"{API}/journal-entries/?date_from=last-week")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["detail"], "Invalid date_from format. Use YYYY-MM-DD.")

    def test_trial_balance_exports(self):
        r = self._post_entry("2026-03-02", [
            {"account_code": "1000", "debit": "250.50"},
            {"account_code": "4000", "credit": "250.50"},
        ])
        self.assertEqual(r.status_code, 201, r.data)

        r = self.client.get(f"{API}/reports/trial-balance/export/?format=csv")
        self.assertEqual(r.status_code, 200)
        self.assertIn("trial_balance_", r["Content-Disposition"])
        rows = list(csv.reader(io.StringIO(r.content.decode("utf-8-sig"))))
        self.assertEqual(rows[0], ["Account Code", "Account Name", "Account Type", "Debit", "Credit"])
        self.assertEqual(rows[1], ["1000", "Cash on Hand", "ASSET", "250.50", "0.00"])
        self.assertEqual(rows[-1], ["", "Total", "", "250.50", "250.50"])

        r = self.client.get(f"{API}/reports/trial-balance/export/?format=xlsx")
        self.assertEqual(r.status_code, 200)
        sheet = load_workbook(io.BytesIO(r.content)).active
        self.assertEqual(sheet.cell(row=1, column=1).value, "Trial Balance - Main Street Bistro")
        self.assertEqual(sheet.cell(row=4, column=1).value, "Account Code")
        self.assertEqual(sheet.cell(row=5, column=4).value, 250.5)

        r = self.client.get(f"{API}/reports/trial-balance/export/?format=txt")
        self.assertEqual(r.status_code, 200)
        self.assertIn("Total", r.content.decode())

        r = self.client.get(f"{API}/accounts/export/?format=csv")
        self.assertEqual(r.status_code, 200)

        r = self.client.get(f"{API}/reports/trial-balance/export/?format=pdf")
        self.assertEqual(r.status_code, 400)

    def test_viewer_is_read_only(self):
        User = get_user_model()
        viewer = User.objects.create_user(email="viewer@bistro.test", password="pass12345", name="Viewer")
        BusinessUnitMembership.objects.create(
            user=viewer,
            business_unit=self.unit,
            role=BusinessUnitMembership.Role.VIEWER,
        )
        viewer.active_business_unit = self.unit
        viewer.save(update_fields=["active_business_unit"])

        client = APIClient()
        client.force_authenticate(user=viewer)

        r = client.get(f"{API}/reports/trial-balance/")
        self.assertEqual(r.status_code, 200)

        r = client.post(
            f"{API}/journal-entries/",
            {"posting_date": "2026-03-02", "lines": []},
            format="json",
        )
        self.assertEqual(r.status_code, 403)

    def test_unauthenticated_requests_are_rejected(self):
        r = APIClient().get(f"{API}/accounts/")
        self.assertEqual(r.status_code, 401)
