# financials/models.py
"""
Source documents that produce derived journal entries.

- BankAccount: a bank account linked to its GL account
- ARInvoice / ARInvoiceItem: sales invoices (debit Receivable, credit revenue)
- APInvoice / APInvoiceItem: purchase invoices (debit expense, credit Payable)
- IncomingPayment / OutgoingPayment: cash received from customers or paid to vendors

Each document keeps a reference to the journal entry posted for it.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from accounts.models import BusinessUnit
from accounting.models import Account, JournalEntry


ZERO = Decimal("0.00")


class BankAccount(models.Model):
    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="bank_accounts",
    )
    name = models.CharField(max_length=100)
    bank_name = models.CharField(max_length=100, blank=True, default="")
    account_number = models.CharField(max_length=50, blank=True, default="")
    gl_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="bank_accounts",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "name"],
                name="uniq_bank_account_name",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.gl_account.code})"


class SourceDocument(models.Model):
    """Fields shared by every document that is posted to the ledger."""

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="%(class)ss",
    )
    document_number = models.CharField(max_length=50)
    partner_code = models.CharField(max_length=50)
    journal_entry = models.ForeignKey(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True

    def __str__(self):
        return self.document_number


class Invoice(SourceDocument):
    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        CLOSED = "CLOSED", "Closed"

    posting_date = models.DateField()
    remarks = models.CharField(max_length=500, blank=True, default="")
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)

    class Meta:
        abstract = True
        ordering = ["-posting_date", "-id"]

    @property
    def outstanding(self) -> Decimal:
        return self.total_amount - self.amount_paid

    def apply_payment(self, amount: Decimal) -> None:
        """Record a payment against the invoice; fully paid invoices close."""
        self.amount_paid += amount
        if self.amount_paid >= self.total_amount:
            self.status = self.Status.CLOSED
        self.save(update_fields=["amount_paid", "status"])


class InvoiceItem(models.Model):
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("1"))
    unit_price = models.DecimalField(max_digits=18, decimal_places=2)
    line_total = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        abstract = True
        ordering = ["id"]


class ARInvoice(Invoice):
    class Meta(Invoice.Meta):
        verbose_name = "A/R invoice"
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "document_number"],
                name="uniq_ar_invoice_number",
            ),
        ]


class ARInvoiceItem(InvoiceItem):
    invoice = models.ForeignKey(ARInvoice, on_delete=models.CASCADE, related_name="items")
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="ar_invoice_items",
        help_text="Revenue account credited for this item",
    )


class APInvoice(Invoice):
    class Meta(Invoice.Meta):
        verbose_name = "A/P invoice"
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "document_number"],
                name="uniq_ap_invoice_number",
            ),
        ]


class APInvoiceItem(InvoiceItem):
    invoice = models.ForeignKey(APInvoice, on_delete=models.CASCADE, related_name="items")
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="ap_invoice_items",
        help_text="Expense or asset account debited for this item",
    )


class Payment(SourceDocument):
    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    remarks = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        abstract = True
        ordering = ["-payment_date", "-id"]


class IncomingPayment(Payment):
    bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.PROTECT,
        related_name="incoming_payments",
    )
    invoice = models.ForeignKey(
        ARInvoice,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    class Meta(Payment.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "document_number"],
                name="uniq_incoming_payment_number",
            ),
            models.CheckConstraint(condition=Q(amount__gt=0), name="chk_incoming_payment_positive"),
        ]


class OutgoingPayment(Payment):
    bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.PROTECT,
        related_name="outgoing_payments",
    )
    invoice = models.ForeignKey(
        APInvoice,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    class Meta(Payment.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "document_number"],
                name="uniq_outgoing_payment_number",
            ),
            models.CheckConstraint(condition=Q(amount__gt=0), name="chk_outgoing_payment_positive"),
        ]
