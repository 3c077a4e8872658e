# accounting/models.py
"""
Ledger models.

- Account: GL account with a running balance
- JournalEntry / JournalLine: balanced double-entry postings
- AccountingPeriod: date ranges gating which postings are allowed
- NumberingSeries: per business unit document counters
- DefaultAccount: designated Receivable / Payable accounts

Journal entries, lines, balances and counters are engine-owned rows:
they are written by accounting.ledger and accounting.numbering inside
the write contexts of accounting.write_barrier.
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounts.models import BusinessUnit
from accounting.write_barrier import write_context_allowed


ZERO = Decimal("0.00")


def _guard_engine_write(model_name: str, allowed: set[str]) -> None:
    if not write_context_allowed(allowed) and not getattr(settings, "TESTING", False):
        raise RuntimeError(
            f"{model_name} is written by the posting engine. "
            "Direct saves are only allowed within posting_writes_allowed()."
        )


class Account(models.Model):
    """
    General-Ledger account.

    The account type decides the normal balance side and therefore the
    sign rule applied to postings:

        ASSET, EXPENSE               -> balance moves by debit - credit
        LIABILITY, EQUITY, REVENUE   -> balance moves by credit - debit

    `balance` is a running total maintained by the posting engine. It is
    never written by a regular save() of an existing row.
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        REVENUE = "REVENUE", "Revenue"
        EXPENSE = "EXPENSE", "Expense"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    # Map account types to their normal balance
    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.REVENUE: NormalBalance.CREDIT,
    }

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="accounts",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_column="type",
    )

    normal_balance = models.CharField(
        max_length=10,
        choices=NormalBalance.choices,
        editable=False,
    )

    description = models.TextField(blank=True, default="")

    balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=ZERO,
        editable=False,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "code"],
                name="uniq_account_code_per_business_unit",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["business_unit", "account_type"], name="idx_account_unit_type"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @classmethod
    def normal_balance_for(cls, account_type: str) -> str:
        try:
            return cls.NORMAL_BALANCE_MAP[account_type]
        except KeyError:
            raise ValidationError(f"Unknown account type: {account_type}")

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance_for(self.account_type) == self.NormalBalance.DEBIT

    def signed_delta(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Balance effect of one journal line on this account."""
        debit = debit or ZERO
        credit = credit or ZERO
        if self.is_debit_normal:
            return debit - credit
        return credit - debit

    def save(self, *args, **kwargs):
        self.normal_balance = self.normal_balance_for(self.account_type)
        # Updates never carry the balance column; only apply_delta moves it.
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name for f in self._meta.concrete_fields
                if not f.primary_key and f.name != "balance"
            ]
        super().save(*args, **kwargs)


class DefaultAccount(models.Model):
    """
    Designated account for a role the derived postings need.

    A business unit without a RECEIVABLE (or PAYABLE) designation has
    automatic A/R (or A/P) posting switched off.
    """

    class Role(models.TextChoices):
        RECEIVABLE = "RECEIVABLE", "Accounts Receivable"
        PAYABLE = "PAYABLE", "Accounts Payable"

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="default_accounts",
    )
    role = models.CharField(max_length=20, choices=Role.choices)
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="default_roles",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "role"],
                name="uniq_default_account_role",
            ),
        ]

    def __str__(self):
        return f"{self.business_unit_id}:{self.role} -> {self.account.code}"

    def clean(self):
        if self.account.business_unit_id != self.business_unit_id:
            raise ValidationError("Default account must belong to the same business unit.")


class AccountingPeriod(models.Model):
    """
    A date range in which postings are allowed while it is OPEN.

    OPEN -> CLOSED is one-way; see accounting.periods.close_period.
    """

    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        CLOSED = "CLOSED", "Closed"

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="accounting_periods",
    )
    name = models.CharField(max_length=100)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.OPEN,
    )
    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="closed_periods",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["business_unit", "start_date"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=models.F("start_date")),
                name="chk_period_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["business_unit", "status", "start_date"], name="idx_period_unit_status_start"),
        ]

    def __str__(self):
        return f"{self.name} ({self.start_date} - {self.end_date}) {self.status}"

    def contains(self, target_date) -> bool:
        return self.start_date <= target_date <= self.end_date


class NumberingSeries(models.Model):
    """
    Counter for one document kind in one business unit.

    Allocation returns `prefix + next_number` and increments the counter
    under a row lock (accounting.numbering.next_number).
    """

    class DocumentKind(models.TextChoices):
        JOURNAL_ENTRY = "JOURNAL_ENTRY", "Journal Entry"
        AR_INVOICE = "AR_INVOICE", "A/R Invoice"
        AP_INVOICE = "AP_INVOICE", "A/P Invoice"
        INCOMING_PAYMENT = "INCOMING_PAYMENT", "Incoming Payment"
        OUTGOING_PAYMENT = "OUTGOING_PAYMENT", "Outgoing Payment"

    DEFAULT_PREFIXES = {
        DocumentKind.JOURNAL_ENTRY: "JE-",
        DocumentKind.AR_INVOICE: "ARI-",
        DocumentKind.AP_INVOICE: "API-",
        DocumentKind.INCOMING_PAYMENT: "IP-",
        DocumentKind.OUTGOING_PAYMENT: "OP-",
    }

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="numbering_series",
    )
    document_kind = models.CharField(max_length=30, choices=DocumentKind.choices)
    prefix = models.CharField(max_length=20, blank=True, default="")
    next_number = models.PositiveBigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["document_kind", "business_unit"],
                name="uniq_numbering_series_kind_business_unit",
            ),
        ]
        verbose_name_plural = "numbering series"

    def __str__(self):
        return f"{self.business_unit_id}:{self.document_kind} {self.prefix}{self.next_number}"

    def save(self, *args, **kwargs):
        _guard_engine_write("NumberingSeries", {"posting", "command", "bootstrap"})
        super().save(*args, **kwargs)


class JournalEntry(models.Model):
    """
    A balanced set of journal lines posted on one date.

    Entries are created together with their lines and balance effects by
    accounting.ledger.post_entry and are immutable afterwards, except for
    the approver.
    """

    business_unit = models.ForeignKey(
        BusinessUnit,
        on_delete=models.CASCADE,
        related_name="journal_entries",
    )
    document_number = models.CharField(max_length=50)
    posting_date = models.DateField()
    remarks = models.CharField(max_length=500, blank=True, default="")

    period = models.ForeignKey(
        AccountingPeriod,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="authored_journal_entries",
    )
    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_journal_entries",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    # Source tracking for derived postings
    source_type = models.CharField(
        max_length=30,
        blank=True,
        default="",
        help_text="Document kind that produced this entry (e.g. AR_INVOICE)",
    )
    source_document = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Document number of the source document",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business_unit", "document_number"],
                name="uniq_journal_entry_number_per_business_unit",
            ),
        ]
        indexes = [
            models.Index(fields=["business_unit", "posting_date", "id"], name="idx_entry_unit_date"),
        ]
        ordering = ["-posting_date", "-id"]
        verbose_name_plural = "journal entries"

    def __str__(self):
        return f"JE {self.document_number} ({self.posting_date})"

    @property
    def totals(self) -> dict:
        # Iterates lines.all() so a prefetch_related("lines") is reused.
        lines = list(self.lines.all())
        return {
            "total_debit": sum((line.debit for line in lines), ZERO),
            "total_credit": sum((line.credit for line in lines), ZERO),
        }

    @property
    def total_debit(self) -> Decimal:
        return self.totals["total_debit"]

    @property
    def total_credit(self) -> Decimal:
        return self.totals["total_credit"]

    def save(self, *args, **kwargs):
        _guard_engine_write("JournalEntry", {"posting", "command"})
        super().save(*args, **kwargs)


class JournalLine(models.Model):
    """
    Individual line within a journal entry.
    Each line affects one account with either a debit or credit amount.
    """

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    line_no = models.PositiveIntegerField()

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    debit = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    class Meta:
        ordering = ["entry", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "line_no"],
                name="uniq_journal_line_no",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_line_not_both_debit_credit",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__exact=0) & Q(credit__exact=0)),
                name="chk_line_not_both_zero",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_line_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["account", "entry"], name="idx_line_account_entry"),
        ]

    def __str__(self):
        return f"JE#{self.entry_id} L{self.line_no}"

    def save(self, *args, **kwargs):
        _guard_engine_write("JournalLine", {"posting"})
        super().save(*args, **kwargs)
