# accounting/periods.py
"""
Accounting period gate.

Postings are only accepted for dates covered by an OPEN period of the
business unit. Closing a period is one-way and runs a validation first:

- errors (block closing): unbalanced journal entries dated in the period
- warnings (informational): unapproved entries, open A/R and A/P invoices
"""

from dataclasses import dataclass, field
import logging

from django.apps import apps
from django.db import transaction
from django.db.models import DecimalField, F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.exceptions import ValidationError
from accounting.models import AccountingPeriod, JournalEntry, ZERO
from accounting.policies import balance_tolerance, can_close_period


logger = logging.getLogger(__name__)


@dataclass
class PeriodCloseValidation:
    can_close: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "can_close": self.can_close,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class PeriodCloseRejected(ValidationError):
    """close_period() refused; carries the validation that blocked it."""

    def __init__(self, validation: PeriodCloseValidation):
        super().__init__(validation.errors)
        self.validation = validation


def find_open_period(business_unit_id: int, target_date, lock: bool = False) -> AccountingPeriod | None:
    """
    The OPEN period whose [start, end] contains target_date, or None.

    With lock=True the row stays locked until the caller's transaction ends,
    so close_period() waits for postings into the period to commit.
    """
    periods = AccountingPeriod.objects.all()
    if lock:
        periods = periods.select_for_update(no_key=True)
    return periods.filter(
        business_unit_id=business_unit_id,
        status=AccountingPeriod.Status.OPEN,
        start_date__lte=target_date,
        end_date__gte=target_date,
    ).order_by("start_date", "id").first()


def _entries_in_period(period: AccountingPeriod):
    return JournalEntry.objects.filter(
        business_unit_id=period.business_unit_id,
        posting_date__gte=period.start_date,
        posting_date__lte=period.end_date,
    )


def _unbalanced_entries(period: AccountingPeriod):
    money = DecimalField(max_digits=18, decimal_places=2)
    tolerance = balance_tolerance()
    return _entries_in_period(period).annotate(
        sum_debit=Coalesce(Sum("lines__debit"), ZERO, output_field=money),
        sum_credit=Coalesce(Sum("lines__credit"), ZERO, output_field=money),
    ).annotate(
        difference=F("sum_debit") - F("sum_credit"),
    ).filter(
        Q(difference__gte=tolerance) | Q(difference__lte=-tolerance)
    ).order_by("posting_date", "id")


def _open_invoice_count(model_name: str, period: AccountingPeriod) -> int:
    model = apps.get_model("financials", model_name)
    return model.objects.filter(
        business_unit_id=period.business_unit_id,
        status=model.Status.OPEN,
        posting_date__gte=period.start_date,
        posting_date__lte=period.end_date,
    ).count()


def validate_for_close(period_id: int) -> PeriodCloseValidation:
    """
    Check whether a period can be closed.

    can_close is True iff there are no errors; warnings never block.
    """
    try:
        period = AccountingPeriod.objects.get(pk=period_id)
    except AccountingPeriod.DoesNotExist:
        raise ValidationError("Accounting period not found.")

    errors = []
    warnings = []

    allowed, reason = can_close_period(period)
    if not allowed:
        errors.append(reason)

    for entry in _unbalanced_entries(period):
        errors.append(
            f"Journal entry {entry.document_number} is not balanced. "
            f"Debits: {entry.sum_debit:.2f}, Credits: {entry.sum_credit:.2f}"
        )

    unapproved = _entries_in_period(period).filter(approver__isnull=True).count()
    if unapproved:
        warnings.append(f"{unapproved} journal entries have not been approved")

    open_ar = _open_invoice_count("ARInvoice", period)
    if open_ar:
        warnings.append(f"{open_ar} A/R invoices are still open")

    open_ap = _open_invoice_count("APInvoice", period)
    if open_ap:
        warnings.append(f"{open_ap} A/P invoices are still open")

    return PeriodCloseValidation(can_close=not errors, errors=errors, warnings=warnings)


@transaction.atomic
def close_period(period_id: int, closed_by=None) -> tuple[AccountingPeriod, PeriodCloseValidation]:
    """
    Transition a period OPEN -> CLOSED.

    Returns the closed period and the validation it passed (warnings included).

    Raises:
        ValidationError: If the period does not exist
        PeriodCloseRejected: If the close validation reports errors
    """
    try:
        period = AccountingPeriod.objects.select_for_update().get(pk=period_id)
    except AccountingPeriod.DoesNotExist:
        raise ValidationError("Accounting period not found.")

    validation = validate_for_close(period.pk)
    if not validation.can_close:
        raise PeriodCloseRejected(validation)

    period.status = AccountingPeriod.Status.CLOSED
    period.closed_at = timezone.now()
    period.closed_by = closed_by
    period.save(update_fields=["status", "closed_at", "closed_by"])

    logger.info(
        f"Closed accounting period {period.name} in business unit {period.business_unit_id} "
        f"with {len(validation.warnings)} warnings",
        extra={"business_unit_id": period.business_unit_id, "period": period.name},
    )
    return period, validation
