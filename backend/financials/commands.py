# financials/commands.py
"""
Commands creating source documents.

Each command allocates the document's own number, persists the document
and posts its derived journal entry in one transaction. When the posting
fails (closed period, unknown account, ...) the document is rolled back
with it. A missing Receivable/Payable account only skips the posting.
"""

from decimal import Decimal, InvalidOperation
import logging

from django.db import transaction

from accounts.authz import ActorContext, require
from accounting.commands import CommandResult, run_with_retry
from accounting.exceptions import LedgerError, ValidationError
from accounting.models import Account, NumberingSeries
from accounting.numbering import next_number
from accounting.policies import within_amount_limit
from financials import postings
from financials.models import (
    APInvoice,
    APInvoiceItem,
    ARInvoice,
    ARInvoiceItem,
    BankAccount,
    IncomingPayment,
    OutgoingPayment,
)


logger = logging.getLogger(__name__)

MONEY_Q = Decimal("0.01")

# InvoiceItem.quantity is DecimalField(max_digits=18, decimal_places=4).
MAX_QUANTITY = Decimal("1e14")

DocumentKind = NumberingSeries.DocumentKind


def _run(actor: ActorContext, func, *args, **kwargs) -> CommandResult:
    try:
        document = run_with_retry(func, actor, *args, **kwargs)
    except LedgerError as exc:
        logger.info(
            f"{func.__name__.lstrip('_')} rejected in business unit {actor.business_unit.id}: "
            f"{exc.code} {exc.errors}"
        )
        return CommandResult.from_error(exc)
    return CommandResult.ok(document)


def _build_items(actor: ActorContext, items) -> list[dict]:
    """
    Resolve item accounts and compute line totals (quantity * unit price).

    Raises:
        ValidationError: listing every invalid item
    """
    items = list(items or [])
    if not items:
        raise ValidationError("Invoice must have at least one item")

    codes = {str(item.get("account_code") or "") for item in items}
    accounts = {
        account.code: account
        for account in Account.objects.filter(business_unit=actor.business_unit, code__in=codes)
    }

    errors = []
    built = []
    for index, item in enumerate(items, start=1):
        code = str(item.get("account_code") or "")
        account = accounts.get(code)
        if account is None:
            errors.append(f"Item {index}: Account {code} not found")
        try:
            quantity = Decimal(str(item.get("quantity", 1)))
            unit_price = Decimal(str(item.get("unit_price")))
        except (InvalidOperation, ValueError, TypeError):
            errors.append(f"Item {index}: Invalid quantity or unit price")
            continue
        if not (quantity.is_finite() and unit_price.is_finite()):
            errors.append(f"Item {index}: Invalid quantity or unit price")
            continue
        if (
            abs(quantity) >= MAX_QUANTITY
            or not within_amount_limit(unit_price)
            or not within_amount_limit(quantity * unit_price)
        ):
            errors.append(f"Item {index}: Amount exceeds the maximum")
            continue
        line_total = (quantity * unit_price).quantize(MONEY_Q)
        if line_total <= 0:
            errors.append(f"Item {index}: Line total must be greater than 0")
        built.append({
            "description": item.get("description", ""),
            "account": account,
            "quantity": quantity,
            "unit_price": unit_price,
            "line_total": line_total,
        })

    total = sum((item["line_total"] for item in built), Decimal("0.00"))
    if not errors and not within_amount_limit(total):
        errors.append("Invoice total exceeds the maximum")
    if errors:
        raise ValidationError(errors)
    return built


def _positive_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if not within_amount_limit(amount):
        raise ValidationError("Amount exceeds the maximum")
    if amount != amount.quantize(MONEY_Q):
        raise ValidationError("Amount cannot have more than 2 decimal places")
    return amount


def _get_bank_account(actor: ActorContext, bank_account_id: int) -> BankAccount:
    try:
        return BankAccount.objects.select_related("gl_account").get(
            pk=bank_account_id, business_unit=actor.business_unit
        )
    except BankAccount.DoesNotExist:
        raise ValidationError("Bank account not found.")


# =============================================================================
# Bank Accounts
# =============================================================================

@transaction.atomic
def create_bank_account(
    actor: ActorContext,
    name: str,
    gl_account_code: str,
    bank_name: str = "",
    account_number: str = "",
) -> CommandResult:
    require(actor, "financials.create")

    try:
        gl_account = Account.objects.get(business_unit=actor.business_unit, code=gl_account_code)
    except Account.DoesNotExist:
        return CommandResult.fail(f"Account {gl_account_code} not found.")
    if gl_account.account_type != Account.AccountType.ASSET:
        return CommandResult.fail("Bank accounts must link to an Asset account.")
    if BankAccount.objects.filter(business_unit=actor.business_unit, name=name).exists():
        return CommandResult.fail(f"Bank account '{name}' already exists.")

    bank_account = BankAccount.objects.create(
        business_unit=actor.business_unit,
        name=name,
        bank_name=bank_name or "",
        account_number=account_number or "",
        gl_account=gl_account,
    )
    return CommandResult.ok(bank_account)


# =============================================================================
# Invoices
# =============================================================================

@transaction.atomic
def _create_ar_invoice(actor, partner_code, posting_date, items, remarks=""):
    built = _build_items(actor, items)
    invoice = ARInvoice.objects.create(
        business_unit=actor.business_unit,
        document_number=next_number(DocumentKind.AR_INVOICE, actor.business_unit.id),
        partner_code=partner_code,
        posting_date=posting_date,
        remarks=remarks or "",
        total_amount=sum((item["line_total"] for item in built), Decimal("0.00")),
        created_by=actor.user,
    )
    ARInvoiceItem.objects.bulk_create([ARInvoiceItem(invoice=invoice, **item) for item in built])
    postings.post_ar_invoice(invoice)
    return invoice


def create_ar_invoice(
    actor: ActorContext,
    partner_code: str,
    posting_date,
    items,
    remarks: str = "",
) -> CommandResult:
    """
    Create an A/R invoice and post Dr Receivable / Cr revenue.

    Args:
        items: List of {"account_code", "description", "quantity", "unit_price"}
    """
    require(actor, "financials.create")
    return _run(actor, _create_ar_invoice, partner_code, posting_date, items, remarks=remarks)


@transaction.atomic
def _create_ap_invoice(actor, partner_code, posting_date, items, remarks=""):
    built = _build_items(actor, items)
    invoice = APInvoice.objects.create(
        business_unit=actor.business_unit,
        document_number=next_number(DocumentKind.AP_INVOICE, actor.business_unit.id),
        partner_code=partner_code,
        posting_date=posting_date,
        remarks=remarks or "",
        total_amount=sum((item["line_total"] for item in built), Decimal("0.00")),
        created_by=actor.user,
    )
    APInvoiceItem.objects.bulk_create([APInvoiceItem(invoice=invoice, **item) for item in built])
    postings.post_ap_invoice(invoice)
    return invoice


def create_ap_invoice(
    actor: ActorContext,
    partner_code: str,
    posting_date,
    items,
    remarks: str = "",
) -> CommandResult:
    """Create an A/P invoice and post Dr expense / Cr Payable."""
    require(actor, "financials.create")
    return _run(actor, _create_ap_invoice, partner_code, posting_date, items, remarks=remarks)


# =============================================================================
# Payments
# =============================================================================

def _apply_to_invoice(model, actor, invoice_id, partner_code, amount):
    if not invoice_id:
        return None
    try:
        invoice = model.objects.select_for_update().get(pk=invoice_id, business_unit=actor.business_unit)
    except model.DoesNotExist:
        raise ValidationError("Invoice not found.")
    if invoice.partner_code != partner_code:
        raise ValidationError("Invoice belongs to a different business partner.")
    if invoice.status != model.Status.OPEN:
        raise ValidationError(f"Invoice {invoice.document_number} is already closed.")
    if amount > invoice.outstanding:
        raise ValidationError(
            f"Payment exceeds the outstanding amount of {invoice.document_number} "
            f"({invoice.outstanding:.2f})."
        )
    invoice.apply_payment(amount)
    return invoice


@transaction.atomic
def _create_incoming_payment(actor, partner_code, payment_date, amount, bank_account_id,
                             invoice_id=None, remarks=""):
    amount = _positive_amount(amount)
    bank_account = _get_bank_account(actor, bank_account_id)
    invoice = _apply_to_invoice(ARInvoice, actor, invoice_id, partner_code, amount)
    payment = IncomingPayment.objects.create(
        business_unit=actor.business_unit,
        document_number=next_number(DocumentKind.INCOMING_PAYMENT, actor.business_unit.id),
        partner_code=partner_code,
        payment_date=payment_date,
        amount=amount,
        bank_account=bank_account,
        invoice=invoice,
        remarks=remarks or "",
        created_by=actor.user,
    )
    postings.post_incoming_payment(payment)
    return payment


def create_incoming_payment(
    actor: ActorContext,
    partner_code: str,
    payment_date,
    amount,
    bank_account_id: int,
    invoice_id: int = None,
    remarks: str = "",
) -> CommandResult:
    """
    Record cash received: Dr bank GL account / Cr Receivable.

    When invoice_id is given the payment is applied to that A/R invoice,
    closing it once fully paid.
    """
    require(actor, "financials.create")
    return _run(
        actor, _create_incoming_payment, partner_code, payment_date, amount, bank_account_id,
        invoice_id=invoice_id, remarks=remarks,
    )


@transaction.atomic
def _create_outgoing_payment(actor, partner_code, payment_date, amount, bank_account_id,
                             invoice_id=None, remarks=""):
    amount = _positive_amount(amount)
    bank_account = _get_bank_account(actor, bank_account_id)
    invoice = _apply_to_invoice(APInvoice, actor, invoice_id, partner_code, amount)
    payment = OutgoingPayment.objects.create(
        business_unit=actor.business_unit,
        document_number=next_number(DocumentKind.OUTGOING_PAYMENT, actor.business_unit.id),
        partner_code=partner_code,
        payment_date=payment_date,
        amount=amount,
        bank_account=bank_account,
        invoice=invoice,
        remarks=remarks or "",
        created_by=actor.user,
    )
    postings.post_outgoing_payment(payment)
    return payment


def create_outgoing_payment(
    actor: ActorContext,
    partner_code: str,
    payment_date,
    amount,
    bank_account_id: int,
    invoice_id: int = None,
    remarks: str = "",
) -> CommandResult:
    """Record cash paid: Dr Payable / Cr bank GL account."""
    require(actor, "financials.create")
    return _run(
        actor, _create_outgoing_payment, partner_code, payment_date, amount, bank_account_id,
        invoice_id=invoice_id, remarks=remarks,
    )
