# financials/postings.py
"""
Derived postings: journal entries produced from source documents.

    A/R invoice        Dr Receivable (total)       Cr item revenue accounts
    A/P invoice        Dr item expense accounts    Cr Payable (total)
    Incoming payment   Dr bank GL account          Cr Receivable
    Outgoing payment   Dr Payable                  Cr bank GL account

A business unit without a Receivable (or Payable) account has automatic
posting switched off for the matching documents: the post_* function
logs and returns None instead of failing. Every other engine error
propagates so the caller's transaction rolls back the source document too.
"""

import logging

from django.db import DatabaseError, transaction

from accounting.ledger import post_entry
from accounting.models import Account, DefaultAccount, JournalEntry
from financials.models import APInvoice, ARInvoice, IncomingPayment, OutgoingPayment


logger = logging.getLogger(__name__)


# =============================================================================
# Designated accounts
# =============================================================================

def _designated_account(business_unit_id: int, role: str, account_type: str, name_fragment: str):
    default = DefaultAccount.objects.select_related("account").filter(
        business_unit_id=business_unit_id,
        role=role,
    ).first()
    if default is not None:
        return default.account

    return Account.objects.filter(
        business_unit_id=business_unit_id,
        account_type=account_type,
        name__icontains=name_fragment,
    ).order_by("code").first()


def resolve_receivable_account(business_unit_id: int) -> Account | None:
    """The designated Receivable account, else the first Asset named like one."""
    return _designated_account(
        business_unit_id,
        DefaultAccount.Role.RECEIVABLE,
        Account.AccountType.ASSET,
        "Receivable",
    )


def resolve_payable_account(business_unit_id: int) -> Account | None:
    """The designated Payable account, else the first Liability named like one."""
    return _designated_account(
        business_unit_id,
        DefaultAccount.Role.PAYABLE,
        Account.AccountType.LIABILITY,
        "Payable",
    )


def link_journal_entry(document, entry: JournalEntry) -> None:
    """
    Store the back-reference from a source document to its journal entry.

    The entry is already posted; a failed link is logged and left alone.
    """
    try:
        with transaction.atomic():
            type(document).objects.filter(pk=document.pk).update(journal_entry=entry)
    except DatabaseError as exc:
        logger.warning(
            f"Could not link {document.document_number} to journal entry "
            f"{entry.document_number}: {exc}",
            extra={
                "business_unit_id": document.business_unit_id,
                "document_number": document.document_number,
            },
        )
        return
    document.journal_entry = entry


def _skip(kind: str, document, role: str) -> None:
    logger.info(
        f"Skipped posting {kind} {document.document_number}: no {role} account "
        f"in business unit {document.business_unit_id}",
        extra={
            "business_unit_id": document.business_unit_id,
            "document_number": document.document_number,
            "source_type": kind,
        },
    )


# =============================================================================
# Line builders
# =============================================================================

def ar_invoice_lines(invoice: ARInvoice, receivable: Account) -> list[dict]:
    lines = [{
        "account_code": receivable.code,
        "debit": invoice.total_amount,
        "description": f"A/R {invoice.partner_code}",
    }]
    for item in invoice.items.select_related("account").order_by("id"):
        lines.append({
            "account_code": item.account.code,
            "credit": item.line_total,
            "description": item.description,
        })
    return lines


def ap_invoice_lines(invoice: APInvoice, payable: Account) -> list[dict]:
    lines = [
        {
            "account_code": item.account.code,
            "debit": item.line_total,
            "description": item.description,
        }
        for item in invoice.items.select_related("account").order_by("id")
    ]
    lines.append({
        "account_code": payable.code,
        "credit": invoice.total_amount,
        "description": f"A/P {invoice.partner_code}",
    })
    return lines


# =============================================================================
# Posting
# =============================================================================

def post_ar_invoice(invoice: ARInvoice) -> JournalEntry | None:
    receivable = resolve_receivable_account(invoice.business_unit_id)
    if receivable is None:
        _skip("A/R invoice", invoice, "Receivable")
        return None

    entry = post_entry(
        business_unit_id=invoice.business_unit_id,
        posting_date=invoice.posting_date,
        remarks=f"A/R Invoice {invoice.document_number}",
        author_id=invoice.created_by_id,
        lines=ar_invoice_lines(invoice, receivable),
        source_type="AR_INVOICE",
        source_document=invoice.document_number,
    )
    link_journal_entry(invoice, entry)
    return entry


def post_ap_invoice(invoice: APInvoice) -> JournalEntry | None:
    payable = resolve_payable_account(invoice.business_unit_id)
    if payable is None:
        _skip("A/P invoice", invoice, "Payable")
        return None

    entry = post_entry(
        business_unit_id=invoice.business_unit_id,
        posting_date=invoice.posting_date,
        remarks=f"A/P Invoice {invoice.document_number}",
        author_id=invoice.created_by_id,
        lines=ap_invoice_lines(invoice, payable),
        source_type="AP_INVOICE",
        source_document=invoice.document_number,
    )
    link_journal_entry(invoice, entry)
    return entry


def post_incoming_payment(payment: IncomingPayment) -> JournalEntry | None:
    receivable = resolve_receivable_account(payment.business_unit_id)
    if receivable is None:
        _skip("incoming payment", payment, "Receivable")
        return None

    entry = post_entry(
        business_unit_id=payment.business_unit_id,
        posting_date=payment.payment_date,
        remarks=f"Incoming Payment {payment.document_number}",
        author_id=payment.created_by_id,
        lines=[
            {
                "account_code": payment.bank_account.gl_account.code,
                "debit": payment.amount,
                "description": f"Received from {payment.partner_code}",
            },
            {
                "account_code": receivable.code,
                "credit": payment.amount,
                "description": f"A/R {payment.partner_code}",
            },
        ],
        source_type="INCOMING_PAYMENT",
        source_document=payment.document_number,
    )
    link_journal_entry(payment, entry)
    return entry


def post_outgoing_payment(payment: OutgoingPayment) -> JournalEntry | None:
    payable = resolve_payable_account(payment.business_unit_id)
    if payable is None:
        _skip("outgoing payment", payment, "Payable")
        return None

    entry = post_entry(
        business_unit_id=payment.business_unit_id,
        posting_date=payment.payment_date,
        remarks=f"Outgoing Payment {payment.document_number}",
        author_id=payment.created_by_id,
        lines=[
            {
                "account_code": payable.code,
                "debit": payment.amount,
                "description": f"A/P {payment.partner_code}",
            },
            {
                "account_code": payment.bank_account.gl_account.code,
                "credit": payment.amount,
                "description": f"Paid to {payment.partner_code}",
            },
        ],
        source_type="OUTGOING_PAYMENT",
        source_document=payment.document_number,
    )
    link_journal_entry(payment, entry)
    return entry
