# financials/admin.py
"""
Django admin configuration for source documents.

Documents are created through the API so their journal entries get
posted; the admin is for viewing.
"""

from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin
from .models import (
    APInvoice,
    APInvoiceItem,
    ARInvoice,
    ARInvoiceItem,
    BankAccount,
    IncomingPayment,
    OutgoingPayment,
)


class ItemInline(admin.TabularInline):
    extra = 0
    fields = ["description", "account", "quantity", "unit_price", "line_total"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ARInvoiceItemInline(ItemInline):
    model = ARInvoiceItem


class APInvoiceItemInline(ItemInline):
    model = APInvoiceItem


@admin.register(BankAccount)
class BankAccountAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "bank_name", "gl_account", "business_unit"]
    list_select_related = ["gl_account", "business_unit"]


@admin.register(ARInvoice)
class ARInvoiceAdmin(ReadOnlyModelAdmin):
    list_display = ["document_number", "partner_code", "posting_date", "total_amount", "amount_paid", "status", "journal_entry"]
    list_filter = ["business_unit", "status"]
    search_fields = ["document_number", "partner_code"]
    inlines = [ARInvoiceItemInline]


@admin.register(APInvoice)
class APInvoiceAdmin(ReadOnlyModelAdmin):
    list_display = ["document_number", "partner_code", "posting_date", "total_amount", "amount_paid", "status", "journal_entry"]
    list_filter = ["business_unit", "status"]
    search_fields = ["document_number", "partner_code"]
    inlines = [APInvoiceItemInline]


@admin.register(IncomingPayment)
class IncomingPaymentAdmin(ReadOnlyModelAdmin):
    list_display = ["document_number", "partner_code", "payment_date", "amount", "bank_account", "journal_entry"]
    list_filter = ["business_unit"]
    search_fields = ["document_number", "partner_code"]


@admin.register(OutgoingPayment)
class OutgoingPaymentAdmin(ReadOnlyModelAdmin):
    list_display = ["document_number", "partner_code", "payment_date", "amount", "bank_account", "journal_entry"]
    list_filter = ["business_unit"]
    search_fields = ["document_number", "partner_code"]
