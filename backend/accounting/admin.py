# accounting/admin.py
"""
Django admin configuration for ledger models.

Journal entries, lines, balances and numbering counters are engine-owned:
they change only through accounting.ledger and the command layer. The
admin shows them read-only. Periods and designated accounts are shown
read-only as well; use the API so the policies apply.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Account,
    AccountingPeriod,
    DefaultAccount,
    JournalEntry,
    JournalLine,
    NumberingSeries,
)


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """
    Base admin class for engine-owned models.

    Direct admin edits would bypass the posting engine and break the
    balance invariants. Use the API/command layer instead.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def changeform_view(self, request, object_id=None, form_url="", extra_context=None):
        extra_context = extra_context or {}
        extra_context["show_save"] = False
        extra_context["show_save_and_continue"] = False
        extra_context["show_save_and_add_another"] = False
        extra_context["readonly_message"] = (
            "Ledger rows are written by the posting engine. Use the API to make changes."
        )
        return super().changeform_view(request, object_id, form_url, extra_context)


class JournalLineInline(admin.TabularInline):
    """Inline display of journal lines within a journal entry (read-only)."""
    model = JournalLine
    extra = 0
    readonly_fields = ["line_no", "account", "description", "debit", "credit"]
    fields = ["line_no", "account", "description", "debit", "credit"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# Account Admin
# =============================================================================

@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    list_display = ["code", "name", "account_type", "normal_balance", "balance", "business_unit"]
    list_filter = ["business_unit", "account_type"]
    search_fields = ["code", "name", "description"]
    list_select_related = ["business_unit"]
    ordering = ["business_unit", "code"]
    readonly_fields = [
        "business_unit", "code", "name", "account_type", "normal_balance",
        "description", "balance", "created_at", "updated_at",
    ]


@admin.register(DefaultAccount)
class DefaultAccountAdmin(ReadOnlyModelAdmin):
    list_display = ["business_unit", "role", "account"]
    list_filter = ["role"]
    list_select_related = ["business_unit", "account"]


# =============================================================================
# Journal Entry Admin
# =============================================================================

@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyModelAdmin):
    list_display = [
        "document_number", "posting_date", "remarks_truncated", "source_type",
        "approved_badge", "total_debit", "total_credit", "business_unit",
    ]
    list_filter = ["business_unit", "source_type", "posting_date"]
    search_fields = ["document_number", "remarks", "source_document"]
    date_hierarchy = "posting_date"
    list_select_related = ["business_unit", "author", "approver"]
    ordering = ["-posting_date", "-id"]

    fieldsets = (
        (None, {
            "fields": ("business_unit", "document_number", "posting_date", "period", "remarks"),
        }),
        ("Approval", {
            "fields": ("author", "approver", "approved_at"),
        }),
        ("Source", {
            "fields": ("source_type", "source_document"),
            "classes": ("collapse",),
        }),
    )
    readonly_fields = [
        "business_unit", "document_number", "posting_date", "period", "remarks",
        "author", "approver", "approved_at", "source_type", "source_document",
    ]
    inlines = [JournalLineInline]

    @admin.display(description="Remarks")
    def remarks_truncated(self, obj):
        if len(obj.remarks) > 50:
            return obj.remarks[:47] + "..."
        return obj.remarks

    @admin.display(description="Approved")
    def approved_badge(self, obj):
        color = "green" if obj.approver_id else "gray"
        label = "Approved" if obj.approver_id else "Pending"
        return format_html('<span style="color: {};">{}</span>', color, label)


# =============================================================================
# Period & Numbering Admin
# =============================================================================

@admin.register(AccountingPeriod)
class AccountingPeriodAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "business_unit", "start_date", "end_date", "status", "closed_at"]
    list_filter = ["business_unit", "status"]
    ordering = ["business_unit", "start_date"]


@admin.register(NumberingSeries)
class NumberingSeriesAdmin(ReadOnlyModelAdmin):
    list_display = ["business_unit", "document_kind", "prefix", "next_number", "updated_at"]
    list_filter = ["document_kind"]
