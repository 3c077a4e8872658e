# accounting/serializers.py
"""
Serializers for the ledger API.

Input serializers only check shape (types, required fields). Ledger rules
(balance, one-sided lines, open period) are enforced by the engine so that
every caller gets the same messages.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import (
    Account,
    AccountingPeriod,
    DefaultAccount,
    JournalEntry,
    JournalLine,
    NumberingSeries,
)


def money(value) -> str:
    return f"{value:.2f}"


def money_dict(data: dict) -> dict:
    """Stringify Decimal amounts in a report payload, recursively."""
    def convert(value):
        if isinstance(value, Decimal):
            return money(value)
        if isinstance(value, dict):
            return {key: convert(item) for key, item in value.items()}
        if isinstance(value, list):
            return [convert(item) for item in value]
        return value

    return convert(data)


# =============================================================================
# Account Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    has_transactions = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            "id", "code", "name", "account_type", "normal_balance",
            "description", "balance", "has_transactions",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_has_transactions(self, obj):
        # Use annotated value if available (from list view), else query
        if hasattr(obj, "_has_transactions"):
            return obj._has_transactions
        return obj.journal_lines.exists()


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class DefaultAccountSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = DefaultAccount
        fields = ["role", "account_code", "account_name"]


class DefaultAccountSetSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=DefaultAccount.Role.choices)
    account_code = serializers.CharField(max_length=20)


# =============================================================================
# Journal Entry Serializers
# =============================================================================

class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = ["line_no", "account_code", "account_name", "description", "debit", "credit"]


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)
    period_name = serializers.CharField(source="period.name", read_only=True, default=None)
    author_email = serializers.EmailField(source="author.email", read_only=True, default=None)
    approver_email = serializers.EmailField(source="approver.email", read_only=True, default=None)
    total_debit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    total_credit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = JournalEntry
        fields = [
            "id", "document_number", "posting_date", "remarks",
            "period", "period_name",
            "author", "author_email", "approver", "approver_email", "approved_at",
            "source_type", "source_document",
            "total_debit", "total_credit", "lines",
            "created_at",
        ]
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    """
    One candidate line. Amounts are passed through as given so the engine
    reports malformed values with their line number.
    """
    account_code = serializers.CharField(required=False, allow_blank=True, default="")
    debit = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    credit = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class JournalEntryCreateSerializer(serializers.Serializer):
    posting_date = serializers.DateField()
    remarks = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    lines = JournalLineInputSerializer(many=True)


# =============================================================================
# Period Serializers
# =============================================================================

class AccountingPeriodSerializer(serializers.ModelSerializer):
    closed_by_email = serializers.EmailField(source="closed_by.email", read_only=True, default=None)

    class Meta:
        model = AccountingPeriod
        fields = [
            "id", "name", "start_date", "end_date", "status",
            "closed_at", "closed_by", "closed_by_email", "created_at",
        ]
        read_only_fields = fields


class AccountingPeriodCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError("Period end date must be on or after its start date.")
        return attrs


# =============================================================================
# Numbering Serializers
# =============================================================================

class NumberingSeriesSerializer(serializers.ModelSerializer):
    class Meta:
        model = NumberingSeries
        fields = ["id", "document_kind", "prefix", "next_number", "updated_at"]
        read_only_fields = fields


class NumberingSeriesConfigureSerializer(serializers.Serializer):
    document_kind = serializers.ChoiceField(choices=NumberingSeries.DocumentKind.choices)
    prefix = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True, default=None)
    next_number = serializers.IntegerField(min_value=1, required=False, default=1)
