# financials/serializers.py
"""Serializers for source documents."""

from decimal import Decimal

from rest_framework import serializers

from .models import (
    APInvoice,
    APInvoiceItem,
    ARInvoice,
    ARInvoiceItem,
    BankAccount,
    IncomingPayment,
    OutgoingPayment,
)


# =============================================================================
# Output Serializers
# =============================================================================

class BankAccountSerializer(serializers.ModelSerializer):
    gl_account_code = serializers.CharField(source="gl_account.code", read_only=True)

    class Meta:
        model = BankAccount
        fields = ["id", "name", "bank_name", "account_number", "gl_account_code", "created_at"]


class InvoiceItemSerializer(serializers.Serializer):
    description = serializers.CharField()
    account_code = serializers.CharField(source="account.code")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=18, decimal_places=2)


INVOICE_FIELDS = [
    "id", "document_number", "partner_code", "posting_date", "remarks",
    "total_amount", "amount_paid", "status",
    "journal_entry", "journal_entry_number", "items", "created_at",
]

PAYMENT_FIELDS = [
    "id", "document_number", "partner_code", "payment_date", "amount", "remarks",
    "bank_account", "invoice", "journal_entry", "journal_entry_number", "created_at",
]


class ARInvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)
    journal_entry_number = serializers.CharField(
        source="journal_entry.document_number", read_only=True, default=None,
    )

    class Meta:
        model = ARInvoice
        fields = INVOICE_FIELDS


class APInvoiceSerializer(ARInvoiceSerializer):
    class Meta:
        model = APInvoice
        fields = INVOICE_FIELDS


class IncomingPaymentSerializer(serializers.ModelSerializer):
    journal_entry_number = serializers.CharField(
        source="journal_entry.document_number", read_only=True, default=None,
    )

    class Meta:
        model = IncomingPayment
        fields = PAYMENT_FIELDS


class OutgoingPaymentSerializer(IncomingPaymentSerializer):
    class Meta:
        model = OutgoingPayment
        fields = PAYMENT_FIELDS


# =============================================================================
# Input Serializers
# =============================================================================

class BankAccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    gl_account_code = serializers.CharField(max_length=20)
    bank_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    account_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")


class InvoiceItemInputSerializer(serializers.Serializer):
    account_code = serializers.CharField(max_length=20)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, required=False, default=Decimal("1"))
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2)


class InvoiceCreateSerializer(serializers.Serializer):
    partner_code = serializers.CharField(max_length=50)
    posting_date = serializers.DateField()
    remarks = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    items = InvoiceItemInputSerializer(many=True, allow_empty=False)


class PaymentCreateSerializer(serializers.Serializer):
    partner_code = serializers.CharField(max_length=50)
    payment_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=Decimal("0.01"))
    bank_account_id = serializers.IntegerField()
    invoice_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    remarks = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
