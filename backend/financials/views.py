# financials/views.py
"""
Thin views for source documents.

POST creates the document and posts its journal entry through
financials.commands; failures map to HTTP statuses like the ledger views.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from accounting.views import failure_response
from . import commands
from .models import (
    APInvoice,
    ARInvoice,
    BankAccount,
    IncomingPayment,
    OutgoingPayment,
)
from .serializers import (
    APInvoiceSerializer,
    ARInvoiceSerializer,
    BankAccountCreateSerializer,
    BankAccountSerializer,
    IncomingPaymentSerializer,
    InvoiceCreateSerializer,
    OutgoingPaymentSerializer,
    PaymentCreateSerializer,
)


class DocumentListCreateView(APIView):
    """
    GET -> list documents of the active business unit
    POST -> validate input, run the create command, return the document
    """
    permission_classes = [IsAuthenticated]

    model = None
    serializer_class = None
    input_serializer_class = None
    select_related = ()
    prefetch_related = ()

    def get_queryset(self, actor):
        queryset = self.model.objects.filter(business_unit=actor.business_unit)
        if self.select_related:
            queryset = queryset.select_related(*self.select_related)
        if self.prefetch_related:
            queryset = queryset.prefetch_related(*self.prefetch_related)
        return queryset

    def run_command(self, actor, data):
        raise NotImplementedError

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "financials.view")

        queryset = self.get_queryset(actor)
        status_filter = request.query_params.get("status")
        if status_filter and hasattr(self.model, "Status"):
            queryset = queryset.filter(status=status_filter.upper())

        return Response(self.serializer_class(queryset, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = self.input_serializer_class(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = self.run_command(actor, input_serializer.validated_data)
        if not result.success:
            return failure_response(result)

        document = self.get_queryset(actor).get(pk=result.data.pk)
        return Response(self.serializer_class(document).data, status=status.HTTP_201_CREATED)


class BankAccountListCreateView(DocumentListCreateView):
    """
    GET/POST /api/financials/bank-accounts/
    """
    model = BankAccount
    serializer_class = BankAccountSerializer
    input_serializer_class = BankAccountCreateSerializer
    select_related = ("gl_account",)

    def run_command(self, actor, data):
        return commands.create_bank_account(actor, **data)


class ARInvoiceListCreateView(DocumentListCreateView):
    """
    GET/POST /api/financials/ar-invoices/
    """
    model = ARInvoice
    serializer_class = ARInvoiceSerializer
    input_serializer_class = InvoiceCreateSerializer
    select_related = ("journal_entry",)
    prefetch_related = ("items__account",)

    def run_command(self, actor, data):
        return commands.create_ar_invoice(actor, **_with_plain_items(data))


class APInvoiceListCreateView(DocumentListCreateView):
    """
    GET/POST /api/financials/ap-invoices/
    """
    model = APInvoice
    serializer_class = APInvoiceSerializer
    input_serializer_class = InvoiceCreateSerializer
    select_related = ("journal_entry",)
    prefetch_related = ("items__account",)

    def run_command(self, actor, data):
        return commands.create_ap_invoice(actor, **_with_plain_items(data))


class IncomingPaymentListCreateView(DocumentListCreateView):
    """
    GET/POST /api/financials/incoming-payments/
    """
    model = IncomingPayment
    serializer_class = IncomingPaymentSerializer
    input_serializer_class = PaymentCreateSerializer
    select_related = ("journal_entry", "bank_account")

    def run_command(self, actor, data):
        return commands.create_incoming_payment(actor, **data)


class OutgoingPaymentListCreateView(DocumentListCreateView):
    """
    GET/POST /api/financials/outgoing-payments/
    """
    model = OutgoingPayment
    serializer_class = OutgoingPaymentSerializer
    input_serializer_class = PaymentCreateSerializer
    select_related = ("journal_entry", "bank_account")

    def run_command(self, actor, data):
        return commands.create_outgoing_payment(actor, **data)


def _with_plain_items(data):
    return {**data, "items": [dict(item) for item in data["items"]]}
