# financials/urls.py
"""
URL configuration for source documents.

Endpoints:
- /bank-accounts/
- /ar-invoices/, /ap-invoices/
- /incoming-payments/, /outgoing-payments/
"""

from django.urls import path

from .views import (
    APInvoiceListCreateView,
    ARInvoiceListCreateView,
    BankAccountListCreateView,
    IncomingPaymentListCreateView,
    OutgoingPaymentListCreateView,
)

app_name = "financials"

urlpatterns = [
    path("bank-accounts/", BankAccountListCreateView.as_view(), name="bank-account-list-create"),
    path("ar-invoices/", ARInvoiceListCreateView.as_view(), name="ar-invoice-list-create"),
    path("ap-invoices/", APInvoiceListCreateView.as_view(), name="ap-invoice-list-create"),
    path(
        "incoming-payments/",
        IncomingPaymentListCreateView.as_view(),
        name="incoming-payment-list-create",
    ),
    path(
        "outgoing-payments/",
        OutgoingPaymentListCreateView.as_view(),
        name="outgoing-payment-list-create",
    ),
]
