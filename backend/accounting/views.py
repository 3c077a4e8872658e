# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, engine calls.

Failed commands map to HTTP statuses by error code:
    validation_error, configuration_error -> 400
    period_closed, concurrency_error      -> 409
    not_found                             -> 404
"""

from datetime import datetime

from django.db.models import Exists, OuterRef
from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from . import reports
from .balances import account_transactions
from .commands import (
    approve_journal_entry,
    close_period,
    configure_numbering_series,
    create_account,
    create_period,
    delete_account,
    post_journal_entry,
    set_default_account,
    validate_period_close,
)
from .exports import (
    ACCOUNT_EXPORT_COLUMNS,
    TRIAL_BALANCE_EXPORT_COLUMNS,
    ExportFormat,
    create_export_response,
    prepare_account_export_data,
    trial_balance_footer,
)
from .models import (
    Account,
    AccountingPeriod,
    DefaultAccount,
    JournalEntry,
    JournalLine,
    NumberingSeries,
)
from .serializers import (
    AccountCreateSerializer,
    AccountingPeriodCreateSerializer,
    AccountingPeriodSerializer,
    AccountSerializer,
    DefaultAccountSerializer,
    DefaultAccountSetSerializer,
    JournalEntryCreateSerializer,
    JournalEntrySerializer,
    NumberingSeriesConfigureSerializer,
    NumberingSeriesSerializer,
    money_dict,
)


ERROR_STATUS = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "configuration_error": status.HTTP_400_BAD_REQUEST,
    "period_closed": status.HTTP_409_CONFLICT,
    "concurrency_error": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def failure_response(result, **extra) -> Response:
    body = {"detail": result.error, "errors": result.errors, "code": result.code}
    body.update(extra)
    return Response(body, status=ERROR_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST))


def _export_format(request):
    export_format = request.query_params.get("format", ExportFormat.EXCEL)
    if export_format not in ExportFormat.CHOICES:
        return None
    return export_format


def _invalid_format_response() -> Response:
    return Response(
        {"detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"},
        status=status.HTTP_400_BAD_REQUEST,
    )


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounting/accounts/ -> list accounts with balances
    POST /api/accounting/accounts/ -> create account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        accounts = Account.objects.filter(
            business_unit=actor.business_unit,
        ).annotate(
            _has_transactions=Exists(
                JournalLine.objects.filter(account=OuterRef("pk"))
            ),
        ).order_by("code")

        account_type = request.query_params.get("type")
        if account_type:
            accounts = accounts.filter(account_type=account_type.upper())

        return Response(AccountSerializer(accounts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDetailView(APIView):
    """
    GET /api/accounting/accounts/<code>/ -> retrieve account with balance
    DELETE /api/accounting/accounts/<code>/ -> delete an account without postings
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, code):
        account = Account.objects.filter(business_unit=actor.business_unit, code=code).first()
        if not account:
            raise Http404
        return account

    def get(self, request, code):
        actor = resolve_actor(request)
        require(actor, "accounts.view")
        return Response(AccountSerializer(self.get_object(actor, code)).data)

    def delete(self, request, code):
        actor = resolve_actor(request)
        account = self.get_object(actor, code)

        result = delete_account(actor, account.id)
        if not result.success:
            return failure_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)


class AccountTransactionsView(APIView):
    """
    GET /api/accounting/accounts/<code>/transactions/ -> account activity, newest first

    Query params:
        limit: maximum number of lines (optional)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, code):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        account = Account.objects.filter(business_unit=actor.business_unit, code=code).first()
        if not account:
            raise Http404

        limit = request.query_params.get("limit")
        limit = int(limit) if limit and limit.isdigit() else None

        return Response(money_dict({
            "account_code": account.code,
            "account_name": account.name,
            "balance": account.balance,
            "transactions": account_transactions(account, limit=limit),
        }))


class AccountExportView(APIView):
    """
    GET /api/accounting/accounts/export/?format=xlsx|csv|txt -> chart of accounts with balances
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format = _export_format(request)
        if export_format is None:
            return _invalid_format_response()

        accounts = Account.objects.filter(business_unit=actor.business_unit).order_by("code")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return create_export_response(
            data=prepare_account_export_data(accounts),
            columns=ACCOUNT_EXPORT_COLUMNS,
            format=export_format,
            filename=f"chart_of_accounts_{timestamp}",
            title="Chart of Accounts",
        )


class DefaultAccountView(APIView):
    """
    GET /api/accounting/default-accounts/ -> designated Receivable / Payable accounts
    PUT /api/accounting/default-accounts/ -> designate an account for a role
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        defaults = DefaultAccount.objects.filter(
            business_unit=actor.business_unit,
        ).select_related("account").order_by("role")
        return Response(DefaultAccountSerializer(defaults, many=True).data)

    def put(self, request):
        actor = resolve_actor(request)

        input_serializer = DefaultAccountSetSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = set_default_account(actor, **input_serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(DefaultAccountSerializer(result.data).data)


# =============================================================================
# Journal Entry Views
# =============================================================================

class JournalEntryListCreateView(APIView):
    """
    GET /api/accounting/journal-entries/ -> list journal entries, newest first
    POST /api/accounting/journal-entries/ -> post a balanced journal entry

    Query params (GET):
        date_from, date_to: posting date range (YYYY-MM-DD)
        source_type: filter derived postings (e.g. AR_INVOICE)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        entries = JournalEntry.objects.filter(
            business_unit=actor.business_unit,
        ).select_related("period", "author", "approver").prefetch_related("lines__account")

        for param, lookup in (("date_from", "posting_date__gte"), ("date_to", "posting_date__lte")):
            value = request.query_params.get(param)
            if not value:
                continue
            try:
                entries = entries.filter(**{lookup: datetime.strptime(value, "%Y-%m-%d").date()})
            except ValueError:
                return Response(
                    {"detail": f"Invalid {param} format. Use YYYY-MM-DD."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        source_type = request.query_params.get("source_type")
        if source_type:
            entries = entries.filter(source_type=source_type)

        return Response(JournalEntrySerializer(entries, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = JournalEntryCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = post_journal_entry(
            actor,
            posting_date=data["posting_date"],
            remarks=data["remarks"],
            lines=[dict(line) for line in data["lines"]],
        )
        if not result.success:
            return failure_response(result)

        return Response(JournalEntrySerializer(result.data).data, status=status.HTTP_201_CREATED)


class JournalEntryDetailView(APIView):
    """
    GET /api/accounting/journal-entries/<pk>/ -> entry with its lines
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        entry = JournalEntry.objects.filter(
            pk=pk, business_unit=actor.business_unit,
        ).select_related("period", "author", "approver").prefetch_related("lines__account").first()
        if not entry:
            raise Http404
        return Response(JournalEntrySerializer(entry).data)


class JournalEntryApproveView(APIView):
    """
    POST /api/accounting/journal-entries/<pk>/approve/ -> set the approver
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = approve_journal_entry(actor, pk)
        if not result.success:
            return failure_response(result)

        entry = result.data
        return Response({
            "id": entry.id,
            "document_number": entry.document_number,
            "approver": entry.approver_id,
            "approved_at": entry.approved_at,
        })


# =============================================================================
# Period Views
# =============================================================================

class AccountingPeriodListCreateView(APIView):
    """
    GET /api/accounting/periods/ -> list periods
    POST /api/accounting/periods/ -> open a new period
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "periods.view")

        periods = AccountingPeriod.objects.filter(
            business_unit=actor.business_unit,
        ).select_related("closed_by").order_by("start_date")
        return Response(AccountingPeriodSerializer(periods, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = AccountingPeriodCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_period(actor, **input_serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(AccountingPeriodSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountingPeriodCloseView(APIView):
    """
    GET /api/accounting/periods/<pk>/close/ -> close validation (errors + warnings)
    POST /api/accounting/periods/<pk>/close/ -> close the period
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)

        result = validate_period_close(actor, pk)
        if not result.success:
            return failure_response(result)

        return Response(result.data.to_dict())

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = close_period(actor, pk)
        if not result.success:
            extra = {"validation": result.data.to_dict()} if result.data else {}
            return failure_response(result, **extra)

        return Response({
            "period": AccountingPeriodSerializer(result.data["period"]).data,
            "validation": result.data["validation"].to_dict(),
        })


# =============================================================================
# Numbering Views
# =============================================================================

class NumberingSeriesView(APIView):
    """
    GET /api/accounting/numbering-series/ -> series of the business unit
    POST /api/accounting/numbering-series/ -> create or update a series
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        series = NumberingSeries.objects.filter(
            business_unit=actor.business_unit,
        ).order_by("document_kind")
        return Response(NumberingSeriesSerializer(series, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = NumberingSeriesConfigureSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = configure_numbering_series(actor, **input_serializer.validated_data)
        if not result.success:
            return failure_response(result)

        return Response(NumberingSeriesSerializer(result.data).data)


# =============================================================================
# Report Views
# =============================================================================

class TrialBalanceView(APIView):
    """
    GET /api/accounting/reports/trial-balance/ -> rows + totals
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        rows = reports.trial_balance(actor.business_unit.id)
        return Response(money_dict({
            "accounts": rows,
            **reports.trial_balance_totals(rows),
        }))


class TrialBalanceExportView(APIView):
    """
    GET /api/accounting/reports/trial-balance/export/?format=xlsx|csv|txt
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.export")

        export_format = _export_format(request)
        if export_format is None:
            return _invalid_format_response()

        rows = reports.trial_balance(actor.business_unit.id)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return create_export_response(
            data=rows,
            columns=TRIAL_BALANCE_EXPORT_COLUMNS,
            format=export_format,
            filename=f"trial_balance_{timestamp}",
            title=f"Trial Balance - {actor.business_unit.name}",
            footer=trial_balance_footer(reports.trial_balance_totals(rows)),
        )


class BalanceSheetView(APIView):
    """
    GET /api/accounting/reports/balance-sheet/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        return Response(money_dict(reports.balance_sheet(actor.business_unit.id)))


class IncomeStatementView(APIView):
    """
    GET /api/accounting/reports/income-statement/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        return Response(money_dict(reports.income_statement(actor.business_unit.id)))


class FinancialSummaryView(APIView):
    """
    GET /api/accounting/reports/summary/ -> dashboard figures
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        return Response(money_dict(reports.financial_summary(actor.business_unit.id)))
