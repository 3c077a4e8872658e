"""
Export utilities for ledger reports.
Supports Excel (.xlsx), CSV (.csv), and Text (.txt) formats.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    TXT = 'txt'

    CHOICES = [EXCEL, CSV, TXT]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        TXT: 'text/plain',
    }


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f'{value:.2f}'
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def _excel_value(value: Any, numeric: bool):
    # Numbers stay numbers so spreadsheet formulas work on them.
    if numeric and isinstance(value, Decimal):
        return float(value)
    return format_value(value)


def export_to_excel(
    data: list[dict],
    columns: list[dict],
    title: str = 'Export',
    sheet_name: str = 'Data',
    footer: dict | None = None,
) -> bytes:
    """
    Export rows to an Excel workbook.

    Args:
        data: Rows as dictionaries
        columns: Column definitions with 'key', 'header', optional 'width' and 'numeric'
        title: Title written above the header row
        sheet_name: Name of the worksheet
        footer: Optional totals row, keyed like the data rows

    Returns:
        Bytes of the .xlsx file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    thin = Side(style='thin')
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    stamp = ws.cell(row=2, column=1, value=f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    stamp.font = Font(italic=True, size=10, color='666666')
    stamp.alignment = Alignment(horizontal='center')

    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = Font(bold=True, color='FFFFFF')
        cell.fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        cell.border = border
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    rows = list(data)
    if footer:
        rows.append(footer)

    for row_idx, row_data in enumerate(rows, header_row + 1):
        is_footer = footer is not None and row_data is footer
        for col_idx, col in enumerate(columns, 1):
            numeric = col.get('numeric', False)
            cell = ws.cell(
                row=row_idx,
                column=col_idx,
                value=_excel_value(row_data.get(col['key'], ''), numeric),
            )
            cell.border = border
            if numeric:
                cell.alignment = Alignment(horizontal='right')
                cell.number_format = '#,##0.00'
            if is_footer:
                cell.font = Font(bold=True)

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_to_csv(data: list[dict], columns: list[dict], footer: dict | None = None) -> str:
    """Export rows to CSV, header first."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow([col['header'] for col in columns])
    for row_data in list(data) + ([footer] if footer else []):
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])
    return output.getvalue()


def export_to_txt(data: list[dict], columns: list[dict], footer: dict | None = None) -> str:
    """
    Export rows as a fixed-width text table.

    Numeric columns are right-aligned; other cells are truncated at 50 characters.
    """
    rows = list(data) + ([footer] if footer else [])
    widths = []
    for col in columns:
        width = max([len(col['header'])] + [
            len(format_value(row.get(col['key'], ''))) for row in rows
        ])
        widths.append(min(width, 50))

    def render(values):
        parts = []
        for col, width, value in zip(columns, widths, values):
            if len(value) > width:
                value = value[:width - 3] + '...'
            parts.append(value.rjust(width) if col.get('numeric') else value.ljust(width))
        return '  '.join(parts).rstrip()

    lines = [
        render([col['header'] for col in columns]),
        render(['-' * width for width in widths]),
    ]
    for row in rows:
        lines.append(render([format_value(row.get(col['key'], '')) for col in columns]))
    return '\n'.join(lines) + '\n'


def create_export_response(
    data: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
    footer: dict | None = None,
) -> HttpResponse:
    """
    Build an attachment response in the requested format.

    Raises:
        ValueError: If the format is not one of ExportFormat.CHOICES
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]
    if format == ExportFormat.EXCEL:
        response = HttpResponse(
            export_to_excel(data, columns, title=title, footer=footer),
            content_type=content_type,
        )
    elif format == ExportFormat.CSV:
        response = HttpResponse(export_to_csv(data, columns, footer=footer), content_type=content_type)
        response.charset = 'utf-8-sig'  # BOM for Excel compatibility
    else:
        response = HttpResponse(export_to_txt(data, columns, footer=footer), content_type=content_type)

    response['Content-Disposition'] = f'attachment; filename="{filename}.{format}"'
    return response


# =============================================================================
# Trial Balance Export Configuration
# =============================================================================

TRIAL_BALANCE_EXPORT_COLUMNS = [
    {'key': 'account_code', 'header': 'Account Code', 'width': 15},
    {'key': 'account_name', 'header': 'Account Name', 'width': 30},
    {'key': 'account_type', 'header': 'Account Type', 'width': 12},
    {'key': 'debit_balance', 'header': 'Debit', 'width': 16, 'numeric': True},
    {'key': 'credit_balance', 'header': 'Credit', 'width': 16, 'numeric': True},
]


def trial_balance_footer(totals: dict) -> dict:
    return {
        'account_name': 'Total',
        'debit_balance': totals['total_debit'],
        'credit_balance': totals['total_credit'],
    }


# =============================================================================
# Chart of Accounts Export Configuration
# =============================================================================

ACCOUNT_EXPORT_COLUMNS = [
    {'key': 'code', 'header': 'Account Code', 'width': 15},
    {'key': 'name', 'header': 'Account Name', 'width': 30},
    {'key': 'account_type', 'header': 'Account Type', 'width': 12},
    {'key': 'normal_balance', 'header': 'Normal Balance', 'width': 12},
    {'key': 'description', 'header': 'Description', 'width': 40},
    {'key': 'balance', 'header': 'Balance', 'width': 16, 'numeric': True},
]


def prepare_account_export_data(accounts) -> list[dict]:
    """Flatten accounts into export rows."""
    return [
        {
            'code': account.code,
            'name': account.name,
            'account_type': account.account_type,
            'normal_balance': account.normal_balance,
            'description': account.description or '',
            'balance': account.balance,
        }
        for account in accounts
    ]
