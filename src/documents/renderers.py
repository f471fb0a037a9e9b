"""Renderers that turn a DocumentStructure into an output format.

- render_html: HTML fragment for previews and embedding
- render_html_page: standalone HTML file for download and print
- render_json: structured data export
- render_xlsx: Excel workbook export

Renderers only format; every amount they print was computed upstream.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any

import orjson
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from src.documents.models import DocumentStructure, OutputFormat
from src.tax.calculator import round_cents

CURRENCY_KEYWORDS = ("Pay", "Tax", "Balance")
CURRENCY_NUMBER_FORMAT = '"$"#,##0.00'

Renderer = Callable[[DocumentStructure], str | bytes]


# =============================================================================
# Field formatting
# =============================================================================


def format_field_name(name: str) -> str:
    """Turn an identifier into a label.

    A space is inserted before each uppercase letter and the first letter
    is capitalized.

    Example:
        >>> format_field_name("grossPay")
        'Gross Pay'
    """
    spaced = re.sub(r"([A-Z])", r" \1", name).strip()
    return spaced[:1].upper() + spaced[1:]


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_currency_field(name: str, currency_fields: frozenset[str] = frozenset()) -> bool:
    """True when a field's numeric values render as currency."""
    return name in currency_fields or any(word in name for word in CURRENCY_KEYWORDS)


def format_currency(value: int | float | Decimal) -> str:
    """`$` followed by the amount rounded half-up to two decimals."""
    return f"${round_cents(Decimal(str(value))):.2f}"


def format_field_value(
    name: str, value: Any, currency_fields: frozenset[str] = frozenset()
) -> str:
    """Format a single value for display."""
    if value is None:
        return ""
    if _is_number(value) and is_currency_field(name, currency_fields):
        return format_currency(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


# =============================================================================
# HTML
# =============================================================================


def _esc(value: object) -> str:
    return html.escape(str(value), quote=True)


def _container_style(styles: Mapping[str, str]) -> str:
    parts = [
        f"font-family: {styles.get('fontFamily', 'Arial, sans-serif')}",
        f"font-size: {styles.get('fontSize', '12px')}",
        f"line-height: {styles.get('lineHeight', '1.4')}",
        f"color: {styles.get('color', '#000000')}",
    ]
    if "borderColor" in styles:
        parts.append(f"border: 1px solid {styles['borderColor']}")
    return "; ".join(parts)


def _has_balances(transactions: list[Mapping[str, Any]]) -> bool:
    return any(tx.get("balance") is not None for tx in transactions)


def _transaction_row(tx: Mapping[str, Any], with_balance: bool) -> str:
    cells = [
        _esc(format_field_value("date", tx.get("date"))),
        _esc(tx.get("description") or ""),
        _esc(format_currency(tx["amount"])),
    ]
    if with_balance:
        balance = tx.get("balance")
        cells.append(_esc(format_currency(balance)) if balance is not None else "")
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


def _render_transactions(transactions: list[Mapping[str, Any]]) -> str:
    with_balance = _has_balances(transactions)
    rows = "".join(_transaction_row(tx, with_balance) for tx in transactions)
    balance_heading = "<th>Balance</th>" if with_balance else ""
    return (
        '<table class="transactions">'
        "<thead><tr><th>Date</th><th>Description</th><th>Amount</th>"
        f"{balance_heading}</tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>"
    )


def render_html(structure: DocumentStructure) -> str:
    """Render a structure as an HTML fragment."""
    header = structure.header
    styles = structure.styles
    header_info = "".join(
        f"<p><strong>{_esc(format_field_name(key))}:</strong> "
        f"{_esc(format_field_value(key, value, structure.currency_fields))}</p>"
        for key, value in header.items()
        if key != "documentTitle"
    )

    body_parts: list[str] = []
    for key, value in structure.body.items():
        if isinstance(value, list):
            rendered = _render_transactions(value)
        else:
            rendered = _esc(format_field_value(key, value, structure.currency_fields))
        body_parts.append(
            '<div class="field-group">'
            f"<label>{_esc(format_field_name(key))}:</label> "
            f"<span>{rendered}</span>"
            "</div>"
        )

    footer = structure.footer
    notice = footer.get("notice")
    header_background = styles.get("headerBackground")
    header_style = f' style="background: {header_background}"' if header_background else ""

    return (
        f'<div class="document-container" style="{_esc(_container_style(styles))}">'
        f'<header class="document-header"{header_style}>'
        f"<h1>{_esc(header.get('documentTitle', ''))}</h1>"
        f'<div class="header-info">{header_info}</div>'
        "</header>"
        f'<main class="document-body">{"".join(body_parts)}</main>'
        '<footer class="document-footer">'
        f"<p>Generated by {_esc(footer.get('generatedBy', ''))}</p>"
        f"<p>Document ID: {_esc(footer.get('documentId', ''))}</p>"
        f"<p>Generated: {_esc(footer.get('timestamp', ''))}</p>"
        + (f'<p class="notice">{_esc(notice)}</p>' if notice else "")
        + "</footer>"
        "</div>"
    )


def render_html_page(structure: DocumentStructure) -> str:
    """Render a standalone HTML page suitable for download or printing."""
    title = structure.header.get("documentTitle", "Document")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{_esc(title)} {_esc(structure.document_id)}</title>\n"
        "</head>\n"
        "<body>\n"
        f"{render_html(structure)}\n"
        "</body>\n"
        "</html>\n"
    )


# =============================================================================
# JSON
# =============================================================================


def _json_default(value: object) -> str:
    if isinstance(value, Decimal):
        return format(value, "f")
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def render_json(structure: DocumentStructure) -> str:
    """Render a structure as JSON. Amounts are serialized as strings."""
    payload = {
        "header": structure.header,
        "body": structure.body,
        "footer": structure.footer,
    }
    return orjson.dumps(payload, default=_json_default, option=orjson.OPT_INDENT_2).decode(
        "utf-8"
    )


# =============================================================================
# XLSX
# =============================================================================


def _cell_value(value: Any) -> Any:
    """Convert a value for Excel; Decimals become floats."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _auto_fit_columns(worksheet) -> None:
    """Auto-fit column widths based on content."""
    for column_cells in worksheet.columns:
        max_length = max(
            (len(str(cell.value)) for cell in column_cells if cell.value is not None),
            default=0,
        )
        worksheet.column_dimensions[column_cells[0].column_letter].width = min(
            max_length + 2, 60
        )


def render_xlsx(structure: DocumentStructure) -> bytes:
    """Render a structure as an Excel workbook."""
    workbook = Workbook()
    ws = workbook.active
    ws.title = "Document"

    ws["A1"] = structure.header.get("documentTitle", "")
    ws["A1"].font = Font(bold=True, size=14)
    header_fill = PatternFill(
        start_color=structure.styles.get("headerBackground", "#f0f0f0").lstrip("#"),
        end_color=structure.styles.get("headerBackground", "#f0f0f0").lstrip("#"),
        fill_type="solid",
    )

    row = 2
    for key, value in structure.header.items():
        if key == "documentTitle":
            continue
        ws.cell(row=row, column=1, value=format_field_name(key)).fill = header_fill
        ws.cell(row=row, column=2, value=_cell_value(value))
        row += 1

    row += 1
    transactions: list[Mapping[str, Any]] = []
    for key, value in structure.body.items():
        if isinstance(value, list):
            transactions = value
            continue
        ws.cell(row=row, column=1, value=format_field_name(key)).font = Font(bold=True)
        cell = ws.cell(row=row, column=2, value=_cell_value(value))
        if _is_number(value) and is_currency_field(key, structure.currency_fields):
            cell.number_format = CURRENCY_NUMBER_FORMAT
        row += 1

    row += 1
    for key in ("generatedBy", "timestamp", "documentId", "notice"):
        if key in structure.footer:
            ws.cell(row=row, column=1, value=format_field_name(key))
            ws.cell(row=row, column=2, value=structure.footer[key])
            row += 1
    _auto_fit_columns(ws)

    if transactions:
        tx_sheet = workbook.create_sheet("Transactions")
        with_balance = _has_balances(transactions)
        columns = ["Date", "Description", "Amount"]
        if with_balance:
            columns.append("Balance")
        tx_sheet.append(columns)
        for cell in tx_sheet[1]:
            cell.font = Font(bold=True)
        for tx in transactions:
            values = [
                _cell_value(tx.get("date")),
                tx.get("description") or "",
                _cell_value(tx["amount"]),
            ]
            if with_balance:
                values.append(_cell_value(tx.get("balance")))
            tx_sheet.append(values)
            for column in range(3, len(values) + 1):
                tx_sheet.cell(row=tx_sheet.max_row, column=column).number_format = (
                    CURRENCY_NUMBER_FORMAT
                )
        _auto_fit_columns(tx_sheet)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


RENDERERS: dict[OutputFormat, Renderer] = {
    OutputFormat.HTML: render_html_page,
    OutputFormat.JSON: render_json,
    OutputFormat.XLSX: render_xlsx,
}
