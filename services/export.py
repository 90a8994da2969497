"""
Export encoders for ledger reports.
Serializes a filtered transaction list and its totals into an Excel
workbook or a PDF document, returned as bytes. No file or database I/O.
"""

import logging
import math
from io import BytesIO
from datetime import date
from enum import Enum
from dataclasses import dataclass
from typing import List, Sequence
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from exceptions import EncodingError
from models import Transaction, TransactionKind
from services.aggregation import LedgerSummary

logger = logging.getLogger(__name__)

HEADERS = ["Name", "Amount", "Type", "Date"]
DEFAULT_TITLE = "Transactions Report"


class ExportFormat(str, Enum):
    """Supported export formats."""
    XLSX = "xlsx"
    PDF = "pdf"

    @property
    def filename(self) -> str:
        return f"transactions.{self.value}"

    @property
    def mime_type(self) -> str:
        if self is ExportFormat.XLSX:
            return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        return "application/pdf"


@dataclass(frozen=True)
class ExportArtifact:
    """A named byte buffer ready to hand to a download or share facility."""
    filename: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def summary_rows(summary: LedgerSummary) -> List[tuple]:
    """Label/value pairs of the report footer, in display order."""
    return [
        ("Total Given", summary.total_given),
        ("Total Taken", summary.total_taken),
        ("Balance", summary.balance),
    ]


def _validate(transactions: Sequence[Transaction]) -> List[Transaction]:
    """Check every record has the fields the encoders need."""
    checked = []
    for index, tx in enumerate(transactions):
        name = getattr(tx, "name", None)
        amount = getattr(tx, "amount", None)
        kind = getattr(tx, "kind", None)
        tx_date = getattr(tx, "date", None)

        if not isinstance(name, str) or not name:
            raise EncodingError(f"Record {index} has no name")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise EncodingError(f"Record {index} ({name!r}) has no valid amount")
        if not isinstance(kind, TransactionKind):
            raise EncodingError(f"Record {index} ({name!r}) has no transaction kind")
        if not isinstance(tx_date, date):
            raise EncodingError(f"Record {index} ({name!r}) has no date")
        checked.append(tx)
    return checked


# ==================== Excel ====================

def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="3F51B5")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Size columns to their longest value"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def encode_xlsx(transactions: Sequence[Transaction], summary: LedgerSummary) -> bytes:
    """
    Build the spreadsheet report.

    Layout: header row, one row per transaction in the given order,
    a blank row, then Total Given / Total Taken / Balance.

    Raises:
        EncodingError: if a record is malformed or the workbook cannot be written
    """
    records = _validate(transactions)

    try:
        wb = Workbook()
        ws = wb.active
        ws.title = "Transactions"

        ws.append(HEADERS)
        _style_header(ws, 1)
        ws.freeze_panes = "A2"

        for tx in records:
            ws.append([tx.name, tx.amount, tx.kind.value, tx.date.isoformat()])
            # Names are text even when they start with "="; openpyxl would store a formula
            ws.cell(ws.max_row, 1).data_type = "s"
            ws.cell(ws.max_row, 2).number_format = "0.00"

        ws.append([])
        for label, value in summary_rows(summary):
            ws.append([label, value])
            ws.cell(ws.max_row, 1).font = Font(bold=True)
            ws.cell(ws.max_row, 2).number_format = "0.00"

        _autosize_columns(ws)

        buffer = BytesIO()
        wb.save(buffer)
    except Exception as e:
        raise EncodingError(f"Could not build Excel report: {e}") from e

    content = buffer.getvalue()
    logger.info(f"Encoded {len(records)} transactions to xlsx ({len(content)} bytes)")
    return content


# ==================== PDF ====================

# A4 width minus SimpleDocTemplate's default 1 inch margins
PDF_FRAME_WIDTH = A4[0] - 2 * inch
PDF_COL_WIDTHS = [PDF_FRAME_WIDTH - 70 * 3, 70, 70, 70]


def _pdf_table(records: Sequence[Transaction]) -> Table:
    """Transaction table with fixed column widths; long names wrap inside their cell."""
    cell_style = getSampleStyleSheet()["BodyText"]
    rows = [HEADERS] + [
        [Paragraph(escape(tx.name), cell_style), f"{tx.amount:.2f}", tx.kind.value, tx.date.isoformat()]
        for tx in records
    ]

    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#3F51B5")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if records:
        style += [
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#E8EAF6")]),
        ]
    table = Table(rows, colWidths=PDF_COL_WIDTHS, repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle(style))
    return table


def encode_pdf(
    transactions: Sequence[Transaction],
    summary: LedgerSummary,
    title: str = DEFAULT_TITLE
) -> bytes:
    """
    Build the A4 PDF report: title, transaction table, totals block.
    Amounts and totals are rendered with two decimals. The table header
    repeats on every page.

    Raises:
        EncodingError: if a record is malformed or the document cannot be built
    """
    records = _validate(transactions)

    try:
        styles = getSampleStyleSheet()
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=title)

        story = [
            Paragraph(escape(title), styles["Title"]),
            Spacer(1, 10),
            _pdf_table(records),
            Spacer(1, 16),
        ]
        for label, value in summary_rows(summary):
            story.append(Paragraph(f"{label}: {value:.2f}", styles["Normal"]))

        doc.build(story)
    except Exception as e:
        raise EncodingError(f"Could not build PDF report: {e}") from e

    content = buffer.getvalue()
    logger.info(f"Encoded {len(records)} transactions to pdf ({len(content)} bytes)")
    return content


def build_artifact(
    fmt: ExportFormat,
    transactions: Sequence[Transaction],
    summary: LedgerSummary,
    title: str = DEFAULT_TITLE
) -> ExportArtifact:
    """Encode transactions in the requested format and name the result."""
    fmt = ExportFormat(fmt)
    if fmt is ExportFormat.XLSX:
        content = encode_xlsx(transactions, summary)
    else:
        content = encode_pdf(transactions, summary, title=title)
    return ExportArtifact(filename=fmt.filename, mime_type=fmt.mime_type, content=content)
