"""Export service: encodes projected preview rows as CSV, XLSX or PDF."""

import csv
import time
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO, StringIO
from typing import Any, Sequence

from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from reportbuilder.core.config import settings
from reportbuilder.core.exceptions import UnsupportedExportFormatError
from reportbuilder.core.logging import LoggerMixin
from reportbuilder.formula.functions import to_text

ExportRow = dict[str, Any]


@dataclass(frozen=True)
class ExportResult:
    """Encoded export ready to be sent as a download."""

    content: bytes
    media_type: str
    filename: str


class ExportService(LoggerMixin):
    """
    Service for encoding export rows.

    Every encoder takes the column headers and rows mapping header to
    value, as produced by ``build_export_rows``.
    """

    FORMATS: dict[str, tuple[str, str]] = {
        "csv": ("text/csv; charset=utf-8", "csv"),
        "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
        "pdf": ("application/pdf", "pdf"),
    }

    def __init__(
        self,
        basename: str | None = None,
        sheet_title: str | None = None,
        pdf_title: str | None = None,
        pdf_font_size: int | None = None,
    ) -> None:
        self.basename = basename or settings.export_basename
        self.sheet_title = sheet_title or settings.export_sheet_title
        self.pdf_title = pdf_title or settings.export_pdf_title
        self.pdf_font_size = pdf_font_size or settings.export_pdf_font_size

    def export(
        self,
        export_format: str,
        headers: Sequence[str],
        rows: Sequence[ExportRow],
    ) -> ExportResult:
        """
        Encode rows in the requested format.

        Args:
            export_format: 'csv', 'xlsx' (or 'excel') or 'pdf'
            headers: Column headers in order
            rows: Rows mapping header to value

        Returns:
            Encoded content with media type and download file name

        Raises:
            UnsupportedExportFormatError: If the format is unknown
        """
        fmt = export_format.lower()
        if fmt == "excel":
            fmt = "xlsx"

        if fmt == "csv":
            content = self.to_csv(headers, rows)
        elif fmt == "xlsx":
            content = self.to_xlsx(headers, rows)
        elif fmt == "pdf":
            content = self.to_pdf(headers, rows)
        else:
            raise UnsupportedExportFormatError(export_format, list(self.FORMATS))

        media_type, extension = self.FORMATS[fmt]
        filename = f"{self.basename}_{int(time.time() * 1000)}.{extension}"

        self.logger.info(
            f"Exported {len(rows)} rows as {fmt}",
            extra={"export_format": fmt, "rows": len(rows), "columns": len(headers)},
        )
        return ExportResult(content=content, media_type=media_type, filename=filename)

    def to_csv(self, headers: Sequence[str], rows: Sequence[ExportRow]) -> bytes:
        """Encode as CSV; text cells are quoted, numbers are not."""
        output = StringIO()
        csv.writer(output, lineterminator="\n").writerow(headers)

        writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
        for row in rows:
            writer.writerow([self._csv_cell(row.get(h, "")) for h in headers])

        return output.getvalue().encode("utf-8")

    def to_xlsx(self, headers: Sequence[str], rows: Sequence[ExportRow]) -> bytes:
        """Encode as a single-sheet workbook."""
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.sheet_title

        worksheet.append(list(headers))
        for row in rows:
            worksheet.append([self._xlsx_cell(row.get(h, "")) for h in headers])

        output = BytesIO()
        workbook.save(output)
        return output.getvalue()

    def to_pdf(self, headers: Sequence[str], rows: Sequence[ExportRow]) -> bytes:
        """Encode as a landscape document with a title and one table."""
        output = BytesIO()
        doc = SimpleDocTemplate(
            output,
            pagesize=landscape(A4),
            leftMargin=0.5 * inch,
            rightMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch,
            title=self.pdf_title,
        )
        styles = getSampleStyleSheet()
        elements: list[Any] = [Paragraph(self.pdf_title, styles["Heading2"]), Spacer(1, 0.1 * inch)]

        if headers:
            data = [list(headers)] + [[to_text(row.get(h, "")) for h in headers] for row in rows]
            table = Table(data, repeatRows=1)
            table.setStyle(self._table_style())
            elements.append(table)
        else:
            elements.append(Paragraph("No columns selected", styles["Normal"]))

        doc.build(elements)
        return output.getvalue()

    def _table_style(self) -> TableStyle:
        return TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563eb")),  # Header background
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),  # Header text
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), self.pdf_font_size),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#d1d5db")),
        ])

    @staticmethod
    def _csv_cell(value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return to_text(value)

    @staticmethod
    def _xlsx_cell(value: Any) -> Any:
        if isinstance(value, bool):
            return value
        # Excel cannot store timezone-aware datetimes
        if isinstance(value, datetime) and value.tzinfo is not None:
            return to_text(value)
        if isinstance(value, (int, float, str, date)):
            return value
        return to_text(value)
