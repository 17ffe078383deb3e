from __future__ import annotations

import calendar
import io
from abc import ABC, abstractmethod
from typing import Any
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import format_time
from ..core.enums import ReportFormat
from ..core.exceptions import ValidationError
from .model import MonthlyReport, RenderedReport

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIMETYPE = "application/pdf"

SESSION_COLUMNS = ["Date", "Day", "Status", "Start", "End", "Topic"]


def report_filename(report: MonthlyReport, extension: str) -> str:
    return f"attendance-report-{report.year}-{report.month}.{extension}"


def report_title(report: MonthlyReport) -> str:
    return f"Attendance Report - {calendar.month_name[report.month]} {report.year}"


def _session_row(s: AttendanceRecord) -> list[Any]:
    return [
        s.attendance_date.strftime("%Y-%m-%d"),
        s.attendance_date.strftime("%a"),
        s.status.value,
        format_time(s.start_time) or "",
        format_time(s.end_time) or "",
        s.topic or "",
    ]


class ReportRenderer(ABC):
    """Turns a MonthlyReport into a downloadable file."""

    extension: str = ""
    mimetype: str = ""

    @abstractmethod
    def render_bytes(self, report: MonthlyReport) -> bytes:
        raise NotImplementedError

    def render(self, report: MonthlyReport) -> RenderedReport:
        return RenderedReport(
            content=self.render_bytes(report),
            filename=report_filename(report, self.extension),
            mimetype=self.mimetype,
        )


class PdfReportRenderer(ReportRenderer):
    extension = "pdf"
    mimetype = PDF_MIMETYPE

    def render_bytes(self, report: MonthlyReport) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=report_title(report))
        styles = getSampleStyleSheet()
        elements = []

        elements.append(Paragraph(escape(report_title(report)), styles["Title"]))
        elements.append(Paragraph(f"Student: {escape(report.student_name)}", styles["Normal"]))
        elements.append(Spacer(1, 12))
        elements.append(
            Paragraph(
                f"Total sessions: {report.total_sessions} &nbsp;&nbsp; "
                f"Present: {report.total_present} &nbsp;&nbsp; "
                f"Absent: {report.total_absent}",
                styles["Normal"],
            )
        )
        elements.append(Spacer(1, 12))

        if report.sessions:
            table_data: list[list[Any]] = [SESSION_COLUMNS]
            for s in report.sessions:
                row = _session_row(s)
                row[-1] = Paragraph(escape(row[-1]), styles["BodyText"])
                table_data.append(row)

            t = Table(table_data, colWidths=[70, 35, 55, 45, 45, 200], repeatRows=1)
            t.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (0, 0), (-2, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ]))
            elements.append(t)
        else:
            elements.append(Paragraph("No sessions recorded this month.", styles["Italic"]))

        doc.build(elements)
        return buffer.getvalue()


class ExcelReportRenderer(ReportRenderer):
    extension = "xlsx"
    mimetype = XLSX_MIMETYPE

    def render_bytes(self, report: MonthlyReport) -> bytes:
        sessions = pd.DataFrame([_session_row(s) for s in report.sessions], columns=SESSION_COLUMNS)
        summary = pd.DataFrame(
            [
                ["Student", report.student_name],
                ["Month", f"{calendar.month_name[report.month]} {report.year}"],
                ["Total sessions", report.total_sessions],
                ["Present", report.total_present],
                ["Absent", report.total_absent],
            ],
            columns=["Field", "Value"],
        )

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            summary.to_excel(writer, index=False, sheet_name="Summary")
            sessions.to_excel(writer, index=False, sheet_name="Attendance")
        return output.getvalue()


_RENDERERS: dict[ReportFormat, type[ReportRenderer]] = {
    ReportFormat.PDF: PdfReportRenderer,
    ReportFormat.EXCEL: ExcelReportRenderer,
}


def renderer_for(fmt: Any) -> ReportRenderer:
    try:
        report_format = ReportFormat(str(fmt).strip().lower())
    except ValueError:
        raise ValidationError("Format must be 'pdf' or 'excel'")
    return _RENDERERS[report_format]()
