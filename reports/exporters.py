"""
Report Exporters
Render a single report to an .xlsx workbook (openpyxl) or a PDF
(reportlab). Presentation only; values come from the stored row.
Rendering errors propagate to the caller.
"""
import io
import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Sequence

from django.utils import timezone
from django.utils.html import escape
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .dates import parse_day

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
PDF_CONTENT_TYPE = 'application/pdf'

HEADER_BLUE = '2563EB'
HEADER_GREEN = '059669'
TOTAL_YELLOW = 'FFD966'
TABLE_GREY = 'E5E7EB'
NEGATIVE_RED = 'FF0000'

COMMISSION_TITLE = 'Total Operations Commission Report'
DAILY_TITLE = 'Operations Daily Report'


# =============================================================================
# Formatting helpers
# =============================================================================

def format_currency(value) -> str:
    """$1,234.56"""
    amount = Decimal(str(value or 0))
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


def format_percentage(value) -> str:
    return f"{Decimal(str(value or 0)):.2f}%"


def format_display_date(value) -> str:
    """Jan 05, 2024"""
    return parse_day(value).strftime('%b %d, %Y')


def format_date_label(value) -> str:
    """Jan-05-2024, for filenames."""
    return parse_day(value).strftime('%b-%d-%Y')


def format_range_label(start, end) -> str:
    return f"{format_date_label(start)}_to_{format_date_label(end)}"


def commission_filename(report, extension: str) -> str:
    start, end = report.resolved_range()
    return f"Operations_Commission_{format_range_label(start, end)}.{extension}"


def daily_filename(report, extension: str) -> str:
    name = re.sub(r'\s+', '_', (report.operations_name or '').strip()) or 'Operator'
    return f"Operations_Daily_{name}_{format_date_label(report.report_date)}.{extension}"


def property_type_label(property_type) -> str:
    return 'Sale' if (property_type or '').lower() == 'sale' else 'Rent'


def _commission_summary_rows(report) -> List[Sequence[Any]]:
    return [
        ('Total Properties Closed', report.total_properties_count),
        ('Sales Count', report.total_sales_count),
        ('Rent Count', report.total_rent_count),
        ('Total Sales Value', format_currency(report.total_sales_value)),
        ('Total Rent Value', format_currency(report.total_rent_value)),
        ('TOTAL COMMISSION', format_currency(report.total_commission_amount)),
    ]


def _commission_period(report) -> str:
    start, end = report.resolved_range()
    return (
        f"{format_display_date(start)} - {format_display_date(end)} | "
        f"Commission Rate: {format_percentage(report.commission_percentage)}"
    )


def _daily_calculated_rows(report) -> List[Sequence[Any]]:
    out_of_duty = report.leads_responded_out_of_duty_time or 0
    leads_display = (
        f"{report.effective_leads_responded} "
        f"({report.leads_responded_to} total, {out_of_duty} out of duty)"
    )
    return [
        ('Properties Added', report.properties_added),
        ('Leads Responded To', leads_display),
        ('Amending Previous Properties', report.amending_previous_properties),
    ]


def _daily_manual_rows(report) -> List[Sequence[Any]]:
    return [
        ('Preparing Contract', report.preparing_contract or 0),
        ('Tasks Efficiency - Duty Time', report.tasks_efficiency_duty_time or 0),
        ('Tasks Efficiency - Uniform', report.tasks_efficiency_uniform or 0),
        ('Tasks Efficiency - After Duty Performance', report.tasks_efficiency_after_duty or 0),
        ('Leads Responded Out of Duty Time', report.leads_responded_out_of_duty_time or 0),
    ]


def _is_negative(value) -> bool:
    return isinstance(value, (int, Decimal)) and not isinstance(value, bool) and value < 0


# =============================================================================
# Excel
# =============================================================================

def _fill(hex_color: str) -> PatternFill:
    return PatternFill(start_color=hex_color, end_color=hex_color, fill_type='solid')


def _xlsx_title(ws, title: str, subtitle: str, last_col: str):
    ws.merge_cells(f'A1:{last_col}1')
    ws['A1'] = title
    ws['A1'].font = Font(size=16, bold=True)
    ws['A1'].alignment = Alignment(horizontal='center')

    ws.merge_cells(f'A2:{last_col}2')
    ws['A2'] = subtitle
    ws['A2'].font = Font(size=12, italic=True)
    ws['A2'].alignment = Alignment(horizontal='center')


def _xlsx_section_header(ws, row: int, title: str, last_col: str, color: str = HEADER_BLUE):
    ws.merge_cells(f'A{row}:{last_col}{row}')
    cell = ws[f'A{row}']
    cell.value = title
    cell.font = Font(size=12, bold=True, color='FFFFFF')
    cell.fill = _fill(color)
    cell.alignment = Alignment(horizontal='center')


def _workbook_bytes(wb: Workbook) -> bytes:
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def export_commission_report_to_excel(report, properties: List[Dict[str, Any]]) -> bytes:
    """Summary block, then one row per closed property when there are any."""
    wb = Workbook()
    ws = wb.active
    ws.title = 'Operations Commission'

    for col, width in zip('ABCDE', (20, 15, 20, 15, 20)):
        ws.column_dimensions[col].width = width

    _xlsx_title(ws, COMMISSION_TITLE, _commission_period(report), 'E')

    row = 4
    _xlsx_section_header(ws, row, 'Summary', 'E')
    row += 1

    summary = _commission_summary_rows(report)
    for index, (label, value) in enumerate(summary):
        ws[f'A{row}'] = label
        ws[f'A{row}'].font = Font(bold=True)
        ws.merge_cells(f'C{row}:E{row}')
        ws[f'C{row}'] = value
        ws[f'C{row}'].alignment = Alignment(horizontal='right')

        if index == len(summary) - 1:
            for ref in (f'A{row}', f'C{row}'):
                ws[ref].font = Font(bold=True, size=12)
                ws[ref].fill = _fill(TOTAL_YELLOW)
        row += 1

    row += 1

    if properties:
        _xlsx_section_header(ws, row, 'Property Details', 'E')
        row += 1

        for col, header in enumerate(('Reference', 'Type', 'Price', 'Commission %', 'Commission Amount'), start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = _fill(TABLE_GREY)
        row += 1

        percentage = format_percentage(report.commission_percentage)
        for prop in properties:
            ws[f'A{row}'] = prop['reference_number']
            ws[f'B{row}'] = property_type_label(prop['property_type'])
            ws[f'C{row}'] = format_currency(prop['price'])
            ws[f'D{row}'] = percentage
            ws[f'E{row}'] = format_currency(prop['commission'])
            ws[f'C{row}'].alignment = Alignment(horizontal='right')
            ws[f'D{row}'].alignment = Alignment(horizontal='center')
            ws[f'E{row}'].alignment = Alignment(horizontal='right')
            row += 1

    logger.info(f"Rendered commission report {report.id} to xlsx ({len(properties)} properties)")
    return _workbook_bytes(wb)


def export_daily_report_to_excel(report) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = 'Operations Daily Report'
    ws.column_dimensions['A'].width = 40
    ws.column_dimensions['B'].width = 30

    _xlsx_title(
        ws, DAILY_TITLE,
        f"{report.operations_name} | {format_display_date(report.report_date)}", 'B'
    )

    row = 4
    sections = (
        ('Calculated Fields', HEADER_BLUE, _daily_calculated_rows(report)),
        ('Manual Fields', HEADER_GREEN, _daily_manual_rows(report)),
    )
    for title, color, rows in sections:
        _xlsx_section_header(ws, row, title, 'B', color)
        row += 1
        for label, value in rows:
            ws[f'A{row}'] = label
            ws[f'A{row}'].font = Font(bold=True)
            ws[f'B{row}'] = value
            if _is_negative(value):
                ws[f'B{row}'].font = Font(color=NEGATIVE_RED)
            row += 1
        row += 1

    logger.info(f"Rendered daily report {report.id} to xlsx")
    return _workbook_bytes(wb)


# =============================================================================
# PDF
# =============================================================================

def _pdf_styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'ReportTitle', parent=styles['Heading1'], alignment=TA_CENTER,
            textColor=colors.HexColor(f'#{HEADER_BLUE}'), fontSize=22, leading=26
        ),
        'subtitle': ParagraphStyle(
            'ReportSubtitle', parent=styles['Normal'], alignment=TA_CENTER,
            textColor=colors.HexColor('#666666'), fontName='Helvetica-Oblique', fontSize=12
        ),
        'footer': ParagraphStyle(
            'ReportFooter', parent=styles['Normal'], alignment=TA_CENTER,
            textColor=colors.HexColor('#999999'), fontName='Helvetica-Oblique', fontSize=8
        ),
        'empty': styles['Normal'],
    }


def _pdf_section(title: str, rows: List[Sequence[Any]], color: str, highlight_last: bool = False) -> Table:
    data = [[title, '']] + [[f'{label}:', str(value)] for label, value in rows]
    table = Table(data, colWidths=[4.0 * inch, 2.9 * inch])

    style = [
        ('SPAN', (0, 0), (-1, 0)),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{color}')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 13),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 1), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (1, 1), (1, -1), 'Helvetica'),
        ('ALIGN', (1, 1), (1, -1), 'RIGHT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, 1), (-1, -1), 0.25, colors.HexColor(f'#{TABLE_GREY}')),
    ]
    for index, (_, value) in enumerate(rows, start=1):
        if _is_negative(value):
            style.append(('TEXTCOLOR', (1, index), (1, index), colors.HexColor(f'#{NEGATIVE_RED}')))
    if highlight_last and rows:
        style.extend([
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor(f'#{TOTAL_YELLOW}')),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ])

    table.setStyle(TableStyle(style))
    return table


def _pdf_bytes(elements: list, title: str) -> bytes:
    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output, pagesize=letter, title=title,
        leftMargin=0.7 * inch, rightMargin=0.7 * inch,
        topMargin=0.7 * inch, bottomMargin=0.7 * inch
    )
    doc.build(elements)
    output.seek(0)
    return output.getvalue()


def _generated_on(styles) -> Paragraph:
    stamp = timezone.now().strftime('%b %d, %Y %H:%M UTC')
    return Paragraph(f'Generated on {stamp}', styles['footer'])


def export_commission_report_to_pdf(report, properties: List[Dict[str, Any]]) -> bytes:
    styles = _pdf_styles()
    elements = [
        Paragraph(COMMISSION_TITLE, styles['title']),
        Paragraph(_commission_period(report), styles['subtitle']),
        Spacer(1, 18),
        _pdf_section('Summary', _commission_summary_rows(report), HEADER_BLUE, highlight_last=True),
        Spacer(1, 18),
    ]

    if properties:
        percentage = format_percentage(report.commission_percentage)
        data = [['Reference', 'Type', 'Price', 'Commission %', 'Commission Amount']]
        for prop in properties:
            data.append([
                prop['reference_number'],
                property_type_label(prop['property_type']),
                format_currency(prop['price']),
                percentage,
                format_currency(prop['commission']),
            ])

        details = Table(data, repeatRows=1)
        details.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{HEADER_BLUE}')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (2, 1), (2, -1), 'RIGHT'),
            ('ALIGN', (3, 1), (3, -1), 'CENTER'),
            ('ALIGN', (4, 1), (4, -1), 'RIGHT'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F9FAFB')]),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor(f'#{TABLE_GREY}')),
        ]))
        elements.extend([Paragraph('Property Details', getSampleStyleSheet()['Heading2']), details])

    elements.extend([Spacer(1, 24), _generated_on(styles)])

    pdf = _pdf_bytes(elements, COMMISSION_TITLE)
    logger.info(f"Rendered commission report {report.id} to pdf ({len(properties)} properties)")
    return pdf


def export_daily_report_to_pdf(report) -> bytes:
    styles = _pdf_styles()
    elements = [
        Paragraph(DAILY_TITLE, styles['title']),
        Paragraph(
            escape(f"{report.operations_name} | {parse_day(report.report_date).strftime('%B %d, %Y')}"),
            styles['subtitle']
        ),
        Spacer(1, 18),
        _pdf_section('Calculated Fields', _daily_calculated_rows(report), HEADER_BLUE),
        Spacer(1, 14),
        _pdf_section('Manual Fields', _daily_manual_rows(report), HEADER_GREEN),
        Spacer(1, 24),
        _generated_on(styles),
    ]

    pdf = _pdf_bytes(elements, DAILY_TITLE)
    logger.info(f"Rendered daily report {report.id} to pdf")
    return pdf
