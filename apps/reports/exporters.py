"""
File exports of property and company records.

Each renderer takes already formatted rows and returns the file content as
bytes; ``export_properties`` picks the renderer for a format and names the
file.

Example::

    from apps.reports.exporters import export_properties

    export = export_properties(user=user, queryset=properties, export_format='pdf')
    response = HttpResponse(export.content, content_type=export.content_type)
"""

import csv
import io
import logging
from collections import namedtuple
from xml.sax.saxutils import escape

import xlsxwriter
from django.db.models import Prefetch
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from apps.analytics.analytics import AnalyticsQueries
from apps.companies.models import MonthlyFee
from apps.companies.services import fee_totals
from apps.core.formatting import format_cpf, format_cnpj, format_phone, format_currency, format_date
from .exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)


DEFAULT_PDF_TITLE = 'Relatório de Imóveis Rurais'
PROPERTIES_FILENAME = 'imoveis-rurais'
PROPERTIES_SHEET = 'Imóveis Rurais'
STATISTICS_SHEET = 'Estatísticas'

PROPERTY_HEADERS = [
    'ID', 'Proprietário', 'Sítio/Fazenda', 'CPF', 'Telefone', 'Endereço',
    'CCIR', 'ITR', 'Valor', 'Status', 'Data Vencimento', 'Data Pagamento',
]

COMPANY_HEADERS = [
    'ID', 'Empresa', 'CNPJ', 'Regime', 'E-mail', 'Telefone', 'Contato',
    'Dia do Boleto', 'Valor Mensal', 'Ativa', 'Pago', 'Pendente', 'Atrasado',
]

CONTENT_TYPES = {
    'csv': 'text/csv; charset=utf-8',
    'pdf': 'application/pdf',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

ExportFile = namedtuple('ExportFile', ['content', 'content_type', 'filename'])


def property_row(prop):
    """One property as export cells, in PROPERTY_HEADERS order."""
    return [
        str(prop.id),
        prop.owner_name,
        prop.farm_name,
        format_cpf(prop.cpf),
        format_phone(prop.phone),
        prop.address,
        prop.ccir,
        prop.itr,
        format_currency(prop.amount),
        prop.get_payment_status_display(),
        format_date(prop.due_date),
        format_date(prop.payment_date),
    ]


def company_row(company, totals):
    return [
        str(company.id),
        company.name,
        format_cnpj(company.cnpj),
        company.get_regime_type_display(),
        company.payer_email,
        format_phone(company.payer_phone),
        company.contact_person,
        company.boleto_day,
        format_currency(company.boleto_amount),
        'Sim' if company.is_active else 'Não',
        format_currency(totals['paid']),
        format_currency(totals['pending']),
        format_currency(totals['overdue']),
    ]


def statistics_rows(stats):
    """Label/value pairs of the statistics block."""
    return [
        ('Total de Imóveis', stats['total']),
        ('Imóveis Pagos', stats['paid']),
        ('Imóveis Pendentes', stats['pending']),
        ('Imóveis Atrasados', stats['overdue']),
        ('Valor Total', format_currency(stats['total_amount'])),
        ('Valor Pendente', format_currency(stats['pending_amount'])),
        ('Taxa de Pagamento', f"{stats['payment_rate']:.1f}%"),
    ]


# =============================================================================
# Renderers
# =============================================================================

def render_csv(headers, rows) -> bytes:
    """UTF-8 CSV with a BOM so spreadsheet tools detect the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().encode('utf-8-sig')


def render_pdf(headers, rows, title=DEFAULT_PDF_TITLE, generated_at=None) -> bytes:
    """Landscape A4 document: title, generation timestamp and one table."""
    generated_at = generated_at or timezone.localtime()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=1 * cm,
        rightMargin=1 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        spaceAfter=12,
        textColor=colors.darkblue
    )
    cell_style = ParagraphStyle('ReportCell', parent=styles['Normal'], fontSize=7, leading=9)

    story = [
        Paragraph(escape(title), title_style),
        Paragraph(f"Gerado em: {generated_at.strftime('%d/%m/%Y %H:%M')}", styles['Normal']),
        Spacer(1, 12),
    ]

    data = [headers] + [
        [Paragraph(escape(str(cell)), cell_style) for cell in row]
        for row in rows
    ]
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#366092')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 8),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f2f2f2')]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.append(table)

    if not rows:
        story.append(Spacer(1, 12))
        story.append(Paragraph('Nenhum registro encontrado.', styles['Normal']))

    doc.build(story)
    return buffer.getvalue()


def render_xlsx(headers, rows, statistics=None) -> bytes:
    """Workbook with the records sheet and, when given, a statistics sheet."""
    output = io.BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    header_format = workbook.add_format({
        'bold': True,
        'font_color': 'white',
        'bg_color': '#366092',
        'border': 1
    })
    cell_format = workbook.add_format({'border': 1})
    label_format = workbook.add_format({'bold': True, 'border': 1})

    sheet = workbook.add_worksheet(PROPERTIES_SHEET)
    for col, header in enumerate(headers):
        sheet.write(0, col, header, header_format)
    for row_index, row in enumerate(rows, start=1):
        for col, value in enumerate(row):
            sheet.write(row_index, col, value, cell_format)
    sheet.set_column(0, 0, 8)
    sheet.set_column(1, len(headers) - 1, 18)
    sheet.freeze_panes(1, 0)

    if statistics is not None:
        stats_sheet = workbook.add_worksheet(STATISTICS_SHEET)
        stats_sheet.write(0, 0, 'Métrica', header_format)
        stats_sheet.write(0, 1, 'Valor', header_format)
        for row_index, (label, value) in enumerate(statistics_rows(statistics), start=1):
            stats_sheet.write(row_index, 0, label, label_format)
            stats_sheet.write(row_index, 1, value, cell_format)
        stats_sheet.set_column(0, 1, 22)

    workbook.close()
    return output.getvalue()


# =============================================================================
# Exports
# =============================================================================

PROPERTY_FORMATS = ('csv', 'pdf', 'xlsx')
COMPANY_FORMATS = ('csv',)


def _filename(base, extension, today=None):
    today = today or timezone.localdate()
    return f"{base}-{today.isoformat()}.{extension}"


def export_properties(*, user, queryset, export_format, title=None) -> ExportFile:
    """
    Render a user's (filtered) properties as CSV, PDF or XLSX.

    Raises:
        UnsupportedFormatError: If ``export_format`` is not csv, pdf or xlsx.
    """
    export_format = (export_format or '').lower()
    if export_format not in PROPERTY_FORMATS:
        raise UnsupportedFormatError(export_format, PROPERTY_FORMATS)

    properties = queryset.order_by('owner_name', 'id')
    rows = [property_row(prop) for prop in properties]

    if export_format == 'csv':
        content = render_csv(PROPERTY_HEADERS, rows)
    elif export_format == 'pdf':
        content = render_pdf(PROPERTY_HEADERS, rows, title=title or DEFAULT_PDF_TITLE)
    else:
        statistics = AnalyticsQueries.property_statistics(user, queryset=queryset)
        content = render_xlsx(PROPERTY_HEADERS, rows, statistics=statistics)

    logger.info(
        "Exported %d properties as %s for user %s",
        len(rows), export_format, user.id
    )
    return ExportFile(
        content=content,
        content_type=CONTENT_TYPES[export_format],
        filename=_filename(PROPERTIES_FILENAME, export_format),
    )


def export_companies(*, user, companies, export_format='csv', year=None) -> ExportFile:
    """
    Render companies with their paid/pending/overdue fee totals for a year.

    Raises:
        UnsupportedFormatError: For any format other than csv.
    """
    export_format = (export_format or '').lower()
    if export_format not in COMPANY_FORMATS:
        raise UnsupportedFormatError(export_format, COMPANY_FORMATS)

    today = timezone.localdate()
    year = year or today.year
    companies = companies.prefetch_related(
        Prefetch('monthly_fees', queryset=MonthlyFee.objects.filter(year=year), to_attr='year_fees')
    ).order_by('name')

    rows = [
        company_row(company, fee_totals(company.year_fees, today))
        for company in companies
    ]
    headers = COMPANY_HEADERS[:-3] + [f'{label} {year}' for label in COMPANY_HEADERS[-3:]]

    logger.info("Exported %d companies for user %s", len(rows), user.id)
    return ExportFile(
        content=render_csv(headers, rows),
        content_type=CONTENT_TYPES[export_format],
        filename=_filename('empresas', export_format),
    )
