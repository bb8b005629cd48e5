# apps/reports/views.py

import csv
import logging
from io import BytesIO
from xml.sax.saxutils import escape

import xlsxwriter
from django.http import HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_GET
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from apps.core.permissions import requires_auth, requires_project_access, requires_sprint_access
from apps.core.utils import json_response

from .utils import (
    TASK_COLUMNS,
    calculate_velocity,
    format_ideal,
    sprint_burndown,
    sprint_summary_rows,
    sprint_task_rows,
)

logger = logging.getLogger(__name__)


def _report_filename(sprint, extension):
    name = f"{sprint.project.key}_{sprint.name}".replace(' ', '_')
    return f"sprint_{name}.{extension}"


@require_GET
@requires_auth
@requires_sprint_access
def burndown_view(request, sprint_id):
    """Burndown series of a sprint"""
    sprint = request.sprint
    data = sprint_burndown(sprint)
    data['sprint'] = {
        'id': sprint.pk,
        'name': sprint.name,
        'start_date': sprint.start_date.isoformat(),
        'end_date': sprint.end_date.isoformat(),
        'status': sprint.status,
    }
    return json_response(data)


@require_GET
@requires_auth
@requires_project_access
def velocity_view(request, project_id):
    return json_response(calculate_velocity(request.project))


@require_GET
@requires_auth
@requires_sprint_access
def sprint_report_csv(request, sprint_id):
    """
    Sprint report as CSV
    Summary, burndown and task sections separated by blank lines
    """
    sprint = request.sprint
    burndown = sprint_burndown(sprint)

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{_report_filename(sprint, "csv")}"'
    response.write('\ufeff')  # BOM for spreadsheet apps

    writer = csv.writer(response)

    writer.writerow(['Sprint report'])
    for row in sprint_summary_rows(sprint, burndown):
        writer.writerow(row)

    writer.writerow([])
    writer.writerow(['Date', 'Remaining', 'Ideal'])
    for day in burndown['daily_progress']:
        writer.writerow([day['date'], day['remaining'], format_ideal(day['ideal'])])

    writer.writerow([])
    writer.writerow(TASK_COLUMNS)
    for row in sprint_task_rows(sprint):
        writer.writerow(row)

    logger.info(f"CSV report generated for sprint {sprint.pk} by {request.user.email}")
    return response


@require_GET
@requires_auth
@requires_sprint_access
def sprint_report_pdf(request, sprint_id):
    """Sprint report as PDF"""
    sprint = request.sprint
    burndown = sprint_burndown(sprint)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{_report_filename(sprint, "pdf")}"'

    doc = SimpleDocTemplate(response, pagesize=landscape(A4))
    story = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=20,
        spaceAfter=20,
        textColor=colors.darkblue
    )
    heading_style = ParagraphStyle(
        'ReportHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceAfter=12,
        textColor=colors.darkblue
    )
    cell_style = styles['BodyText']

    story.append(Paragraph(f"Sprint report: {escape(sprint.name)}", title_style))
    story.append(Paragraph(f"Generated at {timezone.now().strftime('%Y-%m-%d %H:%M')}", styles['Normal']))
    story.append(Spacer(1, 20))

    # Summary
    story.append(Paragraph("Summary", heading_style))
    summary_data = [['Field', 'Value']] + [
        [label, Paragraph(escape(str(value)), cell_style)]
        for label, value in sprint_summary_rows(sprint, burndown)
    ]
    summary_table = Table(summary_data, colWidths=[150, 450])
    summary_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('GRID', (0, 0), (-1, -1), 1, colors.black)
    ]))
    story.append(summary_table)
    story.append(Spacer(1, 20))

    # Burndown
    story.append(Paragraph("Burndown", heading_style))
    if burndown['daily_progress']:
        burndown_data = [['Date', 'Remaining', 'Ideal']] + [
            [day['date'], str(day['remaining']), format_ideal(day['ideal'])]
            for day in burndown['daily_progress']
        ]
        burndown_table = Table(burndown_data)
        burndown_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.darkblue),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black)
        ]))
        story.append(burndown_table)
    else:
        story.append(Paragraph("The sprint has not started yet.", styles['Normal']))
    story.append(Spacer(1, 20))

    # Tasks
    story.append(Paragraph("Tasks", heading_style))
    task_rows = sprint_task_rows(sprint)
    if task_rows:
        task_data = [TASK_COLUMNS] + [
            [Paragraph(escape(str(value)), cell_style) for value in row]
            for row in task_rows
        ]
        task_table = Table(task_data, repeatRows=1)
        task_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.black)
        ]))
        story.append(task_table)
    else:
        story.append(Paragraph("No tasks in this sprint.", styles['Normal']))

    doc.build(story)
    logger.info(f"PDF report generated for sprint {sprint.pk} by {request.user.email}")
    return response


@require_GET
@requires_auth
@requires_sprint_access
def sprint_report_excel(request, sprint_id):
    """
    Sprint report as XLSX
    One sheet each for summary, burndown and tasks
    """
    sprint = request.sprint
    burndown = sprint_burndown(sprint)

    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    header_format = workbook.add_format({
        'bold': True,
        'font_color': 'white',
        'bg_color': '#366092',
        'border': 1
    })
    cell_format = workbook.add_format({'border': 1})
    number_format = workbook.add_format({'num_format': '0.0', 'border': 1})

    summary_sheet = workbook.add_worksheet('Summary')
    summary_sheet.write('A1', 'SPRINT REPORT', header_format)
    for index, (label, value) in enumerate(sprint_summary_rows(sprint, burndown), start=2):
        summary_sheet.write(index, 0, label, header_format)
        summary_sheet.write(index, 1, value, cell_format)
    summary_sheet.set_column('A:A', 20)
    summary_sheet.set_column('B:B', 50)

    burndown_sheet = workbook.add_worksheet('Burndown')
    for col, title in enumerate(['Date', 'Remaining', 'Ideal']):
        burndown_sheet.write(0, col, title, header_format)
    for row, day in enumerate(burndown['daily_progress'], start=1):
        burndown_sheet.write(row, 0, day['date'], cell_format)
        burndown_sheet.write_number(row, 1, day['remaining'], cell_format)
        burndown_sheet.write_number(row, 2, day['ideal'], number_format)
    burndown_sheet.set_column('A:C', 15)

    if burndown['daily_progress']:
        chart = workbook.add_chart({'type': 'line'})
        last_row = len(burndown['daily_progress'])
        chart.add_series({
            'name': 'Remaining',
            'categories': ['Burndown', 1, 0, last_row, 0],
            'values': ['Burndown', 1, 1, last_row, 1],
        })
        chart.add_series({
            'name': 'Ideal',
            'categories': ['Burndown', 1, 0, last_row, 0],
            'values': ['Burndown', 1, 2, last_row, 2],
            'line': {'dash_type': 'dash'},
        })
        chart.set_title({'name': 'Burndown'})
        burndown_sheet.insert_chart('E2', chart)

    tasks_sheet = workbook.add_worksheet('Tasks')
    for col, title in enumerate(TASK_COLUMNS):
        tasks_sheet.write(0, col, title, header_format)
    for row, values in enumerate(sprint_task_rows(sprint), start=1):
        for col, value in enumerate(values):
            tasks_sheet.write(row, col, value, cell_format)
    tasks_sheet.set_column('A:H', 15)
    tasks_sheet.set_column('B:B', 40)

    workbook.close()
    output.seek(0)

    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{_report_filename(sprint, "xlsx")}"'

    logger.info(f"Excel report generated for sprint {sprint.pk} by {request.user.email}")
    return response
