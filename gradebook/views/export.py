import openpyxl
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse

from .base import teacher_or_admin_required, json_action, get_class_term, check_can_view
from .. import config
from ..utils import compile_class_term


def _subject_cell(entry):
    """Score for graded subjects, otherwise the remark (Absent, Exempt, Not Taken)."""
    if entry['score'] is None:
        return entry['remark']
    return float(entry['score'])


def build_broadsheet(class_term, compiled):
    """Workbook with one row per student in rank order and one column per subject."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Broadsheet"

    # Styles
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color=config.EXCEL_HEADER_COLOR, end_color=config.EXCEL_HEADER_COLOR, fill_type="solid")
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws.cell(row=1, column=1, value=f"{class_term.class_assigned.name} - {class_term.term}").font = Font(bold=True, size=14)

    allocations = compiled['allocations']
    headers = ["Position", "Admission No", "Student Name"]
    headers += [a.subject.short_name or a.subject.name for a in allocations]
    headers += ["Total", "Average", "Grade", "Remark"]

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=3, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', wrap_text=True)
        cell.border = thin_border

    students = compiled['students']
    for row, result in enumerate(compiled['results'], 4):
        student = students[result.student_id]
        values = [result.position, student.admission_number, f"{student.last_name}, {student.first_name}"]
        values += [_subject_cell(result.subjects[a.subject_id]) for a in allocations]
        values += [
            float(result.total_score),
            float(result.display_average),
            result.grade.grade if result.grade else None,
            result.grade.remark if result.grade else None,
        ]
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = thin_border
            if col != 3:
                cell.alignment = Alignment(horizontal='center')

    # Adjust column widths
    ws.column_dimensions['A'].width = 10
    ws.column_dimensions['B'].width = 16
    ws.column_dimensions['C'].width = 28
    for col in range(4, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 12
    ws.freeze_panes = 'D4'
    return wb


@login_required
@teacher_or_admin_required
@json_action
def results_export(request, class_term_id):
    """Download a class term's ranked results as an Excel broadsheet."""
    class_term = get_class_term(class_term_id)
    check_can_view(request.user, class_term)
    wb = build_broadsheet(class_term, compile_class_term(class_term))

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"results_{class_term.class_assigned.name}_{class_term.term.name}.xlsx".replace(' ', '_')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    wb.save(response)
    return response
