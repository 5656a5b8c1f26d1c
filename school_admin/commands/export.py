import os
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import click
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from school_admin.repository import SchoolRepository

HEADERS = ["Student Name", "Student No", "Assignment", "Type", "Marks", "Max Marks", "Percentage", "Grade", "Graded At"]


def _sheet_title(name: str, existing: List[str]) -> str:
    # Excel caps sheet titles at 31 characters and forbids a few symbols
    safe = "".join("_" if ch in "[]:*?/\\" else ch for ch in name)[:31] or "Sheet"
    if safe in existing:
        safe = f"{safe[:28]}_{len(existing)}"
    return safe


def export_grades(repo: SchoolRepository, output_dir: Path, class_id: Optional[str] = None) -> Optional[str]:
    """Export grades to Excel with one sheet per class."""
    classes = repo.get_classes()
    if class_id:
        classes = [c for c in classes if c.id == class_id]
        if not classes:
            click.secho(f"Class {class_id} not found", fg="red")
            return None

    class_rows: Dict[str, List[list]] = defaultdict(list)
    for school_class in classes:
        for assignment in repo.get_assignments_by_class(school_class.id):
            for grade in repo.get_grades_by_assignment(assignment.id):
                student = repo.get_student_by_id(grade.student_id)
                class_rows[school_class.name].append(
                    [
                        student.full_name if student else "Unknown",
                        student.student_id if student else "",
                        assignment.title,
                        assignment.type,
                        grade.marks_obtained,
                        grade.max_marks,
                        grade.percentage,
                        grade.letter,
                        grade.graded_at.strftime("%Y-%m-%d"),
                    ]
                )

    if not class_rows:
        click.secho("No grades found.", fg="yellow")
        return None

    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    excel_path = os.path.join(output_dir, f"grades_{timestamp}.xlsx")

    wb = Workbook()
    if wb.active:
        wb.remove(wb.active)

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")

    for class_name in sorted(class_rows):
        rows = sorted(class_rows[class_name], key=lambda r: (r[0], r[2]))
        ws = wb.create_sheet(title=_sheet_title(class_name, [s.title for s in wb.worksheets]))

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill

        for row_index, row in enumerate(rows, 2):
            for col, value in enumerate(row, 1):
                ws.cell(row=row_index, column=col, value=value)

        for col in range(1, len(HEADERS) + 1):
            column_letter = get_column_letter(col)
            max_length = max(len(str(cell.value)) for cell in ws[column_letter] if cell.value is not None)
            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    wb.save(excel_path)

    total = sum(len(rows) for rows in class_rows.values())
    click.secho(f"Successfully exported grades to: {excel_path}", fg="green")
    click.echo(f"\nSummary:")
    click.echo(f"- Classes: {len(class_rows)}")
    click.echo(f"- Grades: {total}")
    return excel_path
