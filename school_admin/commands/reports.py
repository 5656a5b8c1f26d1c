from pathlib import Path
from typing import Optional

import click

from school_admin.reports import (
    ReportDocument,
    build_class_list,
    build_grade_report,
    build_school_report,
    build_student_transcript,
)
from school_admin.repository import SchoolRepository
from school_admin.utils.pdf_generator import ReportPDFGenerator


def _render(document: Optional[ReportDocument], output_dir: Path, missing: str) -> Optional[str]:
    if document is None:
        click.secho(missing, fg="red")
        return None
    path = ReportPDFGenerator.render(document, output_dir)
    if path is None:
        click.secho(f"Failed to generate {document.title}", fg="red")
        return None
    click.secho(f"Report written to: {path}", fg="green")
    return path


def generate_transcript(repo: SchoolRepository, student_id: str, output_dir: Path) -> Optional[str]:
    return _render(build_student_transcript(repo, student_id), output_dir, f"Student {student_id} not found")


def generate_class_list(repo: SchoolRepository, class_id: str, output_dir: Path) -> Optional[str]:
    return _render(build_class_list(repo, class_id), output_dir, f"Class {class_id} not found")


def generate_grade_report(repo: SchoolRepository, class_id: str, output_dir: Path) -> Optional[str]:
    return _render(build_grade_report(repo, class_id), output_dir, f"Class {class_id} not found")


def generate_school_report(repo: SchoolRepository, output_dir: Path) -> Optional[str]:
    return _render(build_school_report(repo), output_dir, "")
