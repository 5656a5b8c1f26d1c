import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from school_admin.config import SCHOOL_NAME
from school_admin.reports import ReportDocument, ReportTable

logger = logging.getLogger(__name__)

CONTENT_WIDTH = 6.5 * inch


class ReportPDFGenerator:
    """Lays out ReportDocuments as PDF files"""

    BRAND_PRIMARY = colors.HexColor("#212121")
    BRAND_GRAY = colors.HexColor("#333333")

    @staticmethod
    def render(document: ReportDocument, output_dir: Path) -> Optional[str]:
        """Write a report to ``output_dir``

        Args:
            document: The report content
            output_dir: Directory for the generated file

        Returns:
            str: Path to the generated PDF file, or None if generation failed
        """
        try:
            os.makedirs(output_dir, exist_ok=True)
            generated_at = datetime.now()
            timestamp = generated_at.strftime("%Y%m%d_%H%M%S")
            pdf_path = os.path.join(output_dir, f"{document.filename}_{timestamp}.pdf")

            styles = ReportPDFGenerator._create_styles()

            doc = SimpleDocTemplate(
                pdf_path,
                pagesize=A4,
                rightMargin=0.75 * inch,
                leftMargin=0.75 * inch,
                topMargin=0.5 * inch,
                bottomMargin=0.5 * inch,
                title=document.title,
                author=SCHOOL_NAME,
            )

            elements: List[Any] = []
            elements.extend(ReportPDFGenerator._build_header(document.title, generated_at, styles))
            elements.extend(ReportPDFGenerator._build_info(document, styles))
            for table in document.tables:
                elements.extend(ReportPDFGenerator._build_table(table, styles))
            elements.extend(ReportPDFGenerator._build_footer(document.filename, generated_at, styles))

            doc.build(elements)

            logger.info(f"Generated report PDF: {pdf_path}")
            return pdf_path

        except Exception as e:
            logger.error(f"Failed to generate report PDF '{document.title}': {str(e)}")
            return None

    @staticmethod
    def _create_styles() -> Dict[str, ParagraphStyle]:
        return {
            "title": ParagraphStyle(
                "Title",
                fontSize=18,
                fontName="Helvetica-Bold",
                textColor=ReportPDFGenerator.BRAND_PRIMARY,
                leading=22,
                spaceAfter=6,
            ),
            "subtitle": ParagraphStyle(
                "Subtitle",
                fontSize=13,
                fontName="Helvetica",
                textColor=ReportPDFGenerator.BRAND_GRAY,
                leading=16,
                spaceAfter=4,
            ),
            "normal": ParagraphStyle("Normal", fontSize=9, fontName="Helvetica", leading=11),
            "small": ParagraphStyle(
                "Small",
                fontSize=7,
                fontName="Helvetica",
                leading=9,
                textColor=ReportPDFGenerator.BRAND_GRAY,
            ),
            "section_header": ParagraphStyle(
                "SectionHeader",
                fontSize=11,
                fontName="Helvetica-Bold",
                spaceAfter=8,
                textColor=ReportPDFGenerator.BRAND_PRIMARY,
                leading=13,
            ),
            "data_label": ParagraphStyle(
                "DataLabel",
                fontSize=9,
                fontName="Helvetica-Bold",
                textColor=ReportPDFGenerator.BRAND_GRAY,
            ),
            "data_value": ParagraphStyle("DataValue", fontSize=9, fontName="Helvetica"),
        }

    @staticmethod
    def _build_header(title: str, generated_at: datetime, styles: Dict[str, ParagraphStyle]) -> List[Any]:
        return [
            Paragraph(escape(SCHOOL_NAME), styles["title"]),
            Paragraph(escape(title), styles["subtitle"]),
            Paragraph(f"Generated on: {generated_at.strftime('%d %B %Y')}", styles["small"]),
            HRFlowable(
                width="100%",
                thickness=2,
                color=ReportPDFGenerator.BRAND_PRIMARY,
                spaceBefore=8,
                spaceAfter=16,
            ),
        ]

    @staticmethod
    def _build_info(document: ReportDocument, styles: Dict[str, ParagraphStyle]) -> List[Any]:
        elements: List[Any] = [Paragraph(escape(document.info_heading), styles["section_header"])]
        if not document.info:
            return elements

        rows = [
            [
                Paragraph(f"{escape(label)}:", styles["data_label"]),
                Paragraph(escape(value), styles["data_value"]),
            ]
            for label, value in document.info
        ]
        elements.append(
            Table(
                rows,
                colWidths=[1.5 * inch, CONTENT_WIDTH - 1.5 * inch],
                style=TableStyle(
                    [
                        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                        ("TOPPADDING", (0, 0), (-1, -1), 6),
                        ("LEFTPADDING", (0, 0), (-1, -1), 10),
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                        ("LINEBELOW", (0, -1), (-1, -1), 1, ReportPDFGenerator.BRAND_PRIMARY),
                    ]
                ),
            )
        )
        elements.append(Spacer(1, 0.3 * inch))
        return elements

    @staticmethod
    def _build_table(table: ReportTable, styles: Dict[str, ParagraphStyle]) -> List[Any]:
        header_style = ParagraphStyle("HeaderStyle", parent=styles["data_label"], textColor=colors.white)

        data = [[Paragraph(escape(h), header_style) for h in table.headers]]
        for row in table.rows:
            data.append([Paragraph(escape(cell), styles["normal"]) for cell in row])

        col_width = CONTENT_WIDTH / max(len(table.headers), 1)
        return [
            Paragraph(escape(table.heading), styles["section_header"]),
            Table(
                data,
                colWidths=[col_width] * len(table.headers),
                repeatRows=1,
                style=TableStyle(
                    [
                        ("BACKGROUND", (0, 0), (-1, 0), ReportPDFGenerator.BRAND_PRIMARY),
                        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                        ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
                        ("TOPPADDING", (0, 0), (-1, -1), 6),
                        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                    ]
                ),
            ),
            Spacer(1, 0.3 * inch),
        ]

    @staticmethod
    def _build_footer(doc_id: str, generated_at: datetime, styles: Dict[str, ParagraphStyle]) -> List[Any]:
        footer_text = (
            f"<b>Document ID:</b> {escape(doc_id)} | "
            f"Generated by the {escape(SCHOOL_NAME)} administration system on "
            f"<b>{generated_at.strftime('%d %B %Y')}</b>."
        )
        return [
            HRFlowable(
                width="100%",
                thickness=1,
                color=ReportPDFGenerator.BRAND_PRIMARY,
                spaceBefore=8,
                spaceAfter=8,
            ),
            Paragraph(footer_text, styles["small"]),
        ]
