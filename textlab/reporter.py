"""
Report Writer Module.

Collects the tables and charts of a run into report.html and report.txt.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from pathlib import Path

import pandas as pd

logger = logging.getLogger("textlab.reporter")

# Rows shown per table; the full frames are only kept in memory
MAX_TABLE_ROWS = 25


@dataclass
class ReportSection:
    """One analysis section of the report."""
    title: str
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)
    charts: list[Path] = field(default_factory=list)
    notes: str = ""


class ReportWriter:
    """
    Renders report sections as an HTML page and a plain-text file.
    """

    def __init__(self, output_dir: str | Path, title: str = "Text Analysis Report"):
        """
        Initialize the report writer.

        Args:
            output_dir: Directory the report files go to. Chart paths are
                linked relative to it.
            title: Report heading.
        """
        self.output_dir = Path(output_dir)
        self.title = title
        logger.info(f"ReportWriter initialized for {self.output_dir}")

    def _relative(self, chart: Path) -> str:
        try:
            return Path(os.path.relpath(chart, self.output_dir)).as_posix()
        except ValueError:
            return Path(chart).as_posix()

    def _generate_html_report(self, sections: list[ReportSection], document_count: int) -> str:
        """
        Generate a plain, print-friendly HTML page.

        Args:
            sections: Sections in display order.
            document_count: Number of documents analyzed.

        Returns:
            HTML document.
        """
        today = datetime.now().strftime("%B %d, %Y")
        body_parts = []

        for section in sections:
            parts = [f'<h2 style="border-bottom: 1px solid #000; padding-bottom: 6px;">{escape(section.title)}</h2>']
            if section.notes:
                parts.append(f'<p style="color: #444;">{escape(section.notes)}</p>')
            for name, table in section.tables.items():
                parts.append(f'<h3 style="font-family: monospace; font-size: 13px; text-transform: uppercase;">{escape(name)}</h3>')
                parts.append(
                    table.head(MAX_TABLE_ROWS).to_html(
                        index=False, float_format=lambda v: f"{v:.4g}", border=0, classes="table"
                    )
                )
            for chart in section.charts:
                src = escape(self._relative(chart))
                parts.append(f'<img src="{src}" alt="{escape(Path(chart).stem)}" style="max-width: 100%; margin: 12px 0;">')
            body_parts.append("\n".join(parts))

        body = "\n".join(body_parts)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{escape(self.title)} - {today}</title>
    <style>
        .table {{ border-collapse: collapse; font-family: monospace; font-size: 12px; }}
        .table th, .table td {{ border-bottom: 1px solid #ddd; padding: 4px 10px; text-align: right; }}
    </style>
</head>
<body style="font-family: 'Helvetica Neue', Helvetica, Arial, sans-serif; color: #111; line-height: 1.5; margin: 0; padding: 40px 20px; background-color: #f6f6f6;">
    <div style="max-width: 900px; margin: 0 auto; border: 1px solid #000; background-color: #fff; padding: 30px 40px;">
        <div style="font-family: monospace; font-size: 13px; letter-spacing: 2px; text-transform: uppercase; opacity: 0.7;">
            {today} | {document_count} documents
        </div>
        <h1 style="margin-top: 8px;">{escape(self.title)}</h1>
{body}
    </div>
</body>
</html>
"""

    def _generate_plain_text(self, sections: list[ReportSection], document_count: int) -> str:
        """
        Generate a plain text version of the report.

        Args:
            sections: Sections in display order.
            document_count: Number of documents analyzed.

        Returns:
            Plain text report.
        """
        today = datetime.now().strftime("%B %d, %Y")
        rule = "-" * 80
        lines = [self.title.upper(), f"{today} - {document_count} documents", rule]

        for section in sections:
            lines.append("")
            lines.append(section.title.upper())
            if section.notes:
                lines.append(section.notes)
            for name, table in section.tables.items():
                lines.append("")
                lines.append(f"[{name}]")
                lines.append(table.head(MAX_TABLE_ROWS).to_string(index=False))
            for chart in section.charts:
                lines.append(f"chart: {self._relative(chart)}")
            lines.append(rule)

        return "\n".join(lines) + "\n"

    def write(self, sections: list[ReportSection], document_count: int = 0) -> tuple[Path, Path]:
        """
        Write report.html and report.txt.

        Returns:
            Paths of the HTML and text reports.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        html_path = self.output_dir / "report.html"
        text_path = self.output_dir / "report.txt"

        html_path.write_text(self._generate_html_report(sections, document_count), encoding="utf-8")
        text_path.write_text(self._generate_plain_text(sections, document_count), encoding="utf-8")

        logger.info(f"Report written: {html_path} ({len(sections)} sections)")
        return html_path, text_path
