# File: csp_scout/report/__init__.py
"""csp_scout.report: Генерация отчётов (JSON, CSV, HTML), используемая CLI и тестами."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from csp_scout.aggregator import CspReport
from csp_scout.report.csv_report import render_domain_csv, render_pages_csv
from csp_scout.report.html_report import render_html

JSON_NAME = "csp_report.json"
DOMAIN_CSV_NAME = "csp_domain_summary.csv"
PAGES_CSV_NAME = "csp_page_findings.csv"
HTML_NAME = "csp_report.html"


def render_json(report: CspReport, output_path: Union[str, Path]) -> Path:
    """Сохраняет отчёт в JSON (UTF-8, отступ 2)."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=True), encoding="utf-8")
    return output


def write_reports(
    report: CspReport,
    out_dir: Union[str, Path],
    *,
    html: bool = False,
    template_dir: Union[str, Path, None] = None,
) -> List[Path]:
    """Создаёт *out_dir* и сохраняет в нём все отчёты; возвращает пути в порядке записи."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths = [
        render_json(report, out / JSON_NAME),
        render_domain_csv(report, out / DOMAIN_CSV_NAME),
        render_pages_csv(report, out / PAGES_CSV_NAME),
    ]
    if html:
        paths.append(render_html(report, template_dir, out / HTML_NAME))
    return paths


__all__ = ["render_json", "render_domain_csv", "render_pages_csv", "render_html", "write_reports"]
