# File: csp_scout/report/csv_report.py
"""csp_scout.report.csv_report: Плоские CSV-выгрузки – сводка по доменам и находки по страницам."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Union

from csp_scout.aggregator import CspReport

DOMAIN_SUMMARY_HEADER = ["CSP Directive", "Source Type", "Source Value", "Count", "Sample Pages"]
PAGE_FINDINGS_HEADER = ["Page URL", "HTTP Code", "Directive", "Domains (deduped)"]


def render_domain_csv(report: CspReport, output_path: Union[str, Path]) -> Path:
    """Одна строка на (директива, источник); внутри директивы – по убыванию count."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(DOMAIN_SUMMARY_HEADER)
        for directive in report.domain_summary:
            for entry in report.sorted_summary(directive):
                writer.writerow(
                    [directive, entry.source_type, entry.token, entry.count, " | ".join(entry.sample_pages)]
                )
    return output


def render_pages_csv(report: CspReport, output_path: Union[str, Path]) -> Path:
    """Одна строка на (страница, директива); страница без находок даёт одну строку с пустыми полями."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(PAGE_FINDINGS_HEADER)
        for page_url, finding in report.page_findings.items():
            if not finding.directive_domains:
                writer.writerow([page_url, finding.http_code, "", ""])
                continue
            for directive, tokens in finding.directive_domains.items():
                writer.writerow([page_url, finding.http_code, directive, ", ".join(tokens)])
    return output
