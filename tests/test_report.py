# File: tests/test_report.py
import csv
import json

import pytest

from csp_scout.aggregator import Aggregator
from csp_scout.crawler.models import FetchResult
from csp_scout.report import write_reports
from csp_scout.report.csv_report import DOMAIN_SUMMARY_HEADER, PAGE_FINDINGS_HEADER


@pytest.fixture()
def report(ok_page):
    agg = Aggregator()
    agg.add_result(
        ok_page(
            "https://a.com/1",
            '<script src="https://cdn.x/a.js"></script><img src="data:image/png;base64,AA">'
            '<img src="https://one.cdn/x.png">',
        )
    )
    agg.add_result(ok_page("https://a.com/2", '<script src="https://cdn.y/a.js"></script><script src="https://cdn.y/b.js"></script>'))
    agg.add_result(ok_page("https://a.com/3", "<p>nothing external</p>"))
    agg.add_result(FetchResult(url="https://a.com/4", status=404, body="gone"))
    return agg.build_report(sitemap="https://a.com/sitemap.xml", total_urls=4, generated_at="2026-10-18T00:00:00+00:00")


def read_csv(path):
    with path.open(encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


def test_write_reports_creates_all_files(report, tmp_path):
    out = tmp_path / "nested" / "out"
    paths = write_reports(report, out)

    assert [p.name for p in paths] == ["csp_report.json", "csp_domain_summary.csv", "csp_page_findings.csv"]
    assert all(p.exists() for p in paths)

    text = (out / "csp_report.json").read_text(encoding="utf-8")
    assert text == report.json(pretty=True)
    data = json.loads(text)
    assert data["total_urls"] == 4
    assert data["sitemap"] == "https://a.com/sitemap.xml"
    assert data["page_findings"]["https://a.com/4"]["_fetch"] == {"status": "error", "http_code": 404, "error": None}


def test_domain_summary_csv(report, tmp_path):
    write_reports(report, tmp_path)
    rows = read_csv(tmp_path / "csp_domain_summary.csv")

    assert rows[0] == DOMAIN_SUMMARY_HEADER
    assert rows[1:] == [
        ["script-src", "domain", "cdn.y", "2", "https://a.com/2"],
        ["script-src", "domain", "cdn.x", "1", "https://a.com/1"],
        ["img-src", "scheme", "data:", "1", "https://a.com/1"],
        ["img-src", "domain", "one.cdn", "1", "https://a.com/1"],
    ]


def test_page_findings_csv(report, tmp_path):
    write_reports(report, tmp_path)
    rows = read_csv(tmp_path / "csp_page_findings.csv")

    assert rows[0] == PAGE_FINDINGS_HEADER
    assert rows[1:] == [
        ["https://a.com/1", "200", "script-src", "cdn.x"],
        ["https://a.com/1", "200", "img-src", "data:, one.cdn"],
        ["https://a.com/2", "200", "script-src", "cdn.y"],
        ["https://a.com/3", "200", "", ""],
        ["https://a.com/4", "404", "", ""],
    ]


def test_html_report(report, tmp_path):
    paths = write_reports(report, tmp_path, html=True)
    html_path = paths[-1]

    assert html_path.name == "csp_report.html"
    html = html_path.read_text(encoding="utf-8")
    assert "cdn.y" in html
    assert "https://a.com/sitemap.xml" in html
    assert "img-src" in html


def test_html_report_custom_template_dir(report, tmp_path):
    templates = tmp_path / "tpl"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{% for d, entries in summary.items() %}{{ d }}={{ entries|length }};{% endfor %}", encoding="utf-8"
    )
    paths = write_reports(report, tmp_path / "out", html=True, template_dir=templates)
    assert paths[-1].read_text(encoding="utf-8") == "script-src=2;img-src=2;"
