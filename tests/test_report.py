# File: tests/test_report.py
import json

import click

from threepwood.aggregator import ReportSnapshot
from threepwood.report import render_html, render_json, render_text


def sample() -> ReportSnapshot:
    return ReportSnapshot(
        visits=4,
        google_analytics_script_src=True,
        google_fonts_script=True,
        google_fonts_css=("https://fonts.googleapis.com/css?family=Lato",),
        other_scripts=("https://cdn.example.net/a.js", "https://cdn.example.net/<b>.js"),
        dns_prefetch=True,
    )


def test_render_text_lines():
    text = click.unstyle(render_text(sample()))
    assert text.splitlines() == [
        "Website uses Google Analytics via <script src>",
        "Website uses Google Fonts in css file @import: https://fonts.googleapis.com/css?family=Lato",
        "Found Google Fonts URL in <script> (this doesn't imply that it gets executed)",
        "Found 3rd Party <script> elements: https://cdn.example.net/a.js, https://cdn.example.net/<b>.js",
        "Found <link rel='dns-prefetch'> elements",
    ]


def test_render_text_colours():
    text = render_text(sample())
    assert click.style("Website uses Google Analytics via <script src>", fg="red") in text
    assert "\x1b[33m" in text


def test_render_text_empty_report():
    assert render_text(ReportSnapshot()) == "No third-party resources found"


def test_render_json(tmp_path):
    out = render_json(sample(), tmp_path / "nested" / "report.json")
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["visits"] == 4
    assert data["other_scripts"][0] == "https://cdn.example.net/a.js"
    assert data["google_fonts_link"] is False


def test_render_html_builtin_template(tmp_path):
    out = render_html(sample(), None, tmp_path / "report.html", site="http://example.com/")
    html = out.read_text(encoding="utf-8")
    assert "http://example.com/" in html
    assert "Google Analytics via &lt;script src&gt;" in html
    assert "https://cdn.example.net/&lt;b&gt;.js" in html
    assert "4 pages visited" in html


def test_render_html_custom_template(tmp_path):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{{ visits }}|{{ other_scripts | join(',') }}", encoding="utf-8"
    )
    out = render_html(sample(), templates, tmp_path / "custom.html")
    assert out.read_text(encoding="utf-8") == (
        "4|https://cdn.example.net/a.js,https://cdn.example.net/&lt;b&gt;.js"
    )


def test_render_text_only_skipped_references():
    snap = ReportSnapshot(visits=1, malformed_references=("http://[::1/x",))
    assert click.unstyle(render_text(snap)).splitlines() == [
        "No third-party resources found",
        "Skipped malformed references: http://[::1/x",
    ]


def test_render_html_empty_report(tmp_path):
    out = render_html(ReportSnapshot(visits=1), None, tmp_path / "r.html")
    assert "No third-party resources found" in out.read_text(encoding="utf-8")
    full = render_html(sample(), None, tmp_path / "s.html")
    assert "No third-party resources found" not in full.read_text(encoding="utf-8")
