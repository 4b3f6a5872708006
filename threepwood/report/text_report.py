# File: threepwood/report/text_report.py
"""threepwood.report.text_report: Цветной текстовый отчёт для терминала."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import click

from threepwood.aggregator import ReportSnapshot

_NOT_EXECUTED = " (this doesn't imply that it gets executed)"

# (поле снимка, текст, цвет); для наборов значения перечисляются через запятую
_FINDINGS: Sequence[Tuple[str, str, str]] = (
    ("google_analytics_script_src", "Website uses Google Analytics via <script src>", "red"),
    ("google_analytics_iframe", "Website uses Google Analytics via <iframe>", "red"),
    ("google_fonts_link", "Website uses Google Fonts via <link>", "red"),
    ("google_fonts_css", "Website uses Google Fonts in css file @import: ", "red"),
    ("google_fonts_style", "Website uses Google Fonts in <style> @import: ", "red"),
    ("google_analytics_script", "Found Google Analytics URL in <script>", "yellow"),
    ("google_fonts_script", "Found Google Fonts URL in <script>", "yellow"),
    ("other_links", "Found 3rd Party <link> elements: ", "yellow"),
    ("other_scripts", "Found 3rd Party <script> elements: ", "yellow"),
    ("other_iframes", "Found 3rd Party <iframe> elements: ", "yellow"),
    ("other_css", "Found 3rd Party @import in css: ", "yellow"),
    ("other_preconnect", "Found 3rd Party <link rel='preconnect'> elements: ", "yellow"),
    ("other_style", "Found 3rd Party @import|s in <style> element: ", "yellow"),
    ("dns_prefetch", "Found <link rel='dns-prefetch'> elements", ""),
    ("malformed_references", "Skipped malformed references: ", ""),
)


def render_text(report: ReportSnapshot) -> str:
    """Возвращает отчёт в виде строк с ANSI-цветами (click их уберёт вне TTY)."""
    lines: List[str] = []
    for field_name, text, color in _FINDINGS:
        value = getattr(report, field_name)
        if not value:
            continue
        headline = click.style(text, fg=color or None)
        if isinstance(value, tuple):
            lines.append(headline + ", ".join(value))
        elif field_name in ("google_analytics_script", "google_fonts_script"):
            lines.append(headline + _NOT_EXECUTED)
        else:
            lines.append(headline)
    if not report.has_findings:
        lines.insert(0, "No third-party resources found")
    return "\n".join(lines)
