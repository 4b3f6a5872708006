# File: threepwood/report/__init__.py
"""threepwood.report: Рендеры отчёта (терминал, JSON, HTML) используемые CLI и тестами."""

from __future__ import annotations

from .html_report import render_html
from .json_report import render_json
from .text_report import render_text

__all__ = ["render_html", "render_json", "render_text"]
