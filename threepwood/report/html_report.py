# File: threepwood/report/html_report.py
"""threepwood.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from threepwood.aggregator import ReportSnapshot

TEMPLATE_NAME = "report.html.j2"


def _environment(template_dir: Optional[Union[Path, str]]) -> Environment:
    loaders = [PackageLoader("threepwood", "templates")]
    if template_dir is not None:
        loaders.insert(0, FileSystemLoader(str(template_dir)))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def render_html(
    report: ReportSnapshot,
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
    *,
    site: str = "",
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: снимок отчёта сканирования.
        template_dir: директория с шаблоном ``report.html.j2``; ``None``:
            встроенный шаблон пакета.
        output_path: путь к итоговому HTML-файлу.
        site: сканированный URL для заголовка.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    template = _environment(template_dir).get_template(TEMPLATE_NAME)
    context: dict[str, Any] = {"site": site, "report": report, **report.to_dict()}

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
