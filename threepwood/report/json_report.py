# threepwood/report/json_report.py

"""
Генерация JSON-отчёта для проекта Threepwood.

Сериализация объекта ReportSnapshot в файл.
"""
from pathlib import Path

from threepwood.aggregator import ReportSnapshot


def render_json(report: ReportSnapshot, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: снимок отчёта сканирования
    :param output_path: путь к JSON-файлу
    :param pretty: форматировать с отступом 2
    :return: Path сохранённого файла

    Пример:
    ```python
    from threepwood.report.json_report import render_json
    report_path = render_json(report, 'reports/report.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty) + "\n", encoding="utf-8")
    return output
