# === FILE: threepwood/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска сканера Threepwood через командную строку.

Использование:
  threepwood [OPTIONS] URL

Опции:
  -d, --depth INT     Макс. число переходов от стартовой страницы, 0 = только она (default: 3)
  -v, --verbose       Подробная трассировка вместо строки прогресса
  -c, --config PATH   YAML/JSON-файл с параметрами ScannerConfig
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с шаблоном report.html.j2
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --scan-timeout SEC  Таймаут всего сканирования (секунд)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stderr, если не указан)
  --version           Показать версию Threepwood

Пример:
  threepwood -d 2 -v https://example.com --json report.json
"""
import asyncio
import sys
from pathlib import Path

import click

from threepwood import __version__
from threepwood.config import load_config
from threepwood.engine import start_scan
from threepwood.logger import init_logging
from threepwood.report import render_html, render_json, render_text

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def print_progress(count: int) -> None:
    click.echo(f"\x1b[2K\r{count} pages visited", nl=False, err=True)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', message='Threepwood, version %(version)s')
@click.argument('url')
@click.option(
    '--depth', '-d', 'depth',
    type=click.IntRange(min=0),
    default=None,
    help='Макс. число переходов от стартовой страницы; 0 = только она сама  [default: 3]'
)
@click.option(
    '--verbose', '-v', is_flag=True,
    help='Подробная трассировка каждого запроса и находки'
)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--json', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с шаблоном report.html.j2 (встроенный, если не указана)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего сканирования (секунд)'
)
@click.option(
    '--log-level', 'log_level',
    default=None,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования (INFO при --verbose, иначе WARNING)'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
def cli(url, depth, verbose, config_path, json_output, html_output, template_dir,
        pretty, scan_timeout, log_level, log_file):
    """Найти сторонние ресурсы (Google Fonts, Google Analytics и др.) на сайте URL."""
    init_logging(
        level=log_level or ('INFO' if verbose else 'WARNING'),
        log_file=str(log_file) if log_file else None,
    )
    try:
        cfg = load_config(
            config_path,
            base_url=url,
            max_depth=depth,
            verbose=True if verbose else None,
        )
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    click.echo(f'crawling {cfg.base_url}')
    progress = None if cfg.verbose else print_progress
    try:
        if scan_timeout:
            report = asyncio.run(
                asyncio.wait_for(start_scan(cfg, progress), timeout=scan_timeout)
            )
        else:
            report = asyncio.run(start_scan(cfg, progress))
    except asyncio.TimeoutError:
        print_error(f'Сканирование не завершено за {scan_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')

    if progress is not None:
        click.echo(err=True)
    click.echo(render_text(report))

    # JSON-отчёт
    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    # HTML-отчёт
    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output, site=str(cfg.base_url))
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


if __name__ == "__main__":
    cli()
