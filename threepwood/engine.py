# File: threepwood/engine.py
"""threepwood.engine: Orchestration layer для запуска сканирования и сборки отчёта."""

from __future__ import annotations

from typing import Callable, Optional

from threepwood.aggregator import ReportSnapshot, ScanReport
from threepwood.classifier import ClassificationEngine
from threepwood.config import ScannerConfig
from threepwood.crawler.crawler import AsyncCrawler
from threepwood.logger import logger
from threepwood.origin import ScanTarget

__all__ = ["start_scan"]


async def start_scan(
    cfg: ScannerConfig,
    progress: Optional[Callable[[int], None]] = None,
) -> ReportSnapshot:
    """
    Запускает обход сайта и возвращает итоговый снимок отчёта.

    Parameters
    ----------
    cfg : ScannerConfig
        Конфигурация сканирования.
    progress : callable, optional
        Вызывается с числом посещений после каждого запроса (если не verbose).

    Returns
    -------
    ReportSnapshot
        Неизменяемый отчёт, готовый к рендерингу.
    """
    target = ScanTarget.from_url(str(cfg.base_url))
    report = ScanReport()
    engine = ClassificationEngine(target, report, cfg, progress=progress)
    logger.info("Crawling %s (max depth %d)", target.url, cfg.max_depth)
    async with AsyncCrawler(cfg, engine) as crawler:
        await crawler.crawl()
    snapshot = engine.finalize()
    logger.info("Scan finished: %d pages visited", snapshot.visits)
    return snapshot
