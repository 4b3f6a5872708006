# File: threepwood/crawler/__init__.py
"""threepwood.crawler: Асинхронный обходчик сайта, поставляющий события классификатору."""

from .crawler import AsyncCrawler
from .models import CrawlHandler, ElementEvent, PageData

__all__ = ["AsyncCrawler", "CrawlHandler", "ElementEvent", "PageData"]
