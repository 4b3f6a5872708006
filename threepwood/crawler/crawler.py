# === FILE: threepwood/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Dict, List, Optional, Sequence, Set, Tuple
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

from aiohttp import ClientError, ClientSession, ClientTimeout
from bs4 import BeautifulSoup, NavigableString
from bs4.element import Tag

from threepwood.crawler.models import CrawlHandler, ElementEvent, PageData
from threepwood.logger import LOGGER_NAME

__all__ = ("AsyncCrawler",)


class AsyncCrawler:
    """Асинхронный обход одного хоста с ограничением глубины и retry.

    Для каждой страницы вызывает колбэки *handler*: ``on_request`` перед
    запросом, ``on_element`` для элементов HTML и ``on_response`` для CSS.
    Разбор HTML и колбэки выполняются в пуле потоков.
    """
    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
    _ELEMENT_TAGS: Sequence[str] = ("a", "link", "script", "iframe", "style")

    def __init__(self, config, handler: CrawlHandler) -> None:
        self.config = config
        self.handler = handler
        self.host: str = (urlsplit(str(config.base_url)).hostname or "").lower()
        self.retry_times: int = config.retry_times
        self.concurrency: int = config.concurrency
        self.visited: Set[str] = set()
        self.requests: int = 0
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> AsyncCrawler:
        timeout = ClientTimeout(total=self.config.timeout)
        self.session = ClientSession(
            timeout=timeout,
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> int:
        """Обходит сайт и возвращает число выполненных запросов."""
        self.logger.info("Старт обхода: %s", self.config.base_url)
        start = time.monotonic()
        queue: asyncio.Queue[Tuple[str, int]] = asyncio.Queue()
        root = self._normalize_url(str(self.config.base_url))
        self.visited.add(root)
        await queue.put((root, 0))
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.concurrency)]
        join = asyncio.create_task(queue.join())
        # воркер завершается сам только при ошибке в колбэке
        await asyncio.wait([join, *workers], return_when=asyncio.FIRST_COMPLETED)
        for task in (join, *workers):
            task.cancel()
        outcomes = await asyncio.gather(join, *workers, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                raise outcome
        duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d запросов за %.2f с (%.2f запр/с)",
            self.requests, duration, self.requests / duration if duration else 0,
        )
        return self.requests

    async def _worker(self, queue: asyncio.Queue[Tuple[str, int]]) -> None:
        while True:
            try:
                url, depth = await queue.get()
            except asyncio.CancelledError:
                break
            try:
                await self._visit(url, depth, queue)
            finally:
                queue.task_done()

    async def _visit(self, url: str, depth: int, queue: asyncio.Queue[Tuple[str, int]]) -> None:
        if depth > self.config.max_depth or self.requests >= self.config.max_pages:
            return
        self.requests += 1
        self.handler.on_request(url)
        page = await self._fetch(url)
        if page is None:
            return
        if self._is_css(page):
            await asyncio.to_thread(self.handler.on_response, page.url, page.content)
            return
        if page.content_type != "text/html":
            return
        links = await asyncio.to_thread(self._dispatch_html, page)
        if depth < self.config.max_depth:
            for link in links:
                if link not in self.visited:
                    self.visited.add(link)
                    await queue.put((link, depth + 1))

    async def _fetch(self, url: str) -> Optional[PageData]:
        if not self.session:
            raise RuntimeError("Session not initialized")
        attempts = 0
        while attempts <= self.retry_times:
            try:
                async with self.session.get(url) as resp:
                    status = resp.status
                    mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    if status in self._RETRY_STATUS:
                        raise ClientError(f"retryable status {status}")
                    if status != 200:
                        self.logger.debug("HTTP %s for %s", status, url)
                        return None
                    final_url = str(resp.url)
                    if (resp.url.host or "").lower() != self.host:
                        self.logger.debug("Redirected off-site: %s -> %s", url, final_url)
                        return None
                    if mime not in ("text/html", "text/css") and not urlsplit(final_url).path.endswith("css"):
                        return None
                    text = await resp.text(errors="replace")
                    return PageData(final_url, text, mime)
            except (ClientError, asyncio.TimeoutError) as e:
                attempts += 1
                if attempts > self.retry_times:
                    self.logger.warning("Failed %s: %s", url, e)
                    break
                backoff = min(60, 2**attempts + random.random())
                self.logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)
        return None

    def _dispatch_html(self, page: PageData) -> List[str]:
        """Разбирает HTML, отдаёт элементы в handler и возвращает ссылки для обхода."""
        soup = BeautifulSoup(page.content, "html.parser")
        links: List[str] = []
        for tag in soup.find_all(self._ELEMENT_TAGS):
            if not isinstance(tag, Tag):
                continue
            attrs = self._attrs(tag)
            if tag.name == "a":
                self._follow(page.url, attrs.get("href"), links)
                continue
            if tag.name == "link":
                if "href" not in attrs:
                    continue
                self._follow(page.url, attrs["href"], links)
            elif tag.name == "iframe" and "src" not in attrs:
                continue
            text = "".join(str(s) for s in tag.contents if isinstance(s, NavigableString))
            self.handler.on_element(ElementEvent(page.url, tag.name, attrs, text))
        return links

    def _follow(self, page_url: str, href: Optional[str], links: List[str]) -> None:
        if not href:
            return
        try:
            absolute = urljoin(page_url, href.strip())
            parts = urlsplit(absolute)
            host = (parts.hostname or "").lower()
        except ValueError as e:
            self.logger.warning("Skipping malformed link %r on %s: %s", href, page_url, e)
            return
        if parts.scheme in ("http", "https") and host == self.host:
            links.append(self._normalize_url(absolute))

    def _is_css(self, page: PageData) -> bool:
        return page.content_type == "text/css" or urlsplit(page.url).path.endswith("css")

    @staticmethod
    def _attrs(tag: Tag) -> Dict[str, str]:
        return {
            name: " ".join(value) if isinstance(value, list) else str(value)
            for name, value in tag.attrs.items()
        }

    @staticmethod
    def _normalize_url(url: str) -> str:
        url, _ = urldefrag(url)
        parts = urlsplit(url)
        return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, ""))
