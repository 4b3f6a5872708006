# threepwood/crawler/models.py
"""
Data models and the callback protocol of the Threepwood crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol


@dataclass(slots=True)
class PageData:
    """Holds the URL, decoded body and MIME type of a fetched response."""

    url: str
    content: str
    content_type: str = ""


@dataclass(frozen=True, slots=True)
class ElementEvent:
    """One ``<link>``, ``<script>``, ``<iframe>`` or ``<style>`` element found on a page.

    Multi-valued attributes (``rel``) are joined with single spaces.
    """

    page_url: str
    tag: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    def attr(self, name: str) -> str:
        return self.attrs.get(name, "")


class CrawlHandler(Protocol):
    """Callbacks fired by :class:`~threepwood.crawler.crawler.AsyncCrawler`.

    ``on_element`` and ``on_response`` may run concurrently in worker threads.
    """

    def on_request(self, url: str) -> None: ...

    def on_element(self, event: ElementEvent) -> None: ...

    def on_response(self, url: str, body: str) -> None: ...
