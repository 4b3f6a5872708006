# File: threepwood/classifier.py
"""threepwood.classifier: classification of crawled resource references.

:class:`ClassificationEngine` receives the crawler callbacks, decides for
every reference whether it is same-origin, a known provider or some other
third party, and records the outcome in a shared
:class:`~threepwood.aggregator.ScanReport`.

Per-reference algorithm (first matching step wins):

1. empty value → ignored;
2. ``<link rel="dns-prefetch">`` → ``dns_prefetch`` flag;
3. malformed URL → skipped and recorded (or raised, see ``abort_on_malformed``);
4. ``<link rel="preconnect">`` to a third party → ``other_preconnect``;
5. provider markers of the element kind, Google Fonts before Google Analytics;
6. third party → the ``other_*`` bucket of the element kind;
7. same origin → nothing is recorded.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Sequence, Tuple

from threepwood.aggregator import FLAGS, ReportSnapshot, ScanReport
from threepwood.crawler.models import ElementEvent
from threepwood.logger import logger
from threepwood.origin import (
    LOCAL_PATH_RE,
    MalformedReferenceError,
    ScanTarget,
    check_reference,
    is_same_origin,
)
from threepwood.patterns import ProviderKind, extract_imports, matches_provider

__all__: Sequence[str] = (
    "Category",
    "Classification",
    "ClassificationEngine",
    "ElementKind",
    "ResourceReference",
    "ScanState",
    "ScanStateError",
)


class ElementKind(str, Enum):
    LINK = "link"
    SCRIPT_SRC = "script-src"
    SCRIPT_TEXT = "script-inline-text"
    IFRAME_SRC = "iframe-src"
    STYLE_TEXT = "style-inline-text"
    CSS_IMPORT = "css-import"


class Category(str, Enum):
    IGNORED = "ignored"
    SAME_ORIGIN = "same-origin"
    KNOWN_PROVIDER = "known-provider"
    THIRD_PARTY_OTHER = "third-party-other"
    DNS_PREFETCH = "dns-prefetch"
    PRECONNECT = "preconnect"
    MALFORMED = "malformed"


class ScanState(str, Enum):
    IDLE = "idle"
    CRAWLING = "crawling"
    FINALIZED = "finalized"


class ScanStateError(RuntimeError):
    """Event delivered to an engine that has already been finalized."""


@dataclass(frozen=True, slots=True)
class ResourceReference:
    kind: ElementKind
    value: str
    page_url: str = ""
    rel: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Classification:
    category: Category
    via: Optional[ElementKind] = None
    provider: Optional[ProviderKind] = None


# element kind -> (provider, flag or bucket) in match order
PROVIDER_RULES: Mapping[ElementKind, Tuple[Tuple[ProviderKind, str], ...]] = {
    ElementKind.LINK: ((ProviderKind.GOOGLE_FONTS, "google_fonts_link"),),
    ElementKind.SCRIPT_SRC: ((ProviderKind.GOOGLE_ANALYTICS, "google_analytics_script_src"),),
    ElementKind.SCRIPT_TEXT: (
        (ProviderKind.GOOGLE_FONTS, "google_fonts_script"),
        (ProviderKind.GOOGLE_ANALYTICS, "google_analytics_script"),
    ),
    ElementKind.IFRAME_SRC: ((ProviderKind.GOOGLE_ANALYTICS, "google_analytics_iframe"),),
    ElementKind.STYLE_TEXT: ((ProviderKind.GOOGLE_FONTS, "google_fonts_style"),),
    ElementKind.CSS_IMPORT: ((ProviderKind.GOOGLE_FONTS, "google_fonts_css"),),
}

OTHER_BUCKETS: Mapping[ElementKind, str] = {
    ElementKind.LINK: "other_links",
    ElementKind.SCRIPT_SRC: "other_scripts",
    ElementKind.IFRAME_SRC: "other_iframes",
    ElementKind.STYLE_TEXT: "other_style",
    ElementKind.CSS_IMPORT: "other_css",
}

_LABELS: Mapping[ElementKind, str] = {
    ElementKind.LINK: "<link>",
    ElementKind.SCRIPT_SRC: "<script src>",
    ElementKind.SCRIPT_TEXT: "<script>",
    ElementKind.IFRAME_SRC: "<iframe>",
    ElementKind.STYLE_TEXT: "<style> @import",
    ElementKind.CSS_IMPORT: "css @import",
}


class ClassificationEngine:
    """Crawl callback handler for one scan: ``idle → crawling → finalized``."""

    def __init__(
        self,
        target: ScanTarget,
        report: ScanReport,
        config=None,
        progress: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.target = target
        self.report = report
        self.verbose: bool = getattr(config, "verbose", False)
        self.abort_on_malformed: bool = getattr(config, "abort_on_malformed", False)
        self.local_path = config.local_path_re if config is not None else LOCAL_PATH_RE
        self.progress = progress
        self._state = ScanState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> ScanState:
        return self._state

    # ------------------------------------------------------------------ #
    # Crawl callbacks                                                    #
    # ------------------------------------------------------------------ #

    def on_request(self, url: str) -> None:
        self._advance()
        count = self.report.record_visit()
        if self.verbose:
            logger.info("VISITING: %s", url)
        elif self.progress is not None:
            self.progress(count)

    def on_element(self, event: ElementEvent) -> None:
        self._advance()
        page = event.page_url
        if event.tag == "link":
            rel = tuple(event.attr("rel").lower().split())
            self.classify(ResourceReference(ElementKind.LINK, event.attr("href"), page, rel))
        elif event.tag == "script":
            src = event.attr("src")
            if src:
                outcome = self.classify(ResourceReference(ElementKind.SCRIPT_SRC, src, page))
                if outcome.category is not Category.SAME_ORIGIN:
                    return
            self.classify(ResourceReference(ElementKind.SCRIPT_TEXT, event.text, page))
        elif event.tag == "iframe":
            self.classify(ResourceReference(ElementKind.IFRAME_SRC, event.attr("src"), page))
        elif event.tag == "style":
            for target in extract_imports(event.text):
                self.classify(ResourceReference(ElementKind.STYLE_TEXT, target, page))

    def on_response(self, url: str, body: str) -> None:
        self._advance()
        for target in extract_imports(body):
            self.classify(ResourceReference(ElementKind.CSS_IMPORT, target, url))

    def finalize(self) -> ReportSnapshot:
        """Close the scan and return the report snapshot for rendering."""
        with self._state_lock:
            self._state = ScanState.FINALIZED
        return self.report.snapshot()

    # ------------------------------------------------------------------ #
    # Classification                                                     #
    # ------------------------------------------------------------------ #

    def classify(self, ref: ResourceReference) -> Classification:
        value = ref.value
        if not value.strip():
            return Classification(Category.IGNORED, ref.kind)

        if ref.kind is ElementKind.SCRIPT_TEXT:
            for provider, name in PROVIDER_RULES[ref.kind]:
                if matches_provider(value, provider, script_text=True):
                    self._record(name, value)
                    self._trace("%s URL found in <script> on %s (unknown if that code is executed)",
                                provider.value.upper(), ref.page_url)
                    return Classification(Category.KNOWN_PROVIDER, ref.kind, provider)
            return Classification(Category.IGNORED, ref.kind)

        if ref.kind is ElementKind.LINK and "dns-prefetch" in ref.rel:
            self.report.set_flag("dns_prefetch")
            self._trace("DNS-PREFETCH on %s: %s", ref.page_url, value)
            return Classification(Category.DNS_PREFETCH, ref.kind)

        try:
            check_reference(value)
        except MalformedReferenceError as exc:
            if self.abort_on_malformed:
                raise
            logger.warning("Skipping %s on %s: %s", _LABELS[ref.kind], ref.page_url, exc)
            self.report.record_finding("malformed_references", value)
            return Classification(Category.MALFORMED, ref.kind)

        third_party = not is_same_origin(value, self.target, self.local_path)

        if ref.kind is ElementKind.LINK and "preconnect" in ref.rel and third_party:
            self.report.record_finding("other_preconnect", value)
            self._trace("LINK / PRECONNECT on %s: %s", ref.page_url, value)
            return Classification(Category.PRECONNECT, ref.kind)

        for provider, name in PROVIDER_RULES[ref.kind]:
            if matches_provider(value, provider):
                self._record(name, value)
                self._trace("%s %s on %s: %s",
                            provider.value.upper(), _LABELS[ref.kind], ref.page_url, value)
                return Classification(Category.KNOWN_PROVIDER, ref.kind, provider)

        if third_party:
            self.report.record_finding(OTHER_BUCKETS[ref.kind], value)
            self._trace("3RD PARTY %s on %s: %s", _LABELS[ref.kind], ref.page_url, value)
            return Classification(Category.THIRD_PARTY_OTHER, ref.kind)

        return Classification(Category.SAME_ORIGIN, ref.kind)

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _advance(self) -> None:
        with self._state_lock:
            if self._state is ScanState.FINALIZED:
                raise ScanStateError("scan already finalized")
            self._state = ScanState.CRAWLING

    def _record(self, name: str, value: str) -> None:
        if name in FLAGS:
            self.report.set_flag(name)
        else:
            self.report.record_finding(name, value)

    def _trace(self, msg: str, *args: object) -> None:
        if self.verbose:
            logger.info(msg, *args)
        else:
            logger.debug(msg, *args)
