# File: threepwood/patterns.py
"""threepwood.patterns: CSS ``@import`` extraction and known-provider markers."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Iterator, Mapping, Sequence, Tuple

__all__: Sequence[str] = (
    "ProviderKind",
    "PROVIDER_MARKERS",
    "SCRIPT_TEXT_MARKERS",
    "extract_imports",
    "markers_for",
    "matches_provider",
)

_IMPORT_RE = re.compile(
    r"""
    @import\s*
    (?:
        url\(\s*
        (?:"(?P<url_dq>[^"]*)"|'(?P<url_sq>[^']*)'|(?P<url_bare>[^'"()\s]*))
        \s*\)?
      | "(?P<dq>[^"]*)"
      | '(?P<sq>[^']*)'
      | (?P<bare>[^'"()\s;]+)
    )
    """,
    re.IGNORECASE | re.VERBOSE,
)
_TARGET_GROUPS = ("url_dq", "url_sq", "url_bare", "dq", "sq", "bare")


class ProviderKind(str, Enum):
    """External services worth flagging on their own."""

    GOOGLE_FONTS = "google-fonts"
    GOOGLE_ANALYTICS = "google-analytics"


PROVIDER_MARKERS: Mapping[ProviderKind, Tuple[str, ...]] = {
    ProviderKind.GOOGLE_FONTS: ("fonts.googleapis.com", "fonts.gstatic.com"),
    ProviderKind.GOOGLE_ANALYTICS: ("googletagmanager.com",),
}

# inline <script> text only counts the CSS API host for fonts
SCRIPT_TEXT_MARKERS: Mapping[ProviderKind, Tuple[str, ...]] = {
    ProviderKind.GOOGLE_FONTS: ("fonts.googleapis.com",),
}


def extract_imports(css_text: str) -> Iterator[str]:
    """Yield the target of every ``@import`` in *css_text*, in source order.

    Accepts ``@import url("x")``, ``@import url(x)``, ``@import "x"`` and
    ``@import 'x'`` with any whitespace in between; empty targets are skipped.
    """
    for match in _IMPORT_RE.finditer(css_text):
        target = next((match.group(g) for g in _TARGET_GROUPS if match.group(g) is not None), "")
        target = target.strip()
        if target:
            yield target


def markers_for(provider: ProviderKind, script_text: bool = False) -> Tuple[str, ...]:
    table: Dict[ProviderKind, Tuple[str, ...]] = dict(PROVIDER_MARKERS)
    if script_text:
        table.update(SCRIPT_TEXT_MARKERS)
    return table[provider]


def matches_provider(s: str, provider: ProviderKind, script_text: bool = False) -> bool:
    """True if *s* contains one of the markers of *provider*."""
    return any(marker in s for marker in markers_for(provider, script_text))
