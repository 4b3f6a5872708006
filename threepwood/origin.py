# File: threepwood/origin.py
"""threepwood.origin: same-origin / third-party resolution of resource references."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import urlsplit

__all__: Sequence[str] = (
    "LOCAL_PATH_PATTERN",
    "LOCAL_PATH_RE",
    "MalformedReferenceError",
    "ScanTarget",
    "check_reference",
    "is_same_origin",
)

# Optional leading slash, segments of [A-Za-z0-9_.-] joined by single slashes,
# optional "#..." or "?..." suffix. The empty path is accepted; a bare or
# trailing slash is not.
LOCAL_PATH_PATTERN = r"(?:/?[A-Za-z0-9_.\-]+(?:/[A-Za-z0-9_.\-]+)*)?(?:[#?].*)?"
LOCAL_PATH_RE = re.compile(LOCAL_PATH_PATTERN)


class MalformedReferenceError(ValueError):
    """A reference that cannot be parsed as a URL."""

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"malformed reference {reference!r}: {reason}")
        self.reference = reference
        self.reason = reason


@dataclass(frozen=True, slots=True)
class ScanTarget:
    """The site being scanned: the seed URL and its origin parts.

    ``host`` is lowercased and in URL form, so an IPv6 literal is ``[::1]``.
    """

    url: str
    scheme: str
    host: str
    port: Optional[int]
    base_origin: str

    @classmethod
    def from_url(cls, url: str) -> ScanTarget:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme not in ("http", "https"):
            scheme = "https"
        host = parts.hostname or ""
        if not host:
            raise MalformedReferenceError(url, "no host")
        # IPv6 literals keep their brackets, as they appear in URLs
        if ":" in host:
            host = f"[{host}]"
        try:
            port = parts.port
        except ValueError as exc:
            raise MalformedReferenceError(url, str(exc)) from exc
        base_origin = f"{scheme}://{host}"
        if port is not None:
            base_origin += f":{port}"
        return cls(url=url, scheme=scheme, host=host, port=port, base_origin=base_origin)


def check_reference(reference: str) -> str:
    """Return *reference* unchanged or raise :class:`MalformedReferenceError`."""
    try:
        parts = urlsplit(reference)
        # port is parsed lazily
        parts.port
    except ValueError as exc:
        raise MalformedReferenceError(reference, str(exc)) from exc
    return reference


def is_same_origin(
    reference: str,
    target: ScanTarget,
    local_path: re.Pattern[str] = LOCAL_PATH_RE,
) -> bool:
    """Decide whether *reference* stays on *target*; first matching rule wins."""
    if local_path.fullmatch(reference):
        return True
    if reference.startswith("//" + target.host):
        return True
    if reference.startswith(target.base_origin):
        return True
    return reference == "about:blank"
