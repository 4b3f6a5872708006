# File: threepwood/aggregator.py
"""threepwood.aggregator: Потокобезопасный агрегатор находок одного сканирования."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

__all__ = ["FLAGS", "BUCKETS", "ScanReport", "ReportSnapshot"]

FLAGS: Tuple[str, ...] = (
    "google_analytics_script_src",
    "google_analytics_script",
    "google_analytics_iframe",
    "google_fonts_link",
    "google_fonts_script",
    "dns_prefetch",
)

BUCKETS: Tuple[str, ...] = (
    "google_fonts_css",
    "google_fonts_style",
    "other_links",
    "other_scripts",
    "other_iframes",
    "other_css",
    "other_preconnect",
    "other_style",
    "malformed_references",
)


@dataclass(frozen=True, slots=True)
class ReportSnapshot:
    """Неизменяемый результат сканирования, передаётся в рендеры отчётов."""

    visits: int = 0
    google_analytics_script_src: bool = False
    google_analytics_script: bool = False
    google_analytics_iframe: bool = False
    google_fonts_link: bool = False
    google_fonts_script: bool = False
    dns_prefetch: bool = False
    google_fonts_css: Tuple[str, ...] = ()
    google_fonts_style: Tuple[str, ...] = ()
    other_links: Tuple[str, ...] = ()
    other_scripts: Tuple[str, ...] = ()
    other_iframes: Tuple[str, ...] = ()
    other_css: Tuple[str, ...] = ()
    other_preconnect: Tuple[str, ...] = ()
    other_style: Tuple[str, ...] = ()
    malformed_references: Tuple[str, ...] = ()

    @property
    def has_findings(self) -> bool:
        """Найден ли хоть один сторонний ресурс; пропущенные ссылки не в счёт."""
        return any(getattr(self, name) for name in FLAGS + BUCKETS if name != "malformed_references")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for name in BUCKETS:
            data[name] = list(data[name])
        return data

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление снимка."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


class ScanReport:
    """Изменяемый отчёт одного сканирования.

    Все операции атомарны: каждая захватывает один общий замок на время
    одного логического обновления. Наборы строк хранят уникальные значения
    в порядке первого появления, флаги только взводятся, счётчик посещений
    только растёт.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._visits = 0
        self._flags: Dict[str, bool] = dict.fromkeys(FLAGS, False)
        # dict сохраняет порядок вставки
        self._buckets: Dict[str, Dict[str, None]] = {name: {} for name in BUCKETS}

    def record_visit(self) -> int:
        with self._lock:
            self._visits += 1
            return self._visits

    def record_finding(self, bucket: str, value: str) -> bool:
        """Добавляет *value* в набор *bucket*; True, если значение новое."""
        with self._lock:
            entries = self._buckets[bucket]
            if value in entries:
                return False
            entries[value] = None
            return True

    def set_flag(self, name: str) -> None:
        if name not in self._flags:
            raise KeyError(name)
        with self._lock:
            self._flags[name] = True

    def snapshot(self) -> ReportSnapshot:
        """Снимок для рендеринга; вызывается после завершения обхода."""
        with self._lock:
            return ReportSnapshot(
                visits=self._visits,
                **self._flags,
                **{name: tuple(entries) for name, entries in self._buckets.items()},
            )
