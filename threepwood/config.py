# === FILE: threepwood/config.py ===
"""
Модуль для загрузки и валидации конфигурации сканера Threepwood.
Используется Pydantic для описания схемы и проверки данных.

Конфигурация собирается из необязательного YAML/JSON-файла и параметров
командной строки (параметры CLI имеют приоритет).
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

from threepwood.origin import LOCAL_PATH_PATTERN


class ScannerConfig(BaseModel):
    """Конфигурация для одного запуска сканирования."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корневой URL для сканирования.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(10000, ge=1, description="Жесткий лимит по числу запросов.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("Threepwood/0.1", min_length=1, description="Заголовок User-Agent.")
    concurrency: int = Field(8, ge=1, description="Число параллельных воркеров обхода.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    verbose: bool = Field(False, description="Подробная трассировка вместо строки прогресса.")
    abort_on_malformed: bool = Field(
        False, description="Прерывать сканирование на первой некорректной ссылке."
    )
    local_path_pattern: str = Field(
        LOCAL_PATH_PATTERN, description="Грамматика относительных (локальных) ссылок."
    )

    @field_validator("base_url", mode="before")
    def _default_scheme(cls, v: Any) -> Any:
        # без схемы считаем https
        if isinstance(v, str) and "://" not in v:
            return "https://" + v.lstrip("/")
        return v

    @field_validator("local_path_pattern")
    def _compile_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"Некорректное регулярное выражение local_path_pattern: {exc}") from exc
        return v

    @property
    def local_path_re(self) -> re.Pattern[str]:
        return re.compile(self.local_path_pattern)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML или JSON и возвращает словарь без валидации."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> ScannerConfig:
    """
    Собирает и проверяет ScannerConfig.

    Значения из файла *path* (если указан) дополняются параметрами *overrides*;
    параметры со значением ``None`` игнорируются.
    При отсутствии файла бросает FileNotFoundError, при ошибках схемы
    pydantic.ValidationError.
    """
    data: dict[str, Any] = read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ScannerConfig(**data)


__all__ = ["ScannerConfig", "load_config", "read_config_file"]
