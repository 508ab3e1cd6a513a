# === FILE: csp_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации CSP Scout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScannerConfig(BaseModel):
    """Конфигурация для одного запуска обхода sitemap."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sitemap: str = Field(..., min_length=1, description="URL sitemap.xml или путь к локальному файлу.")
    out_dir: Path = Field(Path("out"), description="Каталог для отчётов.")
    concurrency: int = Field(8, ge=1, description="Число параллельных запросов.")
    limit: int = Field(0, ge=0, description="Макс. число URL после дедупликации (0 = без лимита).")
    timeout: int = Field(20, gt=0, description="Таймаут на один запрос (секунд).")
    sitemap_timeout: float = Field(30.0, gt=0, description="Таймаут загрузки sitemap (секунд).")
    user_agent: str = Field("CSP-Inventory-Crawler/1.0", min_length=1, description="Заголовок User-Agent.")
    sample_pages: int = Field(5, ge=1, description="Сколько страниц-примеров хранить на источник.")

    @field_validator("sitemap", "user_agent", mode="before")
    def _strip(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    def apply_limit(self, urls: list[str]) -> list[str]:
        """Обрезает упорядоченный список URL по ``limit`` (0 – без ограничения)."""
        return urls[: self.limit] if self.limit > 0 else urls


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
    """Читает YAML или JSON без валидации. Отсутствующий файл – FileNotFoundError."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path]) -> ScannerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScannerConfig.
    Ошибки схемы поднимаются как pydantic.ValidationError.
    """
    return ScannerConfig(**read_config_file(path))


def build_config(path: Union[str, Path, None] = None, **overrides: Any) -> ScannerConfig:
    """
    Собирает конфигурацию из файла (если задан) и явных значений.
    Значения ``None`` в *overrides* игнорируются, остальные перекрывают файл.
    """
    data = read_config_file(path) if path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ScannerConfig(**data)
