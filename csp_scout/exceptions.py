# File: csp_scout/exceptions.py
"""csp_scout.exceptions: Иерархия исключений, прерывающих запуск сканирования."""

from __future__ import annotations

__all__ = ("CspScoutError", "SitemapError", "SitemapFetchError", "SitemapParseError")


class CspScoutError(Exception):
    """Базовое исключение проекта."""


class SitemapError(CspScoutError):
    """Sitemap не удалось получить или разобрать – запуск прерывается."""


class SitemapFetchError(SitemapError):
    """Сетевая ошибка, HTTP-статус >= 400 или нечитаемый локальный файл."""


class SitemapParseError(SitemapError, ValueError):
    """Некорректный XML или неожиданный корневой элемент."""
