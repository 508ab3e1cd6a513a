# File: csp_scout/utils.py
"""csp_scout.utils: Утилитарные функции для разрешения URL ресурсов, извлечения хостов и дедупликации."""

from __future__ import annotations

import re
from typing import Collection, List, Optional, Sequence
from urllib.parse import urlsplit

from csp_scout.logger import logger

__all__: Sequence[str] = (
    "DATA_TOKEN",
    "BLOB_TOKEN",
    "UNKNOWN_TOKEN",
    "normalize_url",
    "is_http_url",
    "extract_host",
    "host_token",
    "describe_error",
    "remove_duplicates",
)

DATA_TOKEN = "data:"
BLOB_TOKEN = "blob:"
UNKNOWN_TOKEN = "unknown"

_SKIPPED_PREFIXES = ("javascript:", "mailto:", "tel:")
_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)
_SCHEME_TOKEN_RE = re.compile(r"^(data|blob):", re.IGNORECASE)
_LAST_SEGMENT_RE = re.compile(r"/[^/]*$")


def is_http_url(value: str) -> bool:
    """True, если строка начинается с http:// или https:// (без учёта регистра)."""
    return bool(_HTTP_RE.match(value))


def normalize_url(base_url: str, raw: str) -> Optional[str]:
    """Resolve an attribute value found on *base_url* into an absolute URL.

    Returns ``None`` for empty values, ``javascript:``/``mailto:``/``tel:``
    links and relative values when *base_url* has no host. Absolute
    ``http(s)``, ``data:`` and ``blob:`` values are returned unchanged.

    The resolver is intentionally lightweight: dot segments are kept as is
    and query strings or fragments are passed through.
    """
    value = raw.strip()
    if not value or value.lower().startswith(_SKIPPED_PREFIXES):
        return None

    if is_http_url(value) or _SCHEME_TOKEN_RE.match(value):
        return value

    try:
        base = urlsplit(base_url)
    except ValueError:
        logger.debug("Malformed base URL %s, dropping %s", base_url, value)
        return None

    scheme = base.scheme or "https"

    # //cdn.example.com/x.js
    if value.startswith("//"):
        return f"{scheme}:{value}"

    host = base.hostname
    if not host:
        return None
    try:
        port = base.port
    except ValueError:
        logger.debug("Malformed port in base URL %s, dropping %s", base_url, value)
        return None
    if ":" in host:
        host = f"[{host}]"
    origin = f"{scheme}://{host}" + (f":{port}" if port is not None else "")

    if value.startswith("/"):
        return origin + value

    directory = _LAST_SEGMENT_RE.sub("/", base.path or "/")
    return origin + directory + value


def extract_host(url: str) -> str:
    """Возвращает хост URL в нижнем регистре или пустую строку."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def host_token(url: str) -> str:
    """Classification key of a resolved URL: host, ``data:``/``blob:`` or ``unknown``."""
    match = _SCHEME_TOKEN_RE.match(url)
    if match:
        return match.group(1).lower() + ":"
    return extract_host(url) or UNKNOWN_TOKEN


def describe_error(exc: BaseException) -> str:
    """Текст исключения; для исключений без сообщения (TimeoutError) – имя класса."""
    return str(exc) or type(exc).__name__


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
