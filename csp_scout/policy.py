# File: csp_scout/policy.py
"""Mapping of resource categories onto CSP directives and the same-site filter."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

from csp_scout.utils import BLOB_TOKEN, DATA_TOKEN, extract_host

__all__ = (
    "ResourceCategory",
    "DEFAULT_DIRECTIVE",
    "DIRECTIVES",
    "classify",
    "is_external",
)


class ResourceCategory(str, Enum):
    """Kind of resource referenced from page markup."""

    SCRIPT = "script"
    STYLE = "style"
    IMG = "img"
    FRAME = "frame"
    MEDIA = "media"
    OBJECT = "object"
    FONT = "font"
    MANIFEST = "manifest"
    LINK_OTHER = "link-other"


DEFAULT_DIRECTIVE = "default-src"

DIRECTIVES: Mapping[str, str] = MappingProxyType(
    {
        "script": "script-src",
        "style": "style-src",
        "img": "img-src",
        "frame": "frame-src",
        "font": "font-src",
        "media": "media-src",
        "manifest": "manifest-src",
        "object": "object-src",
        "worker": "worker-src",
    }
)


def classify(category: Union[ResourceCategory, str]) -> str:
    """Return the CSP directive for *category*; ``link-other`` and unknown values fall back to ``default-src``."""
    key = category.value if isinstance(category, ResourceCategory) else str(category)
    return DIRECTIVES.get(key, DEFAULT_DIRECTIVE)


def is_external(page_url: str, resolved_url: str, token: str) -> bool:
    """Decide whether a reference found on *page_url* points to a third party.

    ``data:`` and ``blob:`` are always external. A missing host on either
    side cannot be compared and the reference is dropped.
    """
    if token in (DATA_TOKEN, BLOB_TOKEN):
        return True
    page_host = extract_host(page_url)
    resource_host = extract_host(resolved_url)
    if not page_host or not resource_host:
        return False
    return page_host != resource_host
