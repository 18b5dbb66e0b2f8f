"""Network fetch collaborators."""

from __future__ import annotations

from collections.abc import Callable

from .http import http_get

Fetcher = Callable[[str], bytes]

__all__ = ["Fetcher", "http_get"]
