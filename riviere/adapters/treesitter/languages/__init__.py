"""Language-specific tree-sitter extractors.

Extractor classes register themselves with ``@register_extractor``. One
instance per language is kept since extractors hold no per-file state.
Grammars are only imported when a language is first requested.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from .base import LanguageExtractor

E = TypeVar("E", bound=type[LanguageExtractor])

_EXTRACTORS: dict[str, LanguageExtractor] = {}


def register_extractor(*languages: str) -> Callable[[E], E]:
    """Class decorator registering an extractor under one or more language names."""

    def decorator(extractor_class: E) -> E:
        instance = extractor_class()
        for language in languages:
            _EXTRACTORS[language.lower()] = instance
        return extractor_class

    return decorator


def get_extractor(language: str) -> LanguageExtractor | None:
    """Return the extractor for a language, or None if unsupported."""
    _load_extractors()
    return _EXTRACTORS.get(language.lower())


def _load_extractors() -> None:
    if _EXTRACTORS:
        return
    from . import typescript  # noqa: F401


__all__ = [
    "LanguageExtractor",
    "get_extractor",
    "register_extractor",
]
