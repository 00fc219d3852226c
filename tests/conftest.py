"""
Shared pytest fixtures for Riviere tests.

Fixtures are organized by scope:
- session: Expensive setup done once (parser manager)
- function: Fresh state for each test (default)
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from riviere.adapters.treesitter import SourceFileNode, TreeSitterManager


# =============================================================================
# Parsing Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def ts_manager() -> TreeSitterManager:
    """A TreeSitterManager shared across the session (parsers are cached)."""
    return TreeSitterManager()


@pytest.fixture
def parse_ts(ts_manager) -> Callable[..., SourceFileNode]:
    """Parse a dedented TypeScript snippet into a SourceFileNode."""

    def _parse(source: str, file_path: str = "src/orders/api.ts") -> SourceFileNode:
        result = ts_manager.parse_source(textwrap.dedent(source).lstrip("\n"), file_path)
        assert result is not None
        return result

    return _parse


@pytest.fixture
def parse_class(parse_ts):
    """Parse a snippet and return its first class."""

    def _parse(source: str, file_path: str = "src/orders/api.ts"):
        classes = parse_ts(source, file_path).get_classes()
        assert classes, "snippet declares no class"
        return classes[0]

    return _parse


@pytest.fixture
def parse_method(parse_class):
    """Parse a snippet and return a method of its first class by name."""

    def _parse(source: str, name: str, file_path: str = "src/orders/api.ts"):
        cls = parse_class(source, file_path)
        for method in cls.get_methods():
            if method.get_name() == name:
                return method
        raise AssertionError(f"method {name} not found")

    return _parse


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def all_not_used() -> dict:
    """Authored rules marking every built-in component type as not used."""
    return {
        "api": {"notUsed": True},
        "useCase": {"notUsed": True},
        "domainOp": {"notUsed": True},
        "event": {"notUsed": True},
        "eventHandler": {"notUsed": True},
        "ui": {"notUsed": True},
    }


@pytest.fixture
def write_file(tmp_path) -> Callable[[str, str], Path]:
    """Write a dedented text file under tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write
