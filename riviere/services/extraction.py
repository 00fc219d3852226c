"""
Extraction service for Riviere.

Orchestrates an extraction run by:
1. Loading and resolving the extraction config
2. Discovering source files matching each module's path glob
3. Parsing them with the tree-sitter adapter
4. Extracting draft components with the extraction modules

Usage:
    from riviere.services import extraction

    result = extraction.run_extraction("riviere.config.yaml")
    print(f"Components: {result.summary['components']}")
"""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from riviere.adapters.treesitter import SourceFileNode, TreeSitterManager
from riviere.common.exceptions import NoSourceFilesError
from riviere.common.logging import RunLogger, setup_logging_bridge, teardown_logging_bridge
from riviere.common.types import DraftComponent
from riviere.modules.extraction.components import (
    extract_from_file,
    find_module,
    module_path_matches,
)
from riviere.services.config import create_config_loader, load_extraction_config
from riviere.services.config_models import (
    Module,
    ResolvedExtractionConfig,
    RiviereSettings,
)
from riviere.services.resolution import resolve_config

logger = logging.getLogger(__name__)


@dataclass
class ExtractionRunResult:
    """Outcome of an extraction run."""

    components: list[DraftComponent] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"components": self.components, "files": self.files, "summary": self.summary}


# =============================================================================
# Config
# =============================================================================


def load_resolved_config(
    config_path: str | Path, run_logger: RunLogger | None = None
) -> ResolvedExtractionConfig:
    """
    Load an extraction config and resolve every module.

    ``extends`` sources are resolved relative to the config file's directory.

    Raises:
        ConfigurationError: If the config cannot be loaded
        ResolutionError: If a module cannot be resolved
    """
    path = Path(config_path)
    config = load_extraction_config(path)
    resolved = resolve_config(config, create_config_loader(path.resolve().parent))

    if run_logger:
        for authored, module in zip(config.modules, resolved.modules, strict=True):
            run_logger.detail_module_resolved(module.name, module.path, authored.extends)
    return resolved


# =============================================================================
# File Discovery
# =============================================================================


def discover_source_files(
    root: str | Path,
    modules: Iterable[Module],
    exclude_dirs: Iterable[str] = (),
    follow_symlinks: bool = False,
) -> list[str]:
    """
    Find supported source files under ``root`` matching any module's path glob.

    Args:
        root: Directory module globs are relative to
        modules: Resolved modules
        exclude_dirs: Directory names never descended into
        follow_symlinks: Whether to follow symlinked directories

    Returns:
        Sorted, deduplicated '/'-separated paths relative to ``root``
    """
    excluded = set(exclude_dirs)
    root_path = Path(root)
    found: set[str] = set()

    for dirpath, dirnames, filenames in os.walk(root_path, followlinks=follow_symlinks):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in filenames:
            rel = Path(dirpath, filename).relative_to(root_path).as_posix()
            if not TreeSitterManager.supports_file(rel):
                continue
            if any(module_path_matches(m, rel) for m in modules):
                found.add(rel)

    return sorted(found)


def group_files_by_module(
    files: Iterable[str], modules: list[Module]
) -> dict[str, list[str]]:
    """Assign each file to the first module whose glob matches it."""
    grouped: dict[str, list[str]] = defaultdict(list)
    for file_path in files:
        module = find_module(file_path, modules)
        if module is not None:
            grouped[module.name].append(file_path)
    return grouped


# =============================================================================
# Extraction Run
# =============================================================================


def _extract_module(
    module: Module,
    files: list[str],
    root: Path,
    manager: TreeSitterManager,
    run_logger: RunLogger | None,
) -> list[DraftComponent]:
    components: list[DraftComponent] = []
    parsed: list[SourceFileNode] = []
    for rel in files:
        source_file = manager.parse_file(root / rel, display_path=rel)
        if source_file is None:
            logger.warning("Could not parse %s", rel)
            if run_logger:
                run_logger.detail_file_skipped(rel, "parse_failed")
            continue
        if run_logger:
            run_logger.detail_file_parsed(rel, manager.detect_language(rel))
        parsed.append(source_file)

    for source_file in parsed:
        found = extract_from_file(source_file, module)
        if run_logger:
            for component in found:
                run_logger.detail_component_extracted(
                    component["type"],
                    component["name"],
                    component["domain"],
                    component["location"]["file"],
                    component["location"]["line"],
                    component["metadata"],
                )
        components.extend(found)
    return components


def run_extraction(
    config_path: str | Path,
    dry_run: bool = False,
    settings: RiviereSettings | None = None,
    run_logger: RunLogger | None = None,
) -> ExtractionRunResult:
    """
    Run an extraction.

    Args:
        config_path: Path to the extraction config
        dry_run: Only count components (summary still lists all of them)
        settings: Runtime settings (defaults read from the environment)
        run_logger: Optional RunLogger for structured logging; one is created
            from settings when ``run_logging`` is enabled

    Returns:
        ExtractionRunResult with components, parsed files and a summary

    Raises:
        ConfigurationError: If the config cannot be loaded
        ResolutionError: If a module cannot be resolved
        NoSourceFilesError: If no module path matches any source file
        ExtractionError: If an extract rule fails on a matched declaration
    """
    settings = settings or RiviereSettings()
    if run_logger is None and settings.run_logging:
        run_logger = RunLogger(logs_dir=settings.logs_dir)

    handler = setup_logging_bridge(run_logger, logger_names=["riviere"]) if run_logger else None
    try:
        return _run(Path(config_path), dry_run, settings, run_logger)
    finally:
        if handler:
            teardown_logging_bridge(handler, logger_names=["riviere"])


def _run(
    config_path: Path,
    dry_run: bool,
    settings: RiviereSettings,
    run_logger: RunLogger | None,
) -> ExtractionRunResult:
    root = config_path.resolve().parent

    if run_logger:
        run_logger.phase_start("resolution", f"Resolving {config_path}")
    try:
        resolved = load_resolved_config(config_path, run_logger)
    except Exception as e:
        if run_logger:
            run_logger.phase_error("resolution", str(e))
        raise
    if run_logger:
        run_logger.phase_complete("resolution", stats={"modules": len(resolved.modules)})

    files = discover_source_files(
        root, resolved.modules, settings.exclude_dirs, settings.follow_symlinks
    )
    if not files:
        raise NoSourceFilesError([m.path for m in resolved.modules])
    logger.info("Discovered %d source file(s) under %s", len(files), root)

    grouped = group_files_by_module(files, resolved.modules)
    manager = TreeSitterManager()
    components: list[DraftComponent] = []

    if run_logger:
        run_logger.phase_start("extraction", "Extracting components")
    try:
        for module in resolved.modules:
            module_files = grouped.get(module.name, [])
            if run_logger:
                with run_logger.step_start(module.name, f"Extracting module {module.name}") as step:
                    found = _extract_module(module, module_files, root, manager, run_logger)
                    step.items_processed = len(module_files)
                    step.items_created = len(found)
            else:
                found = _extract_module(module, module_files, root, manager, None)
            components.extend(found)
    except Exception as e:
        if run_logger:
            run_logger.phase_error("extraction", str(e))
        raise

    summary = {
        "modules": len(resolved.modules),
        "files": len(files),
        "components": len(components),
        "dry_run": dry_run,
    }
    if run_logger:
        run_logger.phase_complete("extraction", stats=summary)
    logger.info("Extracted %d component(s) from %d file(s)", len(components), len(files))

    return ExtractionRunResult(components=components, files=files, summary=summary)


def format_dry_run(components: Iterable[DraftComponent]) -> list[str]:
    """
    Summarize components as ``domain: type(count), ...`` lines.

    Domains and types are sorted by code point.

    Examples:
        >>> format_dry_run([{"domain": "orders", "type": "api"}, {"domain": "orders", "type": "api"}])
        ['orders: api(2)']
    """
    counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for component in components:
        counts[component["domain"]][component["type"]] += 1

    lines = []
    for domain in sorted(counts):
        types = counts[domain]
        parts = ", ".join(f"{t}({types[t]})" for t in sorted(types))
        lines.append(f"{domain}: {parts}")
    return lines


__all__ = [
    "ExtractionRunResult",
    "discover_source_files",
    "format_dry_run",
    "group_files_by_module",
    "load_resolved_config",
    "run_extraction",
]
