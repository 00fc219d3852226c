"""
Component extraction - matching declarations to component types.

For every source file the first module whose path glob matches the file is
selected. Each of the module's component rules (built-in types in fixed
order, then custom types in declaration order) is applied to the candidate
declarations named by its ``find`` target; matching declarations become
draft components carrying the values of the rule's ``extract`` block.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from wcmatch import glob

from riviere.common.types import ComponentLocation, DraftComponent, SourceFile
from riviere.services.config_models import (
    COMPONENT_TYPES,
    DetectionRule,
    Module,
    NotUsed,
    ResolvedExtractionConfig,
)

from .literals import node_location
from .predicates import evaluate_predicate
from .rules import evaluate_extraction_rule

logger = logging.getLogger(__name__)


GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


def module_path_matches(module: Module, rel_path: str) -> bool:
    """Match a config-relative path against a module's path glob, anchored at the config dir."""
    return glob.globmatch(rel_path, module.path, flags=GLOB_FLAGS)


def relative_path(file_path: str, config_dir: str | Path | None) -> str:
    """
    Express a file path relative to the config directory, with '/' separators.

    Paths outside the config directory are returned unchanged.
    """
    if config_dir is None:
        return Path(file_path).as_posix()
    try:
        rel = os.path.relpath(file_path, config_dir)
    except ValueError:
        return Path(file_path).as_posix()
    if rel.startswith(".."):
        return Path(file_path).as_posix()
    return Path(rel).as_posix()


def find_module(
    file_path: str, modules: Iterable[Module], config_dir: str | Path | None = None
) -> Module | None:
    """Return the first module whose path glob matches the file."""
    rel = relative_path(file_path, config_dir)
    for module in modules:
        if module_path_matches(module, rel):
            return module
    return None


def iter_component_rules(module: Module) -> Iterator[tuple[str, DetectionRule]]:
    """Yield (component type, rule) pairs for every used component type."""
    for component_type in COMPONENT_TYPES:
        rule = module.rule_for(component_type)
        if isinstance(rule, NotUsed):
            continue
        yield component_type, rule
    for component_type, rule in (module.custom_types or {}).items():
        yield component_type, rule


def find_candidates(source_file: SourceFile, rule: DetectionRule) -> list[Any]:
    """Return the declarations a rule's ``find`` target selects."""
    if rule.find == "classes":
        return list(source_file.get_classes())
    if rule.find == "methods":
        return [m for cls in source_file.get_classes() for m in cls.get_methods()]
    return list(source_file.get_functions())


def build_component(
    node: Any, component_type: str, rule: DetectionRule, domain: str
) -> DraftComponent:
    """
    Build a draft component for a matched declaration.

    Args:
        node: The matched declaration
        component_type: Built-in or custom component type name
        rule: The detection rule that matched
        domain: Owning module name

    Returns:
        DraftComponent with every ``extract`` field evaluated

    Raises:
        ExtractionError: If any extract rule cannot produce a value
    """
    file, line = node_location(node)
    metadata: dict[str, Any] = {}
    for field_name, extraction_rule in (rule.extract or {}).items():
        metadata[field_name] = evaluate_extraction_rule(node, extraction_rule)

    location: ComponentLocation = {"file": file, "line": line}
    return {
        "type": component_type,
        "name": node.get_name(),
        "location": location,
        "domain": domain,
        "metadata": metadata,
    }


def extract_from_file(source_file: SourceFile, module: Module) -> list[DraftComponent]:
    """Extract all components a module's rules detect in one source file."""
    components: list[DraftComponent] = []
    for component_type, rule in iter_component_rules(module):
        for node in find_candidates(source_file, rule):
            if not node.get_name():
                continue
            if not evaluate_predicate(node, rule.where):
                continue
            components.append(build_component(node, component_type, rule, module.name))
    return components


def extract_components(
    source_files: Iterable[SourceFile],
    config: ResolvedExtractionConfig,
    config_dir: str | Path | None = None,
) -> list[DraftComponent]:
    """
    Extract draft components from parsed source files.

    Args:
        source_files: Parsed source files
        config: Resolved extraction config
        config_dir: Directory module path globs are relative to

    Returns:
        Draft components in file, component type and declaration order

    Raises:
        ExtractionError: If an extract rule fails on a matched declaration
    """
    components: list[DraftComponent] = []
    for source_file in source_files:
        module = find_module(source_file.get_file_path(), config.modules, config_dir)
        if module is None:
            logger.debug("No module matches %s", source_file.get_file_path())
            continue
        found = extract_from_file(source_file, module)
        logger.debug(
            "Extracted %d component(s) from %s (module %s)",
            len(found),
            source_file.get_file_path(),
            module.name,
        )
        components.extend(found)
    return components


__all__ = [
    "build_component",
    "extract_components",
    "extract_from_file",
    "find_candidates",
    "find_module",
    "iter_component_rules",
    "module_path_matches",
    "relative_path",
]
