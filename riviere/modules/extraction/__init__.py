"""
Extraction module - Pure functions for detecting and describing components.

Architecture:
- transforms.py: String transform pipeline
- literals.py: Literal detection and error locations
- predicates.py: Predicate evaluation
- rules.py: Extraction rule dispatch (names, paths, properties, decorators)
- method_rules.py: Signature, constructor and parameter type rules
- generic_rules.py: Generic type argument rule
- components.py: Matching declarations to component types

Nodes are only inspected through the capability Protocols in
riviere.common.types; evaluation never touches the filesystem.
"""

from __future__ import annotations

from .components import extract_components, extract_from_file, find_module
from .literals import extract_literal_value, is_literal_value
from .predicates import evaluate_predicate
from .rules import evaluate_extraction_rule
from .transforms import apply_transforms, kebab_to_pascal, pascal_to_kebab

__all__ = [
    "apply_transforms",
    "evaluate_extraction_rule",
    "evaluate_predicate",
    "extract_components",
    "extract_from_file",
    "extract_literal_value",
    "find_module",
    "is_literal_value",
    "kebab_to_pascal",
    "pascal_to_kebab",
]
