"""
Transform pipeline for extracted string values.

A Transform enables any subset of six string normalizations. They are always
applied in the same order regardless of the order the keys were authored in:

1. stripSuffix
2. stripPrefix
3. toLowerCase
4. toUpperCase
5. kebabToPascal
6. pascalToKebab
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from riviere.services.config_models import Transform

_UPPERCASE_PATTERN = re.compile(r"([A-Z])")


def strip_suffix(value: str, suffix: str) -> str:
    """Remove ``suffix`` from the end of ``value`` if present."""
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value


def strip_prefix(value: str, prefix: str) -> str:
    """Remove ``prefix`` from the start of ``value`` if present."""
    if value.startswith(prefix):
        return value[len(prefix) :]
    return value


def kebab_to_pascal(value: str) -> str:
    """
    Convert kebab-case to PascalCase.

    Splits on '-' and upper-cases the first character of each part. Parts are
    not lower-cased, so the conversion is not the inverse of pascal_to_kebab.

    Examples:
        >>> kebab_to_pascal("place-order")
        'PlaceOrder'
        >>> kebab_to_pascal("a--b")
        'AB'
    """
    return "".join(part[:1].upper() + part[1:] for part in value.split("-"))


def pascal_to_kebab(value: str) -> str:
    """
    Convert PascalCase to kebab-case.

    Inserts '-' before every uppercase letter, lower-cases the result and
    drops a single leading '-'.

    Examples:
        >>> pascal_to_kebab("PlaceOrder")
        'place-order'
        >>> pascal_to_kebab("HTTPServer")
        'h-t-t-p-server'
    """
    result = _UPPERCASE_PATTERN.sub(r"-\1", value).lower()
    if result.startswith("-"):
        return result[1:]
    return result


def _build_steps(transform: Transform) -> list[Callable[[str], str]]:
    """Build the enabled transform steps in their fixed application order."""
    steps: list[Callable[[str], str]] = []

    if transform.strip_suffix is not None:
        suffix = transform.strip_suffix
        steps.append(lambda v: strip_suffix(v, suffix))
    if transform.strip_prefix is not None:
        prefix = transform.strip_prefix
        steps.append(lambda v: strip_prefix(v, prefix))
    if transform.to_lower_case:
        steps.append(str.lower)
    if transform.to_upper_case:
        steps.append(str.upper)
    if transform.kebab_to_pascal:
        steps.append(kebab_to_pascal)
    if transform.pascal_to_kebab:
        steps.append(pascal_to_kebab)

    return steps


def apply_transforms(value: str, transform: Transform | None) -> str:
    """
    Apply a transform to a string value.

    Args:
        value: Input string
        transform: Transform configuration, or None for identity

    Returns:
        The transformed string
    """
    if transform is None:
        return value

    result = value
    for step in _build_steps(transform):
        result = step(result)
    return result


__all__ = [
    "apply_transforms",
    "kebab_to_pascal",
    "pascal_to_kebab",
    "strip_prefix",
    "strip_suffix",
]
