"""
Config resolution - turning authored module configs into complete modules.

A module without ``extends`` must declare every built-in component rule. A
module with ``extends`` loads its base through the injected ConfigLoader
and takes each rule from the local config when present, otherwise from the
base. Custom types merge with local entries winning.

Resolution fails fast: the first error aborts the whole config.
"""

from __future__ import annotations

import logging

from riviere.common.exceptions import ConfigLoaderRequiredError, MissingComponentRuleError
from riviere.common.types import ConfigLoader
from riviere.services.config_models import (
    COMPONENT_FIELDS,
    COMPONENT_TYPES,
    ComponentRule,
    CustomTypes,
    ExtractionConfig,
    Module,
    ModuleConfig,
    ResolvedExtractionConfig,
)

logger = logging.getLogger(__name__)


def resolve_config(
    config: ExtractionConfig, loader: ConfigLoader | None = None
) -> ResolvedExtractionConfig:
    """
    Resolve every module of an extraction config.

    Args:
        config: Authored config (after $ref expansion)
        loader: Resolves ``extends`` sources to base modules

    Returns:
        ResolvedExtractionConfig with modules in their original order

    Raises:
        MissingComponentRuleError: If a module without extends omits a rule
        ConfigLoaderRequiredError: If a module uses extends and loader is None
    """
    modules = [resolve_module(module, loader) for module in config.modules]
    return ResolvedExtractionConfig(schema_=config.schema_, modules=modules)


def resolve_module(module: ModuleConfig, loader: ConfigLoader | None = None) -> Module:
    """Resolve a single module config."""
    if module.extends is None:
        resolved = _resolve_standalone(module)
    else:
        if loader is None:
            raise ConfigLoaderRequiredError(module.name)
        base = loader(module.extends)
        resolved = _resolve_with_base(module, base)

    logger.debug(
        "Resolved module '%s' (path=%s, extends=%s)", module.name, module.path, module.extends
    )
    return resolved


def merge_custom_types(
    base: CustomTypes | None, local: CustomTypes | None
) -> CustomTypes | None:
    """Merge custom types, local entries overriding base entries of the same name."""
    if base is None and local is None:
        return None
    return {**(base or {}), **(local or {})}


def _resolve_standalone(module: ModuleConfig) -> Module:
    rules: dict[str, ComponentRule] = {}
    for component_type in COMPONENT_TYPES:
        rule = module.rule_for(component_type)
        if rule is None:
            raise MissingComponentRuleError(module.name, component_type)
        rules[COMPONENT_FIELDS[component_type]] = rule

    return Module(
        name=module.name,
        path=module.path,
        custom_types=module.custom_types,
        **rules,
    )


def _resolve_with_base(module: ModuleConfig, base: Module) -> Module:
    rules: dict[str, ComponentRule] = {}
    for component_type in COMPONENT_TYPES:
        local = module.rule_for(component_type)
        rules[COMPONENT_FIELDS[component_type]] = (
            local if local is not None else base.rule_for(component_type)
        )

    return Module(
        name=module.name,
        path=module.path,
        custom_types=merge_custom_types(base.custom_types, module.custom_types),
        **rules,
    )


__all__ = ["merge_custom_types", "resolve_config", "resolve_module"]
