"""Tests for services.resolution module."""

from __future__ import annotations

import pytest

from riviere.common.exceptions import ConfigLoaderRequiredError, MissingComponentRuleError
from riviere.services.config_models import (
    DetectionRule,
    ExtractionConfig,
    Module,
    ModuleConfig,
    NotUsed,
)
from riviere.services.resolution import merge_custom_types, resolve_config, resolve_module

CONTROLLERS = {"find": "classes", "where": {"hasDecorator": {"name": "Controller"}}}
USE_CASES = {"find": "classes", "where": {"nameEndsWith": {"suffix": "UseCase"}}}
EVENTS = {"find": "classes", "where": {"extendsClass": {"name": "DomainEvent"}}}


@pytest.fixture
def base_module(all_not_used) -> Module:
    """A fully specified base module with one custom type."""
    return Module.model_validate(
        {
            "name": "base",
            "path": "**",
            **all_not_used,
            "api": CONTROLLERS,
            "event": EVENTS,
            "customTypes": {
                "repository": {"find": "classes", "where": {"nameEndsWith": {"suffix": "Repository"}}},
                "saga": {"find": "classes", "where": {"nameEndsWith": {"suffix": "Saga"}}},
            },
        }
    )


class RecordingLoader:
    """Config loader returning a fixed module and recording requested sources."""

    def __init__(self, module: Module):
        self.module = module
        self.calls: list[str] = []

    def __call__(self, source: str) -> Module:
        self.calls.append(source)
        return self.module


class TestStandaloneModules:
    """Tests for modules without extends."""

    def test_complete_module_resolves(self, all_not_used):
        """Every rule is carried over unchanged."""
        config = ExtractionConfig.model_validate(
            {"modules": [{"name": "orders", "path": "src/orders/**", **all_not_used, "api": CONTROLLERS}]}
        )
        resolved = resolve_config(config)
        module = resolved.modules[0]
        assert module.name == "orders"
        assert module.path == "src/orders/**"
        assert isinstance(module.api, DetectionRule)
        assert isinstance(module.ui, NotUsed)
        assert module.custom_types is None

    def test_first_missing_rule_is_reported(self):
        """Rules are checked in component type order."""
        module = ModuleConfig.model_validate(
            {"name": "orders", "path": "**", "api": CONTROLLERS, "event": EVENTS}
        )
        with pytest.raises(MissingComponentRuleError) as exc_info:
            resolve_module(module)
        assert exc_info.value.rule_name == "useCase"
        assert str(exc_info.value) == (
            "Module 'orders' is missing required rule 'useCase'. "
            "Either provide the rule or use extends to inherit from a base config."
        )

    def test_first_failing_module_aborts(self, all_not_used):
        """Resolution stops at the first module that fails."""
        config = ExtractionConfig.model_validate(
            {
                "modules": [
                    {"name": "broken", "path": "a/**", "api": CONTROLLERS},
                    {"name": "also-broken", "path": "b/**"},
                ]
            }
        )
        with pytest.raises(MissingComponentRuleError, match="Module 'broken'"):
            resolve_config(config)

    def test_schema_and_order_preserved(self, all_not_used):
        """Module order and $schema survive resolution."""
        config = ExtractionConfig.model_validate(
            {
                "$schema": "./schema.json",
                "modules": [
                    {"name": "b", "path": "b/**", **all_not_used},
                    {"name": "a", "path": "a/**", **all_not_used},
                ],
            }
        )
        resolved = resolve_config(config)
        assert resolved.schema_ == "./schema.json"
        assert [m.name for m in resolved.modules] == ["b", "a"]


class TestExtendedModules:
    """Tests for modules with extends."""

    def test_loader_required(self):
        """extends without a loader fails."""
        module = ModuleConfig.model_validate({"name": "orders", "path": "**", "extends": "./base.yaml"})
        with pytest.raises(ConfigLoaderRequiredError) as exc_info:
            resolve_module(module)
        assert str(exc_info.value) == "Module 'orders' uses extends but no config loader was provided."

    def test_inherits_missing_rules(self, base_module):
        """Rules absent locally come from the base."""
        loader = RecordingLoader(base_module)
        module = ModuleConfig.model_validate(
            {"name": "orders", "path": "src/orders/**", "extends": "./base.yaml", "useCase": USE_CASES}
        )
        resolved = resolve_module(module, loader)
        assert resolved.name == "orders"
        assert resolved.path == "src/orders/**"
        assert resolved.use_case == DetectionRule.model_validate(USE_CASES)
        assert resolved.api == base_module.api
        assert resolved.event == base_module.event
        assert isinstance(resolved.ui, NotUsed)

    def test_local_rules_win(self, base_module):
        """A local rule replaces the base rule entirely."""
        module = ModuleConfig.model_validate(
            {"name": "orders", "path": "**", "extends": "pkg", "api": {"notUsed": True}}
        )
        resolved = resolve_module(module, RecordingLoader(base_module))
        assert isinstance(resolved.api, NotUsed)

    def test_loader_called_once_per_module(self, base_module):
        """The loader is invoked once with the extends source."""
        loader = RecordingLoader(base_module)
        config = ExtractionConfig.model_validate(
            {
                "modules": [
                    {"name": "orders", "path": "a/**", "extends": "./base.yaml"},
                    {"name": "billing", "path": "b/**", "extends": "@acme/conventions"},
                ]
            }
        )
        resolve_config(config, loader)
        assert loader.calls == ["./base.yaml", "@acme/conventions"]

    def test_custom_types_merge(self, base_module):
        """Local custom types override base custom types of the same name."""
        local_saga = {"find": "functions", "where": {"nameMatches": {"pattern": "^saga"}}}
        module = ModuleConfig.model_validate(
            {
                "name": "orders",
                "path": "**",
                "extends": "pkg",
                "customTypes": {
                    "saga": local_saga,
                    "policy": {"find": "classes", "where": {"nameEndsWith": {"suffix": "Policy"}}},
                },
            }
        )
        resolved = resolve_module(module, RecordingLoader(base_module))
        assert list(resolved.custom_types) == ["repository", "saga", "policy"]
        assert resolved.custom_types["saga"] == DetectionRule.model_validate(local_saga)

    def test_base_custom_types_inherited(self, base_module):
        """Without local custom types the base ones are kept."""
        module = ModuleConfig.model_validate({"name": "orders", "path": "**", "extends": "pkg"})
        resolved = resolve_module(module, RecordingLoader(base_module))
        assert set(resolved.custom_types) == {"repository", "saga"}


class TestMergeCustomTypes:
    """Tests for merge_custom_types."""

    def test_both_absent(self):
        """No custom types on either side stays absent."""
        assert merge_custom_types(None, None) is None

    def test_one_side(self):
        """Either side alone is copied."""
        rule = DetectionRule.model_validate(USE_CASES)
        assert merge_custom_types({"a": rule}, None) == {"a": rule}
        assert merge_custom_types(None, {"b": rule}) == {"b": rule}
