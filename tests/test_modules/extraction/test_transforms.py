"""Tests for modules.extraction.transforms module."""

from __future__ import annotations

import pytest

from riviere.modules.extraction.transforms import (
    apply_transforms,
    kebab_to_pascal,
    pascal_to_kebab,
    strip_prefix,
    strip_suffix,
)
from riviere.services.config_models import Transform


def make(**kwargs) -> Transform:
    return Transform.model_validate(kwargs)


class TestStripping:
    """Tests for strip_suffix and strip_prefix."""

    def test_strip_suffix_removes_trailing_match(self):
        """Should remove the suffix when present."""
        assert strip_suffix("OrderController", "Controller") == "Order"

    def test_strip_suffix_keeps_value_without_match(self):
        """Should leave the value unchanged when the suffix is absent."""
        assert strip_suffix("OrderService", "Controller") == "OrderService"

    def test_empty_suffix_is_identity(self):
        """An empty suffix should not strip anything."""
        assert strip_suffix("Order", "") == "Order"

    def test_strip_prefix(self):
        """Should remove a leading prefix only."""
        assert strip_prefix("handleOrder", "handle") == "Order"
        assert strip_prefix("Order", "handle") == "Order"


class TestCaseConversion:
    """Tests for kebab_to_pascal and pascal_to_kebab."""

    def test_kebab_to_pascal(self):
        """Should upper-case the first letter of each dash separated part."""
        assert kebab_to_pascal("order-placed") == "OrderPlaced"

    def test_kebab_to_pascal_keeps_inner_case(self):
        """Parts are not lower-cased."""
        assert kebab_to_pascal("http-API") == "HttpAPI"

    def test_pascal_to_kebab(self):
        """Should insert dashes before capitals and lower-case."""
        assert pascal_to_kebab("OrderPlaced") == "order-placed"

    def test_pascal_to_kebab_splits_consecutive_capitals(self):
        """Every capital gets its own dash."""
        assert pascal_to_kebab("APIKey") == "a-p-i-key"

    def test_pascal_to_kebab_on_camel_case(self):
        """A lower-case first letter gets no leading dash."""
        assert pascal_to_kebab("placeOrder") == "place-order"


class TestApplyTransforms:
    """Tests for apply_transforms."""

    def test_none_is_identity(self):
        """No transform returns the value unchanged."""
        assert apply_transforms("Order", None) == "Order"

    def test_empty_transform_is_identity(self):
        """A transform with nothing enabled returns the value unchanged."""
        assert apply_transforms("Order", Transform()) == "Order"

    def test_strip_suffix_then_kebab(self):
        """stripSuffix runs before pascalToKebab."""
        transform = make(stripSuffix="Controller", pascalToKebab=True)
        assert apply_transforms("PlaceOrderController", transform) == "place-order"

    def test_fixed_order_regardless_of_authoring_order(self):
        """Lowercasing runs after stripping, so the suffix must match original case."""
        transform = make(toLowerCase=True, stripSuffix="Handler")
        assert apply_transforms("OrderHandler", transform) == "order"

    def test_upper_after_lower(self):
        """toUpperCase runs after toLowerCase."""
        transform = make(toLowerCase=True, toUpperCase=True)
        assert apply_transforms("Order", transform) == "ORDER"

    def test_strip_prefix_then_kebab_to_pascal(self):
        """stripPrefix runs before kebabToPascal."""
        transform = make(stripPrefix="evt-", kebabToPascal=True)
        assert apply_transforms("evt-order-placed", transform) == "OrderPlaced"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("UserController", "user"),
            ("AdminUserController", "admin-user"),
            ("Controller", ""),
        ],
    )
    def test_controller_to_route(self, value, expected):
        """Typical controller name to route segment conversion."""
        transform = make(stripSuffix="Controller", pascalToKebab=True)
        assert apply_transforms(value, transform) == expected

    def test_unknown_transform_key_rejected(self):
        """Unknown transform keys fail validation."""
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            make(toSnakeCase=True)
