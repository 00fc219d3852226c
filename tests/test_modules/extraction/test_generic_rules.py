"""Tests for modules.extraction.generic_rules module."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from riviere.common.exceptions import ExtractionError
from riviere.modules.extraction.rules import evaluate_extraction_rule
from riviere.services.config_models import ExtractionRule

_rule = TypeAdapter(ExtractionRule)


def rule(data: dict):
    return _rule.validate_python(data)


HANDLERS = """
export class OrderPlacedHandler implements Auditable, EventHandler<OrderPlaced, OrderContext> {}

export class ShipmentHandler extends BaseHandler<ShipmentCreated> implements Handler<Other> {}

export class GenericHandler<T> implements EventHandler<T> {}

export class NestedHandler implements EventHandler<Envelope<OrderPlaced>> {}

export class PlainHandler extends BaseHandler {}
"""


@pytest.fixture
def classes(parse_ts):
    """Classes of the handler snippet by name."""
    return {c.get_name(): c for c in parse_ts(HANDLERS).get_classes()}


class TestFromGenericArg:
    """Tests for fromGenericArg."""

    def test_named_interface(self, classes):
        """interface selects the implements entry."""
        cls = classes["OrderPlacedHandler"]
        assert evaluate_extraction_rule(
            cls, rule({"fromGenericArg": {"interface": "EventHandler", "position": 0}})
        ) == "OrderPlaced"
        assert evaluate_extraction_rule(
            cls, rule({"fromGenericArg": {"interface": "EventHandler", "position": 1}})
        ) == "OrderContext"

    def test_first_generic_heritage_entry(self, classes):
        """Without interface, extends is checked before implements."""
        cls = classes["ShipmentHandler"]
        assert evaluate_extraction_rule(cls, rule({"fromGenericArg": {"position": 0}})) == "ShipmentCreated"

    def test_skips_non_generic_entries(self, classes):
        """Entries without type arguments are skipped."""
        cls = classes["OrderPlacedHandler"]
        assert evaluate_extraction_rule(cls, rule({"fromGenericArg": {"position": 0}})) == "OrderPlaced"

    def test_transform(self, classes):
        """The transform is applied to the type text."""
        cls = classes["OrderPlacedHandler"]
        result = evaluate_extraction_rule(
            cls,
            rule({"fromGenericArg": {"interface": "EventHandler", "position": 0, "transform": {"pascalToKebab": True}}}),
        )
        assert result == "order-placed"

    def test_nested_generic_returns_full_text(self, classes):
        """A generic type argument is returned as written."""
        cls = classes["NestedHandler"]
        assert evaluate_extraction_rule(cls, rule({"fromGenericArg": {"position": 0}})) == "Envelope<OrderPlaced>"

    def test_interface_not_implemented(self, classes):
        """A missing interface raises."""
        cls = classes["ShipmentHandler"]
        with pytest.raises(ExtractionError, match="does not implement interface 'EventHandler'"):
            evaluate_extraction_rule(cls, rule({"fromGenericArg": {"interface": "EventHandler", "position": 0}}))

    def test_no_generic_arguments(self, classes):
        """A class without generic heritage raises."""
        with pytest.raises(ExtractionError, match="has no generic type arguments"):
            evaluate_extraction_rule(classes["PlainHandler"], rule({"fromGenericArg": {"position": 0}}))

    def test_position_out_of_bounds(self, classes):
        """Positions beyond the argument count raise."""
        cls = classes["OrderPlacedHandler"]
        with pytest.raises(ExtractionError, match="Position 2 out of bounds. Interface has 2 type argument\\(s\\)"):
            evaluate_extraction_rule(cls, rule({"fromGenericArg": {"interface": "EventHandler", "position": 2}}))

    def test_type_parameter_rejected(self, classes):
        """A class type parameter is not a concrete type."""
        cls = classes["GenericHandler"]
        with pytest.raises(ExtractionError, match="is type parameter 'T', expected concrete type"):
            evaluate_extraction_rule(cls, rule({"fromGenericArg": {"position": 0}}))

    def test_method_raises(self, parse_method):
        """Only classes have heritage clauses."""
        method = parse_method("class A { run() {} }", "run")
        with pytest.raises(ExtractionError, match="fromGenericArg requires a class"):
            evaluate_extraction_rule(method, rule({"fromGenericArg": {"position": 0}}))
