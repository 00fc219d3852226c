"""Tests for modules.extraction.rules module."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter

from riviere.common.exceptions import ExtractionError
from riviere.modules.extraction.rules import evaluate_extraction_rule
from riviere.services.config_models import ExtractionRule

_rule = TypeAdapter(ExtractionRule)


def rule(data: dict):
    return _rule.validate_python(data)


CONTROLLER = """
@Controller('/orders', { version: 2, name: 'orders-api', route: ROUTE })
@Tag('commerce')
class PlaceOrderController extends BaseController {
  static readonly route = '/orders/place';
  meta = { http: { method: 'POST', retries: 3 }, label: `x` };
  enabled = true;
  timeout = 30;
  missing: string;
  dynamic = computeRoute();

  @Post()
  @Audit('place', 7)
  handlePlaceOrder(cmd: PlaceOrder): void {}
}

class BaseController {
  inherited = 'from-base';
}
"""


class TestLiteralRule:
    """Tests for the literal rule."""

    def test_returns_value_for_any_node(self):
        """literal ignores the node."""
        assert evaluate_extraction_rule(object(), rule({"literal": "REST"})) == "REST"
        assert evaluate_extraction_rule(object(), rule({"literal": 3})) == 3
        assert evaluate_extraction_rule(object(), rule({"literal": False})) is False


class TestFromClassName:
    """Tests for fromClassName."""

    def test_class_name(self, parse_class):
        """Returns the class name."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromClassName": True})) == "PlaceOrderController"

    def test_with_transform(self, parse_class):
        """Applies the transform."""
        cls = parse_class(CONTROLLER)
        result = evaluate_extraction_rule(
            cls,
            rule({"fromClassName": {"transform": {"stripSuffix": "Controller", "pascalToKebab": True}}}),
        )
        assert result == "place-order"

    def test_member_uses_parent_class(self, parse_method):
        """For a method the declaring class name is used."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        assert evaluate_extraction_rule(method, rule({"fromClassName": True})) == "PlaceOrderController"

    def test_function_raises(self, parse_ts):
        """A function has no class."""
        function = parse_ts("function run() {}").get_functions()[0]
        with pytest.raises(ExtractionError, match="requires a class or class member"):
            evaluate_extraction_rule(function, rule({"fromClassName": True}))

    def test_anonymous_class_raises(self, parse_ts):
        """An anonymous class has no name to extract."""
        cls = parse_ts("export default class {}").get_classes()[0]
        with pytest.raises(ExtractionError, match="anonymous class"):
            evaluate_extraction_rule(cls, rule({"fromClassName": True}))


class TestFromMethodName:
    """Tests for fromMethodName."""

    def test_method_name(self, parse_method):
        """Returns the method name, transformed."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        assert evaluate_extraction_rule(method, rule({"fromMethodName": True})) == "handlePlaceOrder"
        result = evaluate_extraction_rule(
            method, rule({"fromMethodName": {"transform": {"stripPrefix": "handle"}}})
        )
        assert result == "PlaceOrder"

    def test_function_name(self, parse_ts):
        """Functions are accepted."""
        function = parse_ts("export function placeOrder() {}").get_functions()[0]
        assert evaluate_extraction_rule(function, rule({"fromMethodName": True})) == "placeOrder"

    def test_class_raises(self, parse_class):
        """A class is not a method."""
        with pytest.raises(ExtractionError, match="requires a method or function"):
            evaluate_extraction_rule(parse_class(CONTROLLER), rule({"fromMethodName": True}))


class TestFromFilePath:
    """Tests for fromFilePath."""

    def test_whole_path(self, parse_class):
        """true returns the file path."""
        cls = parse_class(CONTROLLER, file_path="src/orders/api/place-order.ts")
        assert evaluate_extraction_rule(cls, rule({"fromFilePath": True})) == "src/orders/api/place-order.ts"

    def test_capture_group(self, parse_class):
        """The default capture group is 1."""
        cls = parse_class(CONTROLLER, file_path="src/orders/api/place-order.ts")
        result = evaluate_extraction_rule(
            cls, rule({"fromFilePath": {"pattern": r"src/([^/]+)/", "transform": {"toUpperCase": True}}})
        )
        assert result == "ORDERS"

    def test_explicit_capture(self, parse_class):
        """A specific capture group can be selected."""
        cls = parse_class(CONTROLLER, file_path="src/orders/api/place-order.ts")
        result = evaluate_extraction_rule(
            cls, rule({"fromFilePath": {"pattern": r"src/(\w+)/api/([\w-]+)\.ts", "capture": 2}})
        )
        assert result == "place-order"

    def test_no_match_raises(self, parse_class):
        """A pattern that does not match raises."""
        cls = parse_class(CONTROLLER, file_path="lib/x.ts")
        with pytest.raises(ExtractionError, match="did not match file path 'lib/x.ts'"):
            evaluate_extraction_rule(cls, rule({"fromFilePath": {"pattern": "^src/(.*)"}}))

    def test_capture_out_of_bounds(self, parse_class):
        """A capture index beyond the group count raises."""
        cls = parse_class(CONTROLLER, file_path="src/x.ts")
        with pytest.raises(ExtractionError, match="Capture group 3 out of bounds. Pattern has 1 capture groups"):
            evaluate_extraction_rule(cls, rule({"fromFilePath": {"pattern": "src/(.*)", "capture": 3}}))


class TestFromProperty:
    """Tests for fromProperty."""

    def test_static_string(self, parse_class):
        """Reads a static property literal."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "route", "kind": "static"}})) == "/orders/place"

    def test_kind_mismatch_not_found(self, parse_class):
        """An instance lookup does not see static properties."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Property 'route' not found on class 'PlaceOrderController'"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "route", "kind": "instance"}}))

    def test_number_and_boolean(self, parse_class):
        """Numbers and booleans are returned untransformed."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "timeout", "transform": {"toUpperCase": True}}})) == 30
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "enabled"}})) is True

    def test_nested_path(self, parse_class):
        """Dotted paths walk object literal initializers."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"path": "meta.http.method"}})) == "POST"
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"path": "meta.http.retries"}})) == 3

    def test_missing_path_segment(self, parse_class):
        """A missing key raises."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Property path 'meta.http.url' not found"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"path": "meta.http.url"}}))

    def test_walk_into_non_object(self, parse_class):
        """Walking into a scalar raises."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="non-object value"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"path": "timeout.value"}}))

    def test_template_string_is_not_literal(self, parse_class):
        """Template strings are rejected."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Non-literal value detected"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"path": "meta.label"}}))

    def test_call_is_not_literal(self, parse_class):
        """Call expressions are rejected."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Non-literal value detected \\(call_expression\\)"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "dynamic"}}))

    def test_no_initializer(self, parse_class):
        """A declared property without initializer raises."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="No initializer found"):
            evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "missing"}}))

    def test_inherited_from_base_in_same_file(self, parse_class):
        """Base classes declared in the same file are searched."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromProperty": {"name": "inherited"}})) == "from-base"

    def test_member_reads_parent_property(self, parse_method):
        """On a method, properties of the declaring class are read."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        assert evaluate_extraction_rule(method, rule({"fromProperty": {"name": "route"}})) == "/orders/place"

    def test_string_transform(self, parse_class):
        """Transforms apply to string values."""
        cls = parse_class(CONTROLLER)
        result = evaluate_extraction_rule(
            cls, rule({"fromProperty": {"name": "inherited", "transform": {"kebabToPascal": True}}})
        )
        assert result == "FromBase"


class TestFromDecoratorArg:
    """Tests for fromDecoratorArg."""

    def test_positional_first_decorator(self, parse_class):
        """Without decoratorName the first decorator is used."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"argIndex": 0}})) == "/orders"

    def test_named_decorator_positional(self, parse_class):
        """decoratorName selects the decorator."""
        cls = parse_class(CONTROLLER)
        result = evaluate_extraction_rule(
            cls, rule({"fromDecoratorArg": {"decoratorName": "Tag", "argIndex": 0, "transform": {"toUpperCase": True}}})
        )
        assert result == "COMMERCE"

    def test_position_alias(self, parse_method):
        """position is accepted as an alias of argIndex."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        assert evaluate_extraction_rule(method, rule({"fromDecoratorArg": {"decoratorName": "Audit", "position": 1}})) == 7

    def test_object_property(self, parse_class):
        """name reads a property of an object literal first argument."""
        cls = parse_class(
            """
            @Component({ selector: 'app-orders', version: 2 })
            class OrdersPage {}
            """
        )
        assert evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"name": "selector"}})) == "app-orders"
        assert evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"name": "version"}})) == 2

    def test_non_object_first_argument(self, parse_class):
        """name requires an object literal first argument."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Expected object literal argument, got string"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"name": "version"}}))

    def test_missing_object_property(self, parse_class):
        """A key absent from the object raises."""
        cls = parse_class(
            """
            @Component({ selector: 'app-orders' })
            class OrdersPage {}
            """
        )
        with pytest.raises(ExtractionError, match="Property 'route' not found in decorator argument"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"name": "route"}}))

    def test_identifier_argument_rejected(self, parse_class):
        """Non-literal object values are rejected."""
        cls = parse_class(
            """
            @Component({ selector: SELECTOR })
            class OrdersPage {}
            """
        )
        with pytest.raises(ExtractionError, match="Non-literal value detected \\(identifier\\): SELECTOR"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"name": "selector"}}))

    def test_out_of_bounds(self, parse_class):
        """An index past the arguments raises with the count."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Argument position 5 out of bounds. Decorator has 2 argument\\(s\\)"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"argIndex": 5}}))

    def test_no_arguments(self, parse_method):
        """A decorator called without arguments raises."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        with pytest.raises(ExtractionError, match="Decorator '@Post' has no arguments"):
            evaluate_extraction_rule(method, rule({"fromDecoratorArg": {"decoratorName": "Post", "argIndex": 0}}))

    def test_decorator_not_found(self, parse_class):
        """A named decorator that is absent raises."""
        cls = parse_class(CONTROLLER)
        with pytest.raises(ExtractionError, match="Decorator '@Get' not found"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"decoratorName": "Get", "argIndex": 0}}))

    def test_undecorated_raises(self, parse_class):
        """A node without decorators raises."""
        cls = parse_class("class Plain {}")
        with pytest.raises(ExtractionError, match="No decorators found on 'Plain'"):
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"argIndex": 0}}))

    def test_error_location_is_decorator(self, parse_class):
        """Errors point at the decorator line."""
        cls = parse_class(CONTROLLER, file_path="src/c.ts")
        with pytest.raises(ExtractionError) as exc_info:
            evaluate_extraction_rule(cls, rule({"fromDecoratorArg": {"decoratorName": "Tag", "argIndex": 3}}))
        assert exc_info.value.location == {"file": "src/c.ts", "line": 2}


class TestFromDecoratorName:
    """Tests for fromDecoratorName."""

    def test_first_decorator(self, parse_class):
        """true returns the first decorator's name."""
        cls = parse_class(CONTROLLER)
        assert evaluate_extraction_rule(cls, rule({"fromDecoratorName": True})) == "Controller"

    def test_mapping(self, parse_method):
        """The first decorator named in the mapping is mapped."""
        method = parse_method(CONTROLLER, "handlePlaceOrder")
        result = evaluate_extraction_rule(
            method, rule({"fromDecoratorName": {"mapping": {"Get": "GET", "Post": "POST"}}})
        )
        assert result == "POST"

    def test_mapping_miss_keeps_name(self, parse_class):
        """Unmapped names pass through and are transformed."""
        cls = parse_class(CONTROLLER)
        result = evaluate_extraction_rule(
            cls, rule({"fromDecoratorName": {"mapping": {"Get": "GET"}, "transform": {"toLowerCase": True}}})
        )
        assert result == "controller"

    def test_member_expression_decorator(self, parse_class):
        """For @ns.Name() the name is the last property."""
        cls = parse_class(
            """
            @http.Controller()
            class Api {}
            """
        )
        assert evaluate_extraction_rule(cls, rule({"fromDecoratorName": True})) == "Controller"

    def test_undecorated_raises(self, parse_ts):
        """Functions cannot be decorated."""
        function = parse_ts("function run() {}").get_functions()[0]
        with pytest.raises(ExtractionError, match="requires a decorated class or method"):
            evaluate_extraction_rule(function, rule({"fromDecoratorName": True}))
