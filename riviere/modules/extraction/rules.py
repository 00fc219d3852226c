"""
Extraction rule evaluation.

Each rule computes one field value of a matched component from structural
facts (names, decorators, file paths) or inline literals. Evaluation is
partial: when a rule's prerequisites are missing or a value is not a
literal, an ExtractionError located at the offending node is raised.
No rule depends on the result of another.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, assert_never

from riviere.common.exceptions import ExtractionError
from riviere.common.types import (
    ClassMember,
    ClassShaped,
    Decoratable,
    ExpressionKind,
    ExtractionValue,
    MethodShaped,
    Nameable,
    SourceLocated,
)
from riviere.services.config_models import (
    FromClassNameRule,
    FromConstructorParamsRule,
    FromDecoratorArgRule,
    FromDecoratorNameRule,
    FromFilePathRule,
    FromGenericArgRule,
    FromMethodNameRule,
    FromMethodSignatureRule,
    FromParameterTypeRule,
    FromPropertyRule,
    LiteralRule,
    Transform,
)

from .generic_rules import evaluate_from_generic_arg_rule
from .literals import LiteralValue, display_name, extract_literal_value, node_location
from .method_rules import (
    evaluate_from_constructor_params_rule,
    evaluate_from_method_signature_rule,
    evaluate_from_parameter_type_rule,
)
from .transforms import apply_transforms

if TYPE_CHECKING:
    from riviere.common.types import Decorator, Property
    from riviere.services.config_models import ExtractionRule, TransformOptions


def evaluate_extraction_rule(node: Any, rule: ExtractionRule) -> ExtractionValue:
    """
    Evaluate an extraction rule against a matched node.

    Args:
        node: AST node the component was matched on
        rule: Extraction rule to evaluate

    Returns:
        The extracted value

    Raises:
        ExtractionError: If the value cannot be extracted
    """
    match rule:
        case LiteralRule(literal=value):
            return value
        case FromClassNameRule():
            return evaluate_from_class_name_rule(rule, node)
        case FromMethodNameRule():
            return evaluate_from_method_name_rule(rule, node)
        case FromFilePathRule():
            return evaluate_from_file_path_rule(rule, node)
        case FromPropertyRule():
            return evaluate_from_property_rule(rule, node)
        case FromDecoratorArgRule():
            return evaluate_from_decorator_arg_rule(rule, node)
        case FromDecoratorNameRule():
            return evaluate_from_decorator_name_rule(rule, node)
        case FromGenericArgRule():
            return evaluate_from_generic_arg_rule(rule, node)
        case FromMethodSignatureRule():
            return evaluate_from_method_signature_rule(rule, node)
        case FromConstructorParamsRule():
            return evaluate_from_constructor_params_rule(rule, node)
        case FromParameterTypeRule():
            return evaluate_from_parameter_type_rule(rule, node)
        case never:
            assert_never(never)


def _transform_of(options: TransformOptions | bool) -> Transform | None:
    """Transform of a ``true | {transform?}`` rule payload."""
    if options is True:
        return None
    return options.transform


def _transform_literal(value: LiteralValue, transform: Transform | None) -> LiteralValue:
    """Apply a transform to string literals only."""
    if isinstance(value, str):
        return apply_transforms(value, transform)
    return value


# =============================================================================
# Names and paths
# =============================================================================


def _owning_class(node: Any) -> Any | None:
    """The node itself when it is a class, else its parent class."""
    if isinstance(node, ClassShaped):
        return node
    if isinstance(node, ClassMember):
        return node.get_parent_class()
    return None


def evaluate_from_class_name_rule(rule: FromClassNameRule, node: Any) -> str:
    """Name of the class, or of the class declaring a member."""
    file, line = node_location(node)
    cls = _owning_class(node)
    if cls is None:
        raise ExtractionError(
            f"fromClassName requires a class or class member, got '{display_name(node)}'",
            file,
            line,
        )

    name = cls.get_name() if isinstance(cls, Nameable) else None
    if not name:
        raise ExtractionError("Cannot extract class name from anonymous class", file, line)

    return apply_transforms(name, _transform_of(rule.from_class_name))


def evaluate_from_method_name_rule(rule: FromMethodNameRule, node: Any) -> str:
    """Name of a method or function."""
    file, line = node_location(node)
    if not isinstance(node, MethodShaped) or not isinstance(node, Nameable):
        raise ExtractionError(
            f"fromMethodName requires a method or function, got '{display_name(node)}'",
            file,
            line,
        )

    name = node.get_name()
    if not name:
        raise ExtractionError("Cannot extract method name from anonymous function", file, line)

    return apply_transforms(name, _transform_of(rule.from_method_name))


def evaluate_from_file_path_rule(rule: FromFilePathRule, node: Any) -> str:
    """Source file path, or a regex capture group of it."""
    file, line = node_location(node)
    if not isinstance(node, SourceLocated):
        raise ExtractionError("fromFilePath requires a node with a source file", file, line)

    options = rule.from_file_path
    if options is True:
        return file
    if options.pattern is None:
        return apply_transforms(file, options.transform)

    match = re.search(options.pattern, file)
    if match is None:
        raise ExtractionError(
            f"Pattern '{options.pattern}' did not match file path '{file}'", file, line
        )

    group_count = len(match.groups())
    if options.capture > group_count:
        raise ExtractionError(
            f"Capture group {options.capture} out of bounds. "
            f"Pattern has {group_count} capture groups",
            file,
            line,
        )

    captured = match.group(options.capture)
    if captured is None:
        raise ExtractionError(
            f"Capture group {options.capture} did not participate in the match", file, line
        )

    return apply_transforms(captured, options.transform)


# =============================================================================
# Properties
# =============================================================================


def _find_property(cls: Any, name: str, kind: str | None) -> Property | None:
    """Find a property on a class, then on base classes in the same file."""
    seen: set[int] = set()
    current = cls
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        for prop in current.get_properties():
            if prop.get_name() != name:
                continue
            if kind is None or prop.is_static() == (kind == "static"):
                return prop
        current = current.get_base_class()
    return None


def evaluate_from_property_rule(rule: FromPropertyRule, node: Any) -> LiteralValue:
    """
    Literal value of a class property, optionally inside an object literal.

    ``path: 'meta.route'`` reads the ``route`` key of the object literal
    assigned to property ``meta``.
    """
    options = rule.from_property
    file, line = node_location(node)
    cls = _owning_class(node)
    if cls is None:
        raise ExtractionError(
            f"fromProperty requires a class or class member, got '{display_name(node)}'",
            file,
            line,
        )

    segments = options.segments
    prop = _find_property(cls, segments[0], options.kind)
    if prop is None:
        file, line = node_location(cls)
        raise ExtractionError(
            f"Property '{segments[0]}' not found on class '{display_name(cls)}'", file, line
        )

    line = prop.get_start_line()
    expression = prop.get_initializer()
    walked = segments[0]
    for segment in segments[1:]:
        if expression is None:
            raise ExtractionError(f"Property '{walked}' has no initializer", file, line)
        if expression.kind != ExpressionKind.OBJECT:
            raise ExtractionError(
                f"Cannot read '{segment}' of non-object value ({expression.kind}) "
                f"at '{walked}': {expression.text}",
                file,
                line,
            )
        if segment not in expression.properties:
            raise ExtractionError(
                f"Property path '{walked}.{segment}' not found", file, expression.line
            )
        line = expression.line
        expression = expression.properties[segment]
        walked = f"{walked}.{segment}"

    value = extract_literal_value(expression, file, line)
    return _transform_literal(value, options.transform)


# =============================================================================
# Decorators
# =============================================================================


def _require_decorators(node: Any, rule_name: str) -> list[Decorator]:
    file, line = node_location(node)
    if not isinstance(node, Decoratable):
        raise ExtractionError(
            f"{rule_name} requires a decorated class or method, got '{display_name(node)}'",
            file,
            line,
        )
    decorators = node.get_decorators()
    if not decorators:
        raise ExtractionError(f"No decorators found on '{display_name(node)}'", file, line)
    return decorators


def evaluate_from_decorator_arg_rule(rule: FromDecoratorArgRule, node: Any) -> LiteralValue:
    """Literal argument of a decorator, by position or object-literal key."""
    options = rule.from_decorator_arg
    decorators = _require_decorators(node, "fromDecoratorArg")

    if options.decorator_name is None:
        decorator = decorators[0]
    else:
        decorator = next(
            (d for d in decorators if d.get_name() == options.decorator_name), None
        )
        if decorator is None:
            file, line = node_location(node)
            raise ExtractionError(
                f"Decorator '@{options.decorator_name}' not found on '{display_name(node)}'",
                file,
                line,
            )

    file, line = decorator.get_file_path(), decorator.get_start_line()
    args = decorator.get_arguments()
    if not args:
        raise ExtractionError(f"Decorator '@{decorator.get_name()}' has no arguments", file, line)

    if options.arg_index is not None:
        if options.arg_index >= len(args):
            raise ExtractionError(
                f"Argument position {options.arg_index} out of bounds. "
                f"Decorator has {len(args)} argument(s)",
                file,
                line,
            )
        value = extract_literal_value(args[options.arg_index], file, line)
        return _transform_literal(value, options.transform)

    first = args[0]
    if first.kind != ExpressionKind.OBJECT:
        raise ExtractionError(
            f"Expected object literal argument, got {first.kind}", file, line
        )
    if options.name not in first.properties:
        raise ExtractionError(
            f"Property '{options.name}' not found in decorator argument", file, line
        )
    initializer = first.properties[options.name]
    if initializer is None:
        raise ExtractionError(f"Property '{options.name}' has no initializer", file, line)

    value = extract_literal_value(initializer, file, line)
    return _transform_literal(value, options.transform)


def evaluate_from_decorator_name_rule(rule: FromDecoratorNameRule, node: Any) -> str:
    """Name of the node's decorator, optionally mapped to another value.

    With a mapping, the first decorator named in the mapping is used.
    """
    decorators = _require_decorators(node, "fromDecoratorName")
    options = rule.from_decorator_name

    if options is True:
        return decorators[0].get_name()

    decorator = decorators[0]
    if options.mapping:
        decorator = next(
            (d for d in decorators if d.get_name() in options.mapping), decorator
        )
    name = decorator.get_name()
    mapped = options.mapping.get(name, name) if options.mapping else name
    return apply_transforms(mapped, options.transform)


__all__ = [
    "evaluate_extraction_rule",
    "evaluate_from_class_name_rule",
    "evaluate_from_constructor_params_rule",
    "evaluate_from_decorator_arg_rule",
    "evaluate_from_decorator_name_rule",
    "evaluate_from_file_path_rule",
    "evaluate_from_generic_arg_rule",
    "evaluate_from_method_name_rule",
    "evaluate_from_method_signature_rule",
    "evaluate_from_parameter_type_rule",
    "evaluate_from_property_rule",
]
