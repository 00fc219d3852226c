"""
Signature-based extraction rules: method signatures, constructor parameters
and parameter types.

Missing type annotations are reported as ``"unknown"`` rather than raising,
since parameter and return types are often left to inference.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from riviere.common.exceptions import ExtractionError
from riviere.common.types import ClassShaped, MethodShaped, MethodSignature, ParameterInfo

from .literals import display_name, node_location
from .transforms import apply_transforms

if TYPE_CHECKING:
    from riviere.common.types import Parameter
    from riviere.services.config_models import (
        FromConstructorParamsRule,
        FromMethodSignatureRule,
        FromParameterTypeRule,
    )

UNKNOWN_TYPE = "unknown"


def parameter_info(param: Parameter) -> ParameterInfo:
    """Describe a parameter by name and annotated type text."""
    type_node = param.get_type_node()
    return {
        "name": param.get_name(),
        "type": type_node.text if type_node is not None else UNKNOWN_TYPE,
    }


def _require_method(node: Any, rule_name: str) -> Any:
    if not isinstance(node, MethodShaped):
        file, line = node_location(node)
        raise ExtractionError(
            f"{rule_name} requires a method or function, got '{display_name(node)}'",
            file,
            line,
        )
    return node


def evaluate_from_method_signature_rule(
    rule: FromMethodSignatureRule, node: Any
) -> MethodSignature:
    """Return the parameters and return type of a method or function."""
    method = _require_method(node, "fromMethodSignature")
    return_type = method.get_return_type_node()
    return {
        "parameters": [parameter_info(p) for p in method.get_parameters()],
        "returnType": return_type.text if return_type is not None else UNKNOWN_TYPE,
    }


def evaluate_from_constructor_params_rule(
    rule: FromConstructorParamsRule, node: Any
) -> list[ParameterInfo]:
    """Return the first constructor's parameters, or [] without a constructor."""
    if not isinstance(node, ClassShaped):
        file, line = node_location(node)
        raise ExtractionError(
            f"fromConstructorParams requires a class, got '{display_name(node)}'",
            file,
            line,
        )

    constructors = node.get_constructors()
    if not constructors:
        return []
    return [parameter_info(p) for p in constructors[0].get_parameters()]


def evaluate_from_parameter_type_rule(rule: FromParameterTypeRule, node: Any) -> str:
    """Return the annotated type of the parameter at a position."""
    options = rule.from_parameter_type
    method = _require_method(node, "fromParameterType")

    params = method.get_parameters()
    if options.position >= len(params):
        file, line = node_location(node)
        raise ExtractionError(
            f"Parameter position {options.position} out of bounds. "
            f"Method has {len(params)} parameter(s)",
            file,
            line,
        )

    type_name = parameter_info(params[options.position])["type"]
    return apply_transforms(type_name, options.transform)


__all__ = [
    "UNKNOWN_TYPE",
    "evaluate_from_constructor_params_rule",
    "evaluate_from_method_signature_rule",
    "evaluate_from_parameter_type_rule",
    "parameter_info",
]
