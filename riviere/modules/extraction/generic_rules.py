"""Generic type argument extraction from class heritage clauses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from riviere.common.exceptions import ExtractionError
from riviere.common.types import ClassShaped

from .literals import display_name, node_location
from .transforms import apply_transforms

if TYPE_CHECKING:
    from riviere.common.types import TypeReference
    from riviere.services.config_models import FromGenericArgRule


def _heritage_with_arguments(node: Any) -> list[TypeReference]:
    """Heritage entries carrying type arguments: extends first, then implements."""
    entries: list[TypeReference] = []
    extends = node.get_extends()
    if extends is not None:
        entries.append(extends)
    entries.extend(node.get_implements())
    return [e for e in entries if e.type_arguments]


def evaluate_from_generic_arg_rule(rule: FromGenericArgRule, node: Any) -> str:
    """
    Return the text of a class heritage type argument.

    With ``interface`` the argument is read from that implements entry,
    otherwise from the first heritage entry that has type arguments. A type
    argument naming one of the class's own type parameters is rejected since
    it is not a concrete type.
    """
    options = rule.from_generic_arg
    file, line = node_location(node)
    class_name = display_name(node)

    if not isinstance(node, ClassShaped):
        raise ExtractionError(
            f"fromGenericArg requires a class, got '{class_name}'", file, line
        )

    if options.interface is not None:
        entry = next(
            (e for e in node.get_implements() if e.name == options.interface), None
        )
        if entry is None:
            raise ExtractionError(
                f"Class '{class_name}' does not implement interface '{options.interface}'",
                file,
                line,
            )
        owner = "Interface"
    else:
        candidates = _heritage_with_arguments(node)
        if not candidates:
            raise ExtractionError(
                f"Class '{class_name}' has no generic type arguments in its heritage clauses",
                file,
                line,
            )
        entry = candidates[0]
        owner = f"'{entry.name}'"

    type_args = entry.type_arguments
    if options.position >= len(type_args):
        raise ExtractionError(
            f"Position {options.position} out of bounds. "
            f"{owner} has {len(type_args)} type argument(s)",
            file,
            line,
        )

    type_arg = type_args[options.position]
    if not type_arg.type_arguments and type_arg.text in node.get_type_parameters():
        raise ExtractionError(
            f"Generic argument at position {options.position} is type parameter "
            f"'{type_arg.text}', expected concrete type",
            file,
            line,
        )

    return apply_transforms(type_arg.text, options.transform)


__all__ = ["evaluate_from_generic_arg_rule"]
