"""
Literal detection and error locations for extracted values.

Only inline string, number and boolean literals are extractable. Any other
expression (identifiers, template strings, calls, arithmetic) is rejected
with a located ExtractionError; nothing is ever evaluated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from riviere.common.exceptions import ExtractionError
from riviere.common.types import ExpressionKind, Nameable, SourceLocated

if TYPE_CHECKING:
    from riviere.common.types import Expression

LiteralValue = str | int | float | bool

UNKNOWN_LOCATION = "<unknown>"

_LITERAL_KINDS = {
    ExpressionKind.STRING.value,
    ExpressionKind.NUMBER.value,
    ExpressionKind.TRUE.value,
    ExpressionKind.FALSE.value,
}


def node_location(node: Any) -> tuple[str, int]:
    """File and start line of a node, for error reporting."""
    if isinstance(node, SourceLocated):
        return node.get_file_path(), node.get_start_line()
    return UNKNOWN_LOCATION, 0


def display_name(node: Any) -> str:
    """Declared name of a node, or 'anonymous'."""
    if isinstance(node, Nameable):
        name = node.get_name()
        if name:
            return name
    return "anonymous"


def is_literal_value(expression: Expression | None) -> bool:
    """Check whether an expression is an extractable literal."""
    if expression is None:
        return False
    return expression.kind in _LITERAL_KINDS


def parse_number(text: str) -> int | float:
    """
    Parse a numeric literal's source text.

    Examples:
        >>> parse_number("42")
        42
        >>> parse_number("0x1F")
        31
        >>> parse_number("1_000.5")
        1000.5
    """
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    if cleaned[:2].lower() in ("0x", "0o", "0b"):
        return int(cleaned, 0)
    try:
        return int(cleaned)
    except ValueError:
        return float(cleaned)


def extract_literal_value(
    expression: Expression | None, file: str, line: int
) -> LiteralValue:
    """
    Extract the value of a literal expression.

    Args:
        expression: Expression to read, or None when there is no initializer
        file: File reported on error
        line: Line reported on error

    Returns:
        The string, number or boolean value

    Raises:
        ExtractionError: If there is no expression or it is not a literal
    """
    if expression is None:
        raise ExtractionError("No initializer found", file, line)

    match expression.kind:
        case ExpressionKind.STRING:
            return expression.text[1:-1]
        case ExpressionKind.NUMBER:
            return parse_number(expression.text)
        case ExpressionKind.TRUE:
            return True
        case ExpressionKind.FALSE:
            return False
        case _:
            raise ExtractionError(
                f"Non-literal value detected ({expression.kind}): {expression.text}. "
                "Only inline literals (strings, numbers, booleans) are supported",
                file,
                line,
            )


__all__ = [
    "LiteralValue",
    "display_name",
    "extract_literal_value",
    "is_literal_value",
    "node_location",
    "parse_number",
]
