"""
Shared type definitions for the extraction rule engine.

This module provides the capability Protocols that AST nodes implement and
the TypedDicts the engine emits. The evaluators only ever talk to nodes
through these Protocols, so any parser adapter that implements them can
drive extraction.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypedDict, runtime_checkable

if TYPE_CHECKING:
    from riviere.services.config_models import Module

# =============================================================================
# Value Types
# =============================================================================

# A value produced by an extraction rule
ExtractionValue = str | int | float | bool | list[str] | dict[str, Any] | list[dict[str, Any]]

# Resolves an extends source to a fully populated module
ConfigLoader = Callable[[str], "Module"]


class ExpressionKind(str, Enum):
    """Normalized kinds of the expressions the engine treats as literals."""

    STRING = "string"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    OBJECT = "object"


class ParameterInfo(TypedDict):
    """A single method parameter: its name and annotated type text."""

    name: str
    type: str


class MethodSignature(TypedDict):
    """Parameters and return type of a method or function."""

    parameters: list[ParameterInfo]
    returnType: str


class ComponentLocation(TypedDict):
    """Source location of a component."""

    file: str
    line: int


class DraftComponent(TypedDict):
    """A matched declaration before graph assembly."""

    type: str
    name: str
    location: ComponentLocation
    domain: str
    metadata: dict[str, Any]


# =============================================================================
# AST Value Protocols
# =============================================================================


class Expression(Protocol):
    """An initializer or argument expression.

    ``kind`` is an ExpressionKind value for literal and object expressions
    and the raw node type for anything else.
    """

    kind: str
    text: str
    line: int
    properties: dict[str, Expression | None]


class TypeReference(Protocol):
    """A textual type annotation, heritage entry or type argument."""

    text: str
    name: str
    line: int
    type_arguments: list[TypeReference]


class JSDoc(Protocol):
    """A ``/** */`` documentation comment."""

    text: str
    tag_names: list[str]


class ImportDeclaration(Protocol):
    """An ES module import statement."""

    module_specifier: str
    named_imports: list[str]


class Decorator(Protocol):
    """A decorator applied to a class, method or property."""

    def get_name(self) -> str: ...

    def get_arguments(self) -> list[Expression]: ...

    def get_file_path(self) -> str: ...

    def get_start_line(self) -> int: ...


class Parameter(Protocol):
    """A formal parameter of a method, constructor or function."""

    def get_name(self) -> str: ...

    def get_type_node(self) -> TypeReference | None: ...


class Property(Protocol):
    """A class field declaration."""

    def get_name(self) -> str: ...

    def is_static(self) -> bool: ...

    def get_initializer(self) -> Expression | None: ...

    def get_start_line(self) -> int: ...


class SourceFile(Protocol):
    """A parsed source file."""

    def get_file_path(self) -> str: ...

    def get_import_declarations(self) -> list[ImportDeclaration]: ...

    def get_classes(self) -> list[Any]: ...

    def get_functions(self) -> list[Any]: ...


# =============================================================================
# Node Capability Protocols
# =============================================================================


@runtime_checkable
class SourceLocated(Protocol):
    """Node that knows where it lives."""

    def get_file_path(self) -> str: ...

    def get_start_line(self) -> int: ...

    def get_source_file(self) -> SourceFile: ...


@runtime_checkable
class Nameable(Protocol):
    """Node with an optional declared name."""

    def get_name(self) -> str | None: ...


@runtime_checkable
class Decoratable(Protocol):
    """Node that can carry decorators."""

    def get_decorators(self) -> list[Decorator]: ...


@runtime_checkable
class DocBearing(Protocol):
    """Node with attached JSDoc comments."""

    def get_js_docs(self) -> list[JSDoc]: ...


@runtime_checkable
class ClassShaped(Protocol):
    """Class declaration."""

    def get_extends(self) -> TypeReference | None: ...

    def get_implements(self) -> list[TypeReference]: ...

    def get_constructors(self) -> list[Any]: ...

    def get_properties(self) -> list[Property]: ...

    def get_base_class(self) -> Any | None: ...

    def get_type_parameters(self) -> list[str]: ...


@runtime_checkable
class MethodShaped(Protocol):
    """Method, constructor or function declaration."""

    def get_parameters(self) -> list[Parameter]: ...

    def get_return_type_node(self) -> TypeReference | None: ...


@runtime_checkable
class ClassMember(Protocol):
    """Node declared inside a class body."""

    def get_parent_class(self) -> Any: ...
