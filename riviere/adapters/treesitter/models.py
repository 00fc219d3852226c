"""Data models for parsed source files.

These models are language-agnostic. A language extractor builds them from a
tree-sitter parse tree and the extraction engine reads them only through
the capability Protocols in riviere.common.types.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# =============================================================================
# Value Nodes
# =============================================================================


@dataclass
class ExpressionNode:
    """An initializer or decorator argument expression.

    ``kind`` is an ExpressionKind value for string, number, boolean and
    object literals, and the raw grammar node type for anything else.
    ``properties`` is only populated for object literals; a property whose
    value is not an expression (shorthand, method) maps to None.
    """

    kind: str
    text: str
    line: int
    properties: dict[str, ExpressionNode | None] = field(default_factory=dict)


@dataclass
class TypeNode:
    """A type annotation or type argument."""

    text: str
    name: str  # Text without type arguments, e.g. 'Handler' for 'Handler<Foo>'
    line: int
    type_arguments: list[TypeNode] = field(default_factory=list)


@dataclass
class HeritageNode:
    """An ``extends`` or ``implements`` entry of a class."""

    text: str
    name: str
    line: int
    type_arguments: list[TypeNode] = field(default_factory=list)


@dataclass
class JSDocNode:
    """A ``/** */`` documentation comment and the block tags it carries."""

    text: str
    tag_names: list[str] = field(default_factory=list)


@dataclass
class ImportNode:
    """An import statement."""

    module_specifier: str
    named_imports: list[str] = field(default_factory=list)  # Local names


# =============================================================================
# Declaration Nodes
# =============================================================================


@dataclass(eq=False)
class SourceFileNode:
    """A parsed source file and its top-level declarations."""

    file_path: str
    imports: list[ImportNode] = field(default_factory=list)
    classes: list[ClassNode] = field(default_factory=list, repr=False)
    functions: list[FunctionNode] = field(default_factory=list, repr=False)

    def get_file_path(self) -> str:
        return self.file_path

    def get_import_declarations(self) -> list[ImportNode]:
        return self.imports

    def get_classes(self) -> list[ClassNode]:
        return self.classes

    def get_functions(self) -> list[FunctionNode]:
        return self.functions

    def get_class(self, name: str) -> ClassNode | None:
        """Find a top-level class declared in this file by name."""
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None


@dataclass(eq=False)
class _Located:
    line: int
    source_file: SourceFileNode = field(repr=False)

    def get_file_path(self) -> str:
        return self.source_file.file_path

    def get_start_line(self) -> int:
        return self.line

    def get_source_file(self) -> SourceFileNode:
        return self.source_file


@dataclass(eq=False)
class DecoratorNode(_Located):
    """A decorator and its call arguments (empty when not called)."""

    name: str = ""
    arguments: list[ExpressionNode] = field(default_factory=list)

    def get_name(self) -> str:
        return self.name

    def get_arguments(self) -> list[ExpressionNode]:
        return self.arguments


@dataclass
class ParameterNode:
    """A formal parameter."""

    name: str
    line: int
    type_node: TypeNode | None = None

    def get_name(self) -> str:
        return self.name

    def get_type_node(self) -> TypeNode | None:
        return self.type_node


@dataclass(eq=False)
class PropertyNode(_Located):
    """A class field declaration."""

    name: str = ""
    static: bool = False
    initializer: ExpressionNode | None = None

    def get_name(self) -> str:
        return self.name

    def is_static(self) -> bool:
        return self.static

    def get_initializer(self) -> ExpressionNode | None:
        return self.initializer


@dataclass(eq=False)
class ClassNode(_Located):
    """A top-level class declaration."""

    name: str | None = None
    decorators: list[DecoratorNode] = field(default_factory=list)
    js_docs: list[JSDocNode] = field(default_factory=list)
    extends: HeritageNode | None = None
    implements: list[HeritageNode] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
    constructors: list[MethodNode] = field(default_factory=list, repr=False)
    methods: list[MethodNode] = field(default_factory=list, repr=False)
    properties: list[PropertyNode] = field(default_factory=list, repr=False)

    def get_name(self) -> str | None:
        return self.name

    def get_decorators(self) -> list[DecoratorNode]:
        return self.decorators

    def get_js_docs(self) -> list[JSDocNode]:
        return self.js_docs

    def get_extends(self) -> HeritageNode | None:
        return self.extends

    def get_implements(self) -> list[HeritageNode]:
        return self.implements

    def get_constructors(self) -> list[MethodNode]:
        return self.constructors

    def get_methods(self) -> list[MethodNode]:
        return self.methods

    def get_properties(self) -> list[PropertyNode]:
        return self.properties

    def get_type_parameters(self) -> list[str]:
        return self.type_parameters

    def get_base_class(self) -> ClassNode | None:
        """Resolve the extended class when it is declared in the same file."""
        if self.extends is None:
            return None
        base = self.source_file.get_class(self.extends.name)
        if base is self:
            return None
        return base


@dataclass(eq=False)
class MethodNode(_Located):
    """A method or constructor declared in a class body.

    Abstract method signatures are methods without a body.
    """

    name: str = ""
    parent: ClassNode | None = field(default=None, repr=False)
    decorators: list[DecoratorNode] = field(default_factory=list)
    js_docs: list[JSDocNode] = field(default_factory=list)
    parameters: list[ParameterNode] = field(default_factory=list)
    return_type: TypeNode | None = None

    def get_name(self) -> str | None:
        return self.name

    def get_decorators(self) -> list[DecoratorNode]:
        return self.decorators

    def get_js_docs(self) -> list[JSDocNode]:
        return self.js_docs

    def get_parameters(self) -> list[ParameterNode]:
        return self.parameters

    def get_return_type_node(self) -> TypeNode | None:
        return self.return_type

    def get_parent_class(self) -> ClassNode | None:
        return self.parent


@dataclass(eq=False)
class FunctionNode(_Located):
    """A top-level function declaration."""

    name: str | None = None
    js_docs: list[JSDocNode] = field(default_factory=list)
    parameters: list[ParameterNode] = field(default_factory=list)
    return_type: TypeNode | None = None

    def get_name(self) -> str | None:
        return self.name

    def get_js_docs(self) -> list[JSDocNode]:
        return self.js_docs

    def get_parameters(self) -> list[ParameterNode]:
        return self.parameters

    def get_return_type_node(self) -> TypeNode | None:
        return self.return_type


__all__ = [
    "ClassNode",
    "DecoratorNode",
    "ExpressionNode",
    "FunctionNode",
    "HeritageNode",
    "ImportNode",
    "JSDocNode",
    "MethodNode",
    "ParameterNode",
    "PropertyNode",
    "SourceFileNode",
    "TypeNode",
]
