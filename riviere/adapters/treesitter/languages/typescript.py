"""TypeScript language extractor using tree-sitter-typescript."""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING, Any

from riviere.common.types import ExpressionKind

from ..models import (
    ClassNode,
    DecoratorNode,
    ExpressionNode,
    FunctionNode,
    HeritageNode,
    ImportNode,
    JSDocNode,
    MethodNode,
    ParameterNode,
    PropertyNode,
    SourceFileNode,
    TypeNode,
)
from . import register_extractor
from .base import LanguageExtractor

if TYPE_CHECKING:
    import tree_sitter

# =============================================================================
# TypeScript Grammar Constants
# =============================================================================

CLASS_TYPES = {"class_declaration", "abstract_class_declaration", "class"}
METHOD_TYPES = {"method_definition", "abstract_method_signature"}
FUNCTION_TYPES = {"function_declaration"}
PARAMETER_TYPES = {"required_parameter", "optional_parameter"}
ACCESSOR_KEYWORDS = {"get", "set"}

# Grammar node type -> normalized literal kind
LITERAL_KINDS: dict[str, str] = {
    "string": ExpressionKind.STRING.value,
    "number": ExpressionKind.NUMBER.value,
    "true": ExpressionKind.TRUE.value,
    "false": ExpressionKind.FALSE.value,
    "object": ExpressionKind.OBJECT.value,
}

_JSDOC_TAG = re.compile(r"^@([A-Za-z_][\w-]*)")


@register_extractor("typescript")
class TypeScriptExtractor(LanguageExtractor):
    """Extractor for TypeScript source code using tree-sitter-typescript."""

    @property
    def language_name(self) -> str:
        return "typescript"

    def get_language(self, dialect: str | None = None) -> Any:
        """Return the tree-sitter TypeScript or TSX language."""
        import tree_sitter_typescript

        if dialect == "tsx":
            return tree_sitter_typescript.language_tsx()
        return tree_sitter_typescript.language_typescript()

    def get_dialect(self, file_path: str) -> str | None:
        """Use the TSX grammar for .tsx files."""
        ext = os.path.splitext(file_path)[1].lower()
        return "tsx" if ext == ".tsx" else None

    def extract_source_file(
        self, tree: tree_sitter.Tree, source: bytes, file_path: str
    ) -> SourceFileNode:
        """Build imports, top-level classes and top-level functions."""
        source_file = SourceFileNode(file_path=file_path)

        for node in tree.root_node.named_children:
            declaration = node
            if node.type == "export_statement":
                # export default class {} has a class expression as its value
                declaration = self.find_child_by_field(
                    node, "declaration"
                ) or self.find_child_by_field(node, "value")
                if declaration is None:
                    continue

            if declaration.type == "import_statement":
                source_file.imports.append(self._extract_import(declaration, source))
            elif declaration.type in CLASS_TYPES:
                source_file.classes.append(
                    self._extract_class(declaration, node, source, source_file)
                )
            elif declaration.type in FUNCTION_TYPES:
                source_file.functions.append(
                    self._extract_function(declaration, node, source, source_file)
                )

        return source_file

    # =========================================================================
    # Declarations
    # =========================================================================

    def _extract_class(
        self,
        node: tree_sitter.Node,
        host: tree_sitter.Node,
        source: bytes,
        source_file: SourceFileNode,
    ) -> ClassNode:
        """Extract a class. ``host`` is the export statement when exported."""
        name_node = self.find_child_by_field(node, "name")
        decorator_nodes = self._own_decorators(host) if host is not node else []
        decorator_nodes += self._own_decorators(node)

        extends, implements = self._extract_heritage(node, source)

        cls = ClassNode(
            line=self.get_line_start(host),
            source_file=source_file,
            name=self.get_node_text(name_node, source) if name_node else None,
            decorators=[self._extract_decorator(d, source, source_file) for d in decorator_nodes],
            js_docs=self._extract_js_docs(host, source),
            extends=extends,
            implements=implements,
            type_parameters=self._extract_type_parameters(node, source),
        )

        body = self.find_child_by_field(node, "body")
        if body is not None:
            self._extract_members(body, source, cls)

        return cls

    def _extract_members(
        self, body: tree_sitter.Node, source: bytes, cls: ClassNode
    ) -> None:
        """Extract methods, constructors and fields of a class body.

        Decorators and doc comments of a member are siblings that precede it
        in the class body.
        """
        pending_decorators: list[tree_sitter.Node] = []
        pending_docs: list[tree_sitter.Node] = []

        for child in body.children:
            if child.type == "decorator":
                pending_decorators.append(child)
                continue
            if child.type == "comment":
                if self._is_js_doc(child, source):
                    pending_docs.append(child)
                continue

            if child.type in METHOD_TYPES:
                method = self._extract_method(
                    child, pending_decorators, pending_docs, source, cls
                )
                if method is not None:
                    if method.name == "constructor":
                        cls.constructors.append(method)
                    else:
                        cls.methods.append(method)
            elif child.type == "public_field_definition":
                cls.properties.append(self._extract_property(child, source, cls))

            pending_decorators = []
            pending_docs = []

    def _extract_method(
        self,
        node: tree_sitter.Node,
        decorator_nodes: list[tree_sitter.Node],
        doc_nodes: list[tree_sitter.Node],
        source: bytes,
        cls: ClassNode,
    ) -> MethodNode | None:
        """Extract a method, abstract method signature or constructor. Accessors are skipped."""
        name_node = self.find_child_by_field(node, "name")
        if name_node is None:
            return None

        modifiers = [c.type for c in node.children if c.start_byte < name_node.start_byte]
        if ACCESSOR_KEYWORDS.intersection(modifiers):
            return None

        decorators = list(decorator_nodes) + self._own_decorators(node)
        line = self.get_line_start(decorators[0] if decorators else node)

        return MethodNode(
            line=line,
            source_file=cls.source_file,
            name=self.get_node_text(name_node, source),
            parent=cls,
            decorators=[self._extract_decorator(d, source, cls.source_file) for d in decorators],
            js_docs=[self._build_js_doc(d, source) for d in doc_nodes],
            parameters=self._extract_parameters(node, source),
            return_type=self._extract_return_type(node, source),
        )

    def _extract_property(
        self,
        node: tree_sitter.Node,
        source: bytes,
        cls: ClassNode,
    ) -> PropertyNode:
        """Extract a class field declaration."""
        name_node = self.find_child_by_field(node, "name")
        value_node = self.find_child_by_field(node, "value")

        return PropertyNode(
            line=self.get_line_start(node),
            source_file=cls.source_file,
            name=self.get_node_text(name_node, source) if name_node else "",
            static=any(c.type == "static" for c in node.children),
            initializer=self._extract_expression(value_node, source) if value_node else None,
        )

    def _extract_function(
        self,
        node: tree_sitter.Node,
        host: tree_sitter.Node,
        source: bytes,
        source_file: SourceFileNode,
    ) -> FunctionNode:
        """Extract a top-level function declaration."""
        name_node = self.find_child_by_field(node, "name")
        return FunctionNode(
            line=self.get_line_start(host),
            source_file=source_file,
            name=self.get_node_text(name_node, source) if name_node else None,
            js_docs=self._extract_js_docs(host, source),
            parameters=self._extract_parameters(node, source),
            return_type=self._extract_return_type(node, source),
        )

    # =========================================================================
    # Decorators and doc comments
    # =========================================================================

    def _own_decorators(self, node: tree_sitter.Node) -> list[tree_sitter.Node]:
        """Decorator nodes that are direct children of ``node``."""
        return self.find_children_by_type(node, "decorator")

    def _extract_decorator(
        self, node: tree_sitter.Node, source: bytes, source_file: SourceFileNode
    ) -> DecoratorNode:
        """Extract a decorator's name and call arguments.

        ``@Route('/x')`` has name 'Route' and one argument; for a member
        expression such as ``@http.Get()`` the name is the last property.
        """
        expression = next((c for c in node.named_children if c.type != "comment"), None)
        arguments: list[ExpressionNode] = []

        if expression is not None and expression.type == "call_expression":
            args_node = self.find_child_by_field(expression, "arguments")
            if args_node is not None and args_node.type == "arguments":
                arguments = [
                    self._extract_expression(arg, source)
                    for arg in args_node.named_children
                    if arg.type != "comment"
                ]
            expression = self.find_child_by_field(expression, "function")

        name = ""
        if expression is not None:
            if expression.type == "member_expression":
                prop = self.find_child_by_field(expression, "property")
                name = self.get_node_text(prop, source) if prop else ""
            else:
                name = self.get_node_text(expression, source)

        return DecoratorNode(
            line=self.get_line_start(node),
            source_file=source_file,
            name=name,
            arguments=arguments,
        )

    def _is_js_doc(self, node: tree_sitter.Node, source: bytes) -> bool:
        return self.get_node_text(node, source).startswith("/**")

    def _extract_js_docs(self, host: tree_sitter.Node, source: bytes) -> list[JSDocNode]:
        """Collect the doc comments directly preceding a declaration."""
        docs: list[JSDocNode] = []
        sibling = host.prev_sibling
        while sibling is not None and sibling.type == "comment":
            if self._is_js_doc(sibling, source):
                docs.append(self._build_js_doc(sibling, source))
            sibling = sibling.prev_sibling
        docs.reverse()
        return docs

    def _build_js_doc(self, node: tree_sitter.Node, source: bytes) -> JSDocNode:
        """Parse block tag names from a ``/** */`` comment.

        A tag is an ``@name`` at the start of a comment line.
        """
        text = self.get_node_text(node, source)
        body = text[3:-2] if text.endswith("*/") else text[3:]
        tag_names: list[str] = []
        for line in body.splitlines():
            stripped = line.strip().lstrip("*").strip()
            match = _JSDOC_TAG.match(stripped)
            if match:
                tag_names.append(match.group(1))
        return JSDocNode(text=text, tag_names=tag_names)

    # =========================================================================
    # Heritage, parameters and types
    # =========================================================================

    def _extract_heritage(
        self, node: tree_sitter.Node, source: bytes
    ) -> tuple[HeritageNode | None, list[HeritageNode]]:
        """Extract the extends entry and implements entries of a class."""
        heritage = self.find_child_by_type(node, "class_heritage")
        if heritage is None:
            return None, []

        extends: HeritageNode | None = None
        implements: list[HeritageNode] = []

        extends_clause = self.find_child_by_type(heritage, "extends_clause")
        if extends_clause is not None:
            value = self.find_child_by_field(extends_clause, "value")
            if value is not None:
                type_args_node = self.find_child_by_field(extends_clause, "type_arguments")
                end = type_args_node.end_byte if type_args_node else value.end_byte
                extends = HeritageNode(
                    text=source[value.start_byte : end].decode("utf-8", errors="replace"),
                    name=self.get_node_text(value, source),
                    line=self.get_line_start(value),
                    type_arguments=self._extract_type_arguments(type_args_node, source),
                )

        implements_clause = self.find_child_by_type(heritage, "implements_clause")
        if implements_clause is not None:
            for entry in implements_clause.named_children:
                if entry.type == "comment":
                    continue
                type_node = self._extract_type(entry, source)
                implements.append(
                    HeritageNode(
                        text=type_node.text,
                        name=type_node.name,
                        line=type_node.line,
                        type_arguments=type_node.type_arguments,
                    )
                )

        return extends, implements

    def _extract_type_parameters(self, node: tree_sitter.Node, source: bytes) -> list[str]:
        """Names of a class's declared type parameters."""
        params_node = self.find_child_by_field(node, "type_parameters")
        if params_node is None:
            return []
        names: list[str] = []
        for param in self.find_children_by_type(params_node, "type_parameter"):
            name_node = self.find_child_by_field(param, "name")
            if name_node is not None:
                names.append(self.get_node_text(name_node, source))
        return names

    def _extract_parameters(
        self, node: tree_sitter.Node, source: bytes
    ) -> list[ParameterNode]:
        """Extract the formal parameters of a method or function."""
        params_node = self.find_child_by_field(node, "parameters")
        if params_node is None:
            return []

        params: list[ParameterNode] = []
        for child in params_node.named_children:
            if child.type not in PARAMETER_TYPES:
                continue
            pattern = self.find_child_by_field(child, "pattern")
            name = ""
            if pattern is not None:
                if pattern.type == "rest_pattern":
                    inner = self.find_child_by_type(pattern, "identifier")
                    name = self.get_node_text(inner or pattern, source)
                else:
                    name = self.get_node_text(pattern, source)
            annotation = self.find_child_by_type(child, "type_annotation")
            params.append(
                ParameterNode(
                    name=name,
                    line=self.get_line_start(child),
                    type_node=self._extract_annotation(annotation, source),
                )
            )
        return params

    def _extract_return_type(
        self, node: tree_sitter.Node, source: bytes
    ) -> TypeNode | None:
        annotation = self.find_child_by_field(node, "return_type")
        return self._extract_annotation(annotation, source)

    def _extract_annotation(
        self, annotation: tree_sitter.Node | None, source: bytes
    ) -> TypeNode | None:
        """Unwrap a ``: Type`` annotation into its type node."""
        if annotation is None:
            return None
        type_node = next(
            (c for c in annotation.named_children if c.type != "comment"), None
        )
        if type_node is None:
            return None
        return self._extract_type(type_node, source)

    def _extract_type(self, node: tree_sitter.Node, source: bytes) -> TypeNode:
        """Extract a type, splitting generic types into name and arguments."""
        text = self.get_node_text(node, source)
        if node.type == "generic_type":
            name_node = self.find_child_by_field(node, "name")
            args_node = self.find_child_by_field(node, "type_arguments")
            return TypeNode(
                text=text,
                name=self.get_node_text(name_node, source) if name_node else text,
                line=self.get_line_start(node),
                type_arguments=self._extract_type_arguments(args_node, source),
            )
        return TypeNode(text=text, name=text, line=self.get_line_start(node))

    def _extract_type_arguments(
        self, node: tree_sitter.Node | None, source: bytes
    ) -> list[TypeNode]:
        if node is None:
            return []
        return [
            self._extract_type(arg, source)
            for arg in node.named_children
            if arg.type != "comment"
        ]

    # =========================================================================
    # Expressions and imports
    # =========================================================================

    def _extract_expression(self, node: tree_sitter.Node, source: bytes) -> ExpressionNode:
        """Extract an expression, recursing into object literal properties."""
        kind = LITERAL_KINDS.get(node.type, node.type)
        expression = ExpressionNode(
            kind=kind,
            text=self.get_node_text(node, source),
            line=self.get_line_start(node),
        )
        if kind == ExpressionKind.OBJECT:
            expression.properties = self._extract_object_properties(node, source)
        return expression

    def _extract_object_properties(
        self, node: tree_sitter.Node, source: bytes
    ) -> dict[str, ExpressionNode | None]:
        """Map object literal keys to their value expressions."""
        properties: dict[str, ExpressionNode | None] = {}
        for child in node.named_children:
            if child.type == "pair":
                key = self.find_child_by_field(child, "key")
                value = self.find_child_by_field(child, "value")
                if key is None:
                    continue
                key_text = self.get_node_text(key, source)
                if key.type == "string":
                    key_text = key_text[1:-1]
                properties[key_text] = (
                    self._extract_expression(value, source) if value is not None else None
                )
            elif child.type == "shorthand_property_identifier":
                properties[self.get_node_text(child, source)] = None
            elif child.type == "method_definition":
                name_node = self.find_child_by_field(child, "name")
                if name_node is not None:
                    properties[self.get_node_text(name_node, source)] = None
        return properties

    def _extract_import(self, node: tree_sitter.Node, source: bytes) -> ImportNode:
        """Extract an ES module import statement."""
        source_node = self.find_child_by_field(node, "source")
        module = ""
        if source_node is not None:
            module = self.get_node_text(source_node, source).strip("'\"")

        named_imports: list[str] = []

        clause = self.find_child_by_type(node, "import_clause")
        if clause is not None:
            for child in self.find_children_by_type(clause, "named_imports"):
                for spec in self.find_children_by_type(child, "import_specifier"):
                    local = self.find_child_by_field(spec, "alias") or self.find_child_by_field(
                        spec, "name"
                    )
                    if local is not None:
                        named_imports.append(self.get_node_text(local, source))

        return ImportNode(module_specifier=module, named_imports=named_imports)

