"""Tree-sitter adapter - TypeScript declaration models using tree-sitter.

Parses TypeScript and TSX sources and exposes classes, methods, functions,
decorators, doc comments and imports through the capability interface the
extraction engine consumes.
"""

from __future__ import annotations

from .manager import TreeSitterManager
from .models import (
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

__all__ = [
    "TreeSitterManager",
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
