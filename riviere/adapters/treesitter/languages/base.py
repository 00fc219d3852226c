"""Abstract base class for language-specific tree-sitter extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import tree_sitter

    from ..models import SourceFileNode


class LanguageExtractor(ABC):
    """Abstract base class for language-specific extractors.

    Each language extractor knows how to navigate tree-sitter parse trees
    for its specific language and build the language-agnostic declaration
    models the extraction engine consumes.
    """

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the language name (e.g., 'typescript')."""

    @abstractmethod
    def get_language(self, dialect: str | None = None) -> Any:
        """Return the raw tree-sitter language for this extractor.

        Args:
            dialect: Optional grammar variant (e.g., 'tsx')

        Returns:
            Raw language pointer to wrap in tree_sitter.Language
        """

    @abstractmethod
    def extract_source_file(
        self, tree: tree_sitter.Tree, source: bytes, file_path: str
    ) -> SourceFileNode:
        """Build the source file model from a parsed tree.

        Args:
            tree: Parsed tree-sitter tree
            source: Original source code as bytes
            file_path: Path reported on every node of the file

        Returns:
            SourceFileNode with imports, classes and functions
        """

    def get_dialect(self, file_path: str) -> str | None:
        """Return the grammar variant for a file, or None for the default."""
        return None

    # =========================================================================
    # Tree navigation helpers
    # =========================================================================

    def get_node_text(self, node: tree_sitter.Node, source: bytes) -> str:
        """Source text spanned by a node."""
        return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def get_line_start(self, node: tree_sitter.Node) -> int:
        """1-indexed line a node starts on."""
        return node.start_point[0] + 1

    def find_child_by_type(
        self, node: tree_sitter.Node, type_name: str
    ) -> tree_sitter.Node | None:
        return next((c for c in node.children if c.type == type_name), None)

    def find_children_by_type(
        self, node: tree_sitter.Node, type_name: str
    ) -> list[tree_sitter.Node]:
        return [c for c in node.children if c.type == type_name]

    def find_child_by_field(
        self, node: tree_sitter.Node, field_name: str
    ) -> tree_sitter.Node | None:
        return node.child_by_field_name(field_name)
