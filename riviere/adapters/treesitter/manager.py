"""Tree-sitter based parsing manager.

Parses source files with the tree-sitter grammar for their language and
builds the language-agnostic declaration models that the extraction
engine evaluates predicates and extraction rules against.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import tree_sitter

from .languages import LanguageExtractor, get_extractor
from .models import SourceFileNode

logger = logging.getLogger(__name__)


class TreeSitterManager:
    """Unified manager for tree-sitter parsing across supported languages."""

    # Extension to language mapping
    EXTENSION_MAP: dict[str, str] = {
        ".ts": "typescript",
        ".tsx": "typescript",
        ".mts": "typescript",
        ".cts": "typescript",
    }

    def __init__(self) -> None:
        """Initialize the manager."""
        self._parsers: dict[str, tree_sitter.Parser] = {}

    def parse_source(self, source: str | bytes, file_path: str) -> SourceFileNode | None:
        """Parse source code into a source file model.

        Args:
            source: Source code as string, or raw bytes as read from disk
            file_path: File path (used for language detection and reported on nodes)

        Returns:
            SourceFileNode, or None if the language is unsupported
        """
        lang = self.detect_language(file_path)
        if not lang:
            return None

        extractor = get_extractor(lang)
        if not extractor:
            return None

        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = self._parse(source_bytes, lang, extractor, extractor.get_dialect(file_path))
        if not tree:
            return None

        return extractor.extract_source_file(tree, source_bytes, file_path)

    def parse_file(
        self, path: str | Path, display_path: str | None = None
    ) -> SourceFileNode | None:
        """Read and parse a file from disk.

        The file is handed to tree-sitter as raw bytes; text that is not
        valid UTF-8 is decoded with replacement characters.

        Args:
            path: Path to the file
            display_path: Path reported on nodes (defaults to ``path``)

        Returns:
            SourceFileNode, or None if the language is unsupported
        """
        file_path = display_path or str(path)
        return self.parse_source(Path(path).read_bytes(), file_path)

    @classmethod
    def detect_language(cls, file_path: str) -> str | None:
        """Detect language from file extension.

        Args:
            file_path: Path to the file

        Returns:
            Language name or None if not detected
        """
        ext = os.path.splitext(file_path)[1].lower()
        return cls.EXTENSION_MAP.get(ext)

    @classmethod
    def supports_file(cls, file_path: str) -> bool:
        """Check if a file has a supported extension.

        Declaration files (.d.ts) carry no implementations and are skipped.
        """
        if file_path.endswith(".d.ts"):
            return False
        return cls.detect_language(file_path) is not None

    # =========================================================================
    # Private helper methods
    # =========================================================================

    def _get_parser(
        self, language: str, extractor: LanguageExtractor, dialect: str | None
    ) -> tree_sitter.Parser:
        """Get or create a parser for the given language and dialect.

        Args:
            language: Language name
            extractor: Language extractor (to get the grammar)
            dialect: Optional grammar variant

        Returns:
            Configured tree-sitter parser
        """
        key = f"{language}:{dialect}" if dialect else language
        if key not in self._parsers:
            raw_language = extractor.get_language(dialect)
            # Wrap in Language object (tree-sitter 0.24+ API)
            ts_language = tree_sitter.Language(raw_language)
            self._parsers[key] = tree_sitter.Parser(ts_language)

        return self._parsers[key]

    def _parse(
        self,
        source: bytes,
        language: str,
        extractor: LanguageExtractor,
        dialect: str | None,
    ) -> tree_sitter.Tree | None:
        """Parse source bytes into a tree-sitter tree.

        Returns:
            Parsed tree or None on failure
        """
        try:
            parser = self._get_parser(language, extractor, dialect)
            return parser.parse(source)
        except (ValueError, TypeError) as e:
            logger.warning("Failed to parse %s source: %s", extractor.language_name, e)
            return None


__all__ = ["TreeSitterManager"]
