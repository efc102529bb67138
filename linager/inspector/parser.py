"""
Tree-sitter Parser Wrapper

Handles tree-sitter parsing for every supported language.
Language objects are loaded once and shared; a fresh Parser is
created per parse so concurrent inspections never share parser state.
"""

import threading
from typing import Optional

import tree_sitter_go
import tree_sitter_java
import tree_sitter_javascript
import tree_sitter_python
from tree_sitter import Language, Parser, Tree

from linager.configs.logging import get_logger

logger = get_logger("inspector.parser")


# Supported languages and their tree-sitter modules
LANGUAGE_MODULES = {
    "go": tree_sitter_go,
    "java": tree_sitter_java,
    "javascript": tree_sitter_javascript,
    "python": tree_sitter_python,
}


class ASTParser:
    """
    Tree-sitter based parser for multiple languages.

    Lazily loads each grammar on first use.
    """

    def __init__(self):
        self._languages: dict[str, Language] = {}
        self._lock = threading.Lock()

    def get_language(self, lang_name: str) -> Optional[Language]:
        """Get or create Language object for a language."""
        with self._lock:
            if lang_name in self._languages:
                return self._languages[lang_name]

            module = LANGUAGE_MODULES.get(lang_name)
            if module is None:
                logger.warning(f"Unsupported language: {lang_name}")
                return None

            language = Language(module.language())
            self._languages[lang_name] = language
            return language

    def parse(self, source: bytes, language: str) -> Optional[Tree]:
        """
        Parse source code into an AST.

        Args:
            source: Source code as UTF-8 bytes
            language: Language name (go, java, javascript, python)

        Returns:
            Tree-sitter Tree or None if the language is unsupported
        """
        lang = self.get_language(language)
        if lang is None:
            return None
        parser = Parser(lang)
        return parser.parse(source)


# Global parser instance (lazy singleton)
_parser: Optional[ASTParser] = None
_parser_lock = threading.Lock()


def get_parser() -> ASTParser:
    """Get the global ASTParser instance."""
    global _parser
    with _parser_lock:
        if _parser is None:
            _parser = ASTParser()
    return _parser
