"""
Syntax check — advisory tree-sitter parse of patched content.

Uses tree-sitter >= 0.22 API with individual language packages.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import tree_sitter as ts
import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_typescript

logger = logging.getLogger(__name__)

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

_LANGUAGE_FUNCS = {
    "python": tree_sitter_python.language,
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

# Cache parsers to avoid repeated construction
_PARSER_CACHE: dict[str, ts.Parser] = {}


def detect_language(file_path: str) -> Optional[str]:
    """Return the tree-sitter language name for *file_path*, or None."""
    ext = os.path.splitext(file_path)[1].lower()
    return EXTENSION_TO_LANGUAGE.get(ext)


def _get_parser(language: str) -> ts.Parser:
    if language not in _PARSER_CACHE:
        lang_obj = ts.Language(_LANGUAGE_FUNCS[language]())
        _PARSER_CACHE[language] = ts.Parser(lang_obj)
    return _PARSER_CACHE[language]


def _first_error(node: ts.Node) -> Optional[ts.Node]:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


def check_syntax(file_path: str, content: str) -> Optional[str]:
    """Parse *content* as the language implied by *file_path*.

    Returns
    -------
    str | None
        A short description of the first syntax error, or None when the
        content parses cleanly or the language is not supported.
    """
    language = detect_language(file_path)
    if language is None:
        return None

    tree = _get_parser(language).parse(content.encode("utf-8"))
    error_node = _first_error(tree.root_node)
    if error_node is None:
        return None

    row, col = error_node.start_point
    message = f"{language} syntax error near line {row + 1}, column {col + 1}"
    logger.debug("[Syntax] %s: %s", file_path, message)
    return message
