"""Tests for the advisory tree-sitter syntax check."""

from udiff_writer.editing.syntax_check import check_syntax, detect_language


class TestDetectLanguage:
    def test_known_extensions(self):
        assert detect_language("src/app.py") == "python"
        assert detect_language("web/index.JS") == "javascript"
        assert detect_language("web/types.ts") == "typescript"
        assert detect_language("web/App.tsx") == "tsx"

    def test_unknown_extension(self):
        assert detect_language("README.md") is None
        assert detect_language("Makefile") is None


class TestCheckSyntax:
    def test_valid_python(self):
        assert check_syntax("a.py", "def f():\n    return 1\n") is None

    def test_invalid_python(self):
        message = check_syntax("a.py", "def f(:\n    return 1\n")

        assert message is not None
        assert message.startswith("python syntax error near line")

    def test_valid_javascript(self):
        assert check_syntax("a.js", "function f() { return 1; }\n") is None

    def test_invalid_typescript(self):
        assert check_syntax("a.ts", "function f( { return 1; \n") is not None

    def test_unsupported_language_skipped(self):
        assert check_syntax("notes.txt", "def f(:") is None
