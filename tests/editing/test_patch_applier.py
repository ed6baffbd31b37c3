"""Tests for the PatchApplier."""

import pytest

from udiff_writer.editing.errors import ParseError, PatchError
from udiff_writer.editing.hunk_parser import HunkParser
from udiff_writer.editing.patch_applier import PatchApplier, ApplyResult


SAMPLE_FILE = """\
import os
import sys

def authenticate_user(username, password):
    user = db.find(username)
    return user.check_password(password)

def helper():
    return 42"""


class TestApplySingleHunk:
    def test_pure_addition(self):
        result = PatchApplier().apply("a\nb\nc", "@@ -1,1 +1,2 @@\n a\n+x")

        assert result == "a\nx\nb\nc"

    def test_pure_deletion(self):
        result = PatchApplier().apply("a\nb\nc", "@@ -1,2 +1,1 @@\n a\n-b")

        assert result == "a\nc"

    def test_replacement_in_function(self):
        diff = """\
--- a/auth.py
+++ b/auth.py
@@ -4,3 +4,7 @@
 def authenticate_user(username, password):
+    if not username or not password:
+        return False
     user = db.find(username)
+    if user is None:
+        return False
     return user.check_password(password)
"""
        result = PatchApplier().apply(SAMPLE_FILE, diff)

        lines = result.split("\n")
        assert lines[3] == "def authenticate_user(username, password):"
        assert lines[4] == "    if not username or not password:"
        assert lines[7] == "    if user is None:"
        # Surrounding code preserved
        assert lines[0] == "import os"
        assert lines[-2] == "def helper():"
        assert lines[-1] == "    return 42"

    def test_trailing_empty_line_is_padding(self):
        result = PatchApplier().apply("a\nb", "@@ -1,2 +1,2 @@\n a\n-b\n+B\n")

        assert result == "a\nB"

    def test_unprefixed_empty_line_is_context(self):
        result = PatchApplier().apply("a\n\nb", "@@ -1,3 +1,3 @@\n a\n\n-b\n+B")

        assert result == "a\n\nB"

    def test_context_text_comes_from_diff(self):
        # Context lines are replayed from the diff even when they differ
        result = PatchApplier().apply("a\nb\nc", "@@ -1,2 +1,3 @@\n a\n bee\n+x")

        assert result == "a\nbee\nx\nc"

    def test_addition_before_anchor(self):
        result = PatchApplier().apply("b\nc", "@@ -1,1 +1,2 @@\n+a\n b")

        assert result == "a\nb\nc"

    def test_additions_only_use_declared_start(self):
        result = PatchApplier().apply("a\nb\nc", "@@ -2,0 +3 @@\n+x")

        assert result == "a\nb\nx\nc"

    def test_no_hunks_returns_original(self):
        assert PatchApplier().apply("a\nb", "no diff here") == "a\nb"

    def test_accepts_parsed_hunks(self):
        hunks = HunkParser().parse("@@ -2 +2 @@\n-b\n+B")
        result = PatchApplier().apply("a\nb\nc", hunks)

        assert result == "a\nB\nc"


class TestResync:
    def test_wrong_declared_start_still_applies(self):
        original = "l1\nl2\nl3\nl4\nl5"
        diff = "@@ -1,2 +1,2 @@\n l4\n-l5\n+L5"

        assert PatchApplier().apply(original, diff) == "l1\nl2\nl3\nl4\nL5"

    def test_multiple_hunks_sequential(self):
        diff = "@@ -2 +2 @@\n-b\n+B\n@@ -4 +4 @@\n-d\n+D"
        result = PatchApplier().apply("a\nb\nc\nd\ne", diff)

        assert result == "a\nB\nc\nD\ne"

    def test_anchor_not_found(self):
        with pytest.raises(PatchError) as excinfo:
            PatchApplier().apply("a\nb", "@@ -1 +1 @@\n-zzz\n+y")

        assert excinfo.value.line_number == 1
        assert excinfo.value.line == "zzz"
        assert "Resync target not found" in str(excinfo.value)

    def test_anchor_behind_cursor_fails(self):
        diff = "@@ -3 +3 @@\n-c\n+C\n@@ -1 +1 @@\n-a\n+A"
        with pytest.raises(PatchError):
            PatchApplier().apply("a\nb\nc", diff)

    def test_duplicate_lines_dropped_by_default(self):
        result = PatchApplier().apply("x\nx\ny", "@@ -3 +3 @@\n-y\n+Y")

        assert result == "x\nY"

    def test_duplicate_lines_kept_when_disabled(self):
        applier = PatchApplier(dedupe_on_resync=False)
        result = applier.apply("x\nx\ny", "@@ -3 +3 @@\n-y\n+Y")

        assert result == "x\nx\nY"

    def test_tail_not_deduplicated(self):
        result = PatchApplier().apply("a\nb\nb", "@@ -1 +1 @@\n-a\n+A")

        assert result == "A\nb\nb"


class TestBodyErrors:
    def test_invalid_unprefixed_line(self):
        with pytest.raises(PatchError) as excinfo:
            PatchApplier().apply("a\nb", "@@ -1 +1 @@\n a\nbogus\n+x")

        assert excinfo.value.line_number == 3
        assert excinfo.value.line == "bogus"
        assert excinfo.value.kind == "patch"

    def test_deletion_past_end(self):
        with pytest.raises(PatchError):
            PatchApplier().apply("a", "@@ -1,2 +1 @@\n a\n-b")

    def test_empty_hunk(self):
        with pytest.raises(PatchError):
            PatchApplier().apply("a", "@@ -1 +1 @@\n@@ -1 +1 @@\n a")


class TestTryApply:
    def test_success(self):
        result = PatchApplier().try_apply("a\nb\nc", "@@ -1,2 +1,1 @@\n a\n-b")

        assert isinstance(result, ApplyResult)
        assert result.success is True
        assert result.content == "a\nc"
        assert result.hunks_applied == 1
        assert result.error_kind == ""

    def test_parse_error_reported(self):
        result = PatchApplier().try_apply("a", "@@ broken\n+x")

        assert result.success is False
        assert result.error_kind == "parse"
        assert result.line_number == 1
        assert result.content == ""

    def test_patch_error_reported(self):
        result = PatchApplier().try_apply("a\nb", "@@ -1 +1 @@\n-zzz\n+y")

        assert result.success is False
        assert result.error_kind == "patch"
        assert result.line == "zzz"

    def test_parse_error_is_not_patch_error(self):
        with pytest.raises(ParseError):
            PatchApplier().apply("a", "@@ -1 @@\n+x")


class TestLogging:
    def test_applied_hunk_counts_logged(self, caplog):
        with caplog.at_level("DEBUG", logger="udiff_writer.editing.patch_applier"):
            PatchApplier().apply("a\nb\nc", "@@ -2 +2,2 @@\n-b\n+x\n+y")

        assert "Applied hunk at line 1 (+2/-1)" in caplog.text
