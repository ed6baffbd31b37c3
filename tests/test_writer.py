"""Tests for the WriteFileTool pipeline."""

import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from udiff_writer import writer as writer_module
from udiff_writer.editing.metrics import read_write_stats
from udiff_writer.workspace import LocalFileStore, LocalPreview
from udiff_writer.writer import (
    ApprovalDecision, SaveResult, WriteFileTool, WriteRequest,
    preprocess_content,
)


ORIGINAL = "import os\n\ndef f():\n    return 1\n"


def _approve(path, old, new):
    return ApprovalDecision("approve")


def _reject(path, old, new):
    return ApprovalDecision("reject")


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "app.py").write_text(ORIGINAL, encoding="utf-8")
    store = LocalFileStore(str(tmp_path))
    return store, LocalPreview(store)


def _tool(workspace, approver=_approve, **kwargs):
    store, preview = workspace
    kwargs.setdefault("syntax_check", False)
    return WriteFileTool(store=store, preview=preview, approver=approver, **kwargs)


def _read(workspace, name):
    store, _ = workspace
    with open(store.resolve(name), encoding="utf-8") as f:
        return f.read()


class TestPatchExistingFile:
    def test_diff_applied_and_saved(self, workspace):
        diff = "@@ -3,2 +3,2 @@\n def f():\n-    return 1\n+    return 2\n"
        response = _tool(workspace).execute(WriteRequest(path="app.py", udiff=diff))

        assert response.status == "success"
        assert "successfully saved to app.py" in response.message
        assert response.omission is not None
        assert response.omission.has_omission is False
        assert _read(workspace, "app.py") == "import os\n\ndef f():\n    return 2\n"

    def test_untouched_lines_preserved(self, workspace):
        store, _ = workspace
        with open(store.resolve("index.html"), "w", encoding="utf-8") as f:
            f.write("<p>a &lt; b</p>\n<p>old</p>\n")
        diff = "@@ -2 +2 @@\n-<p>old</p>\n+<p>new</p>\n"

        response = _tool(workspace).execute(WriteRequest(path="index.html", udiff=diff))

        assert response.status == "success"
        assert _read(workspace, "index.html") == "<p>a &lt; b</p>\n<p>new</p>\n"

    def test_crlf_line_endings_preserved(self, workspace):
        store, _ = workspace
        with open(store.resolve("win.txt"), "wb") as f:
            f.write(b"a\r\nb\r\nc\r\n")
        diff = "@@ -2 +2 @@\n-b\r\n+B\r\n"

        response = _tool(workspace).execute(WriteRequest(path="win.txt", udiff=diff))

        assert response.status == "success"
        with open(store.resolve("win.txt"), "rb") as f:
            assert f.read() == b"a\r\nB\r\nc\r\n"

    def test_missing_udiff_is_error(self, workspace):
        response = _tool(workspace).execute(
            WriteRequest(path="app.py", content="x = 1")
        )

        assert response.status == "error"
        assert "'udiff' parameter is missing" in response.message
        assert _read(workspace, "app.py") == ORIGINAL

    def test_patch_failure_leaves_file_untouched(self, workspace):
        approver = MagicMock(side_effect=_approve)
        diff = "@@ -1 +1 @@\n-import nothing\n+import sys"
        response = _tool(workspace, approver=approver).execute(
            WriteRequest(path="app.py", udiff=diff)
        )

        assert response.status == "error"
        assert response.message.startswith("Write to File Error With:")
        assert "Resync target not found" in response.message
        assert _read(workspace, "app.py") == ORIGINAL
        approver.assert_not_called()

    def test_parse_failure_reported(self, workspace):
        response = _tool(workspace).execute(
            WriteRequest(path="app.py", udiff="@@ nonsense\n+x")
        )

        assert response.status == "error"
        assert "Invalid hunk header at line 1" in response.message

    def test_omission_advisory_appended(self, workspace):
        diff = "@@ -3,2 +3,2 @@\n def f():\n-    return 1\n+    # rest of the code remains\n"
        response = _tool(workspace).execute(WriteRequest(path="app.py", udiff=diff))

        assert response.status == "success"
        assert response.omission.has_omission is True
        assert "some code may have been omitted" in response.message
        # Advisory only: the content is still written
        assert "# rest of the code remains" in _read(workspace, "app.py")


class TestNewFile:
    def test_content_written(self, workspace):
        response = _tool(workspace).execute(
            WriteRequest(path="pkg/new.py", content="```python\nx = 1\n```")
        )

        assert response.status == "success"
        assert _read(workspace, "pkg/new.py") == "x = 1"

    def test_missing_content_is_error(self, workspace):
        response = _tool(workspace).execute(WriteRequest(path="new.py", udiff="@@ -1 +1 @@\n+x"))

        assert response.status == "error"
        assert "'content' parameter is missing" in response.message

    def test_missing_path_is_error(self, workspace):
        response = _tool(workspace).execute(WriteRequest(content="x"))

        assert response.status == "error"
        assert "Missing required parameter 'path'" in response.message

    def test_syntax_advisory(self, workspace):
        response = _tool(workspace, syntax_check=True).execute(
            WriteRequest(path="broken.py", content="def f(:\n    pass\n")
        )

        assert response.status == "success"
        assert response.syntax_error is not None
        assert "may not parse" in response.message


class TestApproval:
    def test_rejection_reverts_preview(self, workspace):
        store, preview = workspace
        diff = "@@ -1 +1 @@\n-import os\n+import sys"
        response = _tool(workspace, approver=_reject).execute(
            WriteRequest(path="app.py", udiff=diff)
        )

        assert response.status == "rejected"
        assert response.message == "Write operation cancelled by user."
        assert preview.is_open() is False
        assert _read(workspace, "app.py") == ORIGINAL

    def test_feedback_returned(self, workspace):
        def approver(path, old, new):
            return ApprovalDecision("feedback", "use pathlib instead")

        response = _tool(workspace, approver=approver).execute(
            WriteRequest(path="new.py", content="import os")
        )

        assert response.status == "feedback"
        assert response.message == "use pathlib instead"
        assert not os.path.exists(workspace[0].resolve("new.py"))

    def test_approver_sees_old_and_new_content(self, workspace):
        approver = MagicMock(return_value=ApprovalDecision("approve"))
        diff = "@@ -1 +1 @@\n-import os\n+import sys"
        _tool(workspace, approver=approver).execute(WriteRequest(path="app.py", udiff=diff))

        path, old, new = approver.call_args[0]
        assert path == "app.py"
        assert old == ORIGINAL
        assert new.startswith("import sys")

    def test_user_edits_reported(self):
        store = MagicMock()
        store.exists.return_value = False
        preview = MagicMock()
        preview.is_open.return_value = False
        preview.save.return_value = SaveResult(
            final_content="x = 2", user_edits="-x = 1\n+x = 2",
        )
        tool = WriteFileTool(store=store, preview=preview, approver=_approve,
                             syntax_check=False)

        response = tool.execute(WriteRequest(path="a.py", content="x = 1"))

        assert response.status == "success"
        assert "The user made the following updates" in response.message
        assert "-x = 1\n+x = 2" in response.message
        preview.open.assert_called_once_with("a.py")
        preview.update.assert_called_once_with("x = 1", True)


class TestPartialUpdates:
    def test_throttled(self, monkeypatch):
        preview = MagicMock()
        preview.is_open.return_value = True
        tool = WriteFileTool(store=MagicMock(), preview=preview, approver=_approve,
                             update_interval_ms=100)

        clock = iter([10.0, 10.05, 10.2])
        monkeypatch.setattr(writer_module, "time",
                            SimpleNamespace(monotonic=lambda: next(clock)))

        tool.handle_partial_update("a.py", "x")
        tool.handle_partial_update("a.py", "x = ")
        tool.handle_partial_update("a.py", "x = 1")

        assert [c.args for c in preview.update.call_args_list] == [
            ("x", False), ("x = 1", False),
        ]

    def test_opens_preview_on_first_update(self):
        preview = MagicMock()
        preview.is_open.return_value = False
        tool = WriteFileTool(store=MagicMock(), preview=preview, approver=_approve)

        tool.handle_partial_update("a.py", "x")

        preview.open.assert_called_once_with("a.py")

    def test_abort_reverts(self):
        preview = MagicMock()
        tool = WriteFileTool(store=MagicMock(), preview=preview, approver=_approve)

        tool.abort()

        preview.revert.assert_called_once()


class TestMetrics:
    def test_outcomes_recorded(self, workspace, tmp_path):
        tool = _tool(workspace, metrics_root=str(tmp_path))
        tool.execute(WriteRequest(path="app.py", udiff="@@ -1 +1 @@\n-import os\n+import re"))
        tool.execute(WriteRequest(path="app.py", udiff="@@ -1 +1 @@\n-missing\n+x"))

        stats = read_write_stats(project_root=str(tmp_path))

        assert stats["total_writes"] == 2
        assert stats["patch_rate"] == pytest.approx(100.0)
        assert stats["success_rate"] == pytest.approx(50.0)
        assert stats["error_kinds"] == {"patch": 1}


class TestPreprocessContent:
    def test_strips_fences(self):
        assert preprocess_content("```js\nlet a = 1\n```\n") == "let a = 1"

    def test_unescapes_entities(self):
        assert preprocess_content("a &lt; b &amp;&gt; &quot;c&quot;") == 'a < b &amp;> "c"'

    def test_plain_content_trimmed(self):
        assert preprocess_content("\n  x = 1  \n") == "x = 1"
