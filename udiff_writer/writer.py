"""
Write-file tool — turns a model's write request into an approved file change.

Existing files are changed through a unified diff, new files are written
from full content. Nothing reaches disk until the approver accepts the
preview; a failed patch or a rejection leaves the file untouched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .editing.errors import DiffEditError
from .editing.metrics import log_write_metric
from .editing.omission import OmissionDetector, OmissionReport
from .editing.patch_applier import PatchApplier
from .editing.syntax_check import check_syntax

logger = logging.getLogger(__name__)

OMISSION_ADVISORY = (
    "but it appears that some code may have been omitted. In case you didn't "
    "write the entire content and included some placeholders or omitted "
    "critical parts, please try again with the full output of the code "
    "without any omissions / truncations; anything similar to \"remain\", "
    "\"remains\", \"unchanged\", \"rest\", \"previous\", \"existing\", \"...\" "
    "should be avoided.\nYou don't need to read the file again as the content "
    "has been updated to your previous tool request content."
)


@dataclass
class WriteRequest:
    path: str = ""
    content: Optional[str] = None
    udiff: Optional[str] = None


@dataclass
class ApprovalDecision:
    response: str               # "approve" | "reject" | "feedback"
    text: Optional[str] = None


@dataclass
class SaveResult:
    final_content: str
    user_edits: Optional[str] = None


@dataclass
class ToolResponse:
    status: str                 # "success" | "rejected" | "feedback" | "error"
    message: str
    omission: Optional[OmissionReport] = None
    syntax_error: Optional[str] = None


class FileStore(Protocol):
    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> str: ...


class PreviewSurface(Protocol):
    def open(self, path: str) -> None: ...

    def is_open(self) -> bool: ...

    def update(self, content: str, final: bool) -> None: ...

    def revert(self) -> None: ...

    def save(self) -> SaveResult: ...


Approver = Callable[[str, str, str], ApprovalDecision]


def preprocess_content(content: str) -> str:
    """Strip surrounding code fences and undo HTML escaping of <, > and "."""
    content = content.strip()
    if content.startswith("```"):
        content = "\n".join(content.split("\n")[1:]).strip()
    if content.endswith("```"):
        content = "\n".join(content.split("\n")[:-1]).strip()
    return content.replace("&gt;", ">").replace("&lt;", "<").replace("&quot;", '"')


class WriteFileTool:
    """Apply one write request through preview and approval.

    Parameters
    ----------
    store:
        File existence / read capability.
    preview:
        Surface holding uncommitted content until it is saved or reverted.
    approver:
        Called with ``(path, old_content, new_content)``; returns the user's
        decision.
    applier, detector:
        Diff engine and omission heuristic; defaults are used when omitted.
    update_interval_ms:
        Minimum spacing between streamed preview updates.
    syntax_check:
        Run the advisory tree-sitter check on approved content.
    metrics_root:
        Project root for the metrics log, or None to disable metrics.
    """

    def __init__(
        self,
        store: FileStore,
        preview: PreviewSurface,
        approver: Approver,
        applier: Optional[PatchApplier] = None,
        detector: Optional[OmissionDetector] = None,
        update_interval_ms: int = 8,
        syntax_check: bool = True,
        metrics_root: Optional[str] = None,
    ) -> None:
        self._store = store
        self._preview = preview
        self._approver = approver
        self._applier = applier or PatchApplier()
        self._detector = detector or OmissionDetector()
        self._update_interval = update_interval_ms / 1000.0
        self._syntax_check = syntax_check
        self._metrics_root = metrics_root
        self._processing_final = False
        self._last_update = 0.0

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def handle_partial_update(self, path: str, content: str) -> None:
        """Push partially streamed content to the preview, throttled."""
        if self._processing_final:
            logger.debug("[WriteFile] Skipping partial update while finalizing %s", path)
            return

        now = time.monotonic()
        if now - self._last_update < self._update_interval:
            return

        if not self._preview.is_open():
            self._preview.open(path)
        self._preview.update(content, False)
        self._last_update = now

    def abort(self) -> None:
        """Discard anything shown in the preview."""
        logger.info("[WriteFile] Aborting write")
        self._preview.revert()

    # ------------------------------------------------------------------
    # Final write
    # ------------------------------------------------------------------

    def execute(self, request: WriteRequest) -> ToolResponse:
        """Run the full write flow for *request*."""
        self._processing_final = True
        mode = "udiff" if request.udiff is not None else "content"
        try:
            response = self._process(request)
        except (DiffEditError, OSError, ValueError) as exc:
            logger.error("[WriteFile] Write to %s failed: %s", request.path, exc)
            if self._preview.is_open():
                self._preview.revert()
            response = ToolResponse(
                status="error",
                message=f"Write to File Error With:{exc}",
            )
            self._record(request.path, mode, response,
                         error_kind=getattr(exc, "kind", type(exc).__name__))
            return response
        finally:
            self._processing_final = False

        self._record(request.path, mode, response)
        return response

    def _process(self, request: WriteRequest) -> ToolResponse:
        rel_path = request.path
        if not rel_path:
            raise ValueError("Missing required parameter 'path'")

        file_exists = self._store.exists(rel_path)
        original = ""

        if file_exists:
            if request.udiff is None:
                raise ValueError("File exists, but 'udiff' parameter is missing")
            original = self._store.read(rel_path)
            new_content = self._applier.apply(original, request.udiff)
            intended = new_content
        else:
            if request.content is None:
                raise ValueError(
                    "File does not exist, but 'content' parameter is missing"
                )
            new_content = preprocess_content(request.content)
            intended = request.content

        self._show_final(rel_path, new_content)

        decision = self._approver(rel_path, original, new_content)
        if decision.response != "approve":
            self._preview.revert()
            if decision.response == "feedback":
                text = decision.text or "The user denied this operation."
                logger.info("[WriteFile] User feedback for %s: %s", rel_path, text)
                return ToolResponse(status="feedback", message=text)
            logger.info("[WriteFile] Write to %s rejected", rel_path)
            return ToolResponse(status="rejected",
                                message="Write operation cancelled by user.")

        saved = self._preview.save()
        readable = rel_path.replace("\\", "/")

        if saved.user_edits:
            return ToolResponse(
                status="success",
                message=(
                    "The user made the following updates to your content:\n\n"
                    f"{saved.user_edits}\n\nThe updated content has been "
                    f"successfully saved to {readable}. (Note: you don't need "
                    "to re-write the file with these changes.)"
                ),
            )

        report = self._detector.detect(original, intended)
        syntax_error = (
            check_syntax(rel_path, saved.final_content)
            if self._syntax_check else None
        )

        if report.has_omission:
            logger.warning(
                "[WriteFile] Truncated content detected in %s (%d finding(s))",
                rel_path, len(report.findings),
            )
            message = f"The content was successfully saved to {readable}, {OMISSION_ADVISORY}"
        else:
            message = (
                f"The content was successfully saved to {readable}. "
                "Do not read the file again unless you forgot the content."
            )
        if syntax_error:
            message += f"\nNote: the saved file may not parse ({syntax_error})."

        return ToolResponse(
            status="success",
            message=message,
            omission=report,
            syntax_error=syntax_error,
        )

    def _show_final(self, path: str, content: str) -> None:
        if not self._preview.is_open():
            self._preview.open(path)
        self._preview.update(content, True)

    def _record(
        self,
        path: str,
        mode: str,
        response: ToolResponse,
        error_kind: str = "",
    ) -> None:
        if self._metrics_root is None:
            return
        log_write_metric({
            "path": path,
            "mode": mode,
            "status": response.status,
            "has_omission": bool(response.omission and response.omission.has_omission),
            "syntax_error": bool(response.syntax_error),
            "error_kind": error_kind,
        }, project_root=self._metrics_root)
