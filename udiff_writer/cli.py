"""
CLI entry point — argument parsing and main execution flow.
"""

import argparse
import sys

from .config import Config, REVIEW_UIS
from .cli_display import setup_logger, log, print_findings
from .diff_display import prompt_diff_approval
from .editing.metrics import read_write_stats
from .editing.omission import OmissionDetector, DEFAULT_RULES
from .editing.patch_applier import PatchApplier
from .workspace import LocalFileStore, LocalPreview
from .writer import WriteFileTool, WriteRequest


def _read_source(path: str | None) -> str | None:
    """Read a file argument; ``-`` means stdin."""
    if path is None:
        return None
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="udiff-writer",
        description="Apply model-written diffs and full-file writes with review",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .udiff_writer.yaml config file")
    sub = parser.add_subparsers(dest="command", required=True)

    write = sub.add_parser("write", help="Write a file from a diff or full content")
    write.add_argument("path", help="File path, relative to --root")
    write.add_argument("--diff", default=None,
                       help="Unified diff file to apply ('-' for stdin)")
    write.add_argument("--content", default=None,
                       help="Full content file for a new file ('-' for stdin)")
    write.add_argument("--root", default=".", help="Workspace root")
    write.add_argument("--ui", choices=REVIEW_UIS, default=None,
                       help="Review surface (default: from config)")
    write.add_argument("--auto", action="store_true",
                       help="Approve without asking (same as --ui auto)")
    write.add_argument("--no-dedupe", action="store_true",
                       help="Keep repeated lines met while resyncing hunks")
    write.add_argument("--no-syntax-check", action="store_true",
                       help="Skip the tree-sitter syntax check")
    write.add_argument("--no-metrics", action="store_true",
                       help="Do not record this write in the metrics log")

    check = sub.add_parser("check", help="Scan a candidate file for omissions")
    check.add_argument("original", help="Original file ('-' for stdin)")
    check.add_argument("candidate", help="Candidate file")

    stats = sub.add_parser("stats", help="Show write statistics")
    stats.add_argument("--root", default=".", help="Workspace root")
    stats.add_argument("--last", type=int, default=50,
                       help="Number of recent writes to include")
    return parser


def _cmd_write(args, cfg: Config) -> int:
    if args.diff is None and args.content is None:
        print("Error: one of --diff or --content is required")
        return 2

    try:
        content = _read_source(args.content)
        udiff = _read_source(args.diff)
    except OSError as exc:
        print(f"Error: {exc}")
        return 2

    ui = "auto" if args.auto else (args.ui or cfg.REVIEW_UI)
    rules = DEFAULT_RULES.extended(cfg.OMISSION_EXTRA_PHRASES)

    store = LocalFileStore(args.root)
    tool = WriteFileTool(
        store=store,
        preview=LocalPreview(store),
        approver=lambda path, old, new: prompt_diff_approval(path, old, new, ui=ui),
        applier=PatchApplier(
            dedupe_on_resync=cfg.DEDUPE_ON_RESYNC and not args.no_dedupe,
        ),
        detector=OmissionDetector(rules),
        update_interval_ms=cfg.UPDATE_INTERVAL_MS,
        syntax_check=cfg.SYNTAX_CHECK and not args.no_syntax_check,
        metrics_root=None if (args.no_metrics or not cfg.METRICS) else store.root,
    )

    response = tool.execute(WriteRequest(
        path=args.path,
        content=content,
        udiff=udiff,
    ))

    print(response.message)
    if response.omission and response.omission.has_omission:
        print_findings(args.path, response.omission.findings)
    return 1 if response.status == "error" else 0


def _cmd_check(args, cfg: Config) -> int:
    try:
        original = _read_source(args.original)
        candidate = _read_source(args.candidate)
    except OSError as exc:
        print(f"Error: {exc}")
        return 2

    rules = DEFAULT_RULES.extended(cfg.OMISSION_EXTRA_PHRASES)
    report = OmissionDetector(rules).detect(original, candidate)
    if not report.has_omission:
        print("  No omissions detected.")
        return 0
    print_findings(args.candidate, report.findings)
    return 1


def _cmd_stats(args) -> int:
    stats = read_write_stats(last_n=args.last, project_root=args.root)
    print(f"  Writes:        {stats['total_writes']}")
    print(f"  Success rate:  {stats['success_rate']:.1f}%")
    print(f"  Patch rate:    {stats['patch_rate']:.1f}%")
    print(f"  Omission rate: {stats['omission_rate']:.1f}%")
    print(f"  Rejected:      {stats['rejection_rate']:.1f}%")
    for kind, count in stats["error_kinds"].items():
        print(f"  Errors ({kind}): {count}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)
    log.info(f"Command: {args.command}")

    if args.command == "write":
        return _cmd_write(args, cfg)
    if args.command == "check":
        return _cmd_check(args, cfg)
    return _cmd_stats(args)


if __name__ == "__main__":
    sys.exit(main())
