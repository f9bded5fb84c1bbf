"""
`patchbox` command line.

Commands
--------
patchbox apply [FILE]                    -- apply a patch from FILE or stdin
patchbox apply [FILE] --remote           -- send it to a running server instead
patchbox rewrite PATH [--content-file F] -- replace a file's content (stdin if no F)
patchbox serve [--host H] [--port P]     -- run the HTTP binding
patchbox root [NEW_ROOT]                 -- show or persist the sandbox root
patchbox stats [--last-n N]              -- show request journal statistics
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_input(path: Optional[str]) -> str:
    """Read text from *path*, or from stdin for ``None`` / ``-``."""
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _load(args: argparse.Namespace):
    from .config import Config
    from .runtime import RuntimeStore

    cfg = Config.load(getattr(args, "config", None))
    return cfg, RuntimeStore.from_config(cfg)


def _emit(result: dict) -> int:
    print(json.dumps(result))
    return 1 if "error" in result else 0


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_apply(args: argparse.Namespace) -> int:
    """Apply a patch locally or through a running server."""
    cfg, runtime = _load(args)
    patch_text = _read_input(args.file)

    if args.remote:
        from .client import PatchClient, PatchClientError

        try:
            return _emit(PatchClient(cfg.SERVER_URL).apply_patch(patch_text))
        except PatchClientError as exc:
            print(f"Remote apply failed: {exc}", file=sys.stderr)
            return 2

    from .engine import PatchEngine

    engine = PatchEngine.from_config(cfg, runtime.root_provider())
    return _emit(engine.apply(patch_text).to_dict())


def _cmd_rewrite(args: argparse.Namespace) -> int:
    """Replace a file's whole content."""
    from .engine import PatchEngine

    cfg, runtime = _load(args)
    content = _read_input(args.content_file)
    engine = PatchEngine.from_config(cfg, runtime.root_provider())
    return _emit(engine.rewrite(args.path, content).to_dict())


def _cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP binding with uvicorn."""
    import uvicorn

    from .server import build_app_from_config

    cfg, _ = _load(args)
    host = args.host or cfg.HOST
    port = args.port or cfg.PORT
    app = build_app_from_config(cfg)
    print(f"[patchbox] serving on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def _cmd_root(args: argparse.Namespace) -> int:
    """Show the sandbox root, or persist a new one."""
    _, runtime = _load(args)
    if args.new_root:
        runtime.save(root_dir=args.new_root)
    print(runtime.root_provider()())
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    """Show rolling request journal statistics."""
    from .editing.metrics import read_edit_stats

    cfg, _ = _load(args)
    last_n = args.last_n
    stats = read_edit_stats(last_n=last_n, project_root=cfg.METRICS_DIR)

    if stats["total_edits"] == 0:
        print("No patch requests recorded yet.")
        return 0

    print(f"\nPatch requests (last {last_n})")
    print(f"  Total requests : {stats['total_edits']}")
    print(f"  Success rate   : {stats['success_rate']:.0f}%")
    for op, pct in stats["ops"].items():
        print(f"  {op + ':':<15}{pct:.0f}%")
    if stats["error_kinds"]:
        print("  Failures:")
        for kind, count in stats["error_kinds"].items():
            print(f"    {kind:<12}{count}")
    print()
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchbox",
        description="Sandboxed patch engine for code-editing agents",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .patchbox.yaml")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log engine activity to stderr")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    apply_p = subparsers.add_parser("apply", help="Apply a patch")
    apply_p.add_argument("file", nargs="?", default=None,
                         help="Patch file (default: stdin)")
    apply_p.add_argument("--remote", action="store_true",
                         help="Send the patch to the configured server")
    apply_p.set_defaults(func=_cmd_apply)

    rewrite_p = subparsers.add_parser("rewrite", help="Rewrite a whole file")
    rewrite_p.add_argument("path", help="Path relative to the sandbox root")
    rewrite_p.add_argument("--content-file", dest="content_file", default=None,
                           help="File holding the new content (default: stdin)")
    rewrite_p.set_defaults(func=_cmd_rewrite)

    serve_p = subparsers.add_parser("serve", help="Run the HTTP binding")
    serve_p.add_argument("--host", default=None)
    serve_p.add_argument("--port", type=int, default=None)
    serve_p.set_defaults(func=_cmd_serve)

    root_p = subparsers.add_parser("root", help="Show or set the sandbox root")
    root_p.add_argument("new_root", nargs="?", default=None)
    root_p.set_defaults(func=_cmd_root)

    stats_p = subparsers.add_parser("stats", help="Show request statistics")
    stats_p.add_argument("--last-n", dest="last_n", type=int, default=50,
                         help="Number of recent requests to include (default: 50)")
    stats_p.set_defaults(func=_cmd_stats)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not logging.root.handlers:
        logging.basicConfig(
            level=logging.INFO if args.verbose else logging.WARNING,
            format="%(levelname)s  %(name)s  %(message)s",
        )
    if args.command == "serve":
        from .config import Config
        from .log_setup import setup_logger

        setup_logger(Config.load(args.config).LOG_DIR)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
