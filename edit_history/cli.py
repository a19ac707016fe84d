# edit_history/cli.py
import argparse
import sys

from .config import DEFAULT_ENV_PATH, LAYOUTS, load_settings
from .reporter import Reporter
from .task_manager import TaskManager


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="edit-history",
        description="Keep and browse a compact edit history next to your text documents."
    )
    ap.add_argument("--env", default=DEFAULT_ENV_PATH, help="Settings file (default: .env)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("history", help="List or show versions of a document")
    p.add_argument("path")
    p.add_argument("--version", default=None,
                   help="Version key, list index, or 'live' (omit to list versions)")
    p.add_argument("--layout", choices=LAYOUTS, default=None, help="Diff layout (default from settings)")
    p.add_argument("--annotate", action="store_true", help="Show which version introduced each line")
    p.add_argument("--copy-to", default=None, help="Write the selected version to this file")

    p = sub.add_parser("save", help="Force-save the current content of a document")
    p.add_argument("path")

    p = sub.add_parser("scan", help="Record every tracked document under a folder once")
    p.add_argument("root", nargs="?", default=None)
    p.add_argument("--force", action="store_true", help="Bypass the minimum time between edits")

    p = sub.add_parser("watch", help="Poll a folder and record edits as documents change")
    p.add_argument("root", nargs="?", default=None)
    p.add_argument("--interval", type=float, default=2.0, help="Seconds between polls (default 2)")
    p.add_argument("--max-polls", type=int, default=None, help=argparse.SUPPRESS)

    p = sub.add_parser("rename", help="Move a document's history after renaming it")
    p.add_argument("path")
    p.add_argument("new_path")

    p = sub.add_parser("delete", help="Delete a document's history")
    p.add_argument("path")

    p = sub.add_parser("export", help="Export a versions CSV and timeline charts")
    p.add_argument("path")
    p.add_argument("--out", default=None, help="CSV file (default: run folder under outputs/history_runs)")
    p.add_argument("--no-charts", action="store_true", help="Skip the HTML/PNG timeline")

    p = sub.add_parser("settings", help="Show or update settings")
    p.add_argument("assignments", nargs="*", metavar="KEY=VALUE")

    return ap


def _task_call(args, settings, log):
    """(task name, kwargs) for a parsed command line."""
    common = {"settings": settings, "log": log, "env_path": args.env}
    if args.command == "history":
        return "open_history", dict(common, path=args.path, version=args.version, layout=args.layout,
                                    annotate=args.annotate, copy_to=args.copy_to)
    if args.command == "save":
        return "save_edit", dict(common, path=args.path)
    if args.command == "scan":
        return "scan_folder", dict(common, root_path=args.root, force=args.force)
    if args.command == "watch":
        return "watch_folder", dict(common, root_path=args.root, interval=args.interval,
                                    max_polls=args.max_polls)
    if args.command == "rename":
        return "rename_history", dict(common, path=args.path, new_path=args.new_path)
    if args.command == "delete":
        return "delete_history", dict(common, path=args.path)
    if args.command == "export":
        return "export_history", dict(common, path=args.path, output_file=args.out,
                                      charts=not args.no_charts)
    return "settings", {"assignments": args.assignments, "env_path": args.env, "log": log}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.env)
    reporter = Reporter(settings.debug_level, replace_default=True)
    try:
        task_name, kwargs = _task_call(args, settings, reporter.logger)
        ok, msg = TaskManager().run_task(task_name, **kwargs)
    finally:
        reporter.close()

    print(msg, file=sys.stdout if ok else sys.stderr)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
