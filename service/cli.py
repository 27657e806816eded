# service/cli.py
"""
Command-line entrypoints for devops_watch.

Subcommands
-----------
run [--dry-run] [--sites PATH] [--history PATH] [--max-threads N]
    - One pass over every configured career page (meant for cron)
    - Exit 0 on completion, 2 when SLACK_BOT_TOKEN / SLACK_CHANNEL_ID are missing

list-sites [--sites PATH]
    - Print the configured sites and their extractor kind

validate-config [--sites PATH]
    - Build settings from env + flags and return nonzero on error

history [--history PATH] [--limit N]
    - Print the most recent entries of the dedup snapshot
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
import uuid
from collections.abc import Iterable
from typing import Any

from modules.devops_watch import main as _module
from modules.devops_watch.lib import logging_bridge
from modules.devops_watch.lib.config import ConfigError, Settings, load_sites_file
from modules.devops_watch.lib.history import HistoryStore, as_timestamp
from modules.devops_watch.lib.sites import DEFAULT_SITES
from modules.devops_watch.lib.utils import getenv_str, ts_to_iso
from service import logging_utils as L

LOG = logging.getLogger("service.cli")

EXIT_OK = 0
EXIT_CONFIG = 2


# -------------------------- Utility / glue code ------------------------------
def _print_table(rows: Iterable[tuple[str, ...]], headers: tuple[str, ...]) -> None:
    """Very simple fixed-width table printer."""
    rows = list(rows)
    widths = [max(len(headers[i]), *(len(r[i]) for r in rows)) if rows else len(headers[i]) for i in range(len(headers))]
    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    print(sep)
    print("| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |")
    print(sep)
    for row in rows:
        print("| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |")
    print(sep)


def _run_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if getattr(args, "sites", None):
        kwargs["sites_path"] = args.sites
    if getattr(args, "history", None):
        kwargs["history_path"] = args.history
    if getattr(args, "max_threads", None):
        kwargs["max_threads"] = args.max_threads
    if getattr(args, "dry_run", False):
        kwargs["dry_run"] = True
    return kwargs


# ------------------------------ Subcommands ----------------------------------
def cmd_run(args: argparse.Namespace) -> int:
    run_id = uuid.uuid4().hex
    start_time = time.monotonic()
    kwargs = _run_kwargs(args)
    LOG.debug("Run devops_watch with kwargs=%s", kwargs)

    try:
        report = _module.run(**kwargs)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        logging_bridge.error({"where": "cli.run", "run_id": run_id, "error": repr(e)})
        return EXIT_CONFIG
    except KeyboardInterrupt:
        return 130

    duration_ms = int((time.monotonic() - start_time) * 1000)
    logging_bridge.activity({
        "event": "cli_run",
        "run_id": run_id,
        "kwargs": kwargs,
        "alerts_sent": report.alerts_sent,
        "failed_sites": report.failed_sites,
        "summary_sent": report.summary_sent,
        "duration_ms": duration_ms,
    })
    print(
        f"DONE: {report.sites_planned} sites, {report.alerts_sent} new alerts, "
        f"{len(report.failed_sites)} failed ({duration_ms} ms)."
    )
    return EXIT_OK


def cmd_list_sites(args: argparse.Namespace) -> int:
    try:
        sites = load_sites_file(args.sites) if args.sites else list(DEFAULT_SITES)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG
    _print_table(((s.name, s.extractor, s.url) for s in sites), headers=("SITE", "EXTRACTOR", "URL"))
    return EXIT_OK


def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        settings = Settings.from_env_and_kwargs(_run_kwargs(args))
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return EXIT_CONFIG
    print(f"OK: configuration is valid ({len(settings.sites())} sites, channel {settings.channel_id}).")
    return EXIT_OK


def cmd_history(args: argparse.Namespace) -> int:
    path = args.history or getenv_str("DEVOPS_WATCH_HISTORY_PATH", "history.json")
    store = HistoryStore.load(path)
    stamped = ((fp, as_timestamp(v)) for fp, v in store.entries().items())
    rows = sorted(
        ((fp, ts) for fp, ts in stamped if ts is not None),
        key=lambda kv: kv[1],
        reverse=True,
    )[: args.limit]
    if not rows:
        print(f"No entries in {path}.")
        return EXIT_OK
    print(f"{len(store)} entries in {path}; showing newest {len(rows)}.")
    _print_table(((ts_to_iso(ts), fp) for fp, ts in rows), headers=("LAST ALERT (UTC)", "FINGERPRINT"))
    return EXIT_OK


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="devops-watch",
        description="Scan career pages for cloud/DevOps openings and alert Slack.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # run
    sp = sub.add_parser("run", help="Scan every site once and post new matches.")
    sp.add_argument("--sites", help="JSON site list (defaults to the built-in list).")
    sp.add_argument("--history", help="Dedup snapshot path (default history.json).")
    sp.add_argument("--max-threads", type=int, help="Cap concurrent site workers.")
    sp.add_argument("--dry-run", action="store_true", help="Log messages instead of posting to Slack.")
    sp.set_defaults(func=cmd_run)

    # list-sites
    sp = sub.add_parser("list-sites", help="Print the configured sites.")
    sp.add_argument("--sites", help="JSON site list (defaults to the built-in list).")
    sp.set_defaults(func=cmd_list_sites)

    # validate-config
    sp = sub.add_parser("validate-config", help="Verify environment and site configuration.")
    sp.add_argument("--sites", help="JSON site list (defaults to the built-in list).")
    sp.set_defaults(func=cmd_validate_config)

    # history
    sp = sub.add_parser("history", help="Show the newest dedup entries.")
    sp.add_argument("--history", help="Dedup snapshot path (default history.json).")
    sp.add_argument("--limit", type=int, default=15, help="Number of entries to show (default 15).")
    sp.set_defaults(func=cmd_history)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    L.setup_console_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
