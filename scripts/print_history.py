#!/usr/bin/env python3

import json
import os
import sys
from datetime import datetime, timezone

HISTORY_PATH = os.getenv("DEVOPS_WATCH_HISTORY_PATH", "history.json")


def get_latest_entries(path: str, limit: int = 15) -> list[tuple[str, int]]:
    """
    Return the newest `limit` (fingerprint, unix_ts) pairs, sorted by time DESC.
    Entries whose value isn't an integer timestamp are skipped.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        return []
    if not isinstance(data, dict):
        print(f"Error reading {path}: expected a JSON object", file=sys.stderr)
        return []

    rows = [(fp, int(ts)) for fp, ts in data.items() if isinstance(ts, (int, float)) and not isinstance(ts, bool)]
    rows.sort(key=lambda kv: kv[1], reverse=True)
    return rows[:limit]


def format_timestamp(ts: int) -> str:
    """Convert a Unix timestamp to readable local format."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def main():
    path = HISTORY_PATH
    if not os.path.exists(path):
        print(f"History file not found: {path}")
        sys.exit(1)

    # Parse optional limit
    limit = 15
    if len(sys.argv) > 1:
        try:
            limit = int(sys.argv[1])
            if limit <= 0:
                raise ValueError
        except ValueError:
            print(f"Invalid limit: {sys.argv[1]}. Using default (15).", file=sys.stderr)
            limit = 15

    entries = get_latest_entries(path, limit)
    print("=" * 80)
    print(f"HISTORY: {os.path.abspath(path)}")
    print("-" * 80)
    if not entries:
        print("  No entries found or error accessing history.")
        return

    for i, (fp, ts) in enumerate(entries, 1):
        print(f"{i:2d}. [{format_timestamp(ts)}] {fp}")


if __name__ == "__main__":
    main()
