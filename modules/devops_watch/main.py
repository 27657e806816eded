from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity
from .lib.models import RunReport


def run(**kwargs: Any) -> RunReport:
    """
    Entry point for the 'devops_watch' module.

    Accepts kwargs (from the CLI or a cron wrapper), including:
      slack_token: str          # falls back to SLACK_BOT_TOKEN
      channel_id: str           # falls back to SLACK_CHANNEL_ID
      history_path: str = "history.json"
      sites_path: Optional[str] # JSON site list instead of the built-in one
      window_hours: float = 72
      max_threads: Optional[int]
      dry_run: bool = False

    Raises:
      ConfigError if the Slack token/channel are missing or settings are invalid.
      Nothing else escapes: site and chat failures are logged and reported.

    Returns:
      RunReport for the pass.
    """
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "devops_watch.main",
        "op": "start",
        "channel": settings.channel_id,
        "history_path": settings.history_path,
        "sites_path": settings.sites_path,
        "flags": {
            "dry_run": settings.dry_run,
            "max_threads": settings.max_threads,
        },
    })

    return _run_engine(settings)
