# modules/devops_watch/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience.
from .config import ConfigError, Settings
from .engine import RunContext, run_once
from .history import HistoryStore
from .models import Candidate, ListingSelectors, RunReport, Site, SiteResult

__all__ = [
    "Candidate",
    "ConfigError",
    "HistoryStore",
    "ListingSelectors",
    "RunContext",
    "RunReport",
    "Settings",
    "Site",
    "SiteResult",
    "run_once",
]
