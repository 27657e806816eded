from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .extractors import EXTRACTORS
from .http_client import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .matcher import DEFAULT_KEYWORDS, DEFAULT_LOCATION
from .models import ListingSelectors, Site
from .sites import DEFAULT_SITES
from .utils import get_float_env, getenv_str, truthy

ENV_TOKEN = "SLACK_BOT_TOKEN"
ENV_CHANNEL = "SLACK_CHANNEL_ID"


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for a 'devops_watch' run.

    Required (env or kwargs):
        SLACK_BOT_TOKEN / slack_token
        SLACK_CHANNEL_ID / channel_id

    Sites come from the built-in list unless `sites_path` points at a JSON file.
    """

    slack_token: str = field(default="", repr=False)
    channel_id: str = ""

    # Dedup store
    history_path: str = "history.json"
    window_hours: float = 72.0

    # Site selection
    sites_path: str | None = None
    _sites: list[Site] = field(default_factory=list, repr=False)

    # Matching profile
    keywords: tuple[str, ...] = DEFAULT_KEYWORDS
    location: str = DEFAULT_LOCATION

    # Runtime behavior
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    max_threads: int | None = None  # None: one worker per site
    matches_log_path: str | None = "matches.log"
    dry_run: bool = False

    # ------------- convenience -------------
    @property
    def window_seconds(self) -> int:
        return int(self.window_hours * 3600)

    def sites(self) -> list[Site]:
        """
        Return the active site list for this run (file-backed if sites_path is set).
        """
        if self._sites:
            return self._sites

        if self.sites_path:
            self._sites = load_sites_file(self.sites_path, location=self.location)
        else:
            self._sites = [_with_location(s, self.location) for s in DEFAULT_SITES]
        if not self._sites:
            raise ConfigError("No sites configured.")
        return self._sites

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs (preferred) and environment with validation.

        Expected kwargs (all optional; env fallback in brackets):

            slack_token: str        [SLACK_BOT_TOKEN]   (required)
            channel_id: str         [SLACK_CHANNEL_ID]  (required)
            history_path: str       [DEVOPS_WATCH_HISTORY_PATH] = "history.json"
            window_hours: float     [DEVOPS_WATCH_WINDOW_HOURS] = 72
            sites_path: str         [DEVOPS_WATCH_SITES_PATH]
            timeout: float          [DEVOPS_WATCH_TIMEOUT] = 30
            user_agent: str         [DEVOPS_WATCH_USER_AGENT] = "Mozilla/5.0"
            max_threads: int        [DEVOPS_WATCH_MAX_THREADS]
            matches_log_path: str   [DEVOPS_WATCH_MATCHES_LOG] = "matches.log" ("" disables)
            dry_run: bool           [DEVOPS_WATCH_DRY_RUN] = false
            keywords: list[str]
            location: str = "halifax"
        """
        kw = dict(kwargs or {})

        token = str(kw.get("slack_token") or getenv_str(ENV_TOKEN) or "").strip()
        channel = str(kw.get("channel_id") or getenv_str(ENV_CHANNEL) or "").strip()
        missing = [name for name, val in ((ENV_TOKEN, token), (ENV_CHANNEL, channel)) if not val]
        if missing:
            raise ConfigError(f"{' or '.join(missing)} not set")

        history_path = str(kw.get("history_path") or getenv_str("DEVOPS_WATCH_HISTORY_PATH", "history.json"))
        sites_path = str(kw.get("sites_path") or getenv_str("DEVOPS_WATCH_SITES_PATH") or "").strip() or None

        if "matches_log_path" in kw:
            matches_log_path = kw.get("matches_log_path") or None
        else:
            matches_log_path = getenv_str("DEVOPS_WATCH_MATCHES_LOG", "matches.log")

        try:
            window_hours = float(kw["window_hours"]) if "window_hours" in kw else get_float_env(
                "DEVOPS_WATCH_WINDOW_HOURS", 72.0
            )
            timeout = float(kw["timeout"]) if "timeout" in kw else get_float_env("DEVOPS_WATCH_TIMEOUT", DEFAULT_TIMEOUT)
            raw_threads = kw.get("max_threads", getenv_str("DEVOPS_WATCH_MAX_THREADS"))
            max_threads = int(raw_threads) if raw_threads not in (None, "") else None
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        keywords_raw = kw.get("keywords")
        if keywords_raw:
            if isinstance(keywords_raw, str):
                keywords_raw = keywords_raw.split(",")
            keywords = tuple(k.strip().lower() for k in keywords_raw if str(k).strip())
        else:
            keywords = DEFAULT_KEYWORDS

        dry_run = truthy(kw["dry_run"]) if "dry_run" in kw else truthy(getenv_str("DEVOPS_WATCH_DRY_RUN"))

        settings = cls(
            slack_token=token,
            channel_id=channel,
            history_path=history_path,
            window_hours=window_hours,
            sites_path=sites_path,
            keywords=keywords,
            location=str(kw.get("location") or DEFAULT_LOCATION).strip().lower(),
            timeout=timeout,
            user_agent=str(kw.get("user_agent") or getenv_str("DEVOPS_WATCH_USER_AGENT", DEFAULT_USER_AGENT)),
            max_threads=max_threads,
            matches_log_path=str(matches_log_path) if matches_log_path else None,
            dry_run=dry_run,
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def load_sites_file(path: str, *, location: str = DEFAULT_LOCATION) -> list[Site]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"sites file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"sites file is invalid JSON: {path}") from e
    return parse_sites_list(data, location=location)


def parse_sites_list(value: Any, *, location: str = DEFAULT_LOCATION) -> list[Site]:
    """
    Parse a flat list into Site objects.
    Accepts: [{"name": "...", "url": "...", "extractor": "generic_body"}, ...]
    Structured sites carry {"selectors": {"listing": ..., "title": ..., "location": ..., ...}}.
    """
    if not value:
        return []
    if not isinstance(value, list):
        raise ConfigError("Expected a list of site objects.")
    out: list[Site] = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"Item[{i}] must be an object.")
        name = str(item.get("name") or "").strip()
        url = str(item.get("url") or "").strip()
        extractor = str(item.get("extractor") or "generic_body").strip().lower()
        if not name or not url:
            raise ConfigError(f"Item[{i}] requires 'name' and 'url'.")
        if extractor not in EXTRACTORS:
            raise ConfigError(f"Item[{i}] has unknown extractor {extractor!r}.")

        selectors = None
        raw_sel = item.get("selectors")
        if raw_sel is not None:
            if not isinstance(raw_sel, dict):
                raise ConfigError(f"Item[{i}].selectors must be an object.")
            raw_sel = {"location_filter": location, **raw_sel}
            try:
                selectors = ListingSelectors(**raw_sel)
            except TypeError as e:
                raise ConfigError(f"Item[{i}].selectors invalid: {e}") from e
        if extractor == "structured_listing" and selectors is None:
            raise ConfigError(f"Item[{i}] uses structured_listing but has no 'selectors'.")
        out.append(Site(name=name, url=url, extractor=extractor, selectors=selectors))
    return out


def _with_location(site: Site, location: str) -> Site:
    if site.selectors is None or site.selectors.location_filter == location:
        return site
    return replace(site, selectors=replace(site.selectors, location_filter=location))


def _validate_settings(s: Settings) -> None:
    if s.max_threads is not None and s.max_threads <= 0:
        raise ConfigError("'max_threads' must be >= 1.")
    if s.window_hours < 0:
        raise ConfigError("'window_hours' cannot be negative.")
    if s.timeout <= 0:
        raise ConfigError("'timeout' must be > 0.")
    if not s.history_path.strip():
        raise ConfigError("'history_path' cannot be empty.")
    if not s.keywords:
        raise ConfigError("At least one keyword is required.")

    # Ensure there is at least one site after selection (file-backed or built-in)
    for site in s.sites():
        if not site.name or not site.url:
            raise ConfigError("Each Site must have 'name' and 'url'.")
