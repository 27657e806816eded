"""
Engine for one devops_watch pass: fetch every site, match, dedupe, notify.

Features:
  - One worker thread per site (optionally bounded by `max_threads`)
  - Shared RunContext: dedup store + "any alert delivered" flag, both locked
  - Summary message when no alert was delivered
  - Dependency injection for testability (`get_extractor`, `client_factory`, `notifier`)
  - Structured logging via `logging_bridge`
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Protocol

from . import logging_bridge
from .config import Settings
from .extractors.base import BaseExtractor
from .fingerprint import fingerprint
from .history import HistoryStore
from .http_client import Document, FetchError, HttpClient
from .models import Candidate, RunReport, Site, SiteResult
from .notifier import SUMMARY_TEXT, DryRunNotifier, SlackNotifier, format_match

LOG = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> Document: ...

    def close(self) -> None: ...


class Notifier(Protocol):
    def post(self, text: str) -> bool: ...


# =============================================================================
# DEFAULT LOOKUPS (PRODUCTION)
# =============================================================================
def _default_get_extractor(kind: str) -> type[BaseExtractor]:
    from .extractors import get as get_extractor_class

    return get_extractor_class(kind)


def _default_notifier(settings: Settings) -> Notifier:
    if settings.dry_run:
        return DryRunNotifier(settings.channel_id)
    return SlackNotifier(settings.slack_token, settings.channel_id, timeout=settings.timeout)


# =============================================================================
# RUN CONTEXT (shared by all site workers)
# =============================================================================
class RunContext:
    """
    Process-wide state for one run. offer() and send_summary() are the only
    mutating entry points and are safe to call from any worker thread.
    """

    def __init__(
        self,
        history: HistoryStore,
        notifier: Notifier,
        *,
        matches_log_path: str | None = None,
    ):
        self.history = history
        self.notifier = notifier
        self.matches_log_path = matches_log_path
        self._alerted = threading.Event()
        self._log_lock = threading.Lock()

    @property
    def alerts_emitted(self) -> bool:
        return self._alerted.is_set()

    def offer(self, candidate: Candidate) -> bool:
        """
        Dedupe and deliver one candidate. Returns True only if the chat post succeeded.
        A candidate inside the suppression window is dropped silently.
        """
        fp = fingerprint(candidate)
        if not self.history.should_emit(fp):
            logging_bridge.activity({
                "component": "devops_watch.engine",
                "op": "suppressed",
                "company": candidate.company,
                "fingerprint": fp,
            })
            return False

        msg = format_match(candidate)
        LOG.info(msg)
        self._append_match_line(msg)

        delivered = self.notifier.post(msg)
        if delivered:
            self._alerted.set()
        logging_bridge.activity({
            "component": "devops_watch.engine",
            "op": "alert",
            "company": candidate.company,
            "title": candidate.title,
            "link": candidate.link,
            "fingerprint": fp,
            "delivered": delivered,
        })
        return delivered

    def send_summary(self) -> bool:
        LOG.info(SUMMARY_TEXT)
        return self.notifier.post(SUMMARY_TEXT)

    def _append_match_line(self, line: str) -> None:
        if not self.matches_log_path:
            return
        with self._log_lock:
            try:
                with open(self.matches_log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                logging_bridge.error({
                    "component": "devops_watch.engine",
                    "op": "matches_log",
                    "path": self.matches_log_path,
                    "error": repr(e),
                })


# =============================================================================
# SITE WORKER
# =============================================================================
def scan_site(site: Site, ctx: RunContext, extractor: BaseExtractor, client: Fetcher) -> SiteResult:
    """
    Fetch -> extract -> dedupe -> notify for a single site, strictly in that order.
    Fetch failures are logged and end the worker; they never raise.
    """
    t0 = time.perf_counter_ns()
    result = SiteResult(site=site.name)
    LOG.info("Scanning %s (%s)...", site.name, extractor.kind)

    try:
        document = client.fetch(site.url)
        candidates = list(extractor.extract(site, document))
    except FetchError as e:
        result.errors.append(str(e))
        LOG.warning("Error visiting %s for %s: %s", site.url, site.name, e)
        logging_bridge.error({
            "component": "devops_watch.engine",
            "op": "fetch",
            "site": site.name,
            "url": site.url,
            "status": e.status,
            "error": str(e),
        })
        result.duration_us = int((time.perf_counter_ns() - t0) // 1000)
        return result

    result.candidates.extend(candidates)
    for cand in candidates:
        if ctx.offer(cand):
            result.alerted.append(cand)

    result.duration_us = int((time.perf_counter_ns() - t0) // 1000)
    return result


# =============================================================================
# DISPATCHER
# =============================================================================
def dispatch(
    sites: list[Site],
    ctx: RunContext,
    *,
    make_extractor: Callable[[Site], BaseExtractor],
    client_factory: Callable[[], Fetcher],
    max_threads: int | None = None,
) -> list[SiteResult]:
    """
    Run one worker per site and wait for all of them. A worker that blows up is
    logged and recorded as a failed site; siblings are unaffected.
    """
    if not sites:
        return []

    def _run_site(site: Site) -> SiteResult:
        client = client_factory()
        try:
            return scan_site(site, ctx, make_extractor(site), client)
        finally:
            client.close()

    results: list[SiteResult] = []
    workers = min(len(sites), max_threads) if max_threads else len(sites)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="site") as pool:
        futures = {pool.submit(_run_site, s): s for s in sites}
        for fut in as_completed(futures):
            site = futures[fut]
            try:
                results.append(fut.result())
            except Exception as e:
                LOG.exception("Worker for %s failed", site.name)
                logging_bridge.error({
                    "component": "devops_watch.engine",
                    "op": "site_worker",
                    "site": site.name,
                    "url": site.url,
                    "error": repr(e),
                })
                results.append(SiteResult(site=site.name, errors=[repr(e)]))
    return results


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    *,
    get_extractor: Callable[[str], type[BaseExtractor]] | None = None,
    client_factory: Callable[[], Fetcher] | None = None,
    notifier: Notifier | None = None,
    history: HistoryStore | None = None,
) -> RunReport:
    """
    Run one complete pass: load history, scan every site, post the summary if
    nothing was delivered.

    Args:
        settings: Validated configuration.
        get_extractor: Optional override to resolve extractor classes (for testing).
        client_factory: Optional override building one page fetcher per worker.
        notifier: Optional chat notifier (defaults to Slack, or dry-run).
        history: Optional preloaded dedup store (defaults to settings.history_path).
    """
    start_ns = time.perf_counter_ns()
    sites = settings.sites()

    get_extractor_func = get_extractor or _default_get_extractor
    if client_factory is None:

        def client_factory() -> Fetcher:
            return HttpClient(timeout=settings.timeout, user_agent=settings.user_agent)

    if history is None:
        history = HistoryStore.load(settings.history_path, window_seconds=settings.window_seconds)
        if settings.dry_run:
            # Dry runs see the real snapshot but never write it back.
            history = HistoryStore(None, history.entries(), window_seconds=settings.window_seconds)
    own_notifier = notifier is None
    chat = notifier if notifier is not None else _default_notifier(settings)

    ctx = RunContext(history, chat, matches_log_path=settings.matches_log_path)

    def make_extractor(site: Site) -> BaseExtractor:
        return get_extractor_func(site.extractor)(keywords=settings.keywords)

    logging_bridge.activity({
        "component": "devops_watch.engine",
        "op": "start",
        "sites": len(sites),
        "history_entries": len(history),
        "window_hours": settings.window_hours,
        "dry_run": settings.dry_run,
    })

    report = RunReport(sites_planned=len(sites))
    try:
        report.results = dispatch(
            sites,
            ctx,
            make_extractor=make_extractor,
            client_factory=client_factory,
            max_threads=settings.max_threads,
        )
        LOG.info("All sites finished.")

        report.alerts_emitted = ctx.alerts_emitted
        if not ctx.alerts_emitted:
            report.summary_attempted = True
            report.summary_sent = ctx.send_summary()
    finally:
        if own_notifier:
            close = getattr(chat, "close", None)
            if callable(close):
                close()

    report.total_us = int((time.perf_counter_ns() - start_ns) // 1000)
    logging_bridge.activity({
        "component": "devops_watch.engine",
        "op": "summary",
        "sites": report.sites_planned,
        "failed_sites": report.failed_sites,
        "candidates": report.candidates_found,
        "alerts_sent": report.alerts_sent,
        "summary_attempted": report.summary_attempted,
        "summary_sent": report.summary_sent,
        "durations_us": {r.site: r.duration_us for r in report.results},
        "total_us": report.total_us,
    })
    return report
