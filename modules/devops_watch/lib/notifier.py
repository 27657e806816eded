# devops_watch/notifier.py
from __future__ import annotations

import logging

import requests

from . import logging_bridge
from .models import Candidate

LOG = logging.getLogger(__name__)

SLACK_POST_URL = "https://slack.com/api/chat.postMessage"
SUMMARY_TEXT = "No new openings found"


def format_match(candidate: Candidate) -> str:
    """Chat line for one match, e.g. '✅ RBC: Cloud Engineer Halifax, NS→ https://...'."""
    return f"✅ {candidate.company}: {candidate.title} {candidate.location}→ {candidate.link}"


class SlackNotifier:
    """
    Posts plain-text messages to one Slack channel via chat.postMessage.

    post() returns True only on HTTP 200. Transport errors and any other status
    are logged (status + response body) and reported as False; nothing is retried
    or raised.
    """

    def __init__(
        self,
        token: str,
        channel: str,
        *,
        api_url: str = SLACK_POST_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.channel = channel
        self.api_url = api_url
        self.timeout = float(timeout)
        self._token = token
        self.session = session or requests.Session()

    def post(self, text: str) -> bool:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }
        payload = {"channel": self.channel, "text": text}
        try:
            resp = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logging_bridge.error({
                "component": "devops_watch.notifier",
                "op": "post",
                "channel": self.channel,
                "error": repr(e),
            })
            LOG.warning("Slack error: %r", e)
            return False

        if resp.status_code != 200:
            body = (resp.text or "")[:500]
            logging_bridge.error({
                "component": "devops_watch.notifier",
                "op": "post",
                "channel": self.channel,
                "status": resp.status_code,
                "body": body,
            })
            LOG.warning("Slack HTTP %d: %s", resp.status_code, body)
            return False

        # Slack reports API-level failures (bad channel, revoked token) inside a 200.
        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("ok") is False:
            LOG.warning("Slack accepted the request but replied ok=false: %s", (resp.text or "")[:500])
        return True

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("SlackNotifier.close() swallow", exc_info=True)


class DryRunNotifier:
    """Logs messages instead of posting them; every post counts as delivered."""

    def __init__(self, channel: str = ""):
        self.channel = channel
        self.sent: list[str] = []

    def post(self, text: str) -> bool:
        self.sent.append(text)
        LOG.info("[dry-run] would post to %s: %s", self.channel or "(channel)", text)
        return True

    def close(self) -> None:
        return None
