# devops_watch/http_client.py
from __future__ import annotations

import logging

import requests
from bs4 import BeautifulSoup  # pip install beautifulsoup4 html5lib
from bs4.element import Tag

LOG = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_TIMEOUT = 30.0


class FetchError(Exception):
    """Network failure or non-2xx response while fetching a page."""

    def __init__(self, url: str, message: str, status: int | None = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class Document:
    """
    A fetched HTML page. Parsing is lazy; callers use either the lowercased
    body text or CSS selection over the parsed tree.
    """

    def __init__(self, url: str, html: str):
        self.url = url
        self.html = html
        self._soup: BeautifulSoup | None = None

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "html5lib")
        return self._soup

    def body_text(self) -> str:
        """Visible text of <body> (whole document if there is none), lowercased."""
        root = self.soup.body or self.soup
        return root.get_text(" ", strip=True).lower()

    def select(self, selector: str) -> list[Tag]:
        return self.soup.select(selector)


def child_text(node: Tag, selector: str) -> str:
    el = node.select_one(selector)
    return el.get_text(" ", strip=True) if el else ""


def child_attr(node: Tag, selector: str, attr: str) -> str:
    el = node.select_one(selector)
    if el is None:
        return ""
    val = el.get(attr)
    if isinstance(val, list):
        val = " ".join(val)
    return (val or "").strip()


class HttpClient:
    """
    HTTP client for career pages: fixed user agent, per-request timeout, no retries
    (the requests default). A failed fetch is picked up again by the next scheduled run.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout = float(timeout)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    # ---- convenience ----
    def get_text(self, url: str, *, timeout: float | None = None) -> str:
        """GET and return decoded text. Raises FetchError on transport errors or non-2xx."""
        try:
            resp = self.session.get(url, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, f"request failed: {e!r}") from e
        if not 200 <= resp.status_code < 300:
            raise FetchError(url, f"HTTP {resp.status_code}", status=resp.status_code)
        if not resp.encoding and resp.apparent_encoding:
            resp.encoding = resp.apparent_encoding
        return resp.text

    def fetch(self, url: str, *, timeout: float | None = None) -> Document:
        return Document(url, self.get_text(url, timeout=timeout))

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)
