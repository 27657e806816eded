from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..http_client import Document
from ..matcher import DEFAULT_KEYWORDS
from ..models import Candidate, Site


class BaseExtractor(ABC):
    """
    Abstract extractor interface.

    Turns one fetched page into zero or more match candidates.

    Contract:
      - extract(site, document) yields Candidate objects that already passed
        the keyword (and, where applicable, location) filters.
      - Do NOT fetch, notify, print, or touch the dedup store; the site worker
        in the engine owns those steps.
      - A selector that matches nothing is an empty result, not an error.
    """

    # Concrete subclasses MUST set this to a stable string, e.g. "generic_body"
    kind: str = ""

    def __init__(self, keywords: Iterable[str] | None = None):
        self.keywords: tuple[str, ...] = tuple(keywords) if keywords else DEFAULT_KEYWORDS

    @abstractmethod
    def extract(self, site: Site, document: Document) -> Iterable[Candidate]:
        raise NotImplementedError
