from __future__ import annotations

from collections.abc import Iterable

from ..http_client import Document
from ..matcher import text_matches_keywords
from ..models import Candidate, Site
from .base import BaseExtractor

PLACEHOLDER_TITLE = "Possible cloud/DevOps opening"


class GenericBodyExtractor(BaseExtractor):
    """
    Whole-page keyword scan for sites without a stable listing layout.

    At most one candidate per page: placeholder title, empty location and
    the page URL as the link.
    """

    kind = "generic_body"

    def extract(self, site: Site, document: Document) -> Iterable[Candidate]:
        if text_matches_keywords(document.body_text(), self.keywords):
            return [Candidate(company=site.name, title=PLACEHOLDER_TITLE, location="", link=site.url)]
        return []
