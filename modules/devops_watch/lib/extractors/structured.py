from __future__ import annotations

from collections.abc import Iterable, Iterator
from urllib.parse import urljoin

from ..http_client import Document, child_attr, child_text
from ..matcher import location_contains, text_matches_keywords
from ..models import Candidate, Listing, ListingSelectors, Site
from .base import BaseExtractor


class StructuredListingExtractor(BaseExtractor):
    """
    Listing-page extractor driven by CSS selectors (see ListingSelectors).

    For every listing node: read title, location and the relative link, keep
    the listing when the title hits a keyword AND the location contains
    `selectors.location_filter`, and join the link onto `selectors.base_url`.
    Listings without a link are skipped.
    """

    kind = "structured_listing"

    def extract(self, site: Site, document: Document) -> Iterable[Candidate]:
        sel = site.selectors
        if sel is None:
            raise ValueError(f"{site.name}: structured_listing requires selectors")

        out: list[Candidate] = []
        for listing in self.listings(document, sel):
            if not text_matches_keywords(listing.title, self.keywords):
                continue
            if not location_contains(sel.location_filter, listing.location):
                continue
            out.append(
                Candidate(
                    company=site.name,
                    title=listing.title,
                    location=listing.location,
                    link=_absolute(sel.base_url or site.url, listing.relative_link),
                )
            )
        return out

    @staticmethod
    def listings(document: Document, sel: ListingSelectors) -> Iterator[Listing]:
        for node in document.select(sel.listing):
            link = child_attr(node, sel.link, sel.link_attr)
            if not link:
                continue
            yield Listing(
                title=child_text(node, sel.title),
                location=child_text(node, sel.location),
                relative_link=link,
            )


def _absolute(base: str, link: str) -> str:
    # Root-relative links are appended to the configured base as-is
    # (so "https://jobs.rbc.com" + "/jobs/123"); anything else goes through urljoin.
    if link.startswith("/") and not link.startswith("//"):
        return base.rstrip("/") + link
    return urljoin(base, link)
