from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ListingSelectors:
    """
    CSS selectors for a careers page with a stable listing layout.

    listing:  selects one node per job (e.g. "li.job-result")
    title / location / link:  child selectors evaluated inside a listing node
    link_attr:  attribute read from the link node (usually "href")
    base_url:  joined with the relative link to build the absolute URL
    location_filter:  substring required in the listing location (case-insensitive)
    """

    listing: str
    title: str
    location: str
    link: str = "a"
    link_attr: str = "href"
    base_url: str = ""
    location_filter: str = "halifax"


@dataclass(frozen=True)
class Site:
    """
    One career page to scan. Immutable within a run.
    - extractor: "generic_body" or "structured_listing"
    - selectors: required only for "structured_listing"
    """

    name: str
    url: str
    extractor: str = "generic_body"
    selectors: ListingSelectors | None = None


@dataclass(frozen=True)
class Listing:
    """Raw record pulled from one listing node (structured extractor only)."""

    title: str
    location: str
    relative_link: str


@dataclass(frozen=True)
class Candidate:
    """
    A possible alert proposed by a site worker.
    title/location may be empty (generic extractor); link never is.
    """

    company: str
    title: str
    location: str
    link: str


@dataclass
class SiteResult:
    """
    Outcome of one site worker.
    - candidates: every match the extractor produced (pre-dedupe)
    - alerted: candidates that passed the dedup window and were delivered
    - errors: non-fatal issues (fetch failures etc.)
    """

    site: str
    candidates: list[Candidate] = field(default_factory=list)
    alerted: list[Candidate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_us: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class RunReport:
    """Summary of one complete run, returned to the caller."""

    sites_planned: int = 0
    results: list[SiteResult] = field(default_factory=list)
    alerts_emitted: bool = False
    summary_attempted: bool = False
    summary_sent: bool = False
    total_us: int = 0

    @property
    def failed_sites(self) -> list[str]:
        return sorted(r.site for r in self.results if not r.ok)

    @property
    def candidates_found(self) -> int:
        return sum(len(r.candidates) for r in self.results)

    @property
    def alerts_sent(self) -> int:
        return sum(len(r.alerted) for r in self.results)
