import pytest

from modules.devops_watch.lib.config import ConfigError, parse_sites_list
from modules.devops_watch.lib.extractors import (
    EXTRACTORS,
    PLACEHOLDER_TITLE,
    GenericBodyExtractor,
    StructuredListingExtractor,
    get,
)
from modules.devops_watch.lib.http_client import Document
from modules.devops_watch.lib.models import Candidate, Site
from modules.devops_watch.lib.sites import DEFAULT_SITES


# ----------------------------------------------------------------------
# Extractor lookup
# ----------------------------------------------------------------------
def test_extractor_set_is_closed():
    assert EXTRACTORS == {
        "generic_body": GenericBodyExtractor,
        "structured_listing": StructuredListingExtractor,
    }
    assert get("GENERIC_BODY") is GenericBodyExtractor
    assert get(" structured_listing ") is StructuredListingExtractor


def test_unknown_kind_raises_keyerror():
    with pytest.raises(KeyError):
        get("headless_browser")


def test_unknown_kind_in_sites_list_is_config_error():
    with pytest.raises(ConfigError, match="unknown extractor"):
        parse_sites_list([{"name": "X", "url": "https://x", "extractor": "headless_browser"}])


# ----------------------------------------------------------------------
# Generic body
# ----------------------------------------------------------------------
def test_generic_match_yields_single_placeholder(html_fixtures):
    site = Site(name="AcmeCo", url=html_fixtures.ACME_URL)
    doc = Document(site.url, html_fixtures.ACME_HTML)

    out = list(GenericBodyExtractor().extract(site, doc))

    assert out == [Candidate("AcmeCo", PLACEHOLDER_TITLE, "", html_fixtures.ACME_URL)]


def test_generic_ignores_markup_outside_visible_text():
    site = Site(name="AcmeCo", url="https://acme.example/careers")
    html = '<html><body class="cloud-theme"><p>We are hiring an office manager.</p></body></html>'
    assert list(GenericBodyExtractor().extract(site, Document(site.url, html))) == []


def test_generic_no_match_develops_only():
    site = Site(name="AcmeCo", url="https://acme.example/careers")
    html = "<html><body><p>Our team develops great products.</p></body></html>"
    assert list(GenericBodyExtractor().extract(site, Document(site.url, html))) == []


def test_generic_respects_custom_keywords():
    site = Site(name="AcmeCo", url="https://acme.example/careers")
    doc = Document(site.url, "<body>Data Analyst</body>")
    assert list(GenericBodyExtractor(keywords=["analyst"]).extract(site, doc))
    assert not list(GenericBodyExtractor().extract(site, doc))


# ----------------------------------------------------------------------
# Structured listing
# ----------------------------------------------------------------------
def _rbc_site(html_fixtures):
    (site,) = parse_sites_list([html_fixtures.RBC_SITE])
    return site


def test_structured_applies_keyword_and_location_filters(html_fixtures):
    site = _rbc_site(html_fixtures)
    doc = Document(site.url, html_fixtures.RBC_HTML)

    out = list(StructuredListingExtractor().extract(site, doc))

    assert out == [
        Candidate(
            company="RBC",
            title="Cloud Platform Engineer",
            location="Halifax, NS",
            link="https://jobs.rbc.com/jobs/123",
        )
    ]


def test_structured_listings_projection(html_fixtures):
    site = _rbc_site(html_fixtures)
    doc = Document(site.url, html_fixtures.RBC_HTML)

    listings = list(StructuredListingExtractor.listings(doc, site.selectors))

    assert [(l.title, l.location, l.relative_link) for l in listings] == [
        ("Cloud Platform Engineer", "Halifax, NS", "/jobs/123"),
        ("Cloud Engineer", "Toronto", "/jobs/124"),
    ]


def test_structured_selector_miss_is_empty_not_error(html_fixtures):
    site = _rbc_site(html_fixtures)
    doc = Document(site.url, "<html><body><div class='no-jobs'>Nothing here</div></body></html>")
    assert list(StructuredListingExtractor().extract(site, doc)) == []


def test_structured_skips_listing_without_link(html_fixtures):
    site = _rbc_site(html_fixtures)
    html = """
    <ul><li class="job-result"><h3 class="job-title">DevOps Lead</h3>
    <span class="job-location">Halifax</span></li></ul>
    """
    assert list(StructuredListingExtractor().extract(site, Document(site.url, html))) == []


def test_structured_keyword_must_be_in_title(html_fixtures):
    site = _rbc_site(html_fixtures)
    html = """
    <ul><li class="job-result"><a href="/jobs/9"><h3 class="job-title">Teller</h3></a>
    <span class="job-location">Halifax - Cloud Campus</span></li></ul>
    """
    assert list(StructuredListingExtractor().extract(site, Document(site.url, html))) == []


def test_structured_absolute_link_kept_as_is(html_fixtures):
    site = _rbc_site(html_fixtures)
    html = """
    <ul><li class="job-result"><a href="https://careers.example/x/1"><h3 class="job-title">SRE</h3></a>
    <span class="job-location">Halifax</span></li></ul>
    """
    (cand,) = StructuredListingExtractor().extract(site, Document(site.url, html))
    assert cand.link == "https://careers.example/x/1"


def test_structured_without_selectors_raises():
    site = Site(name="X", url="https://x.example", extractor="structured_listing")
    with pytest.raises(ValueError):
        list(StructuredListingExtractor().extract(site, Document(site.url, "<body></body>")))


# ----------------------------------------------------------------------
# Built-in site list
# ----------------------------------------------------------------------
def test_default_sites_have_one_structured_entry():
    structured = [s for s in DEFAULT_SITES if s.extractor == "structured_listing"]
    assert [s.name for s in structured] == ["RBC"]
    assert structured[0].selectors.base_url == "https://jobs.rbc.com"
    assert len(DEFAULT_SITES) == 28
    assert len({s.name for s in DEFAULT_SITES}) == len(DEFAULT_SITES)
    assert all(s.url.startswith("https://") for s in DEFAULT_SITES)
