"""Built-in career pages scanned when no sites file is configured."""

from __future__ import annotations

from .models import ListingSelectors, Site

RBC_SELECTORS = ListingSelectors(
    listing="li.job-result",
    title="h3.job-title",
    location=".job-location",
    link="a",
    link_attr="href",
    base_url="https://jobs.rbc.com",
    location_filter="halifax",
)


def _generic(name: str, url: str) -> Site:
    return Site(name=name, url=url, extractor="generic_body")


DEFAULT_SITES: tuple[Site, ...] = (
    # Consulting / services
    Site(
        name="RBC",
        url="https://jobs.rbc.com/ca/en/search-results?keywords=devops&location=Halifax",
        extractor="structured_listing",
        selectors=RBC_SELECTORS,
    ),
    _generic("Scotiabank", "https://jobs.scotiabank.com/search/?q=devops&location=Halifax"),
    _generic("TD Bank", "https://jobs.td.com/en-CA/search-results/?keywords=devops&location=Halifax"),
    _generic("Deloitte", "https://careers.deloitte.ca/search/?q=devops&location=Halifax"),
    _generic("CGI", "https://cgi.njoyn.com/CGI/xweb/XWeb.asp?NTKN=c&clid=21001&Page=JobList&lang=1"),
    _generic("EY", "https://careers.ey.com/ey/search/?q=devops&locationsearch=halifax"),
    _generic("Accenture", "https://www.accenture.com/ca-en/careers/jobsearch?jk=devops&lc=halifax"),
    _generic("IBM", "https://www.ibm.com/ca-en/employment/"),
    _generic("NTT Data", "https://careers-inc.nttdata.com/job-search-results/?keywords=devops&location=Halifax"),
    _generic("Cognizant", "https://careers.cognizant.com/global/en/search-results?keywords=devops&location=Halifax"),
    _generic("Microsoft", "https://careers.microsoft.com/us/en/search-results?keywords=devops&location=Halifax"),
    _generic("Amazon", "https://www.amazon.jobs/en/search?base_query=devops&location=halifax"),
    _generic("Google", "https://careers.google.com/jobs/results/?location=Halifax&q=devops"),
    _generic("Oracle", "https://www.oracle.com/corporate/careers/jobs?keyword=devops&location=halifax"),
    # Product & scale-ups
    _generic("REDspace", "https://jobs.lever.co/redspace"),
    _generic("Dash Hudson", "https://www.dashhudson.com/careers"),
    _generic("Proposify", "https://www.proposify.com/careers"),
    _generic("Milk Moovement", "https://milkmoovement.com/careers"),
    _generic("MOBIA", "https://www.mobia.io/careers"),
    _generic("CarteNav Solutions", "https://www.cartenav.com/careers/"),
    _generic("GeoSpectrum", "https://geospectrum.ca/careers"),
    _generic("ResMed", "https://resmed.wd3.myworkdayjobs.com/ResMedJobs"),
    # Remote-first Canada tech
    _generic(
        "CrowdStrike",
        "https://crowdstrike.wd5.myworkdayjobs.com/CrowdStrikeCareers?locations=6d6b7d53094f01d1c63237f24db0c35d",
    ),
    _generic("Affirm", "https://boards.greenhouse.io/affirm"),
    _generic("Verafin", "https://verafin.com/careers"),
    _generic("Introhive", "https://jobs.lever.co/introhive"),
    # Government & defence
    _generic("Irving Shipbuilding", "https://www.shipsforcanada.ca/en/home/careers"),
    _generic("Lockheed Martin", "https://www.lockheedmartinjobs.com/search-jobs/DevOps/Halifax/694/1"),
)
