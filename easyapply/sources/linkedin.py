"""LinkedIn job search results page: collect Easy Apply postings.

The search URL already filters on Easy Apply (``f_AL=true``), so every posting
link on the page is a candidate. Company and location are not read from the card.
"""
from __future__ import annotations

import re

from easyapply.log import get_logger
from easyapply.models import JobReference
from easyapply.sources.base import ListingSourceBase

log = get_logger(__name__)

JOB_LINK_SELECTOR = 'a[href*="/jobs/view/"], a[href*="currentJobId"]'
CARD_TITLE_SELECTOR = ".job-card-list__title"
POSTING_URL = "https://www.linkedin.com/jobs/view/{id}/"
UNKNOWN = "Unknown"

# Result-list containers seen across LinkedIn layouts.
_LAYOUTS: dict[str, str] = {
    "search-results": ".jobs-search-results-list",
    "scaffold": ".scaffold-layout__list-container",
    "basic-list": "ul.jobs-search__results-list",
}

_VIEW_PATH_RE = re.compile(r"/jobs/view/(\d+)")
_CURRENT_JOB_RE = re.compile(r"[?&]currentJobId=(\d+)")


def extract_job_id(href: str | None) -> str | None:
    """Numeric posting id from a job link; the ``/jobs/view/<id>`` path wins over the query."""
    if not href:
        return None
    m = _VIEW_PATH_RE.search(href) or _CURRENT_JOB_RE.search(href)
    return m.group(1) if m else None


class LinkedInListingScanner(ListingSourceBase):
    def __init__(self, search_url: str, *, settle_ms: int = 3000) -> None:
        self.search_url = search_url
        self.settle_ms = settle_ms

    def open(self, page) -> None:
        log.info("Opening search: %s", self.search_url)
        page.goto(self.search_url, wait_until="domcontentloaded")
        page.wait_for_selector("body", timeout=10_000)
        page.wait_for_timeout(self.settle_ms)

        present = [name for name, sel in _LAYOUTS.items() if page.locator(sel).count() > 0]
        log.debug("Result layouts present: %s (page title %r)", present or "none", page.title())

    def scan(self, page, limit: int = 25) -> list[JobReference]:
        links = page.locator(JOB_LINK_SELECTOR).all()
        log.debug("Found %d candidate job links", len(links))

        jobs: list[JobReference] = []
        seen: set[str] = set()
        for link in links:
            if len(jobs) >= limit:
                break
            try:
                job_id = extract_job_id(link.get_attribute("href"))
                if not job_id or job_id in seen:
                    continue
                seen.add(job_id)
                jobs.append(JobReference(
                    id=job_id,
                    title=self._title(link),
                    company=UNKNOWN,
                    location=UNKNOWN,
                    url=POSTING_URL.format(id=job_id),
                ))
            except Exception as exc:
                log.debug("Skipping malformed job link: %s", exc)

        log.info("Collected %d Easy Apply job(s)", len(jobs))
        return jobs

    def search(self, page, limit: int = 25) -> list[JobReference]:
        self.open(page)
        return self.scan(page, limit)

    @staticmethod
    def _title(link) -> str:
        lines = [ln.strip() for ln in (link.inner_text() or "").splitlines() if ln.strip()]
        title = " ".join(lines[0].split()) if lines else ""
        if len(title) < 3:
            nested = link.locator(CARD_TITLE_SELECTOR)
            if nested.count() > 0:
                title = " ".join(nested.first.inner_text().split())
        return title
