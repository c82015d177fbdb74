"""
Easy Apply agent.

Runs: restore session → scan search results → one wizard attempt per job → run report.
"""
from __future__ import annotations

import random
from collections import Counter
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from easyapply.browser import open_session
from easyapply.config import (
    AUTH_FILE_PATH,
    build_search_url,
    ensure_dirs,
    get_bool_env,
    get_env,
    load_policy,
    load_profile,
)
from easyapply.log import get_logger
from easyapply.models import ApplicationOutcome, OutcomeStatus
from easyapply.oracle import DEFAULT_MODEL, AnswerOracle
from easyapply.report import build_run_report, write_run_report
from easyapply.sources import LinkedInListingScanner
from easyapply.wizard import FormFiller, WizardDriver

log = get_logger(__name__)


def run(
    *,
    max_jobs: int | None = None,
    headless: bool | None = None,
    write_report: bool = True,
    search_url: str | None = None,
) -> dict[str, Any]:
    ensure_dirs()
    profile = load_profile()
    policy = load_policy()
    limit = max_jobs if max_jobs is not None else policy.max_jobs
    headless = headless if headless is not None else get_bool_env("HEADLESS")
    rng = random.Random()

    api_key = get_env("OPENAI_API_KEY")
    if not api_key:
        log.warning("OPENAI_API_KEY not set; open questions get default answers")
    oracle = AnswerOracle(
        profile,
        api_key=api_key,
        model=get_env("OPENAI_MODEL", DEFAULT_MODEL),
        base_url=get_env("OPENAI_BASE_URL") or None,
        policy=policy,
        rng=rng,
    )
    scanner = LinkedInListingScanner(search_url or build_search_url(), settle_ms=policy.page_settle_ms)

    jobs = []
    outcomes: list[ApplicationOutcome] = []
    with open_session(AUTH_FILE_PATH, headless=headless) as page:
        jobs = scanner.search(page, limit=limit)
        if not jobs:
            log.warning("No Easy Apply jobs found for %s", scanner.search_url)

        driver = WizardDriver(page, FormFiller(oracle, profile, policy, rng), policy)
        for i, job in enumerate(jobs, 1):
            log.info("[%d/%d] %s", i, len(jobs), job.url)
            try:
                outcome = driver.apply(job)
            except PlaywrightError as exc:
                log.error("Browser error on %s: %s", job.id, str(exc).splitlines()[0] if str(exc) else exc)
                outcome = ApplicationOutcome(job.id, OutcomeStatus.FAILED_UNKNOWN_STATE, str(exc)[:150])
            outcomes.append(outcome)
            log.info("Job %s: %s", job.title, "APPLIED" if outcome.submitted else outcome.status.value)

            if page.is_closed():
                log.error("Browser page closed; stopping run")
                break
            if i < len(jobs):
                page.wait_for_timeout(int(rng.uniform(*policy.inter_job_delay_s) * 1000))

    tally = Counter(o.status.value for o in outcomes)
    report_content = build_run_report(jobs, outcomes)
    report_path = write_run_report(report_content) if write_report else None

    log.info(
        "Run complete — found=%d, attempted=%d, submitted=%d",
        len(jobs), len(outcomes), tally.get(OutcomeStatus.SUBMITTED.value, 0),
    )

    return {
        "jobs_found": len(jobs),
        "attempted": len(outcomes),
        "submitted": tally.get(OutcomeStatus.SUBMITTED.value, 0),
        "tally": dict(tally),
        "outcomes": outcomes,
        "report_path": str(report_path) if report_path else None,
    }
