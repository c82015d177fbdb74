"""
Drive WizardDriver through a real headless Chromium page.

``easy_apply_fixture.html`` is a static Easy Apply look-alike: a job page whose
button opens a modal wizard. The URL fragment picks the flow.
"""
import json
import random
from pathlib import Path

import pytest
from playwright.sync_api import sync_playwright

from easyapply.config import ApplyPolicy
from easyapply.models import JobReference, OutcomeStatus
from easyapply.wizard import FormFiller, WizardDriver
from fakes import ScriptedOracle

pytestmark = pytest.mark.integration

FIXTURE = Path(__file__).parent / "easy_apply_fixture.html"

POLICY = ApplyPolicy(
    max_steps=4,
    navigation_timeout_ms=10_000,
    page_settle_ms=0,
    modal_timeout_ms=3_000,
    step_settle_ms=100,
    next_settle_ms=200,
    review_settle_ms=200,
    submit_settle_ms=300,
    control_timeout_ms=1_000,
)


@pytest.fixture(scope="module")
def browser():
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True)
        yield browser
        browser.close()


@pytest.fixture
def page(browser):
    page = browser.new_page(viewport={"width": 1280, "height": 800})
    page.set_default_timeout(5_000)
    yield page
    page.close()


def job(flow):
    return JobReference(flow, "Frontend Engineer", "Unknown", "Unknown", f"{FIXTURE.as_uri()}#{flow}")


def apply(page, profile, flow, answers):
    oracle = ScriptedOracle(answers)
    filler = FormFiller(oracle, profile, POLICY, random.Random(0))
    return WizardDriver(page, filler, POLICY).apply(job(flow)), oracle


def test_three_step_wizard_is_submitted(page, profile):
    outcome, oracle = apply(page, profile, "apply", {"city": "Paris", "authorized": "Yes"})

    assert outcome.status is OutcomeStatus.SUBMITTED
    assert outcome.steps == 3
    assert json.loads(page.locator("#submitted").inner_text()) == {"city": "Paris", "work-auth": "Yes"}
    assert [q for q, _ in oracle.calls] == ["City", "Are you legally authorized to work in France?"]
    assert page.locator(".artdeco-modal").count() == 0
    assert page.locator(".global-nav").is_hidden()


def test_inline_error_aborts_and_discards(page, profile):
    outcome, _ = apply(page, profile, "apply", {"city": ""})

    assert outcome.status is OutcomeStatus.FAILED_VALIDATION
    assert outcome.steps == 1
    assert page.locator(".artdeco-modal").count() == 0
    assert page.locator("#submitted").inner_text() == ""


def test_step_without_navigation_hits_ceiling(page, profile):
    outcome, oracle = apply(page, profile, "stuck", {})

    assert outcome.status is OutcomeStatus.FAILED_UNKNOWN_STATE
    assert outcome.steps == POLICY.max_steps
    assert f"{POLICY.max_steps} steps" in outcome.detail
    assert oracle.calls == []
    assert page.locator(".artdeco-modal").count() == 0
