"""
End-to-end tests for WizardDriver against synthetic Easy Apply wizards.

Each wizard is a list of step builders; buttons swap the modal content the way the
real site re-renders between steps.
"""

import random
from dataclasses import replace

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from easyapply.models import JobReference, OutcomeStatus
from easyapply.wizard import FormFiller, WizardDriver
from easyapply.wizard.machine import MODAL_CLOSED_DETAIL
from fake_dom import FakePage, h
from fakes import ScriptedOracle

JOB_URL = "https://www.linkedin.com/jobs/view/4242/"
JOB = JobReference("4242", "Frontend Engineer", "Unknown", "Unknown", JOB_URL)


class Wizard:
    """A job page whose Easy Apply button opens a modal rendering ``steps`` in turn."""

    def __init__(self, *steps, entry=None, opens=True):
        self.steps = steps
        self.entry = entry
        self.opens = opens
        self.modal = None
        self.submitted = False

    def page(self):
        return FakePage({JOB_URL: self.build})

    def build(self, page):
        entry = self.entry or h("button", "Easy Apply", class_="jobs-apply-button")
        if self.opens:
            entry.on_click = self.open
        return [
            h("header", "Home  Jobs  Messaging", class_="global-nav"),
            h("h1", JOB.title),
            entry,
        ]

    def open(self, page):
        self.modal = h("div", class_="artdeco-modal")
        page.body.append(self.modal)
        self.show(0)

    def show(self, i):
        self.modal.replace_children(*self.steps[i](self))

    def goto(self, i):
        return lambda page: self.show(i)

    def submit(self, page):
        self.submitted = True
        self.modal.remove()
        dialog = h("div", class_="artdeco-modal")
        dialog.append(h("button", "Done", on_click=lambda p: dialog.remove()))
        page.body.append(dialog)


def contact_step(w):
    return [
        h("label", "Mobile phone number", for_="phone"),
        h("input", type="tel", id="phone"),
        h("button", "Next", aria_label="Continue to next step", on_click=w.goto(1)),
    ]


def questions_step(w):
    return [
        h("fieldset",
          h("legend", "Are you legally authorized to work in France?"),
          h("input", type="radio", id="auth-yes", name="auth"),
          h("label", "Yes", for_="auth-yes"),
          h("input", type="radio", id="auth-no", name="auth"),
          h("label", "No", for_="auth-no")),
        h("input", type="file", id="resume", visible=False),
        h("button", "Review", aria_label="Review your application", on_click=w.goto(2)),
    ]


def review_step(w):
    return [h("button", "Submit application", aria_label="Submit application", on_click=w.submit)]


@pytest.fixture
def make_driver(profile, policy):
    def make(page, answers=None, pol=None):
        oracle = ScriptedOracle(answers or {"phone": "+33 6 12 34 56 78"})
        pol = pol or policy
        filler = FormFiller(oracle, profile, pol, random.Random(0))
        return WizardDriver(page, filler, pol)

    return make


# ============ Happy path ============

class TestSubmission:

    def test_three_step_wizard_submits(self, make_driver, profile):
        w = Wizard(contact_step, questions_step, review_step)
        page = w.page()

        outcome = make_driver(page).apply(JOB)

        assert outcome.status is OutcomeStatus.SUBMITTED
        assert outcome.job_id == "4242"
        assert outcome.steps <= 3
        assert w.submitted
        doc = page.document
        assert doc.find_by_id("phone") is None  # step was replaced
        assert page.locator("button").filter(has_text="Done").count() == 0

    def test_every_detected_field_answered(self, make_driver, profile):
        w = Wizard(contact_step, questions_step, review_step)
        page = w.page()
        seen = {}

        def capture(step_fn):
            def wrapped(wz):
                nodes = step_fn(wz)
                for n in nodes:
                    seen.setdefault(step_fn.__name__, []).append(n)
                return nodes
            wrapped.__name__ = step_fn.__name__
            return wrapped

        w.steps = tuple(capture(s) for s in w.steps)
        make_driver(page).apply(JOB)

        phone = next(n for n in seen["contact_step"] if n.attrs.get("id") == "phone")
        fieldset = next(n for n in seen["questions_step"] if n.tag == "fieldset")
        resume = next(n for n in seen["questions_step"] if n.attrs.get("id") == "resume")
        assert phone.value == "+33 6 12 34 56 78"
        assert [r.checked for r in fieldset.descendants() if r.tag == "input"] == [True, False]
        assert resume.files == [profile.resume_path]

    def test_entry_activated_by_dispatched_click(self, make_driver):
        w = Wizard(review_step)
        page = w.page()

        make_driver(page).apply(JOB)

        assert [e for e, _ in page.dispatched] == ["click"]
        nav = page.body.children[0]
        assert nav.attrs["class"] == "global-nav" and not nav.visible

    def test_french_entry_button(self, make_driver):
        entry = h("button", "Candidature simplifiée", aria_label="Candidature simplifiée à Acme")
        w = Wizard(review_step, entry=entry)

        outcome = make_driver(w.page()).apply(JOB)

        assert outcome.status is OutcomeStatus.SUBMITTED

    def test_duplicate_entry_buttons_do_not_break_strict_mode(self, make_driver):
        w = Wizard(review_step)
        page = FakePage({JOB_URL: lambda p: w.build(p) + [h("button", "Easy Apply", class_="jobs-apply-button")]})

        outcome = make_driver(page).apply(JOB)

        assert outcome.status is OutcomeStatus.SUBMITTED

    def test_modal_closing_is_inferred_success(self, make_driver):
        def single_step(w):
            return [h("button", "Next", aria_label="Continue to next step",
                      on_click=lambda p: w.modal.remove())]

        outcome = make_driver(Wizard(single_step).page()).apply(JOB)

        assert outcome.status is OutcomeStatus.SUBMITTED
        assert outcome.detail == MODAL_CLOSED_DETAIL
        assert outcome.steps == 2

    def test_forward_submit_then_close_trusted_when_strict(self, make_driver, policy):
        def primary_only(w):
            return [h("div",
                      h("button", "Envoyer", class_="artdeco-button--primary",
                        on_click=lambda p: w.modal.remove()),
                      class_="artdeco-modal__actionbar")]

        strict = replace(policy, trust_modal_close=False)
        outcome = make_driver(Wizard(primary_only).page(), pol=strict).apply(JOB)

        assert outcome.status is OutcomeStatus.SUBMITTED


# ============ Skips and failures ============

class TestAborts:

    def test_no_entry_point(self, make_driver):
        page = FakePage({JOB_URL: lambda p: [
            h("button", "Apply on company website", class_="jobs-apply-button--external"),
        ]})

        outcome = make_driver(page).apply(JOB)

        assert outcome.status is OutcomeStatus.SKIPPED_NO_ENTRY_POINT
        assert outcome.steps == 0

    def test_external_redirect(self, make_driver):
        outcome = make_driver(Wizard(review_step, opens=False).page()).apply(JOB)

        assert outcome.status is OutcomeStatus.SKIPPED_EXTERNAL_REDIRECT

    def test_inline_error_after_next(self, make_driver):
        def failing_step(w):
            def reject(page):
                w.modal.append(h("div", "Enter a valid phone number", class_="artdeco-inline-feedback--error"))
            return [
                h("label", "Mobile phone number", for_="phone"),
                h("input", type="tel", id="phone"),
                h("button", "Next", aria_label="Continue to next step", on_click=reject),
            ]

        outcome = make_driver(Wizard(failing_step).page()).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_VALIDATION
        assert outcome.steps == 1

    def test_submit_refused_with_unanswered_field(self, make_driver):
        submit = h("button", "Submit application", aria_label="Submit application")

        def step(w):
            return [
                h("label", "City", for_="city"),
                h("input", type="text", id="city", fail=("fill",)),
                submit,
            ]

        w = Wizard(step)
        outcome = make_driver(w.page()).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_VALIDATION
        assert submit.clicks == 0
        assert not w.submitted

    def test_no_navigation_control_hits_ceiling(self, make_driver, policy):
        def stuck(w):
            return [h("label", "City", for_="city"), h("input", type="text", id="city")]

        outcome = make_driver(Wizard(stuck).page()).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_UNKNOWN_STATE
        assert outcome.steps == policy.max_steps

    def test_modal_close_untrusted(self, make_driver, policy):
        def single_step(w):
            return [h("button", "Next", aria_label="Continue to next step",
                      on_click=lambda p: w.modal.remove())]

        strict = replace(policy, trust_modal_close=False)
        outcome = make_driver(Wizard(single_step).page(), pol=strict).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_UNKNOWN_STATE

    def test_abort_discards_draft(self, make_driver, policy):
        def stuck(w):
            def dismiss(page):
                w.modal.replace_children(h("button", "Discard", on_click=lambda p: w.modal.remove()))
            return [h("button", class_="artdeco-modal__dismiss", aria_label="Dismiss", on_click=dismiss)]

        w = Wizard(stuck)
        page = w.page()

        outcome = make_driver(page).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_UNKNOWN_STATE
        assert page.locator(".artdeco-modal").count() == 0

    def test_navigation_timeout_is_unknown_state(self, make_driver):
        page = FakePage()
        page.goto_error = PlaywrightTimeoutError("Timeout 25000ms exceeded.")

        outcome = make_driver(page).apply(JOB)

        assert outcome.status is OutcomeStatus.FAILED_UNKNOWN_STATE
        assert outcome.detail.startswith("timeout")

    def test_browser_errors_propagate(self, make_driver):
        page = FakePage()
        page.goto_error = PlaywrightError("Target page, context or browser has been closed")

        with pytest.raises(PlaywrightError):
            make_driver(page).apply(JOB)
