"""
Drive one Easy Apply attempt from the job page to a terminal outcome.

The driver owns every browser side effect; decisions come from
``easyapply.wizard.machine.transition``.
"""
from __future__ import annotations

import re

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from easyapply.config import ApplyPolicy
from easyapply.log import get_logger
from easyapply.models import ApplicationOutcome, FieldKind, JobReference, OutcomeStatus
from easyapply.wizard.fields import FormFiller
from easyapply.wizard.machine import (
    BudgetExhausted,
    Effect,
    EntryProbe,
    ModalProbe,
    NavAction,
    NextResult,
    StepProbe,
    Transition,
    WizardState,
    transition,
)
from easyapply.wizard.matchers import (
    DISCARD_MATCHERS,
    DISMISS_SELECTOR,
    DONE_MATCHERS,
    ENTRY_MATCHERS,
    ERROR_SELECTOR,
    FORWARD_MATCHERS,
    MODAL_READY_SELECTOR,
    MODAL_SELECTOR,
    NEXT_MATCHERS,
    REVIEW_MATCHERS,
    SUBMIT_MATCHERS,
    activate,
    click_first_visible,
    css,
    first_visible,
    visible,
)

log = get_logger(__name__)

_ACTION_MATCHERS = (
    (NavAction.SUBMIT, SUBMIT_MATCHERS),
    (NavAction.REVIEW, REVIEW_MATCHERS),
    (NavAction.NEXT, NEXT_MATCHERS),
    (NavAction.FORWARD, FORWARD_MATCHERS),
)
_SUBMIT_TEXT_RE = re.compile(r"Submit|Envoyer", re.IGNORECASE)


class WizardDriver:
    def __init__(self, page, filler: FormFiller, policy: ApplyPolicy | None = None) -> None:
        self.page = page
        self.filler = filler
        self.policy = policy or ApplyPolicy()
        self._state = WizardState.NOT_STARTED
        self._steps = 0
        self._modal_opened = False

    def apply(self, job: JobReference) -> ApplicationOutcome:
        """Run one application attempt. Never retries; browser crashes propagate."""
        self._state = WizardState.NOT_STARTED
        self._steps = 0
        self._modal_opened = False
        log.info("Applying: %s [%s]", job.title, job.id)

        try:
            outcome = self._drive(job)
        except PlaywrightTimeoutError as exc:
            first_line = str(exc).splitlines()[0] if str(exc) else "timeout"
            outcome = ApplicationOutcome(
                job.id, OutcomeStatus.FAILED_UNKNOWN_STATE, f"timeout: {first_line}", self._steps
            )

        if not outcome.submitted and self._modal_opened:
            self._close_wizard()

        log.info("  -> %s after %d step(s) %s", outcome.status.value, outcome.steps, outcome.detail)
        return outcome

    def _drive(self, job: JobReference) -> ApplicationOutcome:
        page, policy = self.page, self.policy
        page.goto(job.url, wait_until="domcontentloaded", timeout=policy.navigation_timeout_ms)
        page.wait_for_timeout(policy.page_settle_ms)

        hit = first_visible(page, ENTRY_MATCHERS)
        t = self._advance(EntryProbe(found=hit is not None))
        if t.terminal:
            return self._finish(job, t)
        log.debug("Entry point found via %s", hit[0].name)
        activate(page, hit[1])

        t = self._advance(ModalProbe(appeared=self._wait_for_modal()))
        if t.terminal:
            return self._finish(job, t)
        self._modal_opened = True

        last_click_submitted = False
        for step in range(1, policy.max_steps + 1):
            self._steps = step
            page.wait_for_timeout(policy.step_settle_ms)

            modal = page.locator(MODAL_SELECTOR)
            if not visible(modal):
                t = self._advance(StepProbe(modal_present=False, last_click_submitted=last_click_submitted))
                return self._finish(job, t)

            scope = modal.first
            fields = self.filler.fill_step(scope)
            unresolved = [f for f in fields if not f.filled and f.kind is not FieldKind.FILE]
            for f in unresolved:
                log.debug("Unanswered %s field: %r", f.kind.value, f.question)

            action, button = self._pick_action(scope)
            t = self._advance(StepProbe(True, action, len(unresolved)))
            last_click_submitted = False

            if t.effect is Effect.CLICK_SUBMIT:
                button.click()
                page.wait_for_timeout(policy.submit_settle_ms)
                if click_first_visible(page, DONE_MATCHERS):
                    log.debug("Dismissed confirmation dialog")
                return self._finish(job, t)
            if t.terminal:
                return self._finish(job, t)

            if t.effect is Effect.CLICK_REVIEW:
                button.click()
                page.wait_for_timeout(policy.review_settle_ms)
            elif t.effect is Effect.CLICK_NEXT:
                button.click()
                page.wait_for_timeout(policy.next_settle_ms)
                t = self._advance(NextResult(validation_error=visible(scope.locator(ERROR_SELECTOR))))
                if t.terminal:
                    return self._finish(job, t)
            elif t.effect is Effect.CLICK_FORWARD:
                last_click_submitted = bool(_SUBMIT_TEXT_RE.search(button.inner_text()))
                button.click()
                page.wait_for_timeout(policy.next_settle_ms)
            else:
                log.debug("Step %d: no navigation control yet", step)

        return self._finish(job, self._advance(BudgetExhausted()))

    def _advance(self, observation) -> Transition:
        t = transition(self._state, observation, self.policy)
        log.debug("%s + %s -> %s (%s)", self._state.value, type(observation).__name__,
                  t.state.value, t.effect.value if t.effect else "-")
        self._state = t.state
        return t

    def _finish(self, job: JobReference, t: Transition) -> ApplicationOutcome:
        return ApplicationOutcome(job.id, t.status, t.detail, self._steps)

    def _wait_for_modal(self) -> bool:
        try:
            self.page.wait_for_selector(MODAL_READY_SELECTOR, timeout=self.policy.modal_timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    @staticmethod
    def _pick_action(scope):
        for action, matchers in _ACTION_MATCHERS:
            hit = first_visible(scope, matchers)
            if hit is not None:
                return action, hit[1]
        return None, None

    def _close_wizard(self) -> None:
        try:
            if click_first_visible(self.page, (css(DISMISS_SELECTOR),)):
                self.page.wait_for_timeout(self.policy.next_settle_ms)
                click_first_visible(self.page, DISCARD_MATCHERS)
        except Exception as exc:
            log.debug("Could not close the wizard: %s", exc)
