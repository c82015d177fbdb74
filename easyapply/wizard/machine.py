"""
Pure state machine for one Easy Apply attempt.

The driver probes the page, wraps what it saw in an observation and asks
``transition`` what to do next. Nothing here touches the browser, so every path of
the wizard can be checked without one.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from easyapply.config import ApplyPolicy
from easyapply.models import OutcomeStatus


class WizardState(str, Enum):
    NOT_STARTED = "not_started"
    ENTRY_LOCATED = "entry_located"
    STEP_ACTIVE = "step_active"
    REVIEWING = "reviewing"
    SUBMITTED = "submitted"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (WizardState.SUBMITTED, WizardState.ABORTED)


class NavAction(str, Enum):
    """Navigation controls in priority order."""

    SUBMIT = "submit"
    REVIEW = "review"
    NEXT = "next"
    FORWARD = "forward"


class Effect(str, Enum):
    ACTIVATE_ENTRY = "activate_entry"
    CLICK_SUBMIT = "click_submit"
    CLICK_REVIEW = "click_review"
    CLICK_NEXT = "click_next"
    CLICK_FORWARD = "click_forward"
    WAIT = "wait"


@dataclass(frozen=True)
class EntryProbe:
    found: bool


@dataclass(frozen=True)
class ModalProbe:
    appeared: bool


@dataclass(frozen=True)
class StepProbe:
    modal_present: bool
    action: NavAction | None = None
    unresolved: int = 0
    last_click_submitted: bool = False


@dataclass(frozen=True)
class NextResult:
    validation_error: bool


@dataclass(frozen=True)
class BudgetExhausted:
    pass


Observation = Union[EntryProbe, ModalProbe, StepProbe, NextResult, BudgetExhausted]

MODAL_CLOSED_DETAIL = "inferred from modal closing"


@dataclass(frozen=True)
class Transition:
    state: WizardState
    effect: Effect | None = None
    status: OutcomeStatus | None = None
    detail: str = ""

    @property
    def terminal(self) -> bool:
        return self.state.terminal


_CLICK_FOR_ACTION = {
    NavAction.REVIEW: (WizardState.REVIEWING, Effect.CLICK_REVIEW),
    NavAction.NEXT: (WizardState.STEP_ACTIVE, Effect.CLICK_NEXT),
    NavAction.FORWARD: (WizardState.STEP_ACTIVE, Effect.CLICK_FORWARD),
}


def _abort(status: OutcomeStatus, detail: str) -> Transition:
    return Transition(WizardState.ABORTED, status=status, detail=detail)


def transition(state: WizardState, observation: Observation, policy: ApplyPolicy) -> Transition:
    if state.terminal:
        raise ValueError(f"Wizard already finished in state {state.value}")

    if isinstance(observation, BudgetExhausted):
        return _abort(
            OutcomeStatus.FAILED_UNKNOWN_STATE,
            f"no terminal state after {policy.max_steps} steps",
        )

    if isinstance(observation, EntryProbe):
        if state is not WizardState.NOT_STARTED:
            raise ValueError(f"Entry probe is not valid in state {state.value}")
        if not observation.found:
            return _abort(OutcomeStatus.SKIPPED_NO_ENTRY_POINT, "no Easy Apply button")
        return Transition(WizardState.ENTRY_LOCATED, Effect.ACTIVATE_ENTRY)

    if isinstance(observation, ModalProbe):
        if state is not WizardState.ENTRY_LOCATED:
            raise ValueError(f"Modal probe is not valid in state {state.value}")
        if not observation.appeared:
            return _abort(OutcomeStatus.SKIPPED_EXTERNAL_REDIRECT, "apply opened outside the wizard")
        return Transition(WizardState.STEP_ACTIVE)

    if isinstance(observation, StepProbe):
        if state not in (WizardState.STEP_ACTIVE, WizardState.REVIEWING):
            raise ValueError(f"Step probe is not valid in state {state.value}")
        return _step(state, observation, policy)

    if isinstance(observation, NextResult):
        if state is not WizardState.STEP_ACTIVE:
            raise ValueError(f"Next result is not valid in state {state.value}")
        if observation.validation_error:
            return _abort(OutcomeStatus.FAILED_VALIDATION, "form rejected the answers")
        return Transition(WizardState.STEP_ACTIVE)

    raise TypeError(f"Unknown observation: {observation!r}")


def _step(state: WizardState, probe: StepProbe, policy: ApplyPolicy) -> Transition:
    if not probe.modal_present:
        if policy.trust_modal_close or probe.last_click_submitted:
            return Transition(
                WizardState.SUBMITTED, status=OutcomeStatus.SUBMITTED, detail=MODAL_CLOSED_DETAIL
            )
        return _abort(OutcomeStatus.FAILED_UNKNOWN_STATE, "modal closed before submit")

    if probe.action is None:
        return Transition(state, Effect.WAIT)

    if probe.action is NavAction.SUBMIT:
        if probe.unresolved:
            return _abort(
                OutcomeStatus.FAILED_VALIDATION,
                f"{probe.unresolved} field(s) left unanswered",
            )
        return Transition(WizardState.SUBMITTED, Effect.CLICK_SUBMIT, OutcomeStatus.SUBMITTED)

    next_state, effect = _CLICK_FOR_ACTION[probe.action]
    return Transition(next_state, effect)
