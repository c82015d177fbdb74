"""
Classify and fill the controls of one wizard step.

Controls are handled in a fixed order: text inputs, radio groups, dropdowns, file
inputs, consent checkboxes. Every control runs inside its own guard so one broken
element never stops the rest of the step.
"""
from __future__ import annotations

import random
import re
from typing import Protocol, Sequence

from easyapply.config import ApplyPolicy
from easyapply.log import get_logger
from easyapply.models import FieldKind, FormField, UserProfile
from easyapply.oracle import first_number

log = get_logger(__name__)

TEXT_INPUT_SELECTOR = (
    'input[type="text"], input[type="email"], input[type="tel"], input[type="number"], textarea'
)
EXPERIENCE_RE = re.compile(r"experience|expérience|years|ann[ée]es|\bans\b", re.IGNORECASE)
YES_RE = re.compile(r"\b(yes|oui)\b", re.IGNORECASE)
NO_RE = re.compile(r"\b(no|non)\b", re.IGNORECASE)
CONSENT_RE = re.compile(r"agree|accept|confirm|compris|accepte|confirme|lu et accepté", re.IGNORECASE)
PLACEHOLDER_OPTION_RE = re.compile(r"^(select an option|sélectionnez une option)$", re.IGNORECASE)


class Oracle(Protocol):
    def answer(self, question: str, options: Sequence[str] | None = None) -> str: ...


def _clean(text: str | None) -> str:
    return " ".join((text or "").split())


def _label_for(scope, control_id: str):
    return scope.locator(f'label[for="{control_id}"]')


def _label_text(scope, control_id: str | None) -> str:
    if not control_id:
        return ""
    label = _label_for(scope, control_id)
    if label.count() == 0:
        return ""
    return _clean(label.first.inner_text())


def match_option(answer: str, options: Sequence[str]) -> int | None:
    """Index of the option that best fits ``answer``; ``None`` when nothing fits."""
    answer = _clean(answer)
    if not answer or not options:
        return None

    if len(options) == 2:
        yes = [i for i, o in enumerate(options) if YES_RE.search(o)]
        no = [i for i, o in enumerate(options) if NO_RE.search(o)]
        if len(yes) == 1 and len(no) == 1 and yes != no:
            if YES_RE.search(answer):
                return yes[0]
            if NO_RE.search(answer):
                return no[0]

    a = answer.lower()
    for i, opt in enumerate(options):
        o = opt.lower()
        if o and (a in o or o in a):
            return i
    return None


class FormFiller:
    def __init__(
        self,
        oracle: Oracle,
        profile: UserProfile,
        policy: ApplyPolicy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.oracle = oracle
        self.profile = profile
        self.policy = policy or ApplyPolicy()
        self._rng = rng or random.Random()

    def fill_step(self, scope) -> list[FormField]:
        fields: list[FormField] = []
        self._fill_text_inputs(scope, fields)
        self._fill_radio_groups(scope, fields)
        self._fill_selects(scope, fields)
        self._fill_file_inputs(scope, fields)
        self._fill_checkboxes(scope, fields)
        return fields

    # -- text / numeric ------------------------------------------------------

    def _fill_text_inputs(self, scope, fields: list[FormField]) -> None:
        for el in scope.locator(TEXT_INPUT_SELECTOR).all():
            try:
                if not el.is_visible():
                    continue
                control_id = el.get_attribute("id")
                question = _label_text(scope, control_id)
                if not question:
                    continue

                value = (el.input_value() or "").strip()
                refill = value == "0" and bool(EXPERIENCE_RE.search(question))
                if value and not refill:
                    continue

                field = FormField(FieldKind.TEXT, control_id, question, current_value=value or None)
                fields.append(field)
                answer = self.oracle.answer(question)
                if refill:
                    answer = self._experience_years(answer)
                if not answer:
                    log.debug("No answer for text field %r", question)
                    continue

                if value:
                    el.fill("")
                el.fill(answer)
                field.answer = answer
                field.filled = True
                log.debug("Filled %r with %r", question, answer)
            except Exception as exc:
                log.debug("Skipping text input: %s", exc)

    def _experience_years(self, answer: str) -> str:
        number = first_number(answer or "")
        if number is None or int(number) <= 0:
            fallback = str(self._rng.randint(*self.policy.experience_fallback))
            log.debug("Experience answer %r unusable, using %s", answer, fallback)
            return fallback
        return str(int(number))

    # -- radio groups --------------------------------------------------------

    def _fill_radio_groups(self, scope, fields: list[FormField]) -> None:
        for fs in scope.locator("fieldset").all():
            try:
                radios = fs.locator('input[type="radio"]').all()
                if not radios:
                    continue
                if any(r.is_checked() for r in radios):
                    continue

                question = self._group_question(fs)
                labels = []
                for r in radios:
                    labels.append(_label_text(fs, r.get_attribute("id")))

                field = FormField(FieldKind.RADIO_GROUP, fs.get_attribute("id") or question,
                                  question, options=labels)
                fields.append(field)

                answer = self.oracle.answer(question, [o for o in labels if o])
                idx = match_option(answer, labels)
                if idx is None:
                    log.debug("No option matches %r for %r, using the first", answer, question)
                    idx = 0

                self._select_radio(fs, radios[idx])
                if radios[idx].is_checked():
                    field.answer = labels[idx]
                    field.filled = True
                    log.debug("Chose %r for %r", labels[idx], question)
            except Exception as exc:
                log.debug("Skipping radio group: %s", exc)

    @staticmethod
    def _group_question(fs) -> str:
        legend = fs.locator("legend")
        if legend.count() > 0:
            text = _clean(legend.first.inner_text())
            if text:
                return text
        for span in fs.locator('span[aria-hidden="true"]').all():
            if span.is_visible():
                return _clean(span.inner_text())
        return ""

    @staticmethod
    def _select_radio(fs, radio) -> None:
        radio_id = radio.get_attribute("id")
        try:
            if radio_id:
                _label_for(fs, radio_id).first.click()
        except Exception as exc:
            log.debug("Label click failed: %s", exc)
        if not radio.is_checked():
            radio.click(force=True)

    # -- dropdowns -----------------------------------------------------------

    def _fill_selects(self, scope, fields: list[FormField]) -> None:
        for sel in scope.locator("select").all():
            try:
                if not sel.is_visible():
                    continue
                control_id = sel.get_attribute("id")
                question = _label_text(scope, control_id)
                if not question:
                    continue
                options = [
                    o for o in (_clean(t) for t in sel.locator("option").all_inner_texts())
                    if o and not PLACEHOLDER_OPTION_RE.match(o)
                ]
                if not options:
                    continue

                field = FormField(FieldKind.SELECT, control_id, question, options=options)
                fields.append(field)
                answer = self.oracle.answer(question, options)
                idx = match_option(answer, options)
                choice = options[idx] if idx is not None else answer
                try:
                    sel.select_option(label=choice)
                except Exception:
                    log.debug("No option labelled %r for %r, picking index 1", choice, question)
                    sel.select_option(index=1)
                    choice = _clean(sel.locator("option:checked").first.inner_text())
                field.answer = choice
                field.filled = True
            except Exception as exc:
                log.debug("Skipping dropdown: %s", exc)

    # -- file uploads --------------------------------------------------------

    def _fill_file_inputs(self, scope, fields: list[FormField]) -> None:
        for el in scope.locator('input[type="file"]').all():
            field = FormField(FieldKind.FILE, "", "resume")
            fields.append(field)
            try:
                field.identifier = el.get_attribute("id") or ""
                if not self.profile.resume_path:
                    log.warning("No resume configured, leaving upload empty")
                    continue
                el.set_input_files(self.profile.resume_path)
                field.answer = self.profile.resume_path
                field.filled = True
                log.debug("Uploaded resume %s", self.profile.resume_path)
            except Exception as exc:
                log.warning("Resume upload failed: %s", exc)

    # -- consent checkboxes --------------------------------------------------

    def _fill_checkboxes(self, scope, fields: list[FormField]) -> None:
        for box in scope.locator('input[type="checkbox"]').all():
            try:
                if box.is_checked():
                    continue
                control_id = box.get_attribute("id")
                question = _label_text(scope, control_id)
                if not question:
                    continue

                field = FormField(FieldKind.CHECKBOX, control_id, question, options=["Yes", "No"])
                fields.append(field)
                if CONSENT_RE.search(question):
                    tick = True
                else:
                    tick = bool(YES_RE.search(self.oracle.answer(question, ["Yes", "No"])))

                if tick:
                    try:
                        box.check(timeout=self.policy.control_timeout_ms)
                    except Exception:
                        _label_for(scope, control_id).first.click()
                field.answer = "Yes" if tick else "No"
                field.filled = True
            except Exception as exc:
                log.debug("Skipping checkbox: %s", exc)
