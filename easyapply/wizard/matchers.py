"""
Element matchers shared by the wizard driver.

Each matcher is one strategy for finding a control. A list of matchers is tried in
order and the first element that is present *and* visible wins; a matcher that
raises is treated as a miss.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from easyapply.log import get_logger

log = get_logger(__name__)

MODAL_SELECTOR = ".artdeco-modal"
MODAL_READY_SELECTOR = ".jobs-easy-apply-content, .artdeco-modal"
ERROR_SELECTOR = ".artdeco-inline-feedback--error"
DISMISS_SELECTOR = ".artdeco-modal__dismiss"
PRIMARY_ACTION_SELECTOR = ".artdeco-modal__actionbar button.artdeco-button--primary"
OVERLAY_SELECTORS = (
    ".global-nav",
    ".msg-overlay-list-bubble",
    ".jobs-search-results-list__header",
    ".authentication-outlet",
)

_HIDE_OVERLAYS_JS = """(selectors) => {
    for (const sel of selectors) {
        document.querySelectorAll(sel).forEach((el) => { el.style.display = 'none'; });
    }
}"""

FORWARD_TEXT_RE = re.compile(r"Review|Submit|Next|Suivant|Vérifier|Envoyer", re.IGNORECASE)


def visible(locator) -> bool:
    """Safe visibility check that never throws."""
    try:
        return locator.count() > 0 and locator.first.is_visible(timeout=2000)
    except Exception:
        return False


@dataclass(frozen=True)
class Matcher:
    """A named way of locating one kind of control inside a scope (page or modal)."""

    name: str
    locate: Callable[[Any], Any]
    accepts: Callable[[str], bool] | None = None

    def find(self, scope) -> Any | None:
        try:
            loc = self.locate(scope)
            if not visible(loc):
                return None
            el = loc.first
            if self.accepts is not None and not self.accepts(el.inner_text()):
                return None
            return el
        except Exception as exc:
            log.debug("Matcher %s failed: %s", self.name, exc)
            return None


def css(selector: str, *, accepts: Callable[[str], bool] | None = None) -> Matcher:
    return Matcher(f"css:{selector}", lambda scope: scope.locator(selector), accepts)


def text(value: str, *, exact: bool = False) -> Matcher:
    return Matcher(f"text:{value}", lambda scope: scope.get_by_text(value, exact=exact))


def button_text(pattern: re.Pattern) -> Matcher:
    return Matcher(
        f"button-text:{pattern.pattern}",
        lambda scope: scope.locator("button").filter(has_text=pattern),
    )


def first_visible(scope, matchers: Sequence[Matcher]) -> tuple[Matcher, Any] | None:
    for m in matchers:
        el = m.find(scope)
        if el is not None:
            return m, el
    return None


ENTRY_MATCHERS: tuple[Matcher, ...] = (
    css("button.jobs-apply-button"),
    css(".jobs-apply-button--top-card button"),
    css('button[aria-label*="Easy Apply"]'),
    css('button[aria-label*="Candidature simplifiée"]'),
    text("Easy Apply"),
    text("Candidature simplifiée"),
    text("Postuler maintenant"),
)

SUBMIT_MATCHERS: tuple[Matcher, ...] = (
    css('button[aria-label="Submit application"], button[aria-label="Envoyer la candidature"]'),
    button_text(re.compile(r"Submit application|Envoyer la candidature", re.IGNORECASE)),
)

REVIEW_MATCHERS: tuple[Matcher, ...] = (
    css('button[aria-label="Review your application"], button[aria-label="Vérifier votre candidature"]'),
    button_text(re.compile(r"Review|Vérifier", re.IGNORECASE)),
)

NEXT_MATCHERS: tuple[Matcher, ...] = (
    css('button[aria-label="Continue to next step"], button[aria-label="Aller à l’étape suivante"]'),
    button_text(re.compile(r"Next|Suivant", re.IGNORECASE)),
)

FORWARD_MATCHERS: tuple[Matcher, ...] = (
    css(PRIMARY_ACTION_SELECTOR, accepts=lambda t: bool(FORWARD_TEXT_RE.search(t))),
)

DONE_MATCHERS: tuple[Matcher, ...] = (
    button_text(re.compile(r"^\s*(Done|Terminé)\s*$", re.IGNORECASE)),
)

DISCARD_MATCHERS: tuple[Matcher, ...] = (
    button_text(re.compile(r"Discard|Supprimer", re.IGNORECASE)),
)


def hide_overlays(page) -> None:
    """Hide sticky headers and chat bubbles that sit on top of the apply button."""
    try:
        page.evaluate(_HIDE_OVERLAYS_JS, list(OVERLAY_SELECTORS))
    except Exception as exc:
        log.debug("Could not hide overlays: %s", exc)


def activate(page, element) -> None:
    """Scroll ``element`` into view and fire a DOM click event on it directly."""
    try:
        element.scroll_into_view_if_needed()
    except Exception as exc:
        log.debug("scroll_into_view failed: %s", exc)
    hide_overlays(page)
    element.dispatch_event("click")


def click_first_visible(scope, matchers: Sequence[Matcher]) -> bool:
    hit = first_visible(scope, matchers)
    if hit is None:
        return False
    name, el = hit[0].name, hit[1]
    try:
        el.click()
        log.debug("Clicked %s", name)
        return True
    except Exception as exc:
        log.debug("Click on %s failed: %s", name, exc)
        return False
