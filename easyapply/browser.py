"""Chromium session handling: restore a saved LinkedIn login, or capture a new one."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from easyapply.log import get_logger

log = get_logger(__name__)

LOGIN_URL = "https://www.linkedin.com/login"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1280, "height": 900}
DEFAULT_TIMEOUT_MS = 20_000


@contextmanager
def open_session(auth_path: Path, *, headless: bool = False) -> Iterator[Page]:
    """Yield one page whose context carries the saved login. The browser closes on exit."""
    if not Path(auth_path).exists():
        raise FileNotFoundError(f"No saved session at {auth_path}; run onboard.py first")

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=headless)
        try:
            context = browser.new_context(
                storage_state=str(auth_path),
                viewport=VIEWPORT,
                user_agent=USER_AGENT,
            )
            page = context.new_page()
            page.set_default_timeout(DEFAULT_TIMEOUT_MS)
            log.info("Browser session restored from %s (headless=%s)", auth_path, headless)
            yield page
        finally:
            browser.close()


def capture_session(auth_path: Path, *, timeout_ms: int = 300_000) -> bool:
    """Open a visible browser on the login page and save the session once the feed loads."""
    auth_path = Path(auth_path)
    auth_path.parent.mkdir(parents=True, exist_ok=True)

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=False)
        try:
            context = browser.new_context(viewport=VIEWPORT, user_agent=USER_AGENT)
            page = context.new_page()
            page.goto(LOGIN_URL)
            log.info("Log in to LinkedIn in the browser window (waiting up to %d min)", timeout_ms // 60_000)
            try:
                page.wait_for_url("**/feed/**", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                log.error("Login not detected before the timeout; session not saved")
                return False
            context.storage_state(path=str(auth_path))
            log.info("Session saved to %s", auth_path)
            return True
        finally:
            browser.close()
