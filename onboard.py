#!/usr/bin/env python3
"""
Interactive onboarding wizard.

    python onboard.py

Walks through: applicant profile → OpenAI key & search settings → LinkedIn login → ready.
"""
from __future__ import annotations

import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from easyapply.log import get_logger
from easyapply.config import AUTH_FILE_PATH, PROFILE_PATH, ensure_dirs, load_profile, write_profile
from easyapply.models import UserProfile

log = get_logger(__name__)

# ── Helpers ──────────────────────────────────────────────────────────────


def _ask(prompt: str, default: str = "") -> str:
    hint = f" [{default}]" if default else ""
    val = input(f"  {prompt}{hint}: ").strip()
    return val or default


def _ask_yn(prompt: str, default: bool = True) -> bool:
    hint = "Y/n" if default else "y/N"
    val = input(f"  {prompt} ({hint}): ").strip().lower()
    if not val:
        return default
    return val in ("y", "yes")


def _ask_password(prompt: str) -> str:
    return getpass.getpass(f"  {prompt}: ")


def _banner() -> None:
    print()
    print("╔════════════════════════════════════════════╗")
    print("║      LinkedIn Easy Apply Agent — Setup     ║")
    print("╚════════════════════════════════════════════╝")
    print()


def _step(num: int, total: int, title: str) -> None:
    print(f"\n{'─'*50}")
    print(f"  Step {num}/{total}: {title}")
    print(f"{'─'*50}")


def merge_env(env_path: Path, values: dict[str, str], template: Path | None = None) -> None:
    """Rewrite ``env_path`` keeping the template layout, existing values and ``values`` on top."""
    existing: dict[str, str] = {}
    template_lines: list[str] = []
    if template is not None and template.exists():
        for line in template.read_text(encoding="utf-8").splitlines():
            template_lines.append(line)
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k, _, v = stripped.partition("=")
                existing[k.strip()] = v.strip()

    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k, _, v = stripped.partition("=")
                existing[k.strip()] = v.strip()

    all_values = {**existing, **values}

    env_lines: list[str] = []
    written_keys: set[str] = set()
    for line in template_lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and "=" in stripped:
            k = stripped.partition("=")[0].strip()
            env_lines.append(f"{k}={all_values.get(k, '')}")
            written_keys.add(k)
        else:
            env_lines.append(line)

    for k, v in all_values.items():
        if k not in written_keys:
            env_lines.append(f"{k}={v}")

    env_path.write_text("\n".join(env_lines) + "\n", encoding="utf-8")


# ── Steps ────────────────────────────────────────────────────────────────


def step_profile() -> UserProfile | None:
    """Ask for the applicant details the wizard questions are answered from."""
    _step(1, 3, "Applicant Profile")

    current: UserProfile | None = None
    if PROFILE_PATH.exists():
        try:
            current = load_profile()
            print(f"  Found an existing profile for {current.full_name}.")
            if not _ask_yn("Update it?", default=False):
                return current
        except (OSError, ValueError) as exc:
            print(f"  ⚠  Existing profile unreadable ({exc}); starting fresh.")

    def cur(attr: str) -> str:
        return getattr(current, attr) if current else ""

    first = _ask("First name", cur("first_name"))
    last = _ask("Last name", cur("last_name"))
    email = _ask("Email", cur("email"))
    phone = _ask("Phone", cur("phone"))
    if not (first and last and email and phone):
        print("  ✗ Name, email and phone are required — profile not saved.")
        return None

    resume = _ask("Resume file path (PDF)", cur("resume_path")).strip("'\"")
    if resume and not Path(resume).expanduser().exists():
        print(f"  ⚠  File not found: {resume} (uploads will fail until it exists)")

    headline = _ask("Headline (e.g. Senior Frontend Engineer)", cur("headline"))
    summary = _ask("One-line summary", cur("summary"))
    experience = _ask("Experience (e.g. 8 years building web apps)", cur("experience"))
    skills_str = _ask("Skills (comma-separated)", ", ".join(current.skills) if current else "")
    profile_url = _ask("LinkedIn profile URL", cur("profile_url"))

    profile = UserProfile(
        first_name=first,
        last_name=last,
        email=email,
        phone=phone,
        resume_path=str(Path(resume).expanduser()) if resume else "",
        headline=headline,
        summary=summary,
        experience=experience,
        skills=tuple(s.strip() for s in skills_str.split(",") if s.strip()),
        profile_url=profile_url,
    )
    write_profile(profile)
    print(f"  ✓ Profile saved → {PROFILE_PATH}")
    return profile


def step_settings() -> None:
    """Collect the OpenAI key and search preferences into .env."""
    _step(2, 3, "Answers & Search")
    values: dict[str, str] = {}

    key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not key:
        print("  An OpenAI API key lets the agent answer free-text questions.")
        print("  Without one, questions get a default answer (first option or \"Yes\").")
        key = _ask_password("OpenAI API key (or Enter to skip)")
    if key:
        values["OPENAI_API_KEY"] = key
        print("  ✓ OpenAI API key set")

    values["SEARCH_KEYWORDS"] = _ask("Job keywords", os.environ.get("SEARCH_KEYWORDS", "Software Engineer"))
    values["SEARCH_LOCATION"] = _ask("Location", os.environ.get("SEARCH_LOCATION", "Remote"))
    values["JOB_REMOTE"] = "true" if _ask_yn("Remote jobs only?", default=False) else "false"
    values["HEADLESS"] = "true" if _ask_yn("Run the browser hidden (headless)?", default=False) else "false"

    merge_env(ROOT / ".env", values, template=ROOT / ".env.example")
    print("  ✓ Configuration saved → .env")


def step_login() -> bool:
    """Open a browser so the user can log in to LinkedIn once."""
    _step(3, 3, "LinkedIn Login")

    if AUTH_FILE_PATH.exists() and not _ask_yn("A saved session exists. Log in again?", default=False):
        return True
    if not _ask_yn("Open a browser to log in now?", default=True):
        print("  ⚠  Skipped — run this wizard again before starting the agent.")
        return False

    from easyapply.browser import capture_session

    try:
        ok = capture_session(AUTH_FILE_PATH)
    except Exception as exc:
        print(f"  ✗ Login capture failed: {exc}")
        print("    Is Chromium installed? Try `playwright install chromium`.")
        return False
    if ok:
        print(f"  ✓ Session saved → {AUTH_FILE_PATH}")
    else:
        print("  ✗ Login not completed in time — nothing saved.")
    return ok


# ── Main ─────────────────────────────────────────────────────────────────


def main() -> None:
    _banner()
    print("  This wizard will set up everything you need.")
    print("  You can press Enter to accept the value in brackets.\n")

    ensure_dirs()

    profile = step_profile()
    step_settings()
    logged_in = step_login()

    if profile is None or not logged_in:
        print()
        print("  Setup incomplete — run `python onboard.py` again to finish.")
        sys.exit(1)

    print()
    print("╔════════════════════════════════════════════╗")
    print("║            Setup Complete!                 ║")
    print("╚════════════════════════════════════════════╝")
    print()
    print("  Run the agent:")
    print("    python run_agent.py")
    print()
    print("  Edit your profile anytime:")
    print(f"    {PROFILE_PATH}")
    print()


if __name__ == "__main__":
    main()
