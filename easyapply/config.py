"""Load profile, session paths, search settings and apply policy from env/config."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any
from urllib.parse import quote

import yaml
from dotenv import load_dotenv

from easyapply.log import get_logger
from easyapply.models import UserProfile

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
USER_DATA_DIR: Path = ROOT_DIR / "user-data"
REPORTS_DIR: Path = ROOT_DIR / "reports"
PROFILE_PATH: Path = Path(os.environ.get("PROFILE_PATH", "").strip() or CONFIG_DIR / "profile.yaml")
AUTH_FILE_PATH: Path = Path(os.environ.get("AUTH_FILE_PATH", "").strip() or USER_DATA_DIR / "auth.json")

SEARCH_BASE_URL = "https://www.linkedin.com/jobs/search/"

# Older profile.json files were written with camelCase keys.
_PROFILE_KEY_ALIASES: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "cvPath": "resume_path",
    "resumePath": "resume_path",
    "linkedInUrl": "profile_url",
    "profileUrl": "profile_url",
}
_REQUIRED_PROFILE_KEYS = ("first_name", "last_name", "email", "phone")


@dataclass(frozen=True)
class ApplyPolicy:
    """Business policy for one run. All waits are milliseconds unless suffixed ``_s``."""

    max_steps: int = 15
    max_jobs: int = 25
    navigation_timeout_ms: int = 25_000
    page_settle_ms: int = 3_000
    modal_timeout_ms: int = 5_000
    step_settle_ms: int = 1_000
    next_settle_ms: int = 1_000
    review_settle_ms: int = 2_000
    submit_settle_ms: int = 3_000
    control_timeout_ms: int = 2_000
    experience_fallback: tuple[int, int] = (3, 6)
    salary_fallback: tuple[int, int] = (55_000, 65_000)
    inter_job_delay_s: tuple[float, float] = (5.0, 10.0)
    trust_modal_close: bool = True


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def get_bool_env(key: str, default: bool = False) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def get_int_env(key: str, default: int) -> int:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r, using %d", key, raw, default)
        return default


def ensure_dirs() -> None:
    for d in (CONFIG_DIR, USER_DATA_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)


def load_policy() -> ApplyPolicy:
    policy = ApplyPolicy()
    return replace(
        policy,
        max_steps=max(1, get_int_env("MAX_STEPS", policy.max_steps)),
        max_jobs=max(1, get_int_env("MAX_JOBS", policy.max_jobs)),
        trust_modal_close=get_bool_env("TRUST_MODAL_CLOSE", policy.trust_modal_close),
    )


def build_search_url(
    keywords: str | None = None,
    location: str | None = None,
    remote: bool | None = None,
) -> str:
    """Easy Apply-only search URL (``f_AL=true``); ``f_WT=2`` restricts to remote roles."""
    keywords = keywords if keywords is not None else get_env("SEARCH_KEYWORDS", "Software Engineer")
    location = location if location is not None else get_env("SEARCH_LOCATION", "Remote")
    remote = remote if remote is not None else get_bool_env("JOB_REMOTE")

    url = f"{SEARCH_BASE_URL}?f_AL=true&keywords={quote(keywords, safe='')}&location={quote(location, safe='')}"
    if remote:
        url += "&f_WT=2"
    return url


def _normalize_profile(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in data.items():
        out[_PROFILE_KEY_ALIASES.get(key, key)] = value

    skills = out.get("skills") or []
    if isinstance(skills, str):
        skills = skills.split(",")
    seen: set[str] = set()
    unique: list[str] = []
    for s in skills:
        s = str(s).strip()
        if s and s.lower() not in seen:
            seen.add(s.lower())
            unique.append(s)
    out["skills"] = tuple(unique)
    return out


def load_profile(path: Path | None = None) -> UserProfile:
    """Read the applicant profile (YAML or JSON) into an immutable ``UserProfile``."""
    path = path or PROFILE_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Profile at {path} must be a mapping, got {type(data).__name__}")

    data = _normalize_profile(data)
    missing = [k for k in _REQUIRED_PROFILE_KEYS if not data.get(k)]
    if missing:
        raise ValueError(f"Profile at {path} is missing: {', '.join(missing)}")

    fields = UserProfile.__dataclass_fields__
    kwargs = {k: v for k, v in data.items() if k in fields}
    for key in ("first_name", "last_name", "email", "phone", "resume_path",
                "headline", "summary", "experience", "profile_url"):
        if key in kwargs and kwargs[key] is not None:
            kwargs[key] = str(kwargs[key]).strip()
        elif key in kwargs:
            kwargs[key] = ""

    if kwargs.get("resume_path"):
        kwargs["resume_path"] = str(Path(kwargs["resume_path"]).expanduser())

    profile = UserProfile(**kwargs)
    if profile.resume_path and not Path(profile.resume_path).exists():
        log.warning("Resume not found at %s; uploads will fail", profile.resume_path)
    return profile


def write_profile(profile: UserProfile, path: Path | None = None) -> Path:
    """Write the profile to YAML in the layout ``load_profile`` reads back."""
    path = path or PROFILE_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {k: getattr(profile, k) for k in UserProfile.__dataclass_fields__}
    data["skills"] = list(profile.skills)

    header = (
        "# ============================================================\n"
        "# Applicant Profile — answers are derived from these fields\n"
        "# Edit freely; skills drive the years-of-experience answers\n"
        "# ============================================================\n\n"
    )

    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    path.write_text(header + yaml_str, encoding="utf-8")
    log.info("Profile written → %s", path)
    return path
