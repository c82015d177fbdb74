"""Data models for job references, the applicant profile and application outcomes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class JobReference:
    id: str
    title: str
    company: str
    location: str
    url: str


@dataclass(frozen=True)
class UserProfile:
    first_name: str
    last_name: str
    email: str
    phone: str
    resume_path: str = ""
    headline: str = ""
    summary: str = ""
    experience: str = ""
    skills: tuple[str, ...] = ()
    profile_url: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_skill(self, name: str) -> bool:
        wanted = name.strip().lower()
        return any(s.strip().lower() == wanted for s in self.skills)


class FieldKind(str, Enum):
    TEXT = "text"
    RADIO_GROUP = "radio_group"
    SELECT = "select"
    FILE = "file"
    CHECKBOX = "checkbox"


@dataclass
class FormField:
    """One control seen during a single classification pass."""

    kind: FieldKind
    identifier: str
    question: str = ""
    current_value: str | None = None
    options: list[str] = field(default_factory=list)
    answer: str | None = None
    filled: bool = False


class OutcomeStatus(str, Enum):
    SUBMITTED = "submitted"
    SKIPPED_NO_ENTRY_POINT = "skipped_no_entry_point"
    SKIPPED_EXTERNAL_REDIRECT = "skipped_external_redirect"
    FAILED_VALIDATION = "failed_validation"
    FAILED_UNKNOWN_STATE = "failed_unknown_state"


@dataclass(frozen=True)
class ApplicationOutcome:
    job_id: str
    status: OutcomeStatus
    detail: str = ""
    steps: int = 0

    @property
    def submitted(self) -> bool:
        return self.status is OutcomeStatus.SUBMITTED
