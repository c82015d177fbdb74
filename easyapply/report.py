"""Markdown summary of one run."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from easyapply.config import REPORTS_DIR
from easyapply.log import get_logger
from easyapply.models import ApplicationOutcome, JobReference, OutcomeStatus

log = get_logger(__name__)

_STATUS_NOTES: dict[OutcomeStatus, str] = {
    OutcomeStatus.SUBMITTED: "Application sent",
    OutcomeStatus.SKIPPED_NO_ENTRY_POINT: "No Easy Apply button on the posting",
    OutcomeStatus.SKIPPED_EXTERNAL_REDIRECT: "Apply opens on the company site; apply manually",
    OutcomeStatus.FAILED_VALIDATION: "Form rejected an answer; check the profile",
    OutcomeStatus.FAILED_UNKNOWN_STATE: "Wizard did not finish; retry manually",
}
_BADGES: dict[OutcomeStatus, str] = {
    OutcomeStatus.SUBMITTED: "✅",
    OutcomeStatus.SKIPPED_NO_ENTRY_POINT: "⏭️",
    OutcomeStatus.SKIPPED_EXTERNAL_REDIRECT: "\U0001f517",
    OutcomeStatus.FAILED_VALIDATION: "⚠️",
    OutcomeStatus.FAILED_UNKNOWN_STATE: "❌",
}


def _short(text: str, n: int) -> str:
    return text[:n] + ("…" if len(text) > n else "")


def build_run_report(jobs: list[JobReference], outcomes: list[ApplicationOutcome]) -> str:
    by_id = {j.id: j for j in jobs}
    tally = Counter(o.status for o in outcomes)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    lines: list[str] = [f"# Easy Apply Run — {stamp}", ""]
    lines.append(
        f"**{len(jobs)}** jobs found | **{len(outcomes)}** attempted | "
        f"**{tally.get(OutcomeStatus.SUBMITTED, 0)}** submitted"
    )
    lines.append("")

    if outcomes:
        lines.append("## Outcomes")
        lines.append("")
        for status in OutcomeStatus:
            if tally.get(status):
                lines.append(f"- {_BADGES[status]} `{status.value}`: {tally[status]}")
        lines.append("")

        lines.append("| # | Role | Status | Steps | Note | Link |")
        lines.append("|--:|------|--------|------:|------|------|")
        for i, o in enumerate(outcomes, 1):
            job = by_id.get(o.job_id)
            title = _short(job.title, 40) if job and job.title else o.job_id
            link = f"[View]({job.url})" if job and job.url else "—"
            note = _STATUS_NOTES[o.status]
            if o.detail:
                note += f" ({_short(o.detail, 60)})"
            lines.append(f"| {i} | {title} | {o.status.value} | {o.steps} | {note} | {link} |")
        lines.append("")
    else:
        lines.append("_No applications attempted._")
        lines.append("")

    log.info("Built run report: %d attempted, %d submitted", len(outcomes), tally.get(OutcomeStatus.SUBMITTED, 0))
    return "\n".join(lines)


def write_run_report(content: str) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = REPORTS_DIR / f"run_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
