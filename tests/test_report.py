"""Tests for the Markdown run report."""

from easyapply import report
from easyapply.models import ApplicationOutcome, JobReference, OutcomeStatus


def job(i, title):
    return JobReference(str(i), title, "Unknown", "Unknown", f"https://www.linkedin.com/jobs/view/{i}/")


def test_tally_and_rows():
    jobs = [job(1, "Frontend Engineer"), job(2, "Backend Engineer"), job(3, "QA Engineer")]
    outcomes = [
        ApplicationOutcome("1", OutcomeStatus.SUBMITTED, steps=3),
        ApplicationOutcome("2", OutcomeStatus.FAILED_VALIDATION, "form rejected the answers", steps=2),
        ApplicationOutcome("3", OutcomeStatus.SKIPPED_EXTERNAL_REDIRECT),
    ]

    content = report.build_run_report(jobs, outcomes)

    assert "**3** jobs found | **3** attempted | **1** submitted" in content
    assert "`failed_validation`: 1" in content
    assert "`failed_unknown_state`" not in content
    assert "| 2 | Backend Engineer | failed_validation | 2 |" in content
    assert "(form rejected the answers)" in content
    assert "[View](https://www.linkedin.com/jobs/view/3/)" in content


def test_empty_run():
    content = report.build_run_report([], [])

    assert "_No applications attempted._" in content


def test_write_run_report(tmp_path, monkeypatch):
    monkeypatch.setattr(report, "REPORTS_DIR", tmp_path / "reports")

    path = report.write_run_report("# hello")

    assert path.parent == tmp_path / "reports"
    assert path.name.startswith("run_") and path.suffix == ".md"
    assert path.read_text(encoding="utf-8") == "# hello"
