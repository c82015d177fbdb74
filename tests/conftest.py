import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from easyapply.config import ApplyPolicy
from easyapply.models import UserProfile
from fakes import ScriptedOracle


@pytest.fixture
def profile(tmp_path):
    resume = tmp_path / "resume.pdf"
    resume.write_bytes(b"%PDF-1.4\n")
    return UserProfile(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="+33 6 12 34 56 78",
        resume_path=str(resume),
        headline="Senior Frontend Engineer",
        summary="Builds web apps.",
        experience="10 years of web development",
        skills=("React", "Python", "AWS"),
        profile_url="https://www.linkedin.com/in/ada",
    )


@pytest.fixture
def policy():
    """Real limits with every wait collapsed to zero."""
    return ApplyPolicy(
        max_steps=5,
        page_settle_ms=0,
        modal_timeout_ms=0,
        step_settle_ms=0,
        next_settle_ms=0,
        review_settle_ms=0,
        submit_settle_ms=0,
        inter_job_delay_s=(0.0, 0.0),
    )


@pytest.fixture
def oracle():
    return ScriptedOracle()
