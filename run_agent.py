#!/usr/bin/env python3
"""Entry point to run the Easy Apply agent."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from easyapply.log import get_logger
from easyapply.config import AUTH_FILE_PATH, PROFILE_PATH

log = get_logger(__name__)


def _check_setup() -> bool:
    """Return True if first-run setup is needed."""
    missing = []
    if not PROFILE_PATH.exists():
        missing.append(f"profile ({PROFILE_PATH})")
    if not AUTH_FILE_PATH.exists():
        missing.append(f"LinkedIn session ({AUTH_FILE_PATH})")
    if missing:
        print()
        print(f"  Missing {' and '.join(missing)}. Run the setup wizard first:")
        print("    python onboard.py")
        print()
        return True
    return False


if __name__ == "__main__":
    if _check_setup():
        sys.exit(1)

    from easyapply.agent import run

    result = run(write_report=True)
    log.info("Run complete.")
    log.info("  Jobs found: %d", result["jobs_found"])
    log.info("  Attempted: %d", result["attempted"])
    for status, count in sorted(result["tally"].items()):
        log.info("  %s: %d", status, count)
    if result["report_path"]:
        log.info("  Report: %s", result["report_path"])
