"""Check that the closet can persist garments and reach the classifier.

Exits with status 1 when any check fails.
"""

from __future__ import annotations

import asyncio
import sys

from chicpick.config.settings import get_settings
from chicpick.integrations import run_all_checks
from chicpick.monitoring import configure_logging


def main() -> int:
    settings = get_settings()
    configure_logging(settings)
    outcomes = asyncio.run(run_all_checks(settings))
    for outcome in outcomes:
        print(f"[{'ok' if outcome.ok else 'FAIL'}] {outcome.name}: {outcome.detail}")
    return 0 if all(outcome.ok for outcome in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
