from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import django
import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tourdesk.settings")
django.setup()


@pytest.fixture(autouse=True)
def _reset_metrics():
    from apps.core.observability import METRICS

    METRICS.reset()
    yield


@pytest.fixture()
def at():
    """Build UTC datetimes on a fixed tour day: ``at("14:30")``."""

    def build(clock: str, day: int = 12) -> datetime:
        hour, minute = (int(part) for part in clock.split(":"))
        return datetime(2026, 6, day, hour, minute, tzinfo=timezone.utc)

    return build
