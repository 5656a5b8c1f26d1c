import os
import tempfile
from datetime import datetime

# Keep test runs from writing logs into the working tree or onto the console
os.environ.setdefault("SCHOOL_ADMIN_LOGS_DIR", tempfile.mkdtemp(prefix="school-admin-logs-"))
os.environ.setdefault("CONSOLE_LOG_LEVEL", "CRITICAL")

import pytest

from school_admin.fixtures import build_repository
from school_admin.repository import SchoolRepository

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def repo() -> SchoolRepository:
    return build_repository(now=NOW)
