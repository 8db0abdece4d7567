"""Fixtures for smoke tests.

Smoke tests check that the installed package imports cleanly and type-checks.
"""

from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "src" / "amqp_helper"


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def package_dir() -> Path:
    """Return the amqp_helper source directory."""
    return PACKAGE_DIR
