"""
Shared pytest fixtures for all tests.

Domain-specific doubles live in the conftest.py of each test package.
"""

import os

import pytest

from citenly.core.container import reset_container

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["REMINDER_SCHEDULER_ENABLED"] = "false"


# ============================================================================
# CONTAINER ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def fresh_container():
    """Drop the global DI container after each test."""
    yield
    reset_container()
