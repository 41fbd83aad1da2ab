"""Pytest configuration shared by all tests.

Seeds the random module so the statistical pairing tests are reproducible.
"""

import random

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def seeded_random():
    """Seed the global random generator for every test."""
    random.seed(1234)
    yield


@pytest.fixture
def restore_logging():
    """Undo sinks added by setup_loguru during a test."""
    yield
    logger.remove()
    logger.disable("song_ranker")
