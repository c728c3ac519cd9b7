"""Test configuration and fixtures"""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo setup_logging() changes to the root logger after each test"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("civars").setLevel(logging.NOTSET)
