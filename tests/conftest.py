from __future__ import annotations

import logging
from datetime import datetime

import pytest

from srcindex.srcsrv import StreamBuilder
from tests._fixtures.fake_git import FakeGit

FIXED_TIME = datetime(2024, 5, 17, 9, 30, 0)


@pytest.fixture
def fake_git() -> FakeGit:
    """Provide a git stand-in with no repositories registered."""
    return FakeGit()


@pytest.fixture
def stream_builder() -> StreamBuilder:
    """Stream builder with a frozen clock."""
    return StreamBuilder(clock=lambda: FIXED_TIME)


@pytest.fixture(autouse=True)
def _reset_srcindex_logger():
    """Undo configure_logging so caplog keeps seeing srcindex records."""
    yield
    logger = logging.getLogger("srcindex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
