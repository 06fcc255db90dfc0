# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import postparse  # noqa: F401
except ImportError:
    raise ImportError("postparse is not installed. Run: pip install -e '.[dev]'") from None

import logging

import pytest
import structlog

from postparse.config import ParserConfig


@pytest.fixture
def shallow_config() -> ParserConfig:
    """Config with a tiny depth limit for truncation tests."""
    return ParserConfig(max_depth=3)


@pytest.fixture
def reset_logging():
    """Restore root logger + structlog defaults after configure() calls."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()
