# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for postparse log records.

Library modules log through ``logging.getLogger(__name__)`` only.
Applications call ``configure()`` once; ``post_context()`` tags every
record emitted while one post is being extracted.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    Args:
        json_output: JSON lines (batch scraping jobs) instead of console rendering.
        level: Root logger level name; unknown names fall back to INFO.
        stream: Output stream, stderr when omitted.
    """
    shared = _shared_processors()
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=shared,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


@contextmanager
def post_context(post_id: str | int | None) -> Iterator[None]:
    """Bind ``post_id`` to every log record emitted inside the block."""
    if post_id is None:
        yield
        return
    with structlog.contextvars.bound_contextvars(post_id=str(post_id)):
        yield
