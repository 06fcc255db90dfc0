# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""postparse exception hierarchy.

All postparse errors inherit from PostParseError. The extraction passes
themselves never raise on malformed markup; only boundary precondition
violations and bad configuration surface as exceptions.
"""

from __future__ import annotations


class PostParseError(Exception):
    """Base exception for all postparse errors."""


class InvalidInputError(PostParseError, ValueError):
    """Input rejected at the boundary (missing root, unparsable HTML)."""


class ConfigError(PostParseError, ValueError):
    """Invalid ParserConfig value or environment override."""

    def __init__(self, message: str, *, field_name: str = "") -> None:
        super().__init__(message)
        self.field_name = field_name
