# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Parser configuration: depth limits and forum markup markers.

Defaults follow the XenForo post-body convention (``bbWrapper`` bodies,
``bbCodeSpoiler`` blocks, lazy-loaded ``<img data-src>``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from postparse.errors import ConfigError

_DEFAULT_MAX_DEPTH = 100
# parser recursion spends up to three frames per level
MAX_DEPTH_LIMIT = 200


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Immutable configuration shared by every extraction pass."""

    max_depth: int = _DEFAULT_MAX_DEPTH  # recursion cap for parse/reduce/prune/group
    spoiler_class: str = "bbCodeSpoiler"
    spoiler_label_class: str = "bbCodeSpoiler-button-title"
    spoiler_body_class: str = "bbCodeBlock-content"
    formatting_tags: frozenset[str] = field(default_factory=lambda: frozenset({"b", "i"}))
    ignored_tags: frozenset[str] = field(default_factory=lambda: frozenset({"noscript", "script", "style"}))
    link_tags: frozenset[str] = field(default_factory=lambda: frozenset({"a"}))
    image_tags: frozenset[str] = field(default_factory=lambda: frozenset({"img"}))
    lazy_src_attr: str = "data-src"
    interleave_nested: bool = False  # True: nested container records stay at their sibling position

    def __post_init__(self) -> None:
        if not 0 < self.max_depth <= MAX_DEPTH_LIMIT:
            raise ConfigError(
                f"max_depth must be in 1..{MAX_DEPTH_LIMIT}, got {self.max_depth}",
                field_name="max_depth",
            )
        for name in ("spoiler_class", "spoiler_label_class", "spoiler_body_class", "lazy_src_attr"):
            value = getattr(self, name)
            if not value or not value.strip() or any(ch.isspace() for ch in value):
                raise ConfigError(f"{name} must be a single non-empty token, got {value!r}", field_name=name)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ParserConfig:
        """Build a config from ``POSTPARSE_*`` environment variables.

        Blank or missing variables keep the default value.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        raw_depth = env.get("POSTPARSE_MAX_DEPTH", "").strip()
        if raw_depth:
            try:
                kwargs["max_depth"] = int(raw_depth)
            except ValueError:
                raise ConfigError(
                    f"POSTPARSE_MAX_DEPTH must be an integer, got {raw_depth!r}", field_name="max_depth"
                ) from None

        for var, name in (
            ("POSTPARSE_SPOILER_CLASS", "spoiler_class"),
            ("POSTPARSE_SPOILER_LABEL_CLASS", "spoiler_label_class"),
            ("POSTPARSE_SPOILER_BODY_CLASS", "spoiler_body_class"),
        ):
            value = env.get(var, "").strip()
            if value:
                kwargs[name] = value

        raw_interleave = env.get("POSTPARSE_INTERLEAVE_NESTED", "").strip().lower()
        if raw_interleave:
            kwargs["interleave_nested"] = raw_interleave in ("1", "true", "yes")

        return cls(**kwargs)


DEFAULT_CONFIG = ParserConfig()
