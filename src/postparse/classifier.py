# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Raw node classification.

Each DocumentNode maps to exactly one NodeKind, computed once from its
type, tag and class attribute. Order of the checks matters: ignored tags
win over everything, a spoiler marker wins over the tag name.
"""

from __future__ import annotations

from enum import StrEnum

from postparse.config import DEFAULT_CONFIG, ParserConfig
from postparse.dom import DocumentNode


class NodeKind(StrEnum):
    """Raw node categories."""

    TEXT = "text"
    FORMATTING = "formatting"  # <b>, <i>: flattened into content
    SPOILER = "spoiler"
    LINK = "link"
    IMAGE = "image"
    IGNORED = "ignored"  # <noscript> & co: no output at all
    GENERIC = "generic"  # structural container


def classify_node(node: DocumentNode, config: ParserConfig = DEFAULT_CONFIG) -> NodeKind:
    """Return the NodeKind for ``node``."""
    if node.is_text:
        return NodeKind.TEXT

    tag = node.tag
    if tag in config.ignored_tags:
        return NodeKind.IGNORED
    if node.has_class(config.spoiler_class):
        return NodeKind.SPOILER
    if tag in config.link_tags:
        return NodeKind.LINK
    if tag in config.image_tags:
        return NodeKind.IMAGE
    if tag in config.formatting_tags:
        return NodeKind.FORMATTING
    return NodeKind.GENERIC
