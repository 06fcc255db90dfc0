# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Post extraction pipeline orchestration.

Flow:
  post body (DocumentNode | HTML fragment)
    → classify + parse each direct child
    → reduce each child (the body itself is never collapsed)
    → prune empty elements
    → title/data grouping
    → ordered field records
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from postparse import PostElement, generic_element
from postparse.config import DEFAULT_CONFIG, ParserConfig
from postparse.dom import DocumentNode, parse_fragment
from postparse.errors import InvalidInputError
from postparse.grouping import Grouper
from postparse.logging_config import post_context
from postparse.parser import parse_nodes
from postparse.reducer import prune_element, reduce_element

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Records of one post plus extraction metrics."""

    records: list[PostElement] = field(default_factory=list)
    element_count: int = 0  # parsed top-level elements, before pruning
    truncated: bool = False  # a depth limit dropped part of the input
    elapsed_ms: float = 0.0

    @property
    def record_count(self) -> int:
        return len(self.records)


def _check_root(root: object) -> DocumentNode:
    if root is None:
        raise InvalidInputError("post root is None")
    if not isinstance(root, DocumentNode):
        raise InvalidInputError(f"post root must be a DocumentNode, got {type(root).__name__}")
    return root


def _group_elements(
    elements: Sequence[PostElement],
    config: ParserConfig,
) -> tuple[list[PostElement], bool]:
    reduced = [reduce_element(el, config=config) for el in elements]
    body = prune_element(generic_element(*reduced), config=config)
    grouper = Grouper(config)
    return grouper.group(body.content), grouper.truncated


def extract_records(
    elements: Sequence[PostElement],
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> list[PostElement]:
    """Reduce, prune and group already-parsed post-body elements."""
    records, _ = _group_elements(elements, config)
    return records


def extract_post(
    root: DocumentNode,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
    post_id: str | int | None = None,
) -> ExtractionResult:
    """Run the full pipeline on a post body and report metrics.

    Args:
        root: Post body node; its direct children are the post content.
        config: Parser configuration.
        post_id: Optional identifier bound to log records.

    Raises:
        InvalidInputError: ``root`` is missing or not a DocumentNode.
    """
    root = _check_root(root)
    result = ExtractionResult()
    start = time.monotonic()

    with post_context(post_id):
        elements, parse_truncated = parse_nodes(root.children, config=config)
        result.element_count = len(elements)

        records, group_truncated = _group_elements(elements, config)
        result.records = records
        result.truncated = parse_truncated or group_truncated
        result.elapsed_ms = (time.monotonic() - start) * 1000

        logger.debug(
            "Extracted %d record(s) from %d element(s) in %.2f ms%s",
            result.record_count,
            result.element_count,
            result.elapsed_ms,
            " (truncated)" if result.truncated else "",
        )
    return result


def parse_post(root: DocumentNode, *, config: ParserConfig = DEFAULT_CONFIG) -> list[PostElement]:
    """Post body → ordered field records."""
    return extract_post(root, config=config).records


def parse_post_html(html: str, *, config: ParserConfig = DEFAULT_CONFIG) -> list[PostElement]:
    """Post body HTML fragment → ordered field records."""
    return parse_post(parse_fragment(html, config=config), config=config)
