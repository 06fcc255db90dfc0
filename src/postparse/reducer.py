# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Structural clean-up passes over a PostElement tree.

reduce: collapse unlabeled single-child wrappers (``<b><i>x</i></b>`` → x).
prune:  drop children with no name, text or content.

Both build new trees; input elements are never modified.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from postparse import PostElement
from postparse.config import DEFAULT_CONFIG, ParserConfig

logger = logging.getLogger(__name__)


def reduce_element(
    element: PostElement,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
    depth: int = 0,
) -> PostElement:
    """Replace unlabeled single-child wrappers by their (reduced) child."""
    if depth > config.max_depth:
        logger.warning("Max reduce depth %d exceeded, leaving subtree as is", config.max_depth)
        return element

    if element.is_unknown and len(element.content) == 1:
        return reduce_element(element.content[0], config=config, depth=depth + 1)

    if not element.content:
        return element
    return replace(
        element,
        content=tuple(reduce_element(child, config=config, depth=depth + 1) for child in element.content),
    )


def prune_element(
    element: PostElement,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
    depth: int = 0,
) -> PostElement:
    """Recursively drop empty children. ``element`` itself is always kept."""
    if depth > config.max_depth:
        logger.warning("Max prune depth %d exceeded, leaving subtree as is", config.max_depth)
        return element

    if not element.content:
        return element
    pruned = (prune_element(child, config=config, depth=depth + 1) for child in element.content)
    return replace(element, content=tuple(child for child in pruned if not child.is_empty))
