# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Recursive DocumentNode → PostElement conversion.

One raw node yields exactly one PostElement, except ignored nodes
(``<noscript>`` etc.) which yield nothing. Malformed spoilers degrade to
empty fields; nothing here raises on markup shape.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from postparse import ElementKind, PostElement
from postparse.classifier import NodeKind, classify_node
from postparse.config import DEFAULT_CONFIG, ParserConfig
from postparse.dom import DocumentNode

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _own_text(node: DocumentNode) -> str:
    """Node text excluding nested elements (direct text children only)."""
    if not node.children:
        return node.text
    return "".join(child.text for child in node.children if child.is_text)


def _parse_text(node: DocumentNode) -> PostElement:
    return PostElement(kind=ElementKind.TEXT, text=clean_text(_own_text(node)))


def _parse_link(node: DocumentNode) -> PostElement:
    return PostElement(
        kind=ElementKind.LINK,
        text=clean_text(node.text_content()),
        href=node.get("href"),
    )


def _parse_image(node: DocumentNode, config: ParserConfig) -> PostElement:
    # Lazy-loaded images carry a placeholder in src; the real URL is in data-src.
    href = node.get(config.lazy_src_attr) or node.get("src")
    return PostElement(kind=ElementKind.IMAGE, text=node.get("alt"), href=href)


class _Parser:
    """Per-call parser state: config plus the truncation flag."""

    def __init__(self, config: ParserConfig) -> None:
        self.config = config
        self.truncated = False

    def parse_children(self, nodes: Iterable[DocumentNode], depth: int) -> tuple[PostElement, ...]:
        elements = []
        for node in nodes:
            element = self.parse(node, depth)
            if element is not None:
                elements.append(element)
        return tuple(elements)

    def parse(self, node: DocumentNode, depth: int = 0) -> PostElement | None:
        if depth > self.config.max_depth:
            logger.warning(
                "Max parse depth %d exceeded at <%s>, skipping subtree",
                self.config.max_depth,
                node.tag or "#text",
            )
            self.truncated = True
            return None

        kind = classify_node(node, self.config)
        handler = self._handlers[kind]
        return handler(self, node, depth)

    def _ignored(self, node: DocumentNode, depth: int) -> None:
        return None

    def _text(self, node: DocumentNode, depth: int) -> PostElement:
        return _parse_text(node)

    def _link(self, node: DocumentNode, depth: int) -> PostElement:
        return _parse_link(node)

    def _image(self, node: DocumentNode, depth: int) -> PostElement:
        return _parse_image(node, self.config)

    def _container(self, node: DocumentNode, depth: int) -> PostElement:
        # Formatting wrappers and generic containers both flatten into content.
        return PostElement(kind=ElementKind.GENERIC, content=self.parse_children(node.children, depth + 1))

    def _spoiler(self, node: DocumentNode, depth: int) -> PostElement:
        label = node.find_first(self.config.spoiler_label_class)
        body = node.find_first(self.config.spoiler_body_class)
        if label is None or body is None:
            logger.debug(
                "Spoiler without %s sub-node, using empty field",
                "label" if label is None else "body",
            )
        name = clean_text(label.text_content()) if label is not None else ""
        content = self.parse_children(body.children, depth + 1) if body is not None else ()
        return PostElement(kind=ElementKind.SPOILER, name=name, content=content)

    _handlers: dict[NodeKind, Callable[[_Parser, DocumentNode, int], PostElement | None]] = {
        NodeKind.IGNORED: _ignored,
        NodeKind.TEXT: _text,
        NodeKind.LINK: _link,
        NodeKind.IMAGE: _image,
        NodeKind.FORMATTING: _container,
        NodeKind.GENERIC: _container,
        NodeKind.SPOILER: _spoiler,
    }


def parse_node(node: DocumentNode, *, config: ParserConfig = DEFAULT_CONFIG) -> PostElement | None:
    """Parse one raw node; None for ignored nodes."""
    return _Parser(config).parse(node)


def parse_nodes(
    nodes: Iterable[DocumentNode],
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> tuple[tuple[PostElement, ...], bool]:
    """Parse sibling nodes. Returns (elements, truncated)."""
    parser = _Parser(config)
    elements = parser.parse_children(nodes, 0)
    return elements, parser.truncated
