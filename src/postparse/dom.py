# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Read-only document tree consumed by the parser, plus the lxml adapter.

lxml keeps text on ``el.text`` / ``child.tail``; the adapter turns those
into explicit text nodes so the parser sees one ordered child list, the
same shape a DOM ``contents()`` call gives.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

import lxml.html
from lxml import etree

from postparse.config import DEFAULT_CONFIG, ParserConfig
from postparse.errors import InvalidInputError

logger = logging.getLogger(__name__)


class NodeType(StrEnum):
    """Document node discriminant."""

    ELEMENT = "element"
    TEXT = "text"


_EMPTY_ATTRS: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class DocumentNode:
    """An element or text node of a post body. Never mutated."""

    kind: NodeType
    tag: str = ""  # lower-cased tag name, elements only
    attrs: Mapping[str, str] = field(default_factory=lambda: _EMPTY_ATTRS, hash=False)
    text: str = ""  # text nodes only
    children: tuple[DocumentNode, ...] = ()

    @classmethod
    def element(
        cls,
        tag: str,
        *children: DocumentNode | str,
        attrs: Mapping[str, str] | None = None,
    ) -> DocumentNode:
        """Element constructor; plain strings become text children."""
        kids = tuple(cls.text_node(c) if isinstance(c, str) else c for c in children)
        frozen = MappingProxyType(dict(attrs)) if attrs else _EMPTY_ATTRS
        return cls(kind=NodeType.ELEMENT, tag=tag.lower(), attrs=frozen, children=kids)

    @classmethod
    def text_node(cls, text: str) -> DocumentNode:
        return cls(kind=NodeType.TEXT, text=text)

    @property
    def is_text(self) -> bool:
        return self.kind == NodeType.TEXT

    @property
    def is_element(self) -> bool:
        return self.kind == NodeType.ELEMENT

    def get(self, name: str, default: str = "") -> str:
        """Attribute lookup."""
        return self.attrs.get(name, default)

    def has_class(self, token: str) -> bool:
        return token in self.get("class").split()

    def iter_descendants(self) -> Iterator[DocumentNode]:
        """Depth-first, document order, excluding self. Iterative."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_first(self, class_token: str) -> DocumentNode | None:
        """First descendant element carrying ``class_token``."""
        for node in self.iter_descendants():
            if node.is_element and node.has_class(class_token):
                return node
        return None

    def text_content(self) -> str:
        """All descendant text in document order (raw, not normalized)."""
        if self.is_text:
            return self.text
        return "".join(n.text for n in self.iter_descendants() if n.is_text)


def _is_element(el: object) -> bool:
    # Comments, processing instructions and entities carry a callable tag.
    return isinstance(getattr(el, "tag", None), str)


def from_lxml(
    el: etree._Element,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
    depth: int = 0,
) -> DocumentNode:
    """Convert an lxml element (and its subtree) into a DocumentNode."""
    if not _is_element(el):
        raise InvalidInputError(f"expected an lxml element, got {type(el).__name__}")

    children: list[DocumentNode] = []
    if el.text:
        children.append(DocumentNode.text_node(el.text))

    if depth >= config.max_depth and len(el):
        logger.warning(
            "Max document depth %d exceeded at <%s>, dropping %d child element(s)",
            config.max_depth,
            el.tag,
            len(el),
        )
    else:
        for child in el:
            if _is_element(child):
                children.append(from_lxml(child, config=config, depth=depth + 1))
            else:
                logger.debug("Dropping unrecognized node %r", child)
            if child.tail:
                children.append(DocumentNode.text_node(child.tail))

    attrs = {str(k): str(v) for k, v in el.attrib.items()}
    return DocumentNode(
        kind=NodeType.ELEMENT,
        tag=el.tag.lower(),
        attrs=MappingProxyType(attrs) if attrs else _EMPTY_ATTRS,
        children=tuple(children),
    )


def parse_fragment(html: str, *, config: ParserConfig = DEFAULT_CONFIG) -> DocumentNode:
    """Parse a post-body HTML fragment into a container DocumentNode.

    The fragment's top-level nodes become the children of a synthetic
    ``<div>``. Blank input yields an empty container.

    Raises:
        InvalidInputError: ``html`` is None / not a string, or lxml fails outright.
    """
    if html is None:
        raise InvalidInputError("HTML input is None")
    if not isinstance(html, str):
        raise InvalidInputError(f"HTML input must be str, got {type(html).__name__}")
    if not html.strip():
        return DocumentNode.element("div")

    try:
        parser = lxml.html.HTMLParser(recover=True, encoding="utf-8")
        container = lxml.html.fragment_fromstring(html.encode("utf-8"), create_parent="div", parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError) as e:
        raise InvalidInputError(f"lxml parsing failed: {e}") from e

    return from_lxml(container, config=config)
