# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""postparse: structured field records from forum-post bodies.

Turns the markup tree of one post body into an ordered list of
(name, text, content) records such as ``Version: 1.2`` or
``Developer: <link>``:
- classify + parse raw nodes into a PostElement tree
- reduce single-child wrappers, prune empty elements
- group "title" fragments with the "data" fragments that follow them
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

__version__ = "0.1.0"


class ElementKind(StrEnum):
    """Semantic element classification."""

    GENERIC = "Generic"
    TEXT = "Text"
    LINK = "Link"
    IMAGE = "Image"
    SPOILER = "Spoiler"


@dataclass(frozen=True, slots=True)
class PostElement:
    """One semantic element of a post; also the shape of an output record."""

    kind: ElementKind = ElementKind.GENERIC
    name: str = ""  # field label
    text: str = ""  # field value / leaf text
    href: str = ""  # Link and Image only
    content: tuple[PostElement, ...] = ()

    @property
    def is_unknown(self) -> bool:
        """No label and no text (content may still be present)."""
        return not self.name.strip() and not self.text.strip()

    @property
    def is_empty(self) -> bool:
        """No label, no text and no content."""
        return not self.content and self.is_unknown

    @property
    def is_link(self) -> bool:
        return self.kind in (ElementKind.LINK, ElementKind.IMAGE)


def text_element(text: str, *content: PostElement) -> PostElement:
    """Build a Text element (handy for hand-built sequences)."""
    return PostElement(kind=ElementKind.TEXT, text=text, content=tuple(content))


def generic_element(*content: PostElement) -> PostElement:
    """Build an unlabeled Generic container."""
    return PostElement(kind=ElementKind.GENERIC, content=tuple(content))
