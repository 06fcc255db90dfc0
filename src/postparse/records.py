# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Helpers for code that maps records onto a typed model.

Record names are author-written labels, so lookups are case-insensitive
and accept aliases (``"Developer"``, ``"Author"``, ``"Creator"``).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from typing import Any

from postparse import ElementKind, PostElement


def _norm(name: str) -> str:
    return name.strip().casefold()


def find_record(records: Iterable[PostElement], *names: str) -> PostElement | None:
    """First record whose name matches one of ``names`` (case-insensitive)."""
    wanted = {_norm(n) for n in names}
    for record in records:
        if _norm(record.name) in wanted:
            return record
    return None


def record_text(records: Iterable[PostElement], *names: str, default: str = "") -> str:
    record = find_record(records, *names)
    return record.text if record is not None and record.text else default


def iter_links(element: PostElement) -> Iterator[PostElement]:
    """Link and Image elements under ``element``, depth-first, document order."""
    stack = list(reversed(element.content))
    while stack:
        node = stack.pop()
        if node.is_link:
            yield node
        stack.extend(reversed(node.content))


def to_dict(element: PostElement) -> dict[str, Any]:
    """Plain-data form of an element; ``href`` only for Link/Image."""
    data: dict[str, Any] = {
        "kind": str(element.kind),
        "name": element.name,
        "text": element.text,
    }
    if element.kind in (ElementKind.LINK, ElementKind.IMAGE):
        data["href"] = element.href
    data["content"] = [to_dict(child) for child in element.content]
    return data


def to_json(records: Iterable[PostElement], indent: int = 2) -> str:
    """Serialize records to a JSON array string."""
    return json.dumps([to_dict(r) for r in records], indent=indent, ensure_ascii=False)
