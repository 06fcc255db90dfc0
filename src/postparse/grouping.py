# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Title/data grouping: flat element sequence → labeled field records.

Forum authors write fields as a "title" fragment followed by "data"
fragments, e.g. ``<b>Version</b>: 0.5`` parses to
``[Text("Version"), Text(": 0.5")]``. Complex values live in spoilers
(``Changelog: [spoiler]``) and the introduction is an unlabeled
"Overview" paragraph.

Algorithm (per sequence):
  1. Label detection over the non-Generic elements: a Text element is a
     title if it ends with ":" (but is not just ":"), or if the next
     element starts with ":".
  2. Each title absorbs everything up to the next title. Text fragments
     become the record text; other elements go to its content, with
     spoilers spliced (their wrapper and label dropped).
  3. Remaining elements, in original order: punctuation-led text merges
     into the previous record, overview containers become an "Overview"
     record, other non-text elements attach to the previous record,
     anything else starts a new record.
  4. Generic containers are grouped recursively; their records are
     appended after the sequence's own records. An overview container
     yields its "Overview" record in place and its fields from the first
     non-overview title onward are grouped like any other container.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import replace

from postparse import ElementKind, PostElement
from postparse.config import DEFAULT_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

PUNCTUATION = "-!$%^&*()_+|~=`{}[]:\";'<>?,./"

OVERVIEW_NAME = "Overview"
_OVERVIEW_MARKER = "OVERVIEW"
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def strip_title(text: str) -> str:
    """``"Version:"`` → ``"Version"``."""
    return text.strip().rstrip(PUNCTUATION).strip()


def strip_data(text: str) -> str:
    """``": 1.2.3."`` → ``"1.2.3"``: one leading colon, trailing punctuation."""
    text = text.strip().removeprefix(":").strip()
    return text.rstrip(PUNCTUATION).strip()


def _starts_with_punctuation(text: str) -> bool:
    return bool(text) and text[0] in PUNCTUATION


def _is_label(elements: Sequence[PostElement], index: int) -> bool:
    element = elements[index]
    if element.kind != ElementKind.TEXT:
        return False
    if element.text.endswith(":") and element.text != ":":
        return True
    return index + 1 < len(elements) and elements[index + 1].text.startswith(":")


def label_indexes(elements: Sequence[PostElement]) -> list[int]:
    """Indexes of title elements in a sequence without Generic containers."""
    return [i for i in range(len(elements)) if _is_label(elements, i)]


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


def _text_children(element: PostElement) -> list[PostElement]:
    return [child for child in element.content if child.kind == ElementKind.TEXT]


def is_overview(element: PostElement) -> bool:
    """True if a direct Text child starts with "Overview" (any case)."""
    return any(child.text.upper().startswith(_OVERVIEW_MARKER) for child in _text_children(element))


def _strip_overview_marker(text: str) -> str:
    text = text.strip()
    if text.upper().startswith(_OVERVIEW_MARKER):
        text = text[len(_OVERVIEW_MARKER) :].lstrip(":").strip()
    return text


def overview_record(element: PostElement) -> PostElement:
    """Build the "Overview" record from an overview container."""
    parts = []
    for child in _text_children(element):
        cleaned = _strip_overview_marker(child.text)
        if cleaned and _ALNUM_RE.search(cleaned):
            parts.append(cleaned)
    return PostElement(kind=ElementKind.TEXT, name=OVERVIEW_NAME, text=" ".join(parts))


def split_overview(element: PostElement) -> tuple[PostElement | None, PostElement | None]:
    """Split an overview container into (Overview record, remaining fields).

    The introduction runs up to the first title that is not the
    "Overview" marker itself; everything from there on is left as a
    container to be grouped like any other. Either part may be None.
    """
    flat_positions = [i for i, child in enumerate(element.content) if child.kind != ElementKind.GENERIC]
    flat = [element.content[i] for i in flat_positions]
    cut = len(element.content)
    for index in label_indexes(flat):
        if not flat[index].text.upper().startswith(_OVERVIEW_MARKER):
            cut = flat_positions[index]
            break

    intro = replace(element, content=element.content[:cut])
    rest = replace(element, content=element.content[cut:]) if cut < len(element.content) else None
    if not is_overview(intro):
        return None, element
    return overview_record(intro), rest


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def _absorb(content: list[PostElement], element: PostElement) -> None:
    if element.kind == ElementKind.SPOILER:
        content.extend(element.content)
    else:
        content.append(element)


def _group_record(group: Sequence[PostElement]) -> PostElement:
    """First element is the title; the rest is its data."""
    title, *data = group
    texts = []
    content = list(title.content)
    for element in data:
        if element.kind == ElementKind.TEXT:
            cleaned = strip_data(element.text)
            if cleaned:
                texts.append(cleaned)
        else:
            _absorb(content, element)
    return replace(
        title,
        name=strip_title(title.text),
        text=" ".join(texts),
        content=tuple(content),
    )


def _associate(records: list[PostElement], element: PostElement) -> None:
    """Step 3 rules for an element no title absorbed."""
    if element.kind == ElementKind.TEXT and records and _starts_with_punctuation(element.text):
        last = records[-1]
        cleaned = element.text[1:].strip()
        records[-1] = replace(
            last,
            text=last.text or cleaned,
            content=last.content + element.content,
        )
    elif is_overview(element):
        records.append(overview_record(element))
    elif element.kind != ElementKind.TEXT and records:
        content = list(records[-1].content)
        _absorb(content, element)
        records[-1] = replace(records[-1], content=tuple(content))
    elif element.kind == ElementKind.SPOILER:
        records.append(PostElement(kind=ElementKind.TEXT, name=element.name, content=element.content))
    else:
        records.append(replace(element, name=element.text, text=""))


class Grouper:
    """Grouping pass state: config plus the truncation flag."""

    def __init__(self, config: ParserConfig) -> None:
        self.config = config
        self.truncated = False

    def group(self, elements: Sequence[PostElement], depth: int = 0) -> list[PostElement]:
        if depth > self.config.max_depth:
            logger.warning(
                "Max grouping depth %d exceeded, dropping %d element(s)",
                self.config.max_depth,
                len(elements),
            )
            self.truncated = True
            return []

        flat = [e for e in elements if e.kind != ElementKind.GENERIC]
        labels = label_indexes(flat)
        titled: dict[int, PostElement] = {}
        absorbed: set[int] = set()
        for n, start in enumerate(labels):
            end = labels[n + 1] if n + 1 < len(labels) else len(flat)
            titled[start] = _group_record(flat[start:end])
            absorbed.update(range(start + 1, end))

        records: list[PostElement] = []
        nested: list[PostElement] = []
        position = 0
        for element in elements:
            if element.kind == ElementKind.GENERIC:
                container: PostElement | None = element
                if is_overview(element):
                    overview, container = split_overview(element)
                    if overview is not None:
                        records.append(overview)
                if container is not None:
                    if self.config.interleave_nested:
                        records.extend(self.group(container.content, depth + 1))
                    else:
                        nested.append(container)
                continue

            index = position
            position += 1
            if index in titled:
                records.append(titled[index])
            elif index not in absorbed:
                _associate(records, element)

        for container in nested:
            records.extend(self.group(container.content, depth + 1))
        return records


def group_elements(
    elements: Sequence[PostElement],
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> list[PostElement]:
    """Pair title elements with their data; returns the ordered records."""
    return Grouper(config).group(elements)
