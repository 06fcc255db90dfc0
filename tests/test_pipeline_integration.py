# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""End-to-end tests: post-body HTML → field records."""

from __future__ import annotations

import logging

import pytest

from postparse import ElementKind, PostElement
from postparse.config import ParserConfig
from postparse.dom import DocumentNode
from postparse.errors import InvalidInputError
from postparse.pipeline import ExtractionResult, extract_post, extract_records, parse_post, parse_post_html
from postparse.records import find_record
from tests._post_helpers import el, lazy_img, nested_divs, spoiler_html, text, triples

_THREAD_POST = (
    '<div style="text-align: center">' + lazy_img("https://attachments.example/cover.png", "cover.png") + "</div>"
    "<br>"
    "<b>Overview:</b><br>"
    "You are a young man who just moved to a new city.<br>"
    "<br>"
    "<b>Thread Updated</b>: 2021-03-01<br>"
    "<b>Release Date</b>: 2021-02-28<br>"
    '<b>Developer</b>: <a href="https://www.patreon.example/studio">Studio X</a><br>'
    "<b>Censored</b>: No<br>"
    "<b>Version</b>: 0.5.1<br>"
    "<b>OS</b>: Windows, Linux, Mac<br>"
    "<b>Language</b>: English<br>"
    "<br>"
    "<b>Changelog</b>: " + spoiler_html("v0.5.1<br>- Fixed typos<br>v0.5<br>- New scenes") + "<br>"
    "<b>DOWNLOAD</b><br>"
    '<b>Win/Linux</b>: <a href="https://mega.example/a">MEGA</a> - <a href="https://pixeldrain.example/b">PIXELDRAIN</a>'
    "<br>"
    "<noscript><img src=\"https://attachments.example/cover.png\"></noscript>"
)


class TestThreadPost:
    @pytest.fixture
    def records(self) -> list[PostElement]:
        return parse_post_html(_THREAD_POST)

    def test_simple_fields(self, records):
        assert find_record(records, "Version").text == "0.5.1"
        assert find_record(records, "Thread Updated").text == "2021-03-01"
        assert find_record(records, "release date").text == "2021-02-28"
        assert find_record(records, "Censored").text == "No"
        assert find_record(records, "OS").text == "Windows, Linux, Mac"
        assert find_record(records, "Language").text == "English"

    def test_overview_text(self, records):
        overview = find_record(records, "Overview")
        assert overview.text == "You are a young man who just moved to a new city"

    def test_developer_link(self, records):
        developer = find_record(records, "Developer")
        assert developer.text == ""
        assert developer.content == (
            PostElement(kind=ElementKind.LINK, text="Studio X", href="https://www.patreon.example/studio"),
        )

    def test_changelog_spoiler_spliced(self, records):
        changelog = find_record(records, "Changelog")
        assert [c.text for c in changelog.content] == ["v0.5.1", "- Fixed typos", "v0.5", "- New scenes"]
        assert all(c.kind == ElementKind.TEXT for c in changelog.content)

    def test_download_links(self, records):
        win = find_record(records, "Win/Linux")
        assert [c.href for c in win.content] == ["https://mega.example/a", "https://pixeldrain.example/b"]

    def test_cover_image_record_first(self, records):
        first = records[0]
        assert first.kind == ElementKind.IMAGE
        assert first.name == "cover.png"
        assert first.href == "https://attachments.example/cover.png"

    def test_no_spoiler_records(self, records):
        assert all(r.kind != ElementKind.SPOILER for r in records)

    def test_record_order(self, records):
        names = [r.name for r in records]
        assert names.index("Overview") < names.index("Thread Updated") < names.index("Changelog")


class TestSmallPosts:
    def test_empty_html(self):
        assert parse_post_html("") == []

    def test_whitespace_and_breaks_only(self):
        assert parse_post_html("<br>\n<br>  <span> </span>") == []

    def test_single_field(self):
        assert triples(parse_post_html("<b>Version</b>: 1.2.3")) == [("Version", "1.2.3", ())]

    def test_field_in_single_wrapper_div(self):
        records = parse_post_html('<div class="bbWrapper"><b>Version:</b> 1.0<br><b>Engine:</b> Unity</div>')
        assert triples(records) == [("Version", "1.0", ()), ("Engine", "Unity", ())]

    def test_overview_in_container(self):
        records = parse_post_html("<div><b>Overview</b><br>This is a story about a hero.</div><div>x</div>")
        assert triples(records)[0] == ("Overview", "This is a story about a hero.", ())

    def test_fields_after_overview_in_container(self):
        html = "<div><b>Overview:</b><br>A story.<br><b>Version</b>: 1.0<br><b>OS</b>: Windows</div>"
        records = parse_post_html(html)
        assert triples(records) == [("Overview", "A story.", ()), ("Version", "1.0", ()), ("OS", "Windows", ())]
        assert find_record(records, "os").text == "Windows"

    def test_unlabeled_spoiler_value(self):
        html = "<b>Changelog</b>: " + spoiler_html("v1.1 - fixes", title="")
        records = parse_post_html(html)
        assert triples(records) == [("Changelog", "v1.1 - fixes", ())]

    def test_multiline_value(self):
        records = parse_post_html("<b>Genre</b>:<br>3DCG, Male protagonist,<br>Romance")
        assert triples(records) == [("Genre", "3DCG, Male protagonist Romance", ())]


class TestExtractPost:
    def test_result_metrics(self):
        root = el("div", el("b", "Version"), ": 1.0", el("br"), el("b", "OS"), ": Windows")
        result = extract_post(root)
        assert isinstance(result, ExtractionResult)
        assert result.record_count == 2
        assert result.element_count == 5
        assert not result.truncated
        assert result.elapsed_ms >= 0

    def test_truncation_reported(self, shallow_config, caplog):
        root = el("div", nested_divs(10), el("b", "Version"), ": 1.0")
        with caplog.at_level(logging.WARNING, logger="postparse"):
            result = extract_post(root, config=shallow_config)
        assert result.truncated
        assert triples(result.records) == [("Version", "1.0", ())]

    def test_deep_tree_at_depth_limit(self, caplog):
        config = ParserConfig(max_depth=200)
        root = el("div", nested_divs(250), el("b", "Version"), ": 1.0")
        with caplog.at_level(logging.WARNING, logger="postparse"):
            result = extract_post(root, config=config)
        assert result.truncated
        assert triples(result.records) == [("Version", "1.0", ())]

    def test_post_id_accepted(self):
        result = extract_post(el("div", "Intro"), post_id=1234)
        assert triples(result.records) == [("Intro", "", ())]

    def test_summary_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="postparse.pipeline"):
            extract_post(el("div", el("b", "Version"), ": 1.0"))
        assert "Extracted 1 record(s)" in caplog.text

    def test_none_root_rejected(self):
        with pytest.raises(InvalidInputError):
            parse_post(None)  # type: ignore[arg-type]

    def test_wrong_root_type_rejected(self):
        with pytest.raises(InvalidInputError):
            parse_post("<b>x</b>")  # type: ignore[arg-type]

    def test_none_html_rejected(self):
        with pytest.raises(InvalidInputError):
            parse_post_html(None)  # type: ignore[arg-type]

    def test_input_tree_unchanged(self):
        root = el("div", el("b", "Version"), ": 1.0")
        before = repr(root)
        parse_post(root)
        assert repr(root) == before

    def test_text_root_has_no_records(self):
        assert parse_post(DocumentNode.text_node("loose text")) == []

    def test_deterministic(self):
        assert parse_post_html(_THREAD_POST) == parse_post_html(_THREAD_POST)


class TestExtractRecords:
    def test_empty(self):
        assert extract_records([]) == []

    def test_interleave_config(self):
        config = ParserConfig(interleave_nested=True)
        nested = PostElement(content=(text("Version:"), text("1")))
        records = extract_records([nested, text("OS:"), text("Win")], config=config)
        assert [r.name for r in records] == ["Version", "OS"]
