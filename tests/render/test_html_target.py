import re

import pytest

from injector.core.exceptions import RenderTargetGoneError
from injector.render.html_target import (
    SUGGESTION_AREA_CLASS,
    SUGGESTION_ROW_CLASS,
    HtmlRenderTarget,
)
from injector.services.suggestion_renderer import DisplayFragment

from conftest import SINGLE_HUNK_ROWS


def _fragment(code="x = 1", description="Prefer x"):
    return DisplayFragment(
        description=description,
        code=code,
        suggestion_block=f"```suggestion:-0+0\n{code}\n```",
    )


class TestQueries:
    def test_file_containers_are_outermost(self):
        target = HtmlRenderTarget(
            '<div class="file-holder" data-path="a.py">'
            '<div class="diff-file" data-file-path="a.py"><p>1</p></div>'
            "</div>"
            '<div class="file-holder" data-path="b.py"><p>2</p></div>'
        )

        containers = target.file_containers()

        assert [c.get("data-path") for c in containers] == ["a.py", "b.py"]

    def test_container_of_returns_outermost_ancestor(self):
        target = HtmlRenderTarget(
            '<div class="file-holder" data-path="a.py">'
            '<div class="diff-file"><span id="leaf">x</span></div>'
            "</div>"
        )
        leaf = target.find_by_id_pattern(re.compile("^leaf$"))[0]

        assert target.container_of(leaf).get("data-path") == "a.py"

    def test_find_by_text_returns_innermost_nodes(self):
        target = HtmlRenderTarget("<div><p><b>src/app.py</b></p><p>other</p></div>")

        nodes = target.find_by_text("src/app.py")

        assert [node.tag for node in nodes] == ["b"]

    def test_find_by_text_matches_attribute_values(self):
        target = HtmlRenderTarget('<div><a href="/blob/src/app.py">view</a></div>')

        nodes = target.find_by_text("src/app.py")

        assert [node.tag for node in nodes] == ["a"]

    def test_pattern_must_match_whole_text(self):
        target = HtmlRenderTarget("<table><tr><td> 12 </td><td>x = 12</td></tr></table>")

        nodes = target.find_by_text(re.compile(r"\d+"))

        assert [target.get_text(node) for node in nodes] == [" 12 "]

    def test_find_by_text_on_a_large_page(self, text_page):
        rows = [(n, n, f"value_{n} = {n}") for n in range(1, 2001)]
        target = HtmlRenderTarget(text_page([("src/big.py", rows)]))

        nodes = target.find_by_text(re.compile(r"\d+"))

        assert len(nodes) == 4000
        assert [target.get_text(node) for node in nodes[:4]] == ["1", "1", "2", "2"]
        assert target.get_text(nodes[-1]) == "2000"
        assert {node.tag for node in nodes} == {"td"}

    def test_scoped_queries_include_the_scope(self):
        target = HtmlRenderTarget('<div class="file-holder" data-path="a.py"><p>x</p></div>')
        container = target.file_containers()[0]

        assert target.find_by_attribute("data-path", within=container) == [container]

    def test_row_of(self, single_hunk_target):
        cell = single_hunk_target.find_by_attribute("data-linenumber", "4")[-1]

        row = single_hunk_target.row_of(cell)

        assert "line_holder" in row.get("class")
        assert single_hunk_target.row_of(row) is row

    def test_cells_of(self, text_page):
        target = HtmlRenderTarget(text_page([("src/app.py", [(None, 2, "b")])]))
        row = target.row_of(target.find_by_text(re.compile("2"))[0])

        cells = target.cells_of(row)

        assert [target.get_text(cell) for cell in cells] == ["", "2", "b"]


class TestInsertedSuggestions:
    def test_queries_skip_inserted_suggestions(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]
        single_hunk_target.insert_after(row, _fragment("4", "See src/other.py"))

        assert single_hunk_target.find_by_text("src/other.py") == []
        assert single_hunk_target.find_by_attribute("class", SUGGESTION_AREA_CLASS) == []
        numbers = single_hunk_target.find_by_text(re.compile(r"\d+"))
        texts = [single_hunk_target.get_text(node) for node in numbers]
        assert texts == ["1", "1", "2", "2", "3", "3", "4"]

    def test_container_text_leaves_out_suggestions(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]
        single_hunk_target.insert_after(row, _fragment("x = 1", "See src/other.py"))

        container = single_hunk_target.file_containers()[0]

        assert "src/other.py" not in single_hunk_target.get_text(container)
        assert "src/app.py" in single_hunk_target.get_text(container)

    def test_table_cells_leave_out_suggestion_rows(self):
        target = HtmlRenderTarget(
            '<div class="file"><table><tr><td>1</td><td>a</td></tr></table></div>'
        )
        cell = target.find_by_text(re.compile("1"))[0]
        target.insert_after(cell, _fragment("7"))

        numbers = target.find_by_text(re.compile(r"\d+"))

        assert numbers == [cell]
        assert target.cells_of(target.row_of(cell))[0] is cell

    def test_suggestion_fragments_in_document_order(self, single_hunk_target):
        line_four = single_hunk_target.find_by_attribute("data-linenumber", "4")[0]
        line_one = single_hunk_target.find_by_attribute("data-linenumber", "1")[0]

        later = single_hunk_target.insert_after(line_four, _fragment("d = 4"))
        earlier = single_hunk_target.insert_after(line_one, _fragment("a = 1"))

        assert single_hunk_target.suggestion_fragments() == [earlier, later]


class TestLifecycle:
    def test_ready_only_with_file_sections(self, gitlab_page):
        target = HtmlRenderTarget()
        assert not target.is_ready()

        target.load("<p>loading</p>")
        assert not target.is_ready()

        target.load(gitlab_page([("a.py", SINGLE_HUNK_ROWS)]))
        assert target.is_ready()

    def test_subscribers_are_notified_until_unsubscribed(self, gitlab_page):
        target = HtmlRenderTarget()
        events = []
        unsubscribe = target.subscribe(lambda: events.append("changed"))

        target.load(gitlab_page([("a.py", SINGLE_HUNK_ROWS)]))
        unsubscribe()
        target.load(gitlab_page([("a.py", SINGLE_HUNK_ROWS)]))

        assert events == ["changed"]
        assert target.listener_count == 0

    def test_detached_target_rejects_queries(self, single_hunk_target):
        single_hunk_target.detach()

        assert not single_hunk_target.is_attached()
        assert not single_hunk_target.is_ready()
        with pytest.raises(RenderTargetGoneError):
            single_hunk_target.file_containers()
        with pytest.raises(RenderTargetGoneError):
            single_hunk_target.to_html()


class TestInsertAfter:
    def test_inserts_fragment_after_row(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]

        inserted = single_hunk_target.insert_after(row, _fragment())

        line_row = single_hunk_target.row_of(row)
        assert line_row.getnext() is inserted
        assert inserted.get("class") == SUGGESTION_AREA_CLASS
        assert single_hunk_target.get_text(inserted).count("x = 1") == 2
        assert "Prefer x" in single_hunk_target.get_text(inserted)

    def test_table_rows_get_a_wrapping_row(self):
        target = HtmlRenderTarget(
            '<div class="file"><table><tr><td>1</td><td>2</td><td>a</td></tr></table></div>'
        )
        cell = target.find_by_text(re.compile("2"))[0]

        inserted = target.insert_after(cell, _fragment())

        assert inserted.tag == "tr"
        assert inserted.get("class") == SUGGESTION_ROW_CLASS
        assert inserted[0].get("colspan") == "3"
        assert inserted[0][0].get("class") == SUGGESTION_AREA_CLASS

    def test_later_suggestions_go_below_earlier_ones(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]

        first = single_hunk_target.insert_after(row, _fragment("first = 1"))
        second = single_hunk_target.insert_after(row, _fragment("second = 2"))

        assert first.getnext() is second

    def test_code_is_written_as_text(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]
        code = "<script>alert(1)</script>"

        inserted = single_hunk_target.insert_after(row, _fragment(code, None))

        assert inserted.findall(".//script") == []
        assert "&lt;script" in single_hunk_target.to_html()
        assert inserted.find_class("suggestion-description") == []
        assert inserted.find_class("suggestion-code")[0].text == code

    def test_insertion_notifies_subscribers(self, single_hunk_target):
        events = []
        single_hunk_target.subscribe(lambda: events.append("changed"))
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]

        single_hunk_target.insert_after(row, _fragment())

        assert events == ["changed"]

    def test_anchor_from_previous_render_is_rejected(self, single_hunk_target, gitlab_page):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]
        single_hunk_target.load(gitlab_page([("src/app.py", SINGLE_HUNK_ROWS)]))

        with pytest.raises(RenderTargetGoneError):
            single_hunk_target.insert_after(row, _fragment())

    def test_detached_target_rejects_insertion(self, single_hunk_target):
        row = single_hunk_target.find_by_attribute("data-linenumber", "2")[0]
        single_hunk_target.detach()

        with pytest.raises(RenderTargetGoneError):
            single_hunk_target.insert_after(row, _fragment())
