"""Shared fixtures: diff texts and rendered diff pages in the shapes hosts produce."""

import hashlib
from html import escape

import pytest

from injector.render.html_target import HtmlRenderTarget

# One file, one hunk: " a", "+b", " c", " d"
SINGLE_HUNK_DIFF = "\n".join(
    [
        "diff --git a/src/app.py b/src/app.py",
        "index 3b18e51..a4f2c1d 100644",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -1,3 +1,4 @@",
        " a",
        "+b",
        " c",
        " d",
        "",
    ]
)

# (old line, new line, content) for the rows of SINGLE_HUNK_DIFF
SINGLE_HUNK_ROWS = [(1, 1, "a"), (None, 2, "b"), (2, 3, "c"), (3, 4, "d")]


def line_hash(path):
    return hashlib.sha1(path.encode("utf-8")).hexdigest()


def _gitlab_row(path, old, new, text, with_ids, with_line_attrs):
    old_text = "" if old is None else str(old)
    new_text = "" if new is None else str(new)
    row_id = f' id="{line_hash(path)}_{old_text}_{new_text}"' if with_ids else ""
    old_attr = f' data-linenumber="{old_text}"' if with_line_attrs else ""
    new_attr = f' data-linenumber="{new_text}"' if with_line_attrs else ""
    return (
        f'<div class="diff-grid-row line_holder"{row_id}>'
        f'<div class="diff-td diff-line-num old_line"{old_attr}>{old_text}</div>'
        f'<div class="diff-td diff-line-num new_line"{new_attr}>{new_text}</div>'
        f'<div class="diff-td line_content right-side">{escape(text)}</div>'
        "</div>"
    )


def _text_row(old, new, text):
    old_text = "" if old is None else str(old)
    new_text = "" if new is None else str(new)
    return (
        f'<tr><td class="old">{old_text}</td><td class="new">{new_text}</td>'
        f'<td class="code">{escape(text)}</td></tr>'
    )


@pytest.fixture
def gitlab_page():
    """
    Build a GitLab-style page: file holders with data-path, line ids and
    data-linenumber cells, each of which can be switched off.
    """

    def build(files, with_ids=True, with_path_attr=True, with_line_attrs=True):
        sections = []
        for path, rows in files:
            path_attr = f' data-path="{escape(path)}"' if with_path_attr else ""
            body = "".join(
                _gitlab_row(path, old, new, text, with_ids, with_line_attrs)
                for old, new, text in rows
            )
            sections.append(
                f'<div class="diff-file file-holder"{path_attr}>'
                f'<div class="file-title"><span class="file-title-name">{escape(path)}</span></div>'
                f'<div class="diff-content">{body}</div>'
                "</div>"
            )
        return f'<html><body><div class="diffs">{"".join(sections)}</div></body></html>'

    return build


@pytest.fixture
def text_page():
    """Build a page with no ids or data attributes: headers and table rows only."""

    def build(files):
        sections = []
        for header, rows in files:
            body = "".join(_text_row(old, new, text) for old, new, text in rows)
            sections.append(
                '<div class="file">'
                f'<div class="file-header"><strong>{escape(header)}</strong></div>'
                f"<table>{body}</table>"
                "</div>"
            )
        return f'<html><body>{"".join(sections)}</body></html>'

    return build


@pytest.fixture
def single_hunk_target(gitlab_page):
    return HtmlRenderTarget(gitlab_page([("src/app.py", SINGLE_HUNK_ROWS)]))
