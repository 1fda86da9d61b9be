from injector.models.suggestion import Suggestion
from injector.services.suggestion_renderer import (
    DEFAULT_BLOCK_LABEL,
    SuggestionRenderer,
    create_suggestion_block,
    fence_for,
)


def _suggestion(code, description=None):
    return Suggestion(
        filePath="src/app.py", lineNumber=2, suggestedCode=code, description=description
    )


def _block_body(block):
    """Code between the opening and closing fence lines."""
    return block.split("\n", 1)[1].rsplit("\n", 1)[0]


class TestSuggestionBlock:
    def test_default_format(self):
        assert create_suggestion_block("x = 1") == "```suggestion:-0+0\nx = 1\n```"

    def test_custom_line_offsets(self):
        assert create_suggestion_block("x", "-1+2") == "```suggestion:-1+2\nx\n```"

    def test_fence_outgrows_backticks_in_code(self):
        assert fence_for("no ticks") == "```"
        assert fence_for("a ``` b") == "````"
        assert fence_for("`````") == "``````"

    def test_code_with_fences_and_newlines_is_reproduced_exactly(self):
        code = 'doc = """\n```python\nprint(1)\n```\n"""\n\n  indented\t'

        block = create_suggestion_block(code)

        assert block.startswith("````suggestion:-0+0\n")
        assert block.endswith("\n````")
        assert _block_body(block) == code


class TestSuggestionRenderer:
    def test_render_with_description(self):
        rendered = SuggestionRenderer().render(_suggestion("y = 2", "Use y"))

        assert rendered.suggestion_block_text == "```suggestion:-0+0\ny = 2\n```"
        assert rendered.copy_text == "Use y\n\n```suggestion:-0+0\ny = 2\n```"
        assert rendered.display_fragment.description == "Use y"
        assert rendered.display_fragment.code == "y = 2"
        assert rendered.display_fragment.block_label == DEFAULT_BLOCK_LABEL

    def test_render_without_description(self):
        rendered = SuggestionRenderer().render(_suggestion("y = 2"))

        assert rendered.display_fragment.description is None
        assert rendered.copy_text == rendered.suggestion_block_text

    def test_markup_is_kept_as_text(self):
        code = "<script>alert('x')</script> & more"

        rendered = SuggestionRenderer().render(_suggestion(code))

        assert rendered.display_fragment.code == code
        assert _block_body(rendered.suggestion_block_text) == code

    def test_renderer_options(self):
        renderer = SuggestionRenderer(line_offsets="-2+0", block_label="Copy")

        rendered = renderer.render(_suggestion("z"))

        assert rendered.suggestion_block_text == "```suggestion:-2+0\nz\n```"
        assert rendered.display_fragment.block_label == "Copy"
