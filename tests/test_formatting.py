"""Unit tests for the Rich presentation of rendered sections."""
import io

from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from revealchat.rendering import ContentType, NoteKind, RenderNode, render_message
from revealchat.ui.formatting import code_blocks, render_message_renderable, render_text_styled, to_renderable


def _printed(renderable) -> str:
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestToRenderable:
    """Tests for to_renderable."""

    def test_table(self, table_message):
        """Test that table nodes become Rich tables with the parsed headers."""
        renderable = to_renderable(render_message(table_message)[0])
        assert isinstance(renderable, Table)
        assert [column.header for column in renderable.columns] == ["Name", "Age"]
        assert renderable.row_count == 2

    def test_code(self):
        """Test that code nodes are framed and titled by language."""
        renderable = to_renderable(RenderNode(type=ContentType.CODE_BLOCK, text="x = 1", language="python"))
        assert isinstance(renderable, Panel)
        assert renderable.title == "python"

    def test_note(self):
        """Test that note panels are titled by their kind."""
        node = RenderNode(type=ContentType.NOTE_BLOCK, text="careful", note_kind=NoteKind.WARNING)
        renderable = to_renderable(node)
        assert isinstance(renderable, Panel)
        assert "Warning" in renderable.title

    def test_rule_and_plain(self):
        """Test horizontal rules and plain prose."""
        assert isinstance(to_renderable(RenderNode(type=ContentType.HORIZONTAL_RULE)), Rule)
        assert isinstance(to_renderable(RenderNode(type=ContentType.PLAIN, text="Hello")), Markdown)

    def test_prose_keeps_dollar_signs(self):
        """Test that prices in prose are not treated as LaTeX."""
        markdown = to_renderable(RenderNode(type=ContentType.PLAIN, text="costs $5 or $10"))
        assert markdown.markup == "costs $5 or $10"
        assert render_text_styled("costs $5 or $10").plain == "costs $5 or $10"

    def test_math_is_cleaned(self):
        """Test that LaTeX is cleaned inside formula sections only."""
        node = render_message("$$E = mc^2$$")[0]
        assert node.type == ContentType.MATH_FORMULA
        assert node.text == "E = mc^2"

    def test_checklist_glyphs(self):
        """Test that checklist rows are drawn with check boxes."""
        renderable = to_renderable(render_message("✅ Done\n❌ Todo")[0])
        assert isinstance(renderable, Text)
        assert renderable.plain == "☑ Done\n☐ Todo"

    def test_chart_is_not_wrapped(self):
        """Test that ascii charts keep their layout."""
        renderable = to_renderable(RenderNode(type=ContentType.ASCII_CHART, text="Q1 ████"))
        assert isinstance(renderable, Text)
        assert renderable.no_wrap


class TestRenderMessageRenderable:
    """Tests for whole-message rendering."""

    def test_one_renderable_per_section(self, mixed_message):
        """Test that every section gets its own renderable."""
        group = render_message_renderable(mixed_message)
        assert isinstance(group, Group)
        assert len(group.renderables) == 5

    def test_renders_to_text(self, mixed_message):
        """Test that the message prints with its content visible."""
        output = _printed(render_message_renderable(mixed_message))
        assert "Tool" in output
        assert "def main():" in output
        assert "back up first." in output

    def test_partial_message_renders(self, mixed_message):
        """Test that every prefix of a message can be printed."""
        for end in range(0, len(mixed_message), 7):
            _printed(render_message_renderable(mixed_message[:end]))

    def test_code_blocks(self, mixed_message):
        """Test that code is extracted for copying."""
        assert code_blocks(mixed_message) == ["def main():\n    return 1"]
        assert code_blocks("no code") == []
