"""Unit tests for the section renderer."""
from revealchat.rendering import (
    ContentSection,
    ContentType,
    NoteKind,
    parse_table,
    render,
    render_message,
)


class TestParseTable:
    """Tests for parse_table."""

    def test_headers_and_rows(self, table_message):
        """Test that the separator is skipped and cells are trimmed."""
        headers, rows = parse_table(table_message)
        assert headers == ["Name", "Age"]
        assert rows == [["Alice", "30"], ["Bob", "25"]]

    def test_rows_are_padded_and_truncated(self):
        """Test that every row matches the header width."""
        headers, rows = parse_table("| A | B | C |\n| --- | --- | --- |\n| 1 |\n| 1 | 2 | 3 | 4 |")
        assert headers == ["A", "B", "C"]
        assert rows == [["1", "", ""], ["1", "2", "3"]]

    def test_emphasis_is_stripped_from_cells(self):
        """Test that bold markers do not reach the table cells."""
        headers, rows = parse_table("| **Name** | Age |\n| `bob` | *25* |")
        assert headers == ["Name", "Age"]
        assert rows == [["bob", "25"]]

    def test_summary_line_is_skipped(self):
        """Test that a trailing summary sentence is not a row."""
        _, rows = parse_table("| A | B |\n| 1 | 2 |\nOverall, fine.")
        assert rows == [["1", "2"]]


class TestRender:
    """Tests for render and render_message."""

    def test_table_node(self, table_message):
        """Test that a table message renders one table node."""
        nodes = render_message(table_message)
        assert len(nodes) == 1
        assert nodes[0].type == ContentType.TABLE
        assert nodes[0].is_table
        assert nodes[0].headers == ["Name", "Age"]
        assert nodes[0].table_rows == [["Alice", "30"], ["Bob", "25"]]

    def test_table_without_rows_is_plain(self):
        """Test that a header-only table falls back to plain text."""
        node = render(ContentSection(type=ContentType.TABLE, text="| A | B |"))
        assert node.type == ContentType.PLAIN
        assert node.text == "| A | B |"

    def test_note_node(self):
        """Test that the note keyword is stripped and the kind kept."""
        nodes = render_message("Warning: do not disconnect power.")
        assert nodes[0].type == ContentType.NOTE_BLOCK
        assert nodes[0].note_kind == NoteKind.WARNING
        assert nodes[0].text == "do not disconnect power."

    def test_steps_are_numbered_sequentially(self):
        """Test that steps get 1..n whatever the source numbers are."""
        nodes = render_message("1. Open the lid\n2. Press the button")
        assert [row.number for row in nodes[0].rows] == [1, 2]
        assert [row.text for row in nodes[0].rows] == ["Open the lid", "Press the button"]

        renumbered = render_message("3. First\n7. Second")
        assert [row.number for row in renumbered[0].rows] == [1, 2]
        assert [row.text for row in renumbered[0].rows] == ["First", "Second"]

    def test_code_node(self):
        """Test that code keeps its language and text."""
        nodes = render_message("```python\nprint(1)\n```")
        assert nodes[0].type == ContentType.CODE_BLOCK
        assert nodes[0].language == "python"
        assert nodes[0].text == "print(1)"

    def test_checklist_rows(self):
        """Test that checklist rows carry their state."""
        nodes = render_message("✅ Done\n❌ Todo")
        assert [(row.checked, row.text) for row in nodes[0].rows] == [(True, "Done"), (False, "Todo")]

    def test_dialogue_rows(self):
        """Test that dialogue rows are labelled by speaker."""
        nodes = render_message("User: Hi\nAgent: Hello")
        assert nodes[0].type == ContentType.DIALOGUE
        assert [row.label for row in nodes[0].rows] == ["User", "Agent"]
        assert [row.text for row in nodes[0].rows] == ["Hi", "Hello"]

    def test_qa_rows(self):
        """Test that questions and answers are marked."""
        nodes = render_message("Q: What?\nA: This.")
        assert nodes[0].type == ContentType.QA
        assert [row.marker for row in nodes[0].rows] == ["question", "answer"]

    def test_definition_rows(self):
        """Test that definitions are split into term and body."""
        nodes = render_message("API: Application interface\nSDK: Software kit")
        assert nodes[0].type == ContentType.DEFINITION_LIST
        assert [row.label for row in nodes[0].rows] == ["API", "SDK"]
        assert nodes[0].rows[0].text == "Application interface"

    def test_timeline_rows(self):
        """Test that timeline rows are labelled by date."""
        nodes = render_message("2020: Founded\n2023: Launched")
        assert nodes[0].type == ContentType.TIMELINE
        assert [row.label for row in nodes[0].rows] == ["2020", "2023"]

    def test_math_is_cleaned(self):
        """Test that formula text has its LaTeX converted."""
        nodes = render_message(r"$$\alpha + \beta$$")
        assert nodes[0].type == ContentType.MATH_FORMULA
        assert nodes[0].text == "α + β"

    def test_collapsible_keeps_title(self):
        """Test that the summary title is carried to the node."""
        nodes = render_message("<details>\n<summary>More info</summary>\nHidden\n</details>")
        assert nodes[0].type == ContentType.COLLAPSIBLE
        assert nodes[0].title == "More info"

    def test_plain_drops_lone_markers(self):
        """Test that lone bold markers are removed from prose."""
        node = render(ContentSection(type=ContentType.PLAIN, text="Hello ** world"))
        assert node.type == ContentType.PLAIN
        assert "**" not in node.text

    def test_render_is_pure(self, mixed_message):
        """Test that rendering the same text twice gives equal nodes."""
        assert render_message(mixed_message) == render_message(mixed_message)

    def test_partial_prefix_renders(self, table_message):
        """Test that a half revealed message still renders."""
        nodes = render_message(table_message[:20])
        assert len(nodes) >= 1
