"""Unit tests for symbol cleanup and LaTeX conversion."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from revealchat.rendering import clean_excessive_symbols, clean_latex
from revealchat.rendering.cleanup import remove_unwanted_markdown_symbols, strip_inline_emphasis


class TestCleanExcessiveSymbols:
    """Tests for clean_excessive_symbols."""

    def test_star_runs_collapse_to_bold(self):
        """Test that three or more stars become a bold marker."""
        assert clean_excessive_symbols("Hello ***world***") == "Hello **world**"

    def test_long_heading_is_capped(self):
        """Test that more than six leading hashes are reduced to six."""
        assert clean_excessive_symbols("####### Title") == "###### Title"

    def test_long_fence_becomes_triple_backticks(self):
        """Test that runs of four or more backticks become a fence."""
        assert clean_excessive_symbols("`````python") == "```python"

    def test_underscore_and_tilde_runs(self):
        """Test that underscore and tilde runs are collapsed."""
        assert clean_excessive_symbols("a____b ~~~~c") == "a__b ~~c"

    def test_noise_lines_are_removed(self):
        """Test that lines holding only stray symbols are dropped."""
        assert clean_excessive_symbols("Text\n###\n**\nMore") == "Text\nMore"

    def test_horizontal_rules_survive(self):
        """Test that horizontal rules are left intact."""
        text = "Above\n---\n***\n___\nBelow"
        assert clean_excessive_symbols(text) == text

    def test_code_blocks_are_untouched(self):
        """Test that lines inside fenced code are not cleaned."""
        text = "```\n*** not touched\n###\n```"
        assert clean_excessive_symbols(text) == text

    def test_empty_text(self):
        """Test that empty text stays empty."""
        assert clean_excessive_symbols("") == ""

    @given(st.text())
    def test_cleanup_is_idempotent(self, text: str):
        """Property test: Cleaning twice equals cleaning once."""
        once = clean_excessive_symbols(text)
        assert clean_excessive_symbols(once) == once

    @given(st.text(alphabet=st.sampled_from("*#_~` \nab-")))
    def test_cleanup_is_idempotent_on_symbol_soup(self, text: str):
        """Property test: Idempotence holds on symbol-heavy input."""
        once = clean_excessive_symbols(text)
        assert clean_excessive_symbols(once) == once


class TestInlineSymbols:
    """Tests for inline emphasis and lone marker removal."""

    def test_strip_inline_emphasis(self):
        """Test that emphasis markers around words are removed."""
        assert strip_inline_emphasis(" **Name** ") == "Name"
        assert strip_inline_emphasis("`code` and ~~old~~") == "code and old"
        assert strip_inline_emphasis("*slanted*") == "slanted"

    def test_lone_bold_markers_are_removed(self):
        """Test that a standalone bold marker is dropped from prose."""
        result = remove_unwanted_markdown_symbols("Hello ** world")
        assert "**" not in result
        assert result.startswith("Hello")
        assert result.endswith("world")

    def test_wrapped_bold_is_kept(self):
        """Test that bold text keeps its markers for markdown display."""
        assert remove_unwanted_markdown_symbols("A **bold** word") == "A **bold** word"

    def test_lone_heading_markers_are_removed(self):
        """Test that hash runs with no heading text are dropped."""
        result = remove_unwanted_markdown_symbols("Intro\n###\nBody")
        assert "#" not in result
        assert result.split() == ["Intro", "Body"]

    @pytest.mark.parametrize("heading", ["### Third", "#### Heading", "##### Deep", "###### Sixth"])
    def test_deep_headings_are_kept(self, heading: str):
        """Test that real headings keep their full hash run."""
        assert remove_unwanted_markdown_symbols(heading) == heading


class TestCleanLatex:
    """Tests for clean_latex."""

    def test_inline_delimiters_and_greek(self):
        """Test that delimiters go and Greek letters become symbols."""
        assert clean_latex(r"\(\alpha + \beta\)") == "α + β"

    def test_display_math(self):
        """Test that display math dollars are removed."""
        assert clean_latex("$$E = mc^2$$") == "E = mc^2"

    def test_fraction(self):
        """Test that fractions become a slash expression."""
        assert clean_latex(r"\frac{a}{b}") == "(a)/(b)"

    def test_square_root(self):
        """Test that square roots use the radical sign."""
        assert clean_latex(r"\sqrt{x}") == "√(x)"

    def test_superscript_groups(self):
        """Test that braced superscripts become parentheses."""
        assert clean_latex("x^{2}") == "x^(2)"

    def test_text_commands_keep_argument(self):
        """Test that text commands are unwrapped."""
        assert clean_latex(r"\text{speed} = d/t") == "speed = d/t"

    def test_environments_are_removed(self):
        """Test that begin/end markers are dropped."""
        assert clean_latex(r"\begin{aligned}a = b\end{aligned}") == "a = b"

    def test_symbol_prefix_does_not_match_longer_command(self):
        """Test that a symbol is only replaced as a whole command."""
        assert clean_latex(r"\infty") == "∞"
        assert clean_latex(r"a \times b") == "a × b"

    def test_plain_text_is_unchanged(self):
        """Test that text without LaTeX is returned as is."""
        assert clean_latex("Just words.") == "Just words."
