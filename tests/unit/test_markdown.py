"""Tests for the duplicated table separator filter."""

from threaded.core.markdown import fix_malformed_tables


class TestFixMalformedTables:

    def test_drops_separator_that_follows_a_separator(self) -> None:
        markdown = "| a | b |\n|---|---|\n|---|---|\n| 1 | 2 |"

        assert fix_malformed_tables(markdown) == "| a | b |\n|---|---|\n| 1 | 2 |"

    def test_drops_every_repeat_in_a_run(self) -> None:
        markdown = "| a | b |\n| --- | --- |\n|---|---|\n| --- | --- |\n| x | y |"

        assert fix_malformed_tables(markdown) == "| a | b |\n| --- | --- |\n| x | y |"

    def test_keeps_single_column_separators(self) -> None:
        markdown = "| a |\n| --- |\n| --- |\n| x |"

        assert fix_malformed_tables(markdown) == markdown

    def test_keeps_separators_of_different_tables(self) -> None:
        markdown = "| a |\n|---|---|\n| 1 |\n\n| b |\n|---|---|\n| 2 |"

        assert fix_malformed_tables(markdown) == markdown

    def test_leaves_plain_text_unchanged(self) -> None:
        markdown = "# Title\n\nSome text\n- item"

        assert fix_malformed_tables(markdown) == markdown

    def test_is_idempotent(self) -> None:
        markdown = "| a | b |\n|---|---|\n|---|---|\n| 1 | 2 |"

        once = fix_malformed_tables(markdown)
        assert fix_malformed_tables(once) == once

    def test_empty_string(self) -> None:
        assert fix_malformed_tables("") == ""
