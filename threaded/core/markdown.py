"""
Markdown normalization.

Some extraction backends emit a table header separator twice in a row
(`|---|---|` followed by another `|---|---|`), which breaks table
rendering. The filter below drops the repeated separator lines.

Dependencies: re (stdlib)
System role: Post-processing for every parse result, cached or fresh
"""

import re

SEPARATOR_PATTERN = re.compile(r"^\|[\s-]+\|[\s|-]+$")


def fix_malformed_tables(markdown: str) -> str:
    """
    Remove table separator lines that directly follow another separator.

    Single pass, deterministic, idempotent.

    Args:
        markdown: Raw markdown

    Returns:
        str: Markdown with duplicated separators removed
    """
    result: list[str] = []

    for line in markdown.split("\n"):
        if result and SEPARATOR_PATTERN.match(line) and SEPARATOR_PATTERN.match(result[-1]):
            continue
        result.append(line)

    return "\n".join(result)
