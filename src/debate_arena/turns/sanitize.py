"""Markdown stripping for speech-synthesis input."""

from __future__ import annotations

import re

_MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"```[^`]*```", re.DOTALL), ""),
    (re.compile(r"^#+[ \t]", re.MULTILINE), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"[\[\]()*_#`]"), ""),
)


def strip_markdown(text: str) -> str:
    """Return ``text`` with markdown formatting removed.

    Rules apply in order, so emphasis and inline code unwrap before links
    collapse to their label and any leftover formatting symbols are dropped.

    >>> strip_markdown("**bold** and _italic_ and `code`")
    'bold and italic and code'
    >>> strip_markdown("# Heading\\n[link](http://x)")
    'Heading\\nlink'
    """
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text
