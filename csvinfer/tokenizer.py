"""
Line splitting and row tokenizing for csvinfer.

The tokenizer is a single-pass scan with one "inside quotes" flag:

- A doubled quote inside a quoted section is an escaped quote and
  produces one literal quote character.
- Any other quote toggles the flag and is not emitted.
- The delimiter separates fields only outside quotes.
- The end of the line always ends the last field, even when a quote is
  still open. Unbalanced quoting is never an error.

Lines are physical lines: a quoted field cannot span a line break.
"""

from __future__ import annotations

import re

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split text into physical lines on ``\\r\\n``, ``\\r`` or ``\\n``."""
    return _LINE_BREAK.split(text)


def split_processable(buffer: str) -> tuple[str, str]:
    """Cut *buffer* after its last line terminator.

    Returns:
        ``(processable, remainder)``. ``processable`` holds only complete
        lines and is empty when the buffer has no terminator yet;
        ``remainder`` is the trailing partial line.
    """
    cut = max(buffer.rfind("\n"), buffer.rfind("\r"))
    if cut == -1:
        return "", buffer
    return buffer[: cut + 1], buffer[cut + 1:]


def is_skippable(line: str, comment_marker: str | None) -> bool:
    """True for blank lines and comment lines."""
    stripped = line.strip()
    if not stripped:
        return True
    return comment_marker is not None and stripped.startswith(comment_marker)


def tokenize_row(line: str, delimiter: str = ",", quote_char: str = '"') -> list[str]:
    """Split one line into raw field strings.

    Examples::

        >>> tokenize_row('"a,b","c""d"')
        ['a,b', 'c"d']
        >>> tokenize_row('x,"open')
        ['x', 'open']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        char = line[i]
        if char == quote_char:
            if in_quotes and i + 1 < n and line[i + 1] == quote_char:
                current.append(quote_char)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields
