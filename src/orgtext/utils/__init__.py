"""Shared utilities for orgtext.

- text: display width, indentation and paragraph filling
"""

from .text import (
    center_line,
    char_width,
    fill_text,
    indent_string,
    string_width,
)

__all__ = [
    'center_line',
    'char_width',
    'fill_text',
    'indent_string',
    'string_width',
]
