"""Plain-text layout helpers: display width, indentation, filling."""

import textwrap
import unicodedata


def char_width(ch: str) -> int:
    """Number of terminal columns used by a single character."""
    if not ch:
        return 0
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in ('W', 'F'):
        return 2
    return 1


def string_width(text: str) -> int:
    """Display width of text, counting wide East Asian characters twice.

    Only the longest line counts when text spans several lines.
    """
    if not text:
        return 0
    return max(sum(char_width(ch) for ch in line) for line in text.split('\n'))


def indent_string(text: str, width: int) -> str:
    """Indent every non-blank line of text by width spaces."""
    if not text or width <= 0:
        return text or ""
    pad = ' ' * width
    return '\n'.join(pad + line if line.strip() else line for line in text.split('\n'))


def center_line(line: str, width: int) -> str:
    """Center a single line within width columns (left padding only)."""
    gap = width - string_width(line)
    if gap <= 0:
        return line
    return ' ' * (gap // 2) + line


def fill_text(text: str, width: int) -> str:
    """Refill paragraph text to width, keeping explicit hard breaks.

    Org uses a trailing backslash pair for a forced line break.
    """
    out = []
    for chunk in text.split('\\\\\n'):
        words = ' '.join(chunk.split())
        if not words:
            continue
        out.append(textwrap.fill(words, width=max(width, 1), break_long_words=False, break_on_hyphens=False))
    return '\n'.join(out)
