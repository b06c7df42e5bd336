"""Headline titles for the semicolon export.

A title is either underlined (when the caller asks for it and the current
charset defines an underline character at that depth) or prefixed with a
depth marker of ``relative level + 3`` stars, so that a level 1 headline
reads ``**** Title``. TODO keywords, priorities and tags are never shown.
"""

from typing import Any, Mapping

from .utils.text import char_width, string_width

MARKER_CHAR = '*'
MARKER_OFFSET = 3


def headline_numbers(element, info: Mapping[str, Any]) -> str:
    """Return the '1.2. ' prefix of a numbered headline, or ''."""
    if element.type != 'headline' or not info['numbered_p'](element):
        return ""
    numbering = info['headline_number'](element) or []
    if not numbering:
        return ""
    return ".".join(str(n) for n in numbering) + ". "


def marker(level: int) -> str:
    return MARKER_CHAR * (level + MARKER_OFFSET) + " "


def build_title(element, info: Mapping[str, Any], text_width: int, underline=False, notags=False, toc=False) -> str:
    """Format the title of a headline or inline task.

    text_width and notags are accepted for signature compatibility with the
    base title builder; tags are always dropped here so neither is used.

    Returns an empty string for inline tasks, and for headlines when neither
    an underline nor the semicolon marker applies.
    """
    headline_p = element.type == 'headline'
    numbers = headline_numbers(element, info)
    source = element.title
    if toc and headline_p:
        alt = info['alt_title'](element)
        if alt:
            source = alt
    text = info['export_inline'](source).strip()
    # Keywords, priorities and tags are suppressed whatever the export options say
    todo = priority = ""
    first_part = numbers + todo + priority + text

    level = info['relative_level'](element)
    if underline and headline_p:
        chars = info['underline'].get(info['charset']) or ()
        under_char = chars[level - 1] if 0 < level <= len(chars) else None
        if not under_char:
            return first_part
        return first_part + "\n" + under_char * (string_width(first_part) // char_width(under_char))
    if info['semicolons'] and headline_p:
        return marker(level) + first_part
    return ""
