"""Org inline markup to plain text.

The pipeline mirrors how links are protected while emphasis runs:
1. Replace links with placeholders
2. Convert verbatim/code and emphasis markers
3. Replace entities and special strings for the active charset
4. Restore protected links
"""

import re
from typing import List, Optional, Tuple

LINK_DESC_RE = re.compile(r'\[\[([^\]]+)\]\[([^\]]+)\]\]')
LINK_PLAIN_RE = re.compile(r'\[\[([^\]]+)\]\]')
FOOTNOTE_RE = re.compile(r'\[fn:([^\]:]+)\]')
VERBATIM_RE = re.compile(r'(?<![\w=])=(\S(?:[^=\n]*?\S)?)=(?![\w=])')
CODE_RE = re.compile(r'(?<![\w~])~(\S(?:[^~\n]*?\S)?)~(?![\w~])')

VERBATIM_FORMAT = "`%s'"

# name -> (utf-8, ascii)
ENTITIES = {
    'alpha': ('α', 'alpha'),
    'beta': ('β', 'beta'),
    'gamma': ('γ', 'gamma'),
    'lambda': ('λ', 'lambda'),
    'pi': ('π', 'pi'),
    'to': ('→', '->'),
    'rarr': ('→', '->'),
    'larr': ('←', '<-'),
    'times': ('×', '*'),
    'deg': ('°', 'degree'),
    'copy': ('©', '(c)'),
    'nbsp': (' ', ' '),
    'dots': ('…', '...'),
}
ENTITY_RE = re.compile(r'\\(' + '|'.join(sorted(ENTITIES, key=len, reverse=True)) + r')(?:\{\}|(?![A-Za-z]))')

# Ordered: longer dashes first
SPECIAL_STRINGS = [
    ('---', '—'),
    ('--', '–'),
    ('...', '…'),
]


def protect_links(text: str) -> Tuple[str, List[str]]:
    """Replace Org links with placeholders, returning the rendered links.

    [[url][description]] renders as [description] and [[url]] as <url>.
    """
    links = []

    def desc_replacer(match):
        placeholder = f"\x00LINK{len(links)}\x00"
        links.append(f"[{match.group(2)}]")
        return placeholder

    def plain_replacer(match):
        placeholder = f"\x00LINK{len(links)}\x00"
        target = match.group(1)
        if target.startswith('file:'):
            target = target[len('file:'):]
        links.append(f"<{target}>")
        return placeholder

    text = LINK_DESC_RE.sub(desc_replacer, text)
    text = LINK_PLAIN_RE.sub(plain_replacer, text)
    return text, links


def restore_links(text: str, links: List[str]) -> str:
    for i, link in enumerate(links):
        text = text.replace(f"\x00LINK{i}\x00", link)
    return text


def process_verbatim(text: str) -> str:
    """Render =verbatim= and ~code~ objects with the verbatim format.

    Bold, italic, underline and strike-through markers are kept as they are
    since they already read well in plain text.
    """
    text = VERBATIM_RE.sub(lambda m: VERBATIM_FORMAT % m.group(1), text)
    text = CODE_RE.sub(lambda m: VERBATIM_FORMAT % m.group(1), text)
    return text


def replace_entities(text: str, charset: str = 'utf-8') -> str:
    idx = 0 if charset == 'utf-8' else 1
    text = ENTITY_RE.sub(lambda m: ENTITIES[m.group(1)][idx], text)
    if charset == 'utf-8':
        for src, dst in SPECIAL_STRINGS:
            text = text.replace(src, dst)
    return text


def export_inline(text: Optional[str], charset: str = 'utf-8') -> str:
    """Render a piece of Org inline markup as plain text."""
    if not text:
        return ""
    text, links = protect_links(text)
    text = FOOTNOTE_RE.sub(r'[\1]', text)
    text = process_verbatim(text)
    text = replace_entities(text, charset)
    return restore_links(text, links)
