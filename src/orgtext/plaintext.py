"""Plain-text backend.

A backend is a dict mapping an element kind to a handler
``handler(element, contents, info) -> str``. ``contents`` is the already
rendered text of the element's children (or None for leaf blocks) and
``info`` is the read-only export context built by the export driver.

Headline and inline task handlers accept a ``title_builder`` keyword so a
derived backend can change how titles look without touching layout.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from .table_render import render_table_block
from .utils.text import center_line, char_width, fill_text, indent_string, string_width

UNDERLINE = {
    'ascii': ('=', '~', '-'),
    'utf-8': ('═', '─', '╌', '┄', '┈'),
}

BULLETS = {
    'ascii': ('*', '+', '-'),
    'utf-8': ('◊',),
}

CHECKBOXES = {
    'ascii': {'checked': '[X] ', 'unchecked': '[ ] ', 'partial': '[-] '},
    'utf-8': {'checked': '☑ ', 'unchecked': '☐ ', 'partial': '☒ '},
}

INNER_MARGIN = 2
QUOTE_MARGIN = 6
INLINETASK_WIDTH = 30
TOC_INDENT = 2

TitleBuilder = Callable[..., str]


def build_title(element, info: Mapping[str, Any], text_width: int, underline=False, notags=False, toc=False) -> str:
    """Default title: number, TODO keyword, priority, text and aligned tags.

    With underline, headlines get a line of the charset's underline
    character for their depth, as wide as the title without tags.
    """
    headline_p = element.type == 'headline'
    numbers = ""
    if headline_p and info['numbered_p'](element):
        numbers = ".".join(str(n) for n in info['headline_number'](element)) + " "
    source = element.title
    if toc and headline_p and info['alt_title'](element):
        source = info['alt_title'](element)
    text = info['export_inline'](source).strip()
    todo = f"{element.todo} " if info['with_todo_keywords'] and element.todo else ""
    priority = f"[#{element.priority}] " if info['with_priority'] and element.priority else ""
    tags = ""
    if not notags and info['with_tags'] and element.tags:
        tags = ":" + ":".join(element.tags) + ":"
    first_part = numbers + todo + priority + text

    out = first_part
    if tags:
        gap = max(text_width - (1 + string_width(first_part)), string_width(tags))
        out += " " + tags.rjust(gap)
    if underline and headline_p:
        chars = info['underline'].get(info['charset']) or ()
        level = info['relative_level'](element)
        if 0 < level <= len(chars):
            under_char = chars[level - 1]
            out += "\n" + under_char * (string_width(first_part) // char_width(under_char))
    return out


def body_width(info: Mapping[str, Any]) -> int:
    return info['text_width'] - info['inner_margin']


def low_level_rank(element, info: Mapping[str, Any]) -> int:
    """0 for a regular headline, else its depth below the H: limit."""
    level = info['relative_level'](element)
    limit = info['headline_levels']
    return level - limit if level > limit else 0


def headline(element, contents: Optional[str], info: Mapping[str, Any], title_builder: TitleBuilder = build_title) -> str:
    """Lay out a headline around a title produced by title_builder.

    Headlines past the H: limit become bulleted items with their contents
    hanging under the bullet; others get an underlined title followed by a
    blank line and their contents.
    """
    width = info['text_width']
    rank = low_level_rank(element, info)
    if rank:
        bullets = BULLETS.get(info['charset'], BULLETS['utf-8'])
        bullet = f"{bullets[(rank - 1) % len(bullets)]} "
        title = title_builder(element, info, width - string_width(bullet))
        out = bullet + title
        if contents:
            out += "\n" + "\n" * element.pre_blank + indent_string(contents, string_width(bullet))
        return out
    title = title_builder(element, info, width, underline=True)
    if not contents:
        return title
    return f"{title}\n\n{contents}"


def inlinetask(element, contents: Optional[str], info: Mapping[str, Any], title_builder: TitleBuilder = build_title) -> str:
    """Box an inline task between two rules, centered in the body width."""
    utf8 = info['charset'] == 'utf-8'
    width = min(INLINETASK_WIDTH, body_width(info))
    edge = ('━' if utf8 else '_') * width
    title = title_builder(element, info, width)
    if string_width(title) > width:
        title = fill_text(title, width)
    lines = [edge]
    if not utf8:
        lines.append('')
    lines.append(title)
    if contents and contents.strip():
        lines.append(('─' if utf8 else '-') * width)
        lines.append(contents)
    lines.append(edge)
    box = '\n'.join(lines)
    return indent_string(box, max((body_width(info) - width) // 2, 0))


def section(element, contents: Optional[str], info: Mapping[str, Any]) -> str:
    """Indent a headline's own text; the document preamble stays flush left."""
    if not contents:
        return ""
    if element is None:
        return contents
    return indent_string(contents, info['inner_margin'])


def _render_paragraph(block: Dict, info: Mapping[str, Any], width: int) -> str:
    return fill_text(info['export_inline'](block.get('content', '')), width)


def _item_bullet(block: Dict, item: Dict, index: int, info: Mapping[str, Any]) -> str:
    list_type = block.get('type')
    if list_type == 'ol':
        n = block.get('start', 1) + index
        style = block.get('style', '1')
        if style == 'a':
            label = chr(ord('a') + (n - 1) % 26)
        elif style == 'A':
            label = chr(ord('A') + (n - 1) % 26)
        else:
            label = str(n)
        return f"{label}{item.get('bullet', '.')[-1]} "
    bullet = item.get('bullet', '-')
    if bullet == '-' and info['charset'] == 'utf-8':
        bullet = '•'
    return f"{bullet} "


def _render_list(block: Dict, info: Mapping[str, Any], width: int) -> str:
    rendered = []
    boxes = CHECKBOXES.get(info['charset'], CHECKBOXES['utf-8'])
    for index, item in enumerate(block.get('items') or []):
        prefix = _item_bullet(block, item, index, info)
        if item.get('checkbox'):
            prefix += boxes[item['checkbox']]
        hang = string_width(prefix)
        body = render_blocks(item.get('blocks') or [], info, width - hang)
        if 'term' in item:
            term = info['export_inline'](item['term'])
            body = f"{term}\n{indent_string(body, 4)}" if body else term
        lines = body.split('\n') if body else ['']
        first = prefix + lines[0]
        rest = indent_string('\n'.join(lines[1:]), hang) if len(lines) > 1 else ''
        rendered.append(f"{first}\n{rest}" if rest else first)
    return ('\n' if block.get('tight', True) else '\n\n').join(rendered)


def _render_table(block: Dict, info: Mapping[str, Any], width: int) -> str:
    return render_table_block(block, info['charset'], info['export_inline'])


def _render_verbatim(block: Dict, info: Mapping[str, Any], width: int) -> str:
    return '\n'.join(block.get('lines') or []).rstrip('\n')


def _render_verse(block: Dict, info: Mapping[str, Any], width: int) -> str:
    return '\n'.join(info['export_inline'](ln) for ln in block.get('lines') or [])


def _render_special(block: Dict, info: Mapping[str, Any], width: int) -> str:
    name = block.get('name')
    inner = block.get('blocks') or []
    if name == 'quote':
        body = render_blocks(inner, info, width - 2 * QUOTE_MARGIN)
        return indent_string(body, QUOTE_MARGIN)
    body = render_blocks(inner, info, width)
    if name == 'center':
        return '\n'.join(center_line(ln.strip(), width) for ln in body.split('\n'))
    return body


def _render_rule(block: Dict, info: Mapping[str, Any], width: int) -> str:
    return ('─' if info['charset'] == 'utf-8' else '-') * width


BLOCK_RENDERERS = {
    'paragraph': _render_paragraph,
    'list': _render_list,
    'table': _render_table,
    'src': _render_verbatim,
    'example': _render_verbatim,
    'verse': _render_verse,
    'special': _render_special,
    'rule': _render_rule,
}


def render_blocks(blocks, info: Mapping[str, Any], width: int) -> str:
    """Render nested blocks (list item bodies, quote contents) at width."""
    parts = []
    for block in blocks:
        fn = BLOCK_RENDERERS.get(block.get('kind'))
        if fn is None:
            continue
        text = fn(block, info, width)
        if text:
            parts.append(text)
    return '\n\n'.join(parts)


def _block_handler(fn):
    def handler(block, contents, info):
        return fn(block, info, body_width(info))

    handler.__name__ = fn.__name__.replace('_render_', '')
    return handler


def _document_title(info: Mapping[str, Any]) -> str:
    lines = []
    width = info['text_width']
    title = info['export_inline'](info.get('title') or '').strip()
    if info['with_title'] and title:
        rule_char = '═' if info['charset'] == 'utf-8' else '='
        lines.append(center_line(title, width))
        lines.append(center_line(rule_char * string_width(title), width))
    author = (info.get('author') or '').strip()
    if info['with_author'] and author:
        if lines:
            lines.append('')
        lines.append(center_line(author, width))
    return '\n'.join(lines)


def _table_of_contents(info: Mapping[str, Any], title_builder: TitleBuilder) -> str:
    entries = []
    for el in info['toc_entries']:
        indent = TOC_INDENT * (info['relative_level'](el) - 1)
        entries.append(' ' * indent + title_builder(el, info, info['text_width'] - indent, notags=True, toc=True))
    if not entries:
        return ""
    heading = 'Table of Contents'
    rule_char = UNDERLINE.get(info['charset'], UNDERLINE['utf-8'])[0]
    return f"{heading}\n{rule_char * len(heading)}\n\n" + '\n'.join(entries)


def template(element, contents: Optional[str], info: Mapping[str, Any], title_builder: TitleBuilder = build_title) -> str:
    """Assemble the document: title block, table of contents, body."""
    parts = []
    head = _document_title(info)
    if head:
        parts.append(head)
    if info['toc_entries']:
        toc = _table_of_contents(info, title_builder)
        if toc:
            parts.append(toc)
    if contents:
        parts.append(contents)
    return '\n\n\n'.join(parts) + '\n'


BACKEND: Dict[str, Callable] = {
    'template': template,
    'headline': headline,
    'inlinetask': inlinetask,
    'section': section,
    **{kind: _block_handler(fn) for kind, fn in BLOCK_RENDERERS.items()},
}
