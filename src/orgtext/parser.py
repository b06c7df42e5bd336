import re
from typing import Dict, List, Optional, Tuple, Union

HEADLINE_RE = re.compile(r'^(?P<stars>\*+)[ \t]+(?P<rest>.*?)\s*$')
INLINETASK_END_RE = re.compile(r'^\*+[ \t]+END\s*$')
PRIORITY_RE = re.compile(r'^\[#([A-Z0-9])\]\s*')
TAGS_RE = re.compile(r'(?:^|[ \t]+)(:[\w@#%:]+:)$')
KEYWORD_RE = re.compile(r'^\s*#\+(?P<key>[A-Za-z_][\w-]*):[ \t]*(?P<value>.*)$')
COMMENT_LINE_RE = re.compile(r'^\s*#(?:\s|$)')
PROP_BEGIN_RE = re.compile(r'^\s*:PROPERTIES:\s*$', re.I)
DRAWER_BEGIN_RE = re.compile(r'^\s*:(?P<name>[\w-]+):\s*$')
DRAWER_END_RE = re.compile(r'^\s*:END:\s*$', re.I)
PROPERTY_RE = re.compile(r'^\s*:(?P<key>[^:\s]+):(?:[ \t]+(?P<value>.*?))?\s*$')
PLANNING_RE = re.compile(r'^\s*(?:SCHEDULED|DEADLINE|CLOSED):')
BLOCK_BEGIN_RE = re.compile(r'^\s*#\+BEGIN_(?P<name>\w+)(?:[ \t]+(?P<params>.*?))?\s*$', re.I)
BLOCK_END_RE = re.compile(r'^\s*#\+END_(?P<name>\w+)\s*$', re.I)
FIXED_WIDTH_RE = re.compile(r'^\s*:(?: (?P<text>.*)|$)')
RULE_RE = re.compile(r'^\s*-{5,}\s*$')

# List parsing regexes
UL_RE = re.compile(r'^(?P<indent>\s*)(?P<bullet>[-+]|(?<=\s)\*)\s+(?P<text>.*)$')
OL_RE = re.compile(r'^(?P<indent>\s*)(?P<bullet>(?P<marker>\d+|[a-zA-Z])[.)])\s+(?P<text>.*)$')
CHECKBOX_RE = re.compile(r'^\[([ Xx-])\]\s*(.*)$', re.S)
DESC_SEP = ' :: '

# Table parsing regexes (Org-style simple tables)
TABLE_LINE_RE = re.compile(r'^\s*\|.*\|\s*$')
TABLE_SEP_RE = re.compile(r'^\s*\|[\-+:\s]+\|\s*$')

DEFAULT_TODO_KEYWORDS = (['TODO'], ['DONE'])
TODO_KEYWORD_KEYS = ('TODO', 'SEQ_TODO', 'TYP_TODO')

# Headlines with at least this many stars are inline tasks
INLINETASK_MIN_LEVEL = 15

# Org keywords whose value is part of the document rather than export settings
DOCUMENT_KEYWORDS = ('TITLE', 'AUTHOR', 'DATE', 'EMAIL', 'OPTIONS')


def _get_indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _parse_checkbox(text: str) -> Tuple[Optional[str], str]:
    """Parse checkbox from start of text. Returns (checkbox_state, remaining_text)."""
    m = CHECKBOX_RE.match(text)
    if not m:
        return None, text
    ch = m.group(1)
    if ch.lower() == 'x':
        return 'checked', m.group(2)
    if ch == '-':
        return 'partial', m.group(2)
    return 'unchecked', m.group(2)


def _parse_ordered_marker(marker: str) -> Tuple[int, str]:
    """Parse ordered list marker. Returns (number, style)."""
    if marker.isdigit():
        return int(marker), '1'
    if marker.islower():
        return ord(marker) - ord('a') + 1, 'a'
    return ord(marker) - ord('A') + 1, 'A'


def _match_item(line: str):
    """Return (indent, list_type, bullet, text) when line starts a list item."""
    m = UL_RE.match(line)
    if m:
        text = m.group('text')
        list_type = 'dl' if DESC_SEP in f"{text} " else 'ul'
        return len(m.group('indent')), list_type, m.group('bullet'), text
    m = OL_RE.match(line)
    if m:
        return len(m.group('indent')), 'ol', m.group('bullet'), m.group('text')
    return None


def _is_list_line(line: str) -> bool:
    return bool(line.strip()) and _match_item(line) is not None


def _next_nonblank(lines: List[str], idx: int) -> Optional[int]:
    while idx < len(lines):
        if lines[idx].strip():
            return idx
        idx += 1
    return None


def _try_parse_list(lines: List[str], start_idx: int) -> Tuple[Optional[Dict], int]:
    """Try to parse a (possibly nested) plain list starting at start_idx.

    Items at the first item's indentation belong to this list; more indented
    lines form the current item's body, which is parsed recursively so nested
    lists, paragraphs and tables are all supported. A blank line ends the list
    unless the next non-blank line continues it.
    """
    first = _match_item(lines[start_idx]) if start_idx < len(lines) else None
    if not first:
        return None, 0
    base_indent, list_type, _, _ = first
    start_num, style = 1, '1'
    if list_type == 'ol':
        marker = OL_RE.match(lines[start_idx]).group('marker')
        start_num, style = _parse_ordered_marker(marker)

    items: List[Dict] = []
    body: List[str] = []
    text_col = base_indent + 2
    tight = True
    i = start_idx

    def close_item():
        if items:
            items[-1]['blocks'] = _parse_content_blocks(body)

    while i < len(lines):
        line = lines[i]
        if not line.strip():
            nxt = _next_nonblank(lines, i + 1)
            if nxt is None or _get_indent(lines[nxt]) < base_indent:
                break
            nxt_item = _match_item(lines[nxt])
            if _get_indent(lines[nxt]) == base_indent and not nxt_item:
                break
            if nxt - i > 1:
                # Two blank lines end a list
                break
            tight = False
            body.append('')
            i += 1
            continue
        indent = _get_indent(line)
        item = _match_item(line)
        if item and indent == base_indent:
            close_item()
            _, _, bullet, text = item
            text_col = base_indent + len(bullet) + 1
            checkbox, text = _parse_checkbox(text)
            entry: Dict = {'bullet': bullet}
            if checkbox:
                entry['checkbox'] = checkbox
            if list_type == 'dl' and DESC_SEP in f"{text} ":
                term, _, text = f"{text} ".partition(DESC_SEP)
                entry['term'] = term.strip()
                text = text.strip()
            items.append(entry)
            # Continuation lines are dedented to the item's text column
            body = [text] if text.strip() else []
            i += 1
            continue
        if indent > base_indent:
            body.append(line[min(indent, text_col) :])
            i += 1
            continue
        break

    close_item()
    # Trailing blank lines belong to whatever follows the list
    while i > start_idx and not lines[i - 1].strip():
        i -= 1
    block = {'kind': 'list', 'type': list_type, 'items': items, 'tight': tight}
    if list_type == 'ol':
        block['start'] = start_num
        block['style'] = style
    return block, i - start_idx


def _try_parse_table(lines: List[str], start_idx: int) -> Tuple[Optional[Dict], int]:
    """Parse an Org table starting at start_idx.

    Separator lines such as '|---+---|' are recorded as positions after the Nth
    content row; the first separator that has rows on both sides marks the
    header boundary. Returns (table_block, lines_consumed) or (None, 0).
    """
    if start_idx >= len(lines):
        return None, 0
    if not TABLE_LINE_RE.match(lines[start_idx]):
        return None, 0

    rows: List[List[str]] = []
    separators: List[int] = []
    header_candidate = None
    i = start_idx
    while i < len(lines) and TABLE_LINE_RE.match(lines[i]):
        ln = lines[i]
        i += 1
        if TABLE_SEP_RE.match(ln):
            separators.append(len(rows))
            if header_candidate is None and rows:
                header_candidate = len(rows)
            continue
        rows.append([p.strip() for p in ln.strip().strip('|').split('|')])

    if not rows:
        return None, 0
    header_rows = header_candidate if header_candidate is not None and header_candidate < len(rows) else 0
    block = {
        'kind': 'table',
        'rows': rows,
        'header_rows': header_rows,
        'separators': separators,
    }
    return block, (i - start_idx)


def _try_parse_block(lines: List[str], start_idx: int) -> Tuple[Optional[Dict], int]:
    """Parse a #+BEGIN_NAME ... #+END_NAME block.

    SRC and EXAMPLE keep their lines verbatim; other blocks (QUOTE, CENTER,
    VERSE, ...) hold parsed content. An unterminated block is not a block.
    """
    m = BLOCK_BEGIN_RE.match(lines[start_idx])
    if not m:
        return None, 0
    name = m.group('name').lower()
    params = (m.group('params') or '').strip()
    end = None
    for j in range(start_idx + 1, len(lines)):
        em = BLOCK_END_RE.match(lines[j])
        if em and em.group('name').lower() == name:
            end = j
            break
    if end is None:
        return None, 0
    inner = lines[start_idx + 1 : end]
    if name in ('src', 'example'):
        indent = min((_get_indent(ln) for ln in inner if ln.strip()), default=0)
        # Org escapes leading '*' and '#+' with a comma inside verbatim blocks
        value = [re.sub(r'^(\s*),(\*|#\+)', r'\1\2', ln[indent:]) for ln in inner]
        block = {'kind': name, 'lines': value}
        if name == 'src':
            block['language'] = params.split()[0] if params else ''
    elif name == 'verse':
        block = {'kind': 'verse', 'lines': [ln.strip() for ln in inner]}
    else:
        block = {'kind': 'special', 'name': name, 'blocks': _parse_content_blocks(inner)}
    return block, end - start_idx + 1


def _parse_content_blocks(lines: List[str]) -> List[Dict]:
    """Parse section lines into blocks: paragraphs, lists, tables, blocks, rules."""
    blocks: List[Dict] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            i += 1
            continue

        block, consumed = _try_parse_block(lines, i)
        if block is None:
            block, consumed = _try_parse_list(lines, i)
        if block is None:
            block, consumed = _try_parse_table(lines, i)
        if block:
            blocks.append(block)
            i += consumed
            continue

        if RULE_RE.match(line):
            blocks.append({'kind': 'rule'})
            i += 1
            continue

        if FIXED_WIDTH_RE.match(line):
            fixed = []
            while i < len(lines):
                fm = FIXED_WIDTH_RE.match(lines[i])
                if not fm:
                    break
                fixed.append(fm.group('text') or '')
                i += 1
            blocks.append({'kind': 'example', 'lines': fixed})
            continue

        # Paragraph: until a blank line or the start of another construct
        para = [line.strip()]
        i += 1
        while i < len(lines):
            nxt = lines[i]
            if (
                not nxt.strip()
                or _is_list_line(nxt)
                or TABLE_LINE_RE.match(nxt)
                or BLOCK_BEGIN_RE.match(nxt)
                or RULE_RE.match(nxt)
                or FIXED_WIDTH_RE.match(nxt)
            ):
                break
            para.append(nxt.strip())
            i += 1
        blocks.append({'kind': 'paragraph', 'content': '\n'.join(para)})
    return blocks


class OrgHeadline:
    """A headline or an inline task.

    Built by the parser and left untouched afterwards: exporters read it but
    never change it.
    """

    def __init__(
        self,
        level: int,
        title: str,
        type_: str = 'headline',
        todo: Optional[str] = None,
        todo_type: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[List[str]] = None,
        properties: Optional[Dict[str, str]] = None,
        commented: bool = False,
    ):
        self.type = type_
        self.level = level
        self.title = title
        self.todo = todo
        self.todo_type = todo_type
        self.priority = priority
        self.tags = tags or []
        self.properties = properties or {}
        self.commented = commented
        self.children: List['OrgHeadline'] = []
        self.blocks: List[Union[Dict, 'OrgHeadline']] = []
        self.pre_blank = 0
        # Raw section lines and inline tasks, in order, until finalize()
        self._pending: List[Union[str, 'OrgHeadline']] = []

    def __repr__(self):
        return f"OrgHeadline(type={self.type!r}, level={self.level}, title={self.title!r})"

    @property
    def alt_title(self) -> Optional[str]:
        return self.properties.get('ALT_TITLE')

    def to_ir(self) -> Dict:
        return {
            'type': self.type,
            'level': self.level,
            'title': self.title,
            'todo': self.todo,
            'todo_type': self.todo_type,
            'priority': self.priority,
            'tags': list(self.tags),
            'properties': dict(self.properties),
            'commented': self.commented,
            'pre_blank': self.pre_blank,
            'blocks': [b.to_ir() if isinstance(b, OrgHeadline) else b for b in self.blocks],
            'children': [c.to_ir() for c in self.children],
        }


class OrgDocument:
    def __init__(self, meta=None, todo_keywords=None):
        self.meta: Dict[str, str] = meta or {}
        self.todo_keywords = todo_keywords or DEFAULT_TODO_KEYWORDS
        self.blocks: List[Union[Dict, OrgHeadline]] = []
        self.children: List[OrgHeadline] = []
        self._pending: List[Union[str, OrgHeadline]] = []

    def to_ir(self) -> Dict:
        return {
            'meta': dict(self.meta),
            'todo_keywords': {'todo': list(self.todo_keywords[0]), 'done': list(self.todo_keywords[1])},
            'blocks': [b.to_ir() if isinstance(b, OrgHeadline) else b for b in self.blocks],
            'children': [c.to_ir() for c in self.children],
        }


def parse_todo_keywords(values: List[str]) -> Tuple[List[str], List[str]]:
    """Parse '#+TODO: TODO NEXT | DONE CANCELED' lines into (todo, done).

    Fast-access keys like 'WAIT(w@/!)' are reduced to the keyword. Without a
    '|' the last keyword is the done state.
    """
    if not values:
        return DEFAULT_TODO_KEYWORDS
    todo: List[str] = []
    done: List[str] = []
    for value in values:
        words = [re.sub(r'\(.*\)$', '', w) for w in value.split()]
        if '|' in words:
            pos = words.index('|')
            todo.extend(w for w in words[:pos] if w)
            done.extend(w for w in words[pos + 1 :] if w)
        elif words:
            todo.extend(words[:-1])
            done.append(words[-1])
    return todo, done


def split_headline(level: int, rest: str, todo_keywords) -> OrgHeadline:
    """Split the text after the stars into keyword, priority, title and tags."""
    todo_words, done_words = todo_keywords
    todo = todo_type = None
    first, _, remainder = rest.partition(' ')
    if first in todo_words or first in done_words:
        todo = first
        todo_type = 'todo' if first in todo_words else 'done'
        rest = remainder.lstrip()
    priority = None
    pm = PRIORITY_RE.match(rest)
    if pm:
        priority = pm.group(1)
        rest = rest[pm.end() :]
    tags: List[str] = []
    tm = TAGS_RE.search(rest)
    if tm:
        tags = [t for t in tm.group(1).split(':') if t]
        rest = rest[: tm.start()]
    commented = False
    if rest == 'COMMENT' or rest.startswith('COMMENT '):
        commented = True
        rest = rest[len('COMMENT') :]
    type_ = 'inlinetask' if level >= INLINETASK_MIN_LEVEL else 'headline'
    return OrgHeadline(
        level=level,
        title=rest.strip(),
        type_=type_,
        todo=todo,
        todo_type=todo_type,
        priority=priority,
        tags=tags,
        commented=commented,
    )


def _finalize(container: Union[OrgDocument, OrgHeadline]) -> None:
    """Turn a container's pending lines into blocks, keeping inline tasks in place."""
    run: List[str] = []
    blocks: List[Union[Dict, OrgHeadline]] = []
    pending = container._pending
    if isinstance(container, OrgHeadline):
        for item in pending:
            if isinstance(item, str) and not item.strip():
                container.pre_blank += 1
            else:
                break
    for item in pending:
        if isinstance(item, OrgHeadline):
            blocks.extend(_parse_content_blocks(run))
            run = []
            _finalize(item)
            blocks.append(item)
        else:
            run.append(item)
    blocks.extend(_parse_content_blocks(run))
    container.blocks = blocks
    container._pending = []


def parse_org_string(text: str) -> OrgDocument:
    """Parse Org text into an OrgDocument tree."""
    lines = text.splitlines()
    todo_values = []
    for line in lines:
        km = KEYWORD_RE.match(line)
        if km and km.group('key').upper() in TODO_KEYWORD_KEYS:
            todo_values.append(km.group('value'))
    doc = OrgDocument(todo_keywords=parse_todo_keywords(todo_values))

    stack: List[OrgHeadline] = []
    inline_task: Optional[OrgHeadline] = None
    all_headlines: List[OrgHeadline] = []
    drawer: Optional[str] = None
    props: Dict[str, str] = {}
    block_name: Optional[str] = None

    def container():
        return stack[-1] if stack else doc

    def target():
        return inline_task if inline_task is not None else container()

    def release_inline_task():
        # An inline task without END owns no body: hand its lines back
        nonlocal inline_task
        if inline_task is not None:
            container()._pending.extend(inline_task._pending)
            inline_task._pending = []
            inline_task = None

    for idx, line in enumerate(lines):
        if block_name is not None:
            target()._pending.append(line)
            em = BLOCK_END_RE.match(line)
            if em and em.group('name').lower() == block_name:
                block_name = None
            continue

        if drawer is not None:
            if DRAWER_END_RE.match(line):
                if drawer == 'PROPERTIES':
                    owner = inline_task if inline_task is not None else (stack[-1] if stack else None)
                    if owner is not None:
                        owner.properties.update(props)
                    else:
                        doc.meta.update({f"PROPERTY_{k}": v for k, v in props.items()})
                drawer = None
                props = {}
            elif drawer == 'PROPERTIES':
                pm = PROPERTY_RE.match(line)
                if pm:
                    props[pm.group('key').upper()] = (pm.group('value') or '').strip()
            continue

        hm = HEADLINE_RE.match(line)
        if hm:
            level = len(hm.group('stars'))
            if level >= INLINETASK_MIN_LEVEL and INLINETASK_END_RE.match(line):
                inline_task = None
                continue
            release_inline_task()
            el = split_headline(level, hm.group('rest'), doc.todo_keywords)
            all_headlines.append(el)
            if el.type == 'inlinetask':
                container()._pending.append(el)
                inline_task = el
                continue
            while stack and stack[-1].level >= level:
                stack.pop()
            container().children.append(el)
            stack.append(el)
            continue

        if PROP_BEGIN_RE.match(line) and _drawer_closes(lines, idx):
            drawer = 'PROPERTIES'
            props = {}
            continue
        dm = DRAWER_BEGIN_RE.match(line)
        if dm and dm.group('name').upper() != 'END' and _drawer_closes(lines, idx):
            drawer = dm.group('name').upper()
            continue

        bm = BLOCK_BEGIN_RE.match(line)
        if bm and _block_closes(lines, idx, bm.group('name')):
            block_name = bm.group('name').lower()
            target()._pending.append(line)
            continue

        km = KEYWORD_RE.match(line)
        if km:
            key = km.group('key').upper()
            if key == 'TBLFM':
                # Ignore Org table formula lines
                continue
            value = km.group('value').strip()
            if key in DOCUMENT_KEYWORDS and key in doc.meta:
                doc.meta[key] = f"{doc.meta[key]} {value}"
            else:
                doc.meta[key] = value
            continue
        if COMMENT_LINE_RE.match(line) or PLANNING_RE.match(line):
            continue
        target()._pending.append(line)

    release_inline_task()
    _finalize(doc)
    for el in all_headlines:
        if el.type == 'headline':
            _finalize(el)
    return doc


def _block_closes(lines: List[str], idx: int, name: str) -> bool:
    """True when the block opened at idx is closed before the next headline."""
    name = name.lower()
    for line in lines[idx + 1 :]:
        em = BLOCK_END_RE.match(line)
        if em and em.group('name').lower() == name:
            return True
        if HEADLINE_RE.match(line):
            return False
    return False


def _drawer_closes(lines: List[str], idx: int) -> bool:
    """True when the drawer opened at idx has an :END: before the next headline."""
    for line in lines[idx + 1 :]:
        if DRAWER_END_RE.match(line):
            return True
        if HEADLINE_RE.match(line):
            return False
    return False


def parse_org(path) -> OrgDocument:
    with open(path, encoding='utf-8') as f:
        return parse_org_string(f.read())
