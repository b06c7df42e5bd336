import re

from .utils.text import string_width

NUMBER_RE = re.compile(r'^[-+]?(?:\d+(?:[.,]\d*)?|\.\d+)(?:[eE][-+]?\d+)?%?$')

# charset -> (vertical, horizontal, cross, left edge, right edge)
TABLE_CHARS = {
    'ascii': ('|', '-', '+', '|', '|'),
    'utf-8': ('│', '─', '┼', '├', '┤'),
}


def _column_is_numeric(cells) -> bool:
    """Org right-aligns a column when most of its non-empty cells are numbers."""
    values = [c for c in cells if c.strip()]
    if not values:
        return False
    numeric = sum(1 for c in values if NUMBER_RE.match(c.strip()))
    return numeric * 2 > len(values)


def render_table_block(table_block: dict, charset: str, export_inline_fn) -> str:
    """Render an Org table block as aligned plain-text rows.

    - Column widths follow the widest rendered cell (display width)
    - Numeric columns are right aligned, others left aligned
    - Horizontal rules appear only where the source had separator lines

    The caller passes export_inline_fn(text) -> str to render cell markup.
    """
    rows = table_block.get('rows') or []
    if not rows:
        return ""

    max_cols = max((len(r) for r in rows), default=0)
    if max_cols == 0:
        return ""
    norm_rows = [[export_inline_fn(c or '') for c in r] + [""] * (max_cols - len(r)) for r in rows]

    header_rows = int(table_block.get('header_rows') or 0)
    # Separator positions are recorded as "after the Nth parsed row"
    sep_positions = set(int(p) for p in (table_block.get('separators') or []))

    # Drop trailing all-empty rows that follow an explicit closing separator
    if header_rows < len(norm_rows):
        data = norm_rows[header_rows:]

        def row_is_empty(r):
            return all(str(c).strip() == "" for c in r)

        last_nonempty_idx = None
        for i in range(len(data) - 1, -1, -1):
            if not row_is_empty(data[i]):
                last_nonempty_idx = i
                break

        if last_nonempty_idx is not None and header_rows + last_nonempty_idx + 1 in sep_positions:
            norm_rows = norm_rows[:header_rows] + data[: last_nonempty_idx + 1]

    widths = [max(string_width(r[c]) for r in norm_rows) for c in range(max_cols)]
    numeric = [_column_is_numeric([r[c] for r in norm_rows[header_rows:]]) for c in range(max_cols)]
    vert, horiz, cross, left, right = TABLE_CHARS.get(charset, TABLE_CHARS['utf-8'])

    def rule():
        return left + cross.join(horiz * (w + 2) for w in widths) + right

    def row_line(r):
        cells = []
        for c, text in enumerate(r):
            pad = ' ' * (widths[c] - string_width(text))
            cells.append(f" {pad}{text} " if numeric[c] else f" {text}{pad} ")
        return vert + vert.join(cells) + vert

    parts = []
    if 0 in sep_positions:
        parts.append(rule())
    for idx, r in enumerate(norm_rows):
        parts.append(row_line(r))
        if idx + 1 in sep_positions:
            parts.append(rule())
    return "\n".join(parts)
