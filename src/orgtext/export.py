"""Export driver: walks a parsed document and feeds it to a backend.

The driver owns everything that depends on the whole tree (relative
levels, headline numbers, what is excluded from export) and exposes it to
handlers through the read-only ``info`` mapping.
"""

import warnings
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from . import plaintext
from .config import ExportConfig, config_from_meta
from .inline import export_inline
from .parser import OrgDocument, OrgHeadline, parse_org, parse_org_string

EXCLUDE_TAGS = ('noexport',)


def is_exported(el: OrgHeadline) -> bool:
    return not el.commented and not any(t in EXCLUDE_TAGS for t in el.tags)


def iter_headlines(nodes):
    """Yield exported headlines depth first."""
    for el in nodes:
        if not is_exported(el):
            continue
        yield el
        yield from iter_headlines(el.children)


def _unnumbered(el: OrgHeadline) -> bool:
    val = el.properties.get('UNNUMBERED')
    return val is not None and val.strip().lower() != 'nil'


def build_info(doc: OrgDocument, config: ExportConfig) -> Mapping[str, Any]:
    """Collect the export context for one pass over doc."""
    levels: Dict[int, int] = {}
    numbers: Dict[int, List[int]] = {}

    top = list(iter_headlines(doc.children))
    min_level = min((el.level for el in top), default=1)
    counters: List[int] = []

    def walk(nodes, parent_unnumbered):
        for el in nodes:
            if not is_exported(el):
                continue
            rel = el.level - min_level + 1
            levels[id(el)] = rel
            unnumbered = parent_unnumbered or _unnumbered(el)
            limit = config.with_numbering
            numbered = (
                limit is not False
                and not unnumbered
                and (limit is True or rel <= limit)
            )
            if numbered:
                while len(counters) < rel:
                    counters.append(0)
                del counters[rel:]
                counters[rel - 1] += 1
                numbers[id(el)] = list(counters)
            for b in el.blocks:
                if isinstance(b, OrgHeadline):
                    levels[id(b)] = rel + 1
            walk(el.children, unnumbered)

    walk(doc.children, False)
    for b in doc.blocks:
        if isinstance(b, OrgHeadline):
            levels[id(b)] = 1

    toc_depth = config.with_toc
    if toc_depth is True:
        toc_depth = config.headline_levels
    toc_entries = []
    if toc_depth:
        toc_entries = [el for el in top if levels[id(el)] <= toc_depth]

    charset = config.charset
    info: Dict[str, Any] = {
        'charset': charset,
        'underline': plaintext.UNDERLINE,
        'text_width': config.text_width,
        'inner_margin': plaintext.INNER_MARGIN,
        'headline_levels': config.headline_levels,
        'semicolons': config.semicolons,
        'with_numbering': config.with_numbering,
        'with_toc': config.with_toc,
        'with_title': config.with_title,
        'with_author': config.with_author,
        'with_todo_keywords': config.with_todo_keywords,
        'with_tags': config.with_tags,
        'with_priority': config.with_priority,
        'title': doc.meta.get('TITLE', ''),
        'author': doc.meta.get('AUTHOR', ''),
        'toc_entries': toc_entries,
        'relative_level': lambda el: levels.get(id(el), 1),
        'headline_number': lambda el: numbers.get(id(el)),
        'numbered_p': lambda el: id(el) in numbers,
        'alt_title': lambda el: el.alt_title,
        'export_inline': lambda text: export_inline(text, charset),
    }
    return MappingProxyType(info)


class ExportDriver:
    """Render one document through a backend handler table."""

    def __init__(self, backend: Mapping[str, Any], info: Mapping[str, Any]):
        self.backend = backend
        self.info = info

    def handler(self, kind: str):
        fn = self.backend.get(kind)
        if fn is None:
            warnings.warn(f"Backend has no handler for '{kind}', skipping it", UserWarning)
        return fn

    def render_blocks(self, blocks) -> str:
        parts = []
        for block in blocks:
            if isinstance(block, OrgHeadline):
                text = self.render_inlinetask(block) if is_exported(block) else ''
            else:
                fn = self.handler(block.get('kind'))
                text = fn(block, None, self.info) if fn else ''
            if text:
                parts.append(text)
        return '\n\n'.join(parts)

    def render_inlinetask(self, el: OrgHeadline) -> str:
        fn = self.handler(el.type)
        return fn(el, self.render_blocks(el.blocks), self.info) if fn else ''

    def render_section(self, owner: Optional[OrgHeadline], blocks) -> str:
        contents = self.render_blocks(blocks)
        fn = self.handler('section')
        return fn(owner, contents, self.info) if fn else contents

    def render_headline(self, el: OrgHeadline) -> str:
        parts = [self.render_section(el, el.blocks)]
        parts.extend(self.render_headline(c) for c in el.children if is_exported(c))
        contents = '\n\n'.join(p for p in parts if p)
        fn = self.handler(el.type)
        return fn(el, contents, self.info) if fn else contents

    def render_document(self, doc: OrgDocument) -> str:
        parts = [self.render_section(None, doc.blocks)]
        parts.extend(self.render_headline(el) for el in doc.children if is_exported(el))
        body = '\n\n'.join(p for p in parts if p)
        fn = self.handler('template')
        return fn(None, body, self.info) if fn else body


def export_document(doc: OrgDocument, backend=None, config: Optional[ExportConfig] = None, **overrides) -> str:
    """Export a parsed document to plain text.

    Document keywords (#+OPTIONS and friends) refine config; keyword
    arguments override both.
    """
    cfg = config_from_meta(doc.meta, base=config, **overrides)
    info = build_info(doc, cfg)
    return ExportDriver(backend or plaintext.BACKEND, info).render_document(doc)


def export_string(text: str, backend=None, config: Optional[ExportConfig] = None, **overrides) -> str:
    return export_document(parse_org_string(text), backend, config, **overrides)


def export_file(path, backend=None, config: Optional[ExportConfig] = None, **overrides) -> str:
    return export_document(parse_org(path), backend, config, **overrides)
