import re
import warnings
from dataclasses import dataclass, replace
from typing import Dict, Optional, Union

CHARSETS = ('utf-8', 'ascii')
CHARSET_ALIASES = {'utf8': 'utf-8', 'us-ascii': 'ascii'}

DEFAULTS = {
    'CHARSET': 'utf-8',
    'TEXT_WIDTH': '72',
    'HEADLINE_LEVELS': '3',
    'COMMENT_PREFIX': ';; ',
}

# #+OPTIONS item -> ExportConfig field
OPTION_FIELDS = {
    'num': 'with_numbering',
    'toc': 'with_toc',
    'author': 'with_author',
    'title': 'with_title',
    'H': 'headline_levels',
    'todo': 'with_todo_keywords',
    'tags': 'with_tags',
    'pri': 'with_priority',
}

OPTION_ITEM_RE = re.compile(r'(\S+?):(\S+)')

BOOLEAN_FIELDS = ('with_author', 'with_title', 'with_todo_keywords', 'with_tags', 'with_priority')

# Options the semicolon export forwards to the base renderer in every run
SEMICOLON_OVERRIDES = {
    'with_numbering': False,
    'with_author': False,
    'with_title': False,
    'with_toc': False,
}


@dataclass(frozen=True)
class ExportConfig:
    """Settings for one export pass.

    with_numbering and with_toc accept True, False, or a depth limit.
    """

    semicolons: bool = True
    with_numbering: Union[bool, int] = True
    with_author: bool = True
    with_title: bool = True
    with_toc: Union[bool, int] = True
    with_todo_keywords: bool = True
    with_tags: bool = True
    with_priority: bool = False
    charset: str = DEFAULTS['CHARSET']
    text_width: int = int(DEFAULTS['TEXT_WIDTH'])
    headline_levels: int = int(DEFAULTS['HEADLINE_LEVELS'])
    comment_prefix: str = DEFAULTS['COMMENT_PREFIX']

    def with_overrides(self, **changes) -> 'ExportConfig':
        return replace(self, **changes)


def parse_bool(val: Optional[str]) -> Optional[bool]:
    if val is None:
        return None
    s = str(val).strip().lower()
    if s in ("t", "1", "true", "yes", "y", "on"):
        return True
    if s in ("nil", "0", "false", "no", "n", "off"):
        return False
    return None


def parse_option_value(val: str) -> Union[bool, int, None]:
    """Parse an #+OPTIONS value: t / nil / a non-negative integer.

    Digits are depths ('H:1', 'num:0'), never booleans.
    """
    if val.isdigit():
        return int(val)
    return parse_bool(val)


def parse_options_line(line: str) -> Dict[str, Union[bool, int]]:
    """Parse '#+OPTIONS: num:nil toc:2 H:4' into ExportConfig field values.

    Unknown items are skipped silently (other exporters use them); known
    items with unreadable values are reported and skipped.
    """
    out: Dict[str, Union[bool, int]] = {}
    for key, raw in OPTION_ITEM_RE.findall(line or ''):
        field = OPTION_FIELDS.get(key)
        if field is None:
            continue
        value = parse_option_value(raw)
        if value is None:
            warnings.warn(f"Ignoring unreadable #+OPTIONS value '{key}:{raw}'", UserWarning)
            continue
        if field == 'headline_levels':
            if isinstance(value, bool):
                warnings.warn(f"H: expects a number, got '{raw}'", UserWarning)
                continue
        elif field in BOOLEAN_FIELDS:
            value = bool(value)
        out[field] = value
    return out


def normalize_charset(val: Optional[str]) -> str:
    s = (val or '').strip().lower().replace('_', '-')
    s = CHARSET_ALIASES.get(s, s)
    if s in CHARSETS:
        return s
    warnings.warn(f"Unknown charset '{val}', using {DEFAULTS['CHARSET']}", UserWarning)
    return DEFAULTS['CHARSET']


def config_from_meta(meta: Dict[str, str], base: Optional[ExportConfig] = None, **overrides) -> ExportConfig:
    """Build the config for a document from its #+KEYWORD meta.

    Precedence: explicit overrides > document keywords > base config.
    """
    cfg = base or ExportConfig()
    changes: Dict[str, object] = {}
    if meta.get('OPTIONS'):
        changes.update(parse_options_line(meta['OPTIONS']))
    if meta.get('ASCII_CHARSET'):
        changes['charset'] = normalize_charset(meta['ASCII_CHARSET'])
    if meta.get('ASCII_TEXT_WIDTH'):
        try:
            changes['text_width'] = int(meta['ASCII_TEXT_WIDTH'])
        except ValueError:
            warnings.warn(
                f"Ignoring non-numeric ASCII_TEXT_WIDTH '{meta['ASCII_TEXT_WIDTH']}'", UserWarning
            )
    changes.update(overrides)
    if 'charset' in changes:
        changes['charset'] = normalize_charset(str(changes['charset']))
    return cfg.with_overrides(**changes)
