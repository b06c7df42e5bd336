"""Semicolon backend: the plain-text backend with its own headline titles.

Only title formatting changes. Headline and inline task handlers of the
plain-text backend are reused as they are, with ``title.build_title``
passed in as their title strategy, so no shared state is swapped in or out
and nested renders (an inline task inside a headline) each get the same
strategy through their own call.

The template keeps the plain-text title builder for its table of contents;
semicolon targets switch the table of contents off.
"""

from typing import Callable, Dict, Mapping, Optional

from . import plaintext
from .config import SEMICOLON_OVERRIDES, ExportConfig
from .export import export_document
from .parser import OrgDocument, parse_org, parse_org_string
from .postprocess import postprocess
from .title import build_title

# Named export variants; they differ only in the output charset
EXPORT_TARGETS = {
    'semicolon-utf8': {'charset': 'utf-8'},
    'semicolon-ascii': {'charset': 'ascii'},
}
DEFAULT_TARGET = 'semicolon-utf8'


def derive_backend(parent: Mapping[str, Callable], overrides: Mapping[str, Callable]) -> Dict[str, Callable]:
    """Copy a backend's handler table and replace some of its entries."""
    backend = dict(parent)
    backend.update(overrides)
    return backend


def transcode_headline(element, contents: Optional[str], info) -> str:
    """Render a headline with the plain-text layout and a semicolon title."""
    return plaintext.headline(element, contents, info, title_builder=build_title)


def transcode_inlinetask(element, contents: Optional[str], info) -> str:
    return plaintext.inlinetask(element, contents, info, title_builder=build_title)


BACKEND = derive_backend(
    plaintext.BACKEND,
    {
        'headline': transcode_headline,
        'inlinetask': transcode_inlinetask,
    },
)


def export_to_target(
    doc: OrgDocument,
    target: str = DEFAULT_TARGET,
    config: Optional[ExportConfig] = None,
    comment: bool = True,
    **overrides,
) -> str:
    """Run one semicolon export of doc for a named target.

    Numbering, author, title and table of contents are always switched off
    for the base renderer. With comment, every output line is turned into a
    comment using the configured prefix.
    """
    if target not in EXPORT_TARGETS:
        raise ValueError(f"Unknown export target '{target}' (choose from {', '.join(EXPORT_TARGETS)})")
    cfg = config or ExportConfig()
    settings = {**EXPORT_TARGETS[target], **SEMICOLON_OVERRIDES, **overrides}
    text = export_document(doc, BACKEND, cfg, **settings)
    if comment:
        prefix = settings.get('comment_prefix', cfg.comment_prefix)
        text = postprocess(text, prefix)
    return text


def export_string_to_target(text: str, target: str = DEFAULT_TARGET, **kwargs) -> str:
    return export_to_target(parse_org_string(text), target, **kwargs)


def export_file_to_target(path, target: str = DEFAULT_TARGET, **kwargs) -> str:
    return export_to_target(parse_org(path), target, **kwargs)
