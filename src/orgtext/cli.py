#!/usr/bin/env python3
"""Unified CLI for orgtext

Subcommands:
  export    org -> commented plain text (semicolon titles)
  text      org -> plain text with the regular backend
  tree      parse org and emit the document tree as JSON
  validate  parse and check the document tree
  targets   list the named export targets
  watch     re-export on changes (polling)

"""

import argparse
import hashlib
import json
import pathlib
import sys
import time

from .config import ExportConfig
from .export import export_document
from .parser import parse_org
from .semicolon import DEFAULT_TARGET, EXPORT_TARGETS, export_to_target
from .validation import validate_document


def _write(path: pathlib.Path, data: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data, encoding='utf-8')


def _load(org: str):
    org_path = pathlib.Path(org)
    if not org_path.exists():
        print(f"ERROR: org file not found: {org_path}", file=sys.stderr)
        sys.exit(1)
    return parse_org(org_path)


def _config_from_args(args) -> ExportConfig:
    cfg = ExportConfig()
    changes = {}
    if getattr(args, 'text_width', None):
        changes['text_width'] = args.text_width
    if getattr(args, 'comment_prefix', None) is not None:
        changes['comment_prefix'] = args.comment_prefix
    if getattr(args, 'no_semicolons', False):
        changes['semicolons'] = False
    return cfg.with_overrides(**changes)


def _emit(args, text: str, label: str):
    if args.output:
        out_path = pathlib.Path(args.output)
        _write(out_path, text)
        print(f"{label}: {out_path} lines={text.count(chr(10))}")
    else:
        sys.stdout.write(text)


def cmd_export(args):
    doc = _load(args.org)
    text = export_to_target(
        doc,
        target=args.target,
        config=_config_from_args(args),
        comment=not args.no_comment,
    )
    _emit(args, text, 'Exported')


def cmd_text(args):
    doc = _load(args.org)
    overrides = {}
    if args.charset:
        overrides['charset'] = args.charset
    text = export_document(doc, config=_config_from_args(args), **overrides)
    _emit(args, text, 'Exported')


def cmd_tree(args):
    doc = _load(args.org)
    print(json.dumps(doc.to_ir(), indent=2, ensure_ascii=False))


def cmd_validate(args):
    doc = _load(args.org)
    result = validate_document(doc)
    for issue in result.issues:
        print(f"{issue.severity.upper()}: {issue.path or '/'}: {issue.message}")
    if result.ok():
        print("Document valid: no errors")
    else:
        sys.exit(1)


def cmd_targets(args):
    for name, settings in EXPORT_TARGETS.items():
        marker = ' (default)' if name == DEFAULT_TARGET else ''
        print(f"{name}: charset={settings['charset']}{marker}")


def cmd_watch(args):
    org_path = pathlib.Path(args.org)
    if not org_path.exists():
        print(f"ERROR: org file not found: {org_path}", file=sys.stderr)
        sys.exit(1)
    out_path = pathlib.Path(args.output)
    last_hash = None
    print(f"Watching {org_path} interval={args.interval}s target={args.target} (once={args.once})")

    def compute_hash(p: pathlib.Path):
        try:
            return hashlib.sha256(p.read_bytes()).hexdigest()
        except OSError:
            return None

    def export_once():
        text = export_to_target(
            parse_org(org_path),
            target=args.target,
            config=_config_from_args(args),
            comment=not args.no_comment,
        )
        _write(out_path, text)
        print(f"[watch] Exported {out_path}")

    while True:
        h = compute_hash(org_path)
        if h and h != last_hash:
            last_hash = h
            try:
                export_once()
            except Exception as e:
                print(f"[watch] ERROR during export: {e}", file=sys.stderr)
                if args.once:
                    sys.exit(1)
        if args.once:
            break
        time.sleep(args.interval)


def _add_export_options(p, with_target=True):
    p.add_argument('org')
    p.add_argument('-o', '--output', help='write to this file instead of stdout')
    p.add_argument('--text-width', type=int, help='fill paragraphs to this width (default: 72)')
    if with_target:
        p.add_argument('--target', choices=sorted(EXPORT_TARGETS), default=DEFAULT_TARGET)
        p.add_argument('--comment-prefix', help="comment start for every line (default: ';; ')")
        p.add_argument('--no-comment', action='store_true', help='leave lines uncommented')
        p.add_argument(
            '--no-semicolons',
            action='store_true',
            help='do not prefix headline titles with depth markers',
        )


def build_parser():
    p = argparse.ArgumentParser(prog='orgtext')
    sub = p.add_subparsers(dest='command', required=True)

    exp = sub.add_parser('export', help='org -> commented plain text')
    _add_export_options(exp)
    exp.set_defaults(func=cmd_export)

    txt = sub.add_parser('text', help='org -> plain text (regular titles)')
    _add_export_options(txt, with_target=False)
    txt.add_argument('--charset', choices=['utf-8', 'ascii'])
    txt.set_defaults(func=cmd_text)

    tree = sub.add_parser('tree', help='emit the document tree as JSON')
    tree.add_argument('org')
    tree.set_defaults(func=cmd_tree)

    val = sub.add_parser('validate', help='validate the document tree')
    val.add_argument('org')
    val.set_defaults(func=cmd_validate)

    targets = sub.add_parser('targets', help='list export targets')
    targets.set_defaults(func=cmd_targets)

    watch = sub.add_parser('watch', help='watch org file and re-export on change')
    _add_export_options(watch)
    watch.add_argument('--interval', type=float, default=1.0)
    watch.add_argument(
        '--once', action='store_true', help='Run single export then exit (for testing)'
    )
    watch.set_defaults(func=cmd_watch)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == 'watch' and not args.output:
        parser.error('watch requires -o/--output')
    args.func(args)


if __name__ == '__main__':
    main()
