#!/usr/bin/env python3
"""Tests for the semicolon headline transcoder and derived backend"""

import os
import sys
import unittest
from textwrap import dedent

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

import orgtext as ot
from orgtext import plaintext, semicolon
from orgtext.export import ExportDriver, build_info
from orgtext.config import ExportConfig

DOC = dedent(
    """\
    #+OPTIONS: H:1
    * Top
    Some text.
    ** Child
    Child text.
    """
)

DOC_WITH_TASK = dedent(
    """\
    * Parent
    Before.
    *************** TODO Fix this
    Task body.
    *************** END
    After.
    """
)


class TestDerivedBackend(unittest.TestCase):
    def test_only_headline_handlers_replaced(self):
        backend = semicolon.BACKEND
        self.assertIs(backend['headline'], semicolon.transcode_headline)
        self.assertIs(backend['inlinetask'], semicolon.transcode_inlinetask)
        for kind, fn in plaintext.BACKEND.items():
            if kind in ('headline', 'inlinetask'):
                continue
            self.assertIs(backend[kind], fn)

    def test_parent_backend_is_not_modified(self):
        self.assertIs(plaintext.BACKEND['headline'], plaintext.headline)
        self.assertIs(plaintext.BACKEND['inlinetask'], plaintext.inlinetask)

    def test_derive_backend_copies(self):
        parent = {'a': len, 'b': str}
        child = ot.derive_backend(parent, {'b': repr})
        self.assertIs(child['a'], len)
        self.assertIs(child['b'], repr)
        self.assertIs(parent['b'], str)


class TestTranscodeHeadline(unittest.TestCase):
    def test_semicolon_export_layout(self):
        out = ot.export_string_to_target(DOC, comment=False)
        self.assertEqual(out, "Top\n═══\n\n  Some text.\n\n◊ ***** Child\n    Child text.\n")

    def test_base_export_keeps_regular_titles(self):
        out = ot.export_string(DOC, with_toc=False, with_numbering=False)
        self.assertIn("◊ Child", out)
        self.assertNotIn("*****", out)

    def test_base_export_after_semicolon_export(self):
        ot.export_string_to_target(DOC, comment=False)
        out = ot.export_string(DOC, with_toc=False)
        self.assertIn("1 Top\n═════", out)
        self.assertIn("◊ 1.1 Child", out)

    def test_inline_task_title_goes_through_transcoder(self):
        out = ot.export_string_to_target(DOC_WITH_TASK, comment=False)
        self.assertNotIn('Fix this', out)
        self.assertIn('Task body.', out)
        base = ot.export_string(DOC_WITH_TASK, with_toc=False)
        self.assertIn('TODO Fix this', base)

    def test_ascii_target(self):
        out = ot.export_string_to_target(DOC, target='semicolon-ascii', comment=False)
        self.assertIn("Top\n===", out)
        self.assertIn("* ***** Child", out)

    def test_unknown_target(self):
        with self.assertRaises(ValueError):
            ot.export_string_to_target(DOC, target='semicolon-latin1')


class TestTitleStrategyInjection(unittest.TestCase):
    def _info(self, text):
        doc = ot.parse_org_string(text)
        return doc, build_info(doc, ExportConfig(with_toc=False))

    def test_nested_renders_each_use_their_strategy(self):
        seen = []

        def recording_builder(element, info, text_width, **kwargs):
            seen.append(element.title)
            return f"<{element.title}>"

        backend = ot.derive_backend(
            plaintext.BACKEND,
            {
                'headline': lambda el, contents, info: plaintext.headline(
                    el, contents, info, title_builder=recording_builder
                ),
                'inlinetask': lambda el, contents, info: plaintext.inlinetask(
                    el, contents, info, title_builder=recording_builder
                ),
            },
        )
        doc, info = self._info(DOC_WITH_TASK)
        out = ExportDriver(backend, info).render_document(doc)
        self.assertEqual(sorted(seen), ['Fix this', 'Parent'])
        self.assertIn('<Parent>', out)
        self.assertIn('<Fix this>', out)

    def test_error_in_title_strategy_propagates(self):
        def failing_builder(element, info, text_width, **kwargs):
            raise RuntimeError('title failed')

        backend = ot.derive_backend(
            plaintext.BACKEND,
            {'headline': lambda el, contents, info: plaintext.headline(el, contents, info, title_builder=failing_builder)},
        )
        doc, info = self._info(DOC)
        with self.assertRaises(RuntimeError):
            ExportDriver(backend, info).render_document(doc)
        # The shared backends are untouched after the failure
        out = ot.export_string_to_target(DOC, comment=False)
        self.assertIn('◊ ***** Child', out)

    def test_info_is_read_only(self):
        doc, info = self._info(DOC)
        with self.assertRaises(TypeError):
            info['semicolons'] = False


if __name__ == '__main__':
    unittest.main()
