#!/usr/bin/env python3
"""Tests for export settings and #+OPTIONS parsing"""

import os
import sys
import unittest
import warnings

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from orgtext.config import (
    SEMICOLON_OVERRIDES,
    ExportConfig,
    config_from_meta,
    normalize_charset,
    parse_bool,
    parse_options_line,
)


class TestParsing(unittest.TestCase):
    def test_parse_bool(self):
        self.assertTrue(parse_bool('t'))
        self.assertFalse(parse_bool('nil'))
        self.assertIsNone(parse_bool('maybe'))
        self.assertIsNone(parse_bool(None))

    def test_options_line(self):
        self.assertEqual(
            parse_options_line('num:nil toc:2 H:4 tags:nil ^:{} date:t'),
            {'with_numbering': False, 'with_toc': 2, 'headline_levels': 4, 'with_tags': False},
        )

    def test_numeric_values_are_depths(self):
        self.assertEqual(
            parse_options_line('H:1 num:1 toc:1'),
            {'headline_levels': 1, 'with_numbering': 1, 'with_toc': 1},
        )
        self.assertEqual(parse_options_line('H:0 num:0 toc:0'), {'headline_levels': 0, 'with_numbering': 0, 'with_toc': 0})
        values = parse_options_line('num:1 toc:1')
        self.assertIs(type(values['with_numbering']), int)
        self.assertIs(type(values['with_toc']), int)

    def test_numeric_depth_does_not_warn(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            parse_options_line('H:1')
        self.assertEqual(caught, [])

    def test_boolean_field_accepts_digit(self):
        self.assertEqual(parse_options_line('author:0 title:1'), {'with_author': False, 'with_title': True})

    def test_unreadable_value_warns(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertEqual(parse_options_line('num:maybe H:t'), {})
        self.assertEqual(len(caught), 2)

    def test_charset_aliases(self):
        self.assertEqual(normalize_charset('UTF8'), 'utf-8')
        self.assertEqual(normalize_charset('us-ascii'), 'ascii')
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertEqual(normalize_charset('latin1'), 'utf-8')
        self.assertEqual(len(caught), 1)


class TestConfigFromMeta(unittest.TestCase):
    def test_defaults(self):
        cfg = config_from_meta({})
        self.assertEqual(cfg, ExportConfig())
        self.assertEqual(cfg.text_width, 72)
        self.assertEqual(cfg.headline_levels, 3)
        self.assertEqual(cfg.comment_prefix, ';; ')

    def test_keywords(self):
        cfg = config_from_meta({'OPTIONS': 'num:nil', 'ASCII_CHARSET': 'ascii', 'ASCII_TEXT_WIDTH': '50'})
        self.assertEqual((cfg.with_numbering, cfg.charset, cfg.text_width), (False, 'ascii', 50))

    def test_overrides_win(self):
        cfg = config_from_meta({'OPTIONS': 'toc:t author:t'}, **SEMICOLON_OVERRIDES)
        self.assertFalse(cfg.with_toc)
        self.assertFalse(cfg.with_author)
        self.assertFalse(cfg.with_title)
        self.assertFalse(cfg.with_numbering)

    def test_depth_keyword(self):
        cfg = config_from_meta({'OPTIONS': 'H:1 num:1'})
        self.assertEqual(cfg.headline_levels, 1)
        self.assertEqual(cfg.with_numbering, 1)
        self.assertIsNot(cfg.with_numbering, True)

    def test_base_config_is_kept(self):
        base = ExportConfig(text_width=40)
        self.assertEqual(config_from_meta({}, base=base).text_width, 40)

    def test_config_is_frozen(self):
        cfg = ExportConfig()
        with self.assertRaises(AttributeError):
            cfg.charset = 'ascii'
        self.assertEqual(cfg.with_overrides(charset='ascii').charset, 'ascii')
        self.assertEqual(cfg.charset, 'utf-8')


if __name__ == '__main__':
    unittest.main()
