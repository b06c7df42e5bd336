#!/usr/bin/env python3
"""Tests for semicolon headline titles"""
import os
import sys
import unittest

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

import orgtext as ot
from orgtext.inline import export_inline
from orgtext.plaintext import UNDERLINE


def make_info(charset='utf-8', semicolons=True, numbers=None):
    numbers = numbers or {}
    return {
        'charset': charset,
        'underline': UNDERLINE,
        'semicolons': semicolons,
        'numbered_p': lambda el: id(el) in numbers,
        'headline_number': lambda el: numbers.get(id(el)),
        'relative_level': lambda el: el.level,
        'alt_title': lambda el: el.alt_title,
        'export_inline': lambda text: export_inline(text, charset),
    }


class TestSemicolonMarker(unittest.TestCase):
    def test_level_one_gets_four_stars(self):
        el = ot.OrgHeadline(level=1, title='Intro')
        self.assertEqual(ot.build_title(el, make_info(), 72), '**** Intro')

    def test_level_two_gets_five_stars(self):
        el = ot.OrgHeadline(level=2, title='Details')
        self.assertEqual(ot.build_title(el, make_info(), 72), '***** Details')

    def test_marker_tracks_relative_level(self):
        for level in range(1, 7):
            el = ot.OrgHeadline(level=level, title='X')
            title = ot.build_title(el, make_info(), 72)
            self.assertEqual(title, '*' * (level + 3) + ' X')

    def test_title_is_trimmed_and_rendered(self):
        el = ot.OrgHeadline(level=1, title='  =code= sample  ')
        self.assertEqual(ot.build_title(el, make_info(), 72), "**** `code' sample")

    def test_keyword_priority_and_tags_are_suppressed(self):
        el = ot.OrgHeadline(level=1, title='Ship it', todo='TODO', todo_type='todo', priority='A', tags=['work'])
        self.assertEqual(ot.build_title(el, make_info(), 72), '**** Ship it')
        self.assertEqual(ot.build_title(el, make_info(), 72, underline=True), 'Ship it\n═══════')


class TestNumbering(unittest.TestCase):
    def test_numbered_prefix(self):
        el = ot.OrgHeadline(level=2, title='Setup')
        info = make_info(numbers={id(el): [1, 2]})
        self.assertEqual(ot.build_title(el, info, 72), '***** 1.2. Setup')

    def test_numbered_prefix_is_underlined_too(self):
        el = ot.OrgHeadline(level=1, title='Setup')
        info = make_info(numbers={id(el): [3]})
        self.assertEqual(ot.build_title(el, info, 72, underline=True), '3. Setup\n════════')

    def test_unnumbered_headline_has_no_prefix(self):
        el = ot.OrgHeadline(level=1, title='Setup')
        self.assertEqual(ot.build_title(el, make_info(), 72), '**** Setup')

    def test_inline_task_never_reads_numbering(self):
        el = ot.OrgHeadline(level=15, title='Task', type_='inlinetask')
        info = make_info(numbers={id(el): [9]})
        info['headline_number'] = lambda e: self.fail('numbering read for an inline task')
        self.assertEqual(ot.build_title(el, info, 72), '')


class TestUnderline(unittest.TestCase):
    def test_underline_wins_over_semicolons(self):
        el = ot.OrgHeadline(level=1, title='Intro')
        title = ot.build_title(el, make_info(semicolons=True), 72, underline=True)
        self.assertEqual(title, 'Intro\n═════')
        self.assertNotIn('*', title)

    def test_underline_character_follows_depth(self):
        el = ot.OrgHeadline(level=2, title='Intro')
        self.assertEqual(ot.build_title(el, make_info(charset='ascii'), 72, underline=True), 'Intro\n~~~~~')

    def test_underline_width_counts_display_columns(self):
        el = ot.OrgHeadline(level=1, title='日本語')
        self.assertEqual(ot.build_title(el, make_info(), 72, underline=True), '日本語\n══════')

    def test_missing_underline_character_returns_plain_title(self):
        el = ot.OrgHeadline(level=4, title='Deep')
        self.assertEqual(ot.build_title(el, make_info(charset='ascii'), 72, underline=True), 'Deep')
        el = ot.OrgHeadline(level=6, title='Deeper')
        self.assertEqual(ot.build_title(el, make_info(charset='utf-8'), 72, underline=True), 'Deeper')


class TestEmptyResults(unittest.TestCase):
    def test_inline_task_is_empty(self):
        el = ot.OrgHeadline(level=15, title='Follow up', type_='inlinetask')
        for semicolons in (True, False):
            self.assertEqual(ot.build_title(el, make_info(semicolons=semicolons), 72), '')
            self.assertEqual(ot.build_title(el, make_info(semicolons=semicolons), 72, underline=True), '')

    def test_headline_without_underline_or_semicolons_is_empty(self):
        el = ot.OrgHeadline(level=1, title='Intro')
        self.assertEqual(ot.build_title(el, make_info(semicolons=False), 72), '')


class TestAltTitle(unittest.TestCase):
    def test_alt_title_used_for_toc_only(self):
        el = ot.OrgHeadline(level=1, title='A rather long title', properties={'ALT_TITLE': 'Short'})
        self.assertEqual(ot.build_title(el, make_info(), 72, toc=True), '**** Short')
        self.assertEqual(ot.build_title(el, make_info(), 72), '**** A rather long title')

    def test_toc_without_alt_title_uses_title(self):
        el = ot.OrgHeadline(level=1, title='Plain')
        self.assertEqual(ot.build_title(el, make_info(), 72, toc=True), '**** Plain')


if __name__ == '__main__':
    unittest.main()
