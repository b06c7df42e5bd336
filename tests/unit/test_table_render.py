#!/usr/bin/env python3
"""Tests for plain-text table rendering"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.join(os.path.dirname(__file__), '..', '..')
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from orgtext.inline import export_inline
from orgtext.table_render import render_table_block

TABLE = {
    'kind': 'table',
    'rows': [['Name', 'Qty'], ['a', '1'], ['b', '10']],
    'header_rows': 1,
    'separators': [1],
}


def render(block, charset='ascii'):
    return render_table_block(block, charset, lambda text: export_inline(text, charset))


class TestTableRender(unittest.TestCase):
    def test_ascii_alignment(self):
        self.assertEqual(
            render(TABLE).split('\n'),
            [
                '| Name | Qty |',
                '|------+-----|',
                '| a    |   1 |',
                '| b    |  10 |',
            ],
        )

    def test_utf8_rules(self):
        lines = render(TABLE, 'utf-8').split('\n')
        self.assertEqual(lines[0], '│ Name │ Qty │')
        self.assertEqual(lines[1], '├──────┼─────┤')

    def test_rules_only_at_separators(self):
        block = {'rows': [['x'], ['y']], 'header_rows': 0, 'separators': []}
        self.assertEqual(render(block), '| x |\n| y |')

    def test_ragged_rows_padded(self):
        block = {'rows': [['a', 'b'], ['c']], 'header_rows': 0, 'separators': []}
        self.assertEqual(render(block), '| a | b |\n| c |   |')

    def test_trailing_empty_rows_after_closing_rule_dropped(self):
        block = {'rows': [['x'], ['y'], ['']], 'header_rows': 0, 'separators': [2]}
        self.assertEqual(render(block), '| x |\n| y |\n|---|')

    def test_wide_characters(self):
        block = {'rows': [['日本'], ['ab']], 'header_rows': 0, 'separators': []}
        self.assertEqual(render(block, 'utf-8'), '│ 日本 │\n│ ab   │')

    def test_cell_markup_rendered(self):
        block = {'rows': [['=x=']], 'header_rows': 0, 'separators': []}
        self.assertEqual(render(block), "| `x' |")

    def test_empty(self):
        self.assertEqual(render({'rows': []}), '')


if __name__ == '__main__':
    unittest.main()
