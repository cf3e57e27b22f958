from __future__ import annotations

import unittest

from contracts.ocr import PixelBox
from fusion.geometry import horizontal_overlap, iou, reading_order_key, union_box, vertical_overlap
from fusion.text import cjk_ratio, join_inline, merge_confidence, needs_space


class TestGeometry(unittest.TestCase):
    def test_iou_identity_and_disjoint(self) -> None:
        a = PixelBox(x=10, y=10, w=50, h=12)
        self.assertEqual(iou(a, a), 1.0)
        self.assertEqual(iou(a, PixelBox(x=200, y=10, w=50, h=12)), 0.0)

    def test_iou_symmetric_and_bounded(self) -> None:
        a = PixelBox(x=10, y=10, w=50, h=12)
        b = PixelBox(x=30, y=14, w=80, h=20)
        self.assertAlmostEqual(iou(a, b), iou(b, a))
        self.assertGreater(iou(a, b), 0.0)
        self.assertLess(iou(a, b), 1.0)

    def test_touching_edges_do_not_overlap(self) -> None:
        a = PixelBox(x=0, y=0, w=10, h=10)
        b = PixelBox(x=10, y=0, w=10, h=10)
        self.assertEqual(iou(a, b), 0.0)
        self.assertEqual(horizontal_overlap(a, b), 0.0)
        self.assertEqual(vertical_overlap(a, b), 1.0)

    def test_directional_overlap_is_relative_to_smaller_box(self) -> None:
        big = PixelBox(x=0, y=0, w=100, h=20)
        small = PixelBox(x=10, y=5, w=40, h=10)
        self.assertEqual(horizontal_overlap(big, small), 1.0)
        self.assertEqual(vertical_overlap(big, small), 1.0)

    def test_zero_size_boxes_do_not_divide_by_zero(self) -> None:
        empty = PixelBox(x=5, y=5, w=0, h=0)
        self.assertEqual(iou(empty, empty), 0.0)
        self.assertEqual(horizontal_overlap(empty, PixelBox(x=0, y=0, w=10, h=10)), 0.0)

    def test_union_box_contains_both(self) -> None:
        a = PixelBox(x=10, y=10, w=30, h=20)
        b = PixelBox(x=42, y=8, w=20, h=20)
        u = union_box(a, b)
        self.assertTrue(u.contains(a))
        self.assertTrue(u.contains(b))
        self.assertEqual(u, PixelBox(x=10, y=8, w=52, h=22))

    def test_reading_order_key(self) -> None:
        boxes = [PixelBox(x=50, y=10, w=5, h=5), PixelBox(x=0, y=40, w=5, h=5), PixelBox(x=0, y=10, w=5, h=5)]
        ordered = sorted(boxes, key=reading_order_key)
        self.assertEqual([(b.x, b.y) for b in ordered], [(0, 10), (50, 10), (0, 40)])


class TestText(unittest.TestCase):
    def test_needs_space(self) -> None:
        self.assertTrue(needs_space("Hello", "world"))
        self.assertTrue(needs_space("abc  ", "  1"))
        self.assertTrue(needs_space("cat", "dog"))
        self.assertFalse(needs_space("cat-", "dog"))
        self.assertFalse(needs_space("Hello,", "world"))
        self.assertFalse(needs_space("(", "x"))
        self.assertFalse(needs_space("", "x"))

    def test_join_inline(self) -> None:
        self.assertEqual(join_inline("Hello ", " world"), "Hello world")
        self.assertEqual(join_inline("Total:", "42"), "Total:42")
        self.assertEqual(join_inline("Hel", "lo", separated=False), "Hello")

    def test_merge_confidence_is_length_weighted(self) -> None:
        self.assertEqual(merge_confidence(64.5, 7, 64.5, 7), 64.5)
        self.assertEqual(merge_confidence(80.0, 5, 60.0, 5), 70.0)
        self.assertEqual(merge_confidence(90.0, 3, 80.0, 2), 86.0)
        self.assertEqual(merge_confidence(50.0, 0, 70.0, 0), 0.0)

    def test_cjk_ratio(self) -> None:
        self.assertEqual(cjk_ratio("日本語"), 1.0)
        self.assertEqual(cjk_ratio("ab 日本"), 0.5)
        self.assertEqual(cjk_ratio("   "), 0.0)


if __name__ == "__main__":
    unittest.main()
