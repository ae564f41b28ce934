import unittest

from learnhub.services.ordering import next_order_index, reorder
from learnhub.utils.exceptions import ResourceNotFoundException
from learnhub.utils.numbers import rounded_percentage


class TestOrdering(unittest.TestCase):

    def test_next_order_index(self):
        self.assertEqual(next_order_index([]), 0)
        self.assertEqual(next_order_index([0, 1, 2]), 3)
        # Gaps are not filled
        self.assertEqual(next_order_index([0, 5]), 6)

    def test_reorder_moves_and_renumbers(self):
        positions = reorder(["a", "b", "c", "d"], "d", 1)
        self.assertEqual(positions, [("a", 0), ("d", 1), ("b", 2), ("c", 3)])

    def test_reorder_clamps_index(self):
        positions = reorder(["a", "b", "c"], "a", 99)
        self.assertEqual([sid for sid, _ in positions], ["b", "c", "a"])
        self.assertEqual([idx for _, idx in positions], [0, 1, 2])

    def test_reorder_unknown_sibling(self):
        with self.assertRaises(ResourceNotFoundException):
            reorder(["a", "b"], "zzz", 0)


class TestRoundedPercentage(unittest.TestCase):

    def test_rounding(self):
        self.assertEqual(rounded_percentage(2, 3), 67)
        self.assertEqual(rounded_percentage(1, 3), 33)
        self.assertEqual(rounded_percentage(1, 8), 13)  # 12.5 rounds up
        self.assertEqual(rounded_percentage(3, 3), 100)

    def test_empty_whole(self):
        self.assertEqual(rounded_percentage(0, 0), 0)


if __name__ == '__main__':
    unittest.main()
