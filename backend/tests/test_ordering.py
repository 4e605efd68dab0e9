"""
Snapbook Backend - Memory Ordering Tests
=========================================

Pure tests of the ordering rules on plain objects (no database).
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from app.services import ordering

T0 = datetime(2024, 2, 14, 12, 0, tzinfo=timezone.utc)


@dataclass
class Item:
    name: str
    sort_order: int
    created_at: datetime = field(default=T0)


def names(items):
    return [i.name for i in items]


class TestNextSortOrder:

    def test_empty_top(self):
        assert ordering.next_sort_order([], "top") == -1

    def test_empty_bottom(self):
        assert ordering.next_sort_order([], "bottom") == 1

    def test_top_below_minimum(self):
        assert ordering.next_sort_order([-3, 0, 4], "top") == -4

    def test_all_positive_top_is_minus_one(self):
        assert ordering.next_sort_order([1, 2, 3], "top") == -1

    def test_all_negative_bottom_is_one(self):
        assert ordering.next_sort_order([-5, -2], "bottom") == 1

    def test_bottom_above_maximum(self):
        assert ordering.next_sort_order([1, 7, 3], "bottom") == 8

    def test_unknown_position(self):
        with pytest.raises(ValueError):
            ordering.next_sort_order([1], "middle")


class TestDisplayOrder:

    def test_sorts_by_key_then_created_at(self):
        items = [
            Item("late-tie", 1, T0 + timedelta(seconds=5)),
            Item("first", -2),
            Item("early-tie", 1, T0),
        ]
        assert names(ordering.display_order(items)) == ["first", "early-tie", "late-tie"]

    def test_does_not_mutate_input(self):
        items = [Item("b", 2), Item("a", 1)]
        ordering.display_order(items)
        assert names(items) == ["b", "a"]


class TestMove:

    def setup_method(self):
        self.items = [Item("a", -3), Item("b", 0), Item("c", 5), Item("d", 9)]

    def test_move_down_swaps_and_renumbers(self):
        result = ordering.move(self.items, 1, "down")

        assert names(result) == ["a", "c", "b", "d"]
        assert [i.sort_order for i in result] == [1, 2, 3, 4]

    def test_move_up_swaps_and_renumbers(self):
        result = ordering.move(self.items, 3, "up")

        assert names(result) == ["a", "b", "d", "c"]
        assert [i.sort_order for i in result] == [1, 2, 3, 4]

    def test_first_up_is_noop(self):
        assert ordering.move(self.items, 0, "up") is None
        assert [i.sort_order for i in self.items] == [-3, 0, 5, 9]

    def test_last_down_is_noop(self):
        assert ordering.move(self.items, 3, "down") is None
        assert [i.sort_order for i in self.items] == [-3, 0, 5, 9]

    def test_result_matches_display_order(self):
        result = ordering.move(self.items, 2, "up")
        assert names(ordering.display_order(result)) == names(result)

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            ordering.move(self.items, 4, "up")

    def test_unknown_direction(self):
        with pytest.raises(ValueError):
            ordering.move(self.items, 1, "sideways")

    def test_single_item_cannot_move(self):
        only = [Item("solo", 7)]
        assert ordering.move(only, 0, "up") is None
        assert ordering.move(only, 0, "down") is None
        assert only[0].sort_order == 7
