"""Tests for the set of selected classes and the statistics across them."""

import pytest

from tests.conftest import make_class, make_original_result, make_result

from splits.course import Course
from splits.course_class import CourseClass
from splits.course_class_set import (
    CourseClassSet,
    fill_blank_ranges_in_cumulative_times,
    get_blank_ranges,
    get_ranks,
    merge_results,
)
from splits.errors import InvalidData
from splits.times import INVALID


@pytest.fixture
def three_results():
    """Three results over three controls.

                 1    2    3    F
    Fred Brown  65  221  384  515
    John Smith  70   --  390  532
    Jane Doe    65  210  401  549
    """
    return [
        make_result(1, [0, 65, 221, 384, 515], name="Fred Brown"),
        make_result(2, [0, 70, None, 390, 532], name="John Smith"),
        make_result(3, [0, 65, 210, 401, 549], name="Jane Doe"),
    ]


class TestHelpers:
    def test_get_ranks_dense(self):
        assert get_ranks([65, 70, 65, 80]) == [1, 2, 1, 3]

    def test_get_ranks_absent_and_invalid(self):
        assert get_ranks([65, None, INVALID, 60]) == [2, None, None, 1]

    def test_blank_ranges(self):
        assert get_blank_ranges([0, 65, None, INVALID, 515], include_end=False) == [{"start": 1, "end": 4}]

    def test_blank_range_at_end(self):
        assert get_blank_ranges([0, 65, 221, None, None], include_end=False) == []
        assert get_blank_ranges([0, 65, 221, None, None], include_end=True) == [{"start": 2, "end": 5}]

    def test_fill_blank_ranges_interpolates(self):
        assert fill_blank_ranges_in_cumulative_times([0, 65, INVALID, INVALID, 515]) == [0, 65, 215, 365, 515]

    def test_fill_trailing_invalid_times(self):
        assert fill_blank_ranges_in_cumulative_times([0, 65, 221, INVALID, INVALID]) == [0, 65, 221, 401, 461]

    def test_fill_leaves_trailing_absent_times(self):
        assert fill_blank_ranges_in_cumulative_times([0, 65, 221, None, None]) == [0, 65, 221, None, None]

    def test_fill_leaves_invalid_times_after_absent_time(self):
        assert fill_blank_ranges_in_cumulative_times([0, 100, None, INVALID]) == [0, 100, None, INVALID]

    def test_merge_results_sorted_without_non_starters(self):
        non_starter = make_result(4, [0, None, None, None, None])
        non_starter.set_non_starter()
        slow = make_result(1, [0, 70, 200, 390, 600])
        fast = make_result(2, [0, 65, 221, 384, 515])
        merged = merge_results([make_class("M21", [slow, non_starter]), make_class("M35", [fast])])
        assert merged == [fast, slow]

    def test_merge_results_different_control_counts_rejected(self):
        with pytest.raises(InvalidData):
            merge_results([CourseClass("M21", 3, []), CourseClass("M35", 4, [])])


class TestCourseClassSet:
    def setup_method(self):
        self.fred = make_result(1, [0, 65, 221, 384, 515], name="Fred Brown")
        self.jane = make_result(1, [0, 65, 210, 401, 549], name="Jane Doe")
        self.class_a = CourseClass("M21", 3, [self.fred])
        self.class_b = CourseClass("W21", 3, [self.jane])
        course = Course("A", [self.class_a, self.class_b], 4.1, 140, ["235", "212", "189"])
        self.class_a.set_course(course)
        self.class_b.set_course(course)
        self.course = course
        self.class_set = CourseClassSet([self.class_a, self.class_b])

    def test_basics(self):
        assert not self.class_set.is_empty()
        assert self.class_set.get_course() is self.course
        assert self.class_set.get_primary_class_name() == "M21"
        assert self.class_set.get_num_classes() == 2

    def test_empty(self):
        class_set = CourseClassSet([])
        assert class_set.is_empty()
        assert class_set.get_course() is None
        assert class_set.get_primary_class_name() is None
        assert class_set.get_winner_cum_times() is None
        assert class_set.get_fastest_cum_times() is None

    def test_dubious_data(self):
        assert not self.class_set.has_dubious_data()
        self.class_b.record_has_dubious_data()
        assert self.class_set.has_dubious_data()

    def test_no_team_data(self):
        assert not self.class_set.has_team_data()
        assert self.class_set.get_leg_count() is None

    def test_winner_cum_times(self):
        assert self.class_set.get_winner_cum_times() == [0, 65, 221, 384, 515]

    def test_winner_not_completed(self):
        result = make_result(1, [0, 65, None, 384, 515])
        assert CourseClassSet([make_class("M21", [result])]).get_winner_cum_times() is None

    def test_fastest_cum_times(self):
        # Fastest splits: 65, 145 (Jane), 163 (Fred), 131 (Fred)
        assert self.class_set.get_fastest_cum_times() == [0, 65, 210, 373, 504]

    def test_fastest_cum_times_plus_percentage(self):
        result = make_result(1, [0, 100, 300])
        class_set = CourseClassSet([make_class("M21", [result])])
        assert class_set.get_fastest_cum_times_plus_percentage(10) == pytest.approx([0, 110, 330])

    def test_fastest_cum_times_gap_filled_from_results(self):
        results = [make_result(1, [0, 65, None, 384, 515]), make_result(2, [0, 70, None, 390, 532])]
        class_set = CourseClassSet([make_class("M21", results)])
        assert class_set.get_fastest_cum_times() == [0, 65, 224.5, 384, 515]

    def test_fastest_cum_times_default_split_to_finish(self):
        result = make_result(1, [0, 65, 221, 384, None])
        class_set = CourseClassSet([make_class("M21", [result])])
        assert class_set.get_fastest_cum_times() == [0, 65, 221, 384, 444]

    def test_cumulative_times_for_result(self):
        result = make_original_result(1, [0, 65, 221, 384, 515])
        result.set_repaired_cumulative_times([0, 65, INVALID, INVALID, 515])
        class_set = CourseClassSet([make_class("M21", [result])])
        assert class_set.get_cumulative_times_for_result(0) == [0, 65, 215, 365, 515]

    def test_cumulative_times_for_result_with_absent_then_invalid(self):
        result = make_original_result(1, [0, 100, 200, 300])
        result.set_repaired_cumulative_times([0, 100, None, INVALID])
        class_set = CourseClassSet([CourseClass("M21", 2, [result])])
        assert class_set.get_cumulative_times_for_result(0) == [0, 100, None, INVALID]


class TestRanks:
    def test_split_ranks_dense(self, three_results):
        CourseClassSet([make_class("M21", three_results)])
        fred, john, jane = three_results
        assert fred.get_split_rank_to(1) == 1
        assert jane.get_split_rank_to(1) == 1
        assert john.get_split_rank_to(1) == 2

    def test_start_has_no_rank(self, three_results):
        CourseClassSet([make_class("M21", three_results)])
        assert three_results[0].split_ranks[0] is None
        assert three_results[0].cum_ranks[0] is None

    def test_cumulative_ranks(self, three_results):
        CourseClassSet([make_class("M21", three_results)])
        fred, john, jane = three_results
        assert jane.get_cumulative_rank_to(2) == 1
        assert fred.get_cumulative_rank_to(2) == 2
        assert fred.get_cumulative_rank_to(3) == 1
        assert jane.get_cumulative_rank_to(3) == 2

    def test_missing_time_blocks_later_cumulative_ranks(self, three_results):
        CourseClassSet([make_class("M21", three_results)])
        john = three_results[1]
        assert john.get_cumulative_rank_to(2) is None
        assert john.get_cumulative_rank_to(3) is None
        assert john.get_cumulative_rank_to(4) is None
        # Split ranks are not blocked.
        assert john.get_split_rank_to(4) is not None

    def test_invalid_time_does_not_block(self):
        repaired = make_original_result(1, [0, 60, 200, 300, 400])
        repaired.set_repaired_cumulative_times([0, 60, INVALID, 300, 400])
        other = make_result(2, [0, 70, 210, 310, 410])
        CourseClassSet([make_class("M21", [repaired, other])])
        assert repaired.get_cumulative_rank_to(2) is None
        assert repaired.get_cumulative_rank_to(3) == 1
        assert other.get_cumulative_rank_to(3) == 2

    def test_ok_despite_missing_times_not_blocked(self):
        ok_result = make_result(1, [0, 60, None, 300, 400])
        ok_result.set_ok_despite_missing_times()
        other = make_result(2, [0, 70, 210, 310, 410])
        CourseClassSet([make_class("M21", [ok_result, other])])
        assert ok_result.get_cumulative_rank_to(2) is None
        assert ok_result.get_cumulative_rank_to(3) == 1

    def test_ranks_across_classes(self):
        fred = make_result(1, [0, 65, 221], name="Fred Brown")
        jane = make_result(1, [0, 60, 230], name="Jane Doe")
        CourseClassSet([make_class("M21", [fred]), make_class("W21", [jane])])
        assert jane.get_split_rank_to(1) == 1
        assert fred.get_split_rank_to(1) == 2


class TestFastestSplitsTo:
    def setup_method(self):
        self.results = [
            make_result(1, [0, 65, 221, 384, 515], name="Fred Brown"),
            make_result(2, [0, 70, None, 390, 532], name="John Smith"),
            make_result(3, [0, 65, 210, 401, 549], name="Jane Doe"),
            make_result(4, [0, 90, 250, 420, 560], name="Jim Jones"),
        ]
        self.class_set = CourseClassSet([make_class("M21", self.results)])

    def test_fastest_splits(self):
        fastest = self.class_set.get_fastest_splits_to(2, 1)
        assert [(f.name, f.split) for f in fastest] == [("Fred Brown", 65), ("Jane Doe", 65)]

    def test_only_completed_results(self):
        fastest = self.class_set.get_fastest_splits_to(5, 1)
        assert [f.name for f in fastest] == ["Fred Brown", "Jane Doe", "Jim Jones"]

    @pytest.mark.parametrize("num_splits", [0, -1, 1.5])
    def test_bad_number_of_splits(self, num_splits):
        with pytest.raises(InvalidData):
            self.class_set.get_fastest_splits_to(num_splits, 1)

    @pytest.mark.parametrize("control_index", [0, 5])
    def test_control_out_of_range(self, control_index):
        with pytest.raises(InvalidData):
            self.class_set.get_fastest_splits_to(3, control_index)


class TestTeamData:
    def setup_method(self):
        result = make_result(1, [0, 60, 120, 180, 240, 300, 360, 420])
        self.course_class = CourseClass("Relay", 6, [result])
        self.course_class.set_is_team_class([3, 2])
        self.class_set = CourseClassSet([self.course_class])

    def test_has_team_data(self):
        assert self.class_set.has_team_data()
        assert self.class_set.get_leg_count() == 2

    def test_slice_for_leg(self):
        data = [0, 60, 120, 180, 240, 300, 360, 420]
        assert self.class_set.slice_for_leg_index(data, 0) == [0, 60, 120, 180, 240]
        assert self.class_set.slice_for_leg_index(data, 1) == [240, 300, 360, 420]

    def test_slice_without_leg(self):
        data = [0, 60, 120, 180, 240, 300, 360, 420]
        sliced = self.class_set.slice_for_leg_index(data, None)
        assert sliced == data
        assert sliced is not data

    def test_inconsistent_leg_counts(self):
        other = CourseClass("Relay 2", 6, [])
        other.set_is_team_class([2, 2, 0])
        assert CourseClassSet([self.course_class, other]).get_leg_count() is None
