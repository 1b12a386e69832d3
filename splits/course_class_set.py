"""The set of classes currently selected for comparison, and statistics across them."""

import logging
from typing import Sequence

from splits.course_class import CourseClass
from splits.errors import InvalidData
from splits.models import FastestSplit
from splits.result import Result, result_sort_key
from splits.times import INVALID, Time, is_valid_time

logger = logging.getLogger(__name__)

# Split times assumed where nobody has recorded a time to a control.
DEFAULT_CONTROL_SPLIT = 180
DEFAULT_FINISH_SPLIT = 60


def merge_results(classes: Sequence[CourseClass]) -> list[Result]:
    """Merge the results of some classes, leaving out non-starters.

    Raises:
        InvalidData: If the classes do not all have the same number of controls.
    """
    if not classes:
        return []

    expected_control_count = classes[0].num_controls
    all_results = []
    for course_class in classes:
        if course_class.num_controls != expected_control_count:
            raise InvalidData(
                f"Cannot merge classes with {expected_control_count} and "
                f"{course_class.num_controls} controls"
            )
        all_results.extend(result for result in course_class.results if not result.is_non_starter)

    all_results.sort(key=result_sort_key)
    return all_results


def get_ranks(values: Sequence[Time]) -> list[int | None]:
    """Rank some times, fastest first.

    Equal times share a rank and the next distinct time takes the next rank,
    so the ranks are dense. Absent and invalid times have no rank.
    """
    distinct_values = sorted({value for value in values if is_valid_time(value)})
    rank_map = {value: rank for rank, value in enumerate(distinct_values, start=1)}
    return [rank_map[value] if is_valid_time(value) else None for value in values]


def get_blank_ranges(times: Sequence[Time], include_end: bool) -> list[dict[str, int]]:
    """Return the ranges either side of each run of absent or invalid times.

    Each range is a dict with the 'start' and 'end' indexes of the valid
    times either side of the run. A run that reaches the end of the times
    is only included if include_end is set, in which case its end index is
    one past the last time.
    """
    blank_ranges = []
    start_index = 1
    while start_index + 1 < len(times):
        if is_valid_time(times[start_index]):
            start_index += 1
            continue

        end_index = start_index
        while end_index + 1 < len(times) and not is_valid_time(times[end_index + 1]):
            end_index += 1

        if end_index + 1 < len(times) or include_end:
            blank_ranges.append({"start": start_index - 1, "end": end_index + 1})

        start_index = end_index + 1

    return blank_ranges


def fill_blank_ranges_in_cumulative_times(cum_times: Sequence[Time]) -> list[Time]:
    """Fill in runs of absent or invalid cumulative times.

    Runs between two valid times are filled by linear interpolation. Invalid
    times at the end are filled using the default split times. Absent times
    at the end are left alone, as are invalid times that follow an absent
    one.
    """
    cum_times = list(cum_times)
    for blank_range in get_blank_ranges(cum_times, include_end=False):
        time_before = cum_times[blank_range["start"]]
        time_after = cum_times[blank_range["end"]]
        time_per_control = (time_after - time_before) / (blank_range["end"] - blank_range["start"])
        for index in range(blank_range["start"] + 1, blank_range["end"]):
            cum_times[index] = time_before + (index - blank_range["start"]) * time_per_control

    last_invalid_index = len(cum_times)
    while last_invalid_index > 0 and cum_times[last_invalid_index - 1] is INVALID:
        last_invalid_index -= 1

    if 0 < last_invalid_index < len(cum_times) and is_valid_time(cum_times[last_invalid_index - 1]):
        for index in range(last_invalid_index, len(cum_times)):
            default_split = DEFAULT_FINISH_SPLIT if index == len(cum_times) - 1 else DEFAULT_CONTROL_SPLIT
            cum_times[index] = cum_times[index - 1] + default_split

    return cum_times


class CourseClassSet:
    """The classes currently selected for comparison.

    All classes in the set must have the same number of controls. Creating
    a set computes the split and cumulative ranks of every result in it.
    """

    def __init__(self, classes: list[CourseClass]):
        self.classes = classes
        self.all_results = merge_results(classes)
        self.num_controls = classes[0].num_controls if classes else None
        self.compute_ranks()

    def __repr__(self) -> str:
        return f"CourseClassSet(classes={[cls.name for cls in self.classes]!r}, results={len(self.all_results)})"

    def is_empty(self) -> bool:
        return len(self.all_results) == 0

    def get_course(self):
        """Return the course of the classes, or None if there are no classes."""
        return self.classes[0].course if self.classes else None

    def get_primary_class_name(self) -> str | None:
        return self.classes[0].name if self.classes else None

    def get_num_classes(self) -> int:
        return len(self.classes)

    def has_dubious_data(self) -> bool:
        return any(course_class.has_dubious_data for course_class in self.classes)

    def has_team_data(self) -> bool:
        """Return True if every class in the set is a team class."""
        return len(self.classes) > 0 and all(course_class.is_team_class for course_class in self.classes)

    def get_leg_count(self) -> int | None:
        """Return the number of relay legs, or None if there are none or the classes disagree."""
        leg_count = None
        for course_class in self.classes:
            if not course_class.is_team_class:
                return None
            this_leg_count = len(course_class.numbers_of_controls)
            if leg_count is None:
                leg_count = this_leg_count
            elif leg_count != this_leg_count:
                return None

        return leg_count

    def get_winner_cum_times(self) -> list[Time] | None:
        """Return the cumulative times of the winner, or None if nobody completed the course."""
        if not self.all_results:
            return None

        winner = self.all_results[0]
        return fill_blank_ranges_in_cumulative_times(winner.cum_times) if winner.completed() else None

    def get_fastest_cum_times(self) -> list[Time] | None:
        """Return the cumulative times of an imaginary result with the fastest split to every control."""
        return self.get_fastest_cum_times_plus_percentage(0)

    def get_fastest_cum_times_plus_percentage(self, percent: int | float) -> list[Time] | None:
        """Return the fastest cumulative times, slowed down by a percentage.

        Where nobody has a valid split to a control, the gap is filled using
        the smallest run of missing times in any result that covers it. Any
        gaps remaining after that are filled with default split times.

        Returns:
            The cumulative times, or None if there are no classes.
        """
        if self.num_controls is None:
            return None

        ratio = 1 + percent / 100

        fastest_splits: list[Time] = [0]
        for control_index in range(1, self.num_controls + 2):
            fastest = None
            for result in self.all_results:
                split = result.get_split_time_to(control_index)
                if is_valid_time(split) and (fastest is None or split < fastest):
                    fastest = split
            fastest_splits.append(fastest)

        if None in fastest_splits:
            self._fill_fastest_splits_from_results(fastest_splits)

        if None in fastest_splits:
            for index, split in enumerate(fastest_splits):
                if split is None:
                    fastest_splits[index] = (
                        DEFAULT_FINISH_SPLIT if index == len(fastest_splits) - 1 else DEFAULT_CONTROL_SPLIT
                    )

        fastest_cum_times = [0]
        for split in fastest_splits[1:]:
            fastest_cum_times.append(fastest_cum_times[-1] + split * ratio)

        return fastest_cum_times

    def _fill_fastest_splits_from_results(self, fastest_splits: list[Time]) -> None:
        result_blank_ranges = []
        for result in self.all_results:
            for blank_range in get_blank_ranges(result.get_all_cumulative_times(), include_end=False):
                result_blank_ranges.append({
                    "start": blank_range["start"],
                    "end": blank_range["end"],
                    "size": blank_range["end"] - blank_range["start"],
                    "overall_split": (
                        result.get_cumulative_time_to(blank_range["end"])
                        - result.get_cumulative_time_to(blank_range["start"])
                    ),
                })

        for fastest_range in get_blank_ranges(fastest_splits, include_end=True):
            min_size = None
            min_overall_split = None
            for covering_range in result_blank_ranges:
                if not (
                    covering_range["start"] <= fastest_range["start"]
                    and fastest_range["end"] <= covering_range["end"] + 1
                ):
                    continue
                if min_size is None or covering_range["size"] < min_size:
                    min_size = covering_range["size"]
                    min_overall_split = None
                if min_overall_split is None or covering_range["overall_split"] < min_overall_split:
                    min_overall_split = covering_range["overall_split"]

            if min_size is not None and min_overall_split is not None:
                for index in range(fastest_range["start"] + 1, fastest_range["end"]):
                    fastest_splits[index] = min_overall_split / min_size

    def get_cumulative_times_for_result(self, result_index: int) -> list[Time]:
        """Return the cumulative times of a result in the set, with gaps filled in."""
        return fill_blank_ranges_in_cumulative_times(self.all_results[result_index].get_all_cumulative_times())

    def compute_ranks(self) -> None:
        """Compute the split and cumulative ranks of every result in the set.

        Once a result has an absent cumulative time, it has no cumulative
        rank at any later control, unless it is OK despite missing times.
        Invalid times have no rank but do not stop later cumulative ranks.
        """
        if not self.all_results:
            return

        split_ranks_by_result: list[list[int | None]] = [[None] for _ in self.all_results]
        cum_ranks_by_result: list[list[int | None]] = [[None] for _ in self.all_results]
        blocked = [False] * len(self.all_results)

        for control_index in range(1, self.num_controls + 2):
            splits = [result.get_split_time_to(control_index) for result in self.all_results]
            for ranks, rank in zip(split_ranks_by_result, get_ranks(splits)):
                ranks.append(rank)

            cum_times: list[Time] = []
            for index, result in enumerate(self.all_results):
                if blocked[index]:
                    cum_times.append(None)
                    continue
                cum_time = result.get_cumulative_time_to(control_index)
                if cum_time is None and not result.is_ok_despite_missing_times:
                    blocked[index] = True
                cum_times.append(cum_time)
            for ranks, rank in zip(cum_ranks_by_result, get_ranks(cum_times)):
                ranks.append(rank)

        for result, split_ranks, cum_ranks in zip(self.all_results, split_ranks_by_result, cum_ranks_by_result):
            result.set_split_and_cumulative_ranks(split_ranks, cum_ranks)

        logger.debug("Computed ranks for %d results over %d controls", len(self.all_results), self.num_controls)

    def get_fastest_splits_to(
        self, num_splits: int, control_index: int, selected_leg_index: int | None = None
    ) -> list[FastestSplit]:
        """Return the fastest few splits to a control, fastest first.

        Only results that completed the course count. Fewer splits than asked
        for are returned if fewer results have a split to the control.

        Args:
            num_splits: Maximum number of splits to return
            control_index: Index of the control, 1 to the finish inclusive
            selected_leg_index: For team data, the leg whose runner is named

        Raises:
            InvalidData: If num_splits is not positive or the control index
                is out of range.
        """
        if not isinstance(num_splits, int) or num_splits <= 0:
            raise InvalidData("The number of splits must be a positive integer")
        if (
            self.num_controls is None
            or not isinstance(control_index, int)
            or not 0 < control_index <= self.num_controls + 1
        ):
            raise InvalidData(f"Control {control_index} out of range")

        results = [
            result
            for result in self.all_results
            if result.completed() and is_valid_time(result.get_split_time_to(control_index))
        ]
        results.sort(key=lambda result: (result.get_split_time_to(control_index), result.total_time))

        return [
            FastestSplit(
                name=result.get_owner_name_for_leg(selected_leg_index),
                split=result.get_split_time_to(control_index),
            )
            for result in results[:num_splits]
        ]

    def slice_for_leg_index(self, data: Sequence, leg_index: int | None) -> list:
        """Return the part of some per-control data that belongs to one relay leg.

        The slice covers the leg's start, its controls and its finish. Without
        team data or a leg index, a copy of all the data is returned.
        """
        if self.has_team_data() and leg_index is not None:
            num_controls = self.classes[0].numbers_of_controls[leg_index] + 2
            offset = self.classes[0].offsets[leg_index]
            return list(data[offset:offset + num_controls])
        return list(data)
