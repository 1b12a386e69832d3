"""The results of a single competitor or team."""

from functools import cmp_to_key
from statistics import median
from typing import Sequence

from splits.errors import InvalidData
from splits.models import Competitor, Team
from splits.times import INVALID, Time, add_times, format_time, is_invalid_time, is_valid_time, subtract_times

Owner = Competitor | Team


def splits_from_cumulative(cum_times: Sequence[Time]) -> list[Time]:
    """Convert an array of cumulative times into an array of split times.

    The cumulative times must start with a zero for the start. If a
    cumulative time is absent or invalid, the splits to and from that control
    are too.

    Raises:
        InvalidData: If the array is empty, does not start with zero, or
            contains only the zero.
    """
    if len(cum_times) == 0:
        raise InvalidData("Array of cumulative times must not be empty")
    if cum_times[0] != 0 or not is_valid_time(cum_times[0]):
        raise InvalidData("Array of cumulative times must have zero as its first item")
    if len(cum_times) == 1:
        raise InvalidData("Array of cumulative times must contain more than just a single zero")

    return [subtract_times(cum_times[i + 1], cum_times[i]) for i in range(len(cum_times) - 1)]


def cumulative_from_splits(split_times: Sequence[Time]) -> list[Time]:
    """Convert an array of split times into an array of cumulative times.

    The returned array starts with a zero for the start. Once a split is
    absent, every cumulative time after it is absent too.
    """
    cum_times: list[Time] = [0]
    for split_time in split_times:
        cum_times.append(add_times(cum_times[-1], split_time))
    return cum_times


def _sort_key(result: "Result") -> tuple:
    has_time = is_valid_time(result.total_time)
    return (
        result.is_disqualified,
        not has_time,
        result.total_time if has_time else 0,
        result.order,
    )


def compare_results(a: "Result", b: "Result") -> int:
    """Compare two results for sorting.

    Disqualified results sort after all others. Otherwise results are sorted
    by total time, with results that have no total time at the end, and the
    order in which the results were read breaks any ties.

    Returns:
        A negative number if a comes first, a positive number if b comes
        first, zero if the order makes no difference.
    """
    key_a = _sort_key(a)
    key_b = _sort_key(b)
    return (key_a > key_b) - (key_a < key_b)


result_sort_key = cmp_to_key(compare_results)


class Result:
    """The result of a competitor or team on a course.

    A result holds two versions of its times. The 'original' times are
    exactly as read and are never changed afterwards. The 'repaired' times
    (split_times and cum_times) start out the same as the original ones and
    are replaced if a repair step decides some of the original times are
    wrong.

    Results are normally created with one of the factory methods
    from_original_cum_times or from_cum_times rather than directly.

    The order is the position of the result within the data it was read
    from, and is used only to make sorting deterministic. It is not
    necessarily the finishing order.
    """

    def __init__(
        self,
        order: int,
        start_time: int | float | None,
        original_split_times: list[Time],
        original_cum_times: list[Time],
        owner: Owner,
    ):
        if not isinstance(order, int) or isinstance(order, bool):
            raise InvalidData(
                f"Result order must be a number, got {type(order).__name__} '{order}' instead"
            )
        if start_time is not None and (
            not isinstance(start_time, (int, float)) or isinstance(start_time, bool)
        ):
            raise InvalidData(
                f"Start time must be a number, got {type(start_time).__name__} '{start_time}' instead"
            )

        self.order = order
        self.start_time = start_time
        self.owner = owner

        self.is_ok_despite_missing_times = False
        self.is_non_competitive = False
        self.is_non_starter = False
        self.is_non_finisher = False
        self.is_disqualified = False
        self.is_over_max_time = False

        self.original_split_times = original_split_times
        self.original_cum_times = original_cum_times
        self.split_times = list(original_split_times)
        self.cum_times = list(original_cum_times)
        self.split_ranks: list[int | None] | None = None
        self.cum_ranks: list[int | None] | None = None
        self.time_losses: list[Time] | None = None
        self.class_name: str | None = None
        self.offsets: list[int] | None = None

        # Set while the repaired times are only a copy of the original ones
        # that a repair step is still expected to look at.
        self._awaiting_repair = True
        self._has_repaired_times = False

        self.total_time = self._compute_total_time(original_cum_times)

    def __repr__(self) -> str:
        return f"Result(order={self.order}, owner={self.owner.name!r}, total_time={format_time(self.total_time)})"

    @classmethod
    def from_original_cum_times(
        cls, order: int, start_time: int | float | None, cum_times: list[Time], owner: Owner
    ) -> "Result":
        """Create a result from cumulative times exactly as they were read.

        The repaired times start out equal to these times, and may be
        replaced later by set_repaired_cumulative_times.

        Raises:
            InvalidData: If the cumulative times are empty, contain only a
                single value, or do not start with zero.
        """
        split_times = splits_from_cumulative(cum_times)
        return cls(order, start_time, split_times, list(cum_times), owner)

    @classmethod
    def from_cum_times(
        cls, order: int, start_time: int | float | None, cum_times: list[Time], owner: Owner
    ) -> "Result":
        """Create a result from cumulative times that need no repair."""
        result = cls.from_original_cum_times(order, start_time, cum_times, owner)
        result._awaiting_repair = False
        return result

    def _compute_total_time(self, cum_times: Sequence[Time]) -> Time:
        if self.is_ok_despite_missing_times or None not in cum_times:
            return cum_times[-1]
        return None

    def set_ok_despite_missing_times(self) -> None:
        """Record that this result is OK even though some times are missing.

        The total time is then taken from the finish time, even though some
        of the times before it are absent.
        """
        self.is_ok_despite_missing_times = True
        self.total_time = self.cum_times[-1]

    def set_non_competitive(self) -> None:
        self.is_non_competitive = True

    def set_non_starter(self) -> None:
        self.is_non_starter = True

    def set_non_finisher(self) -> None:
        self.is_non_finisher = True

    def disqualify(self) -> None:
        self.is_disqualified = True

    def set_over_max_time(self) -> None:
        self.is_over_max_time = True

    def set_class_name(self, class_name: str) -> None:
        self.class_name = class_name

    def set_offsets(self, offsets: list[int]) -> None:
        """Set the indexes at which each leg of a team result starts."""
        self.offsets = offsets

    def set_repaired_cumulative_times(self, cum_times: list[Time]) -> None:
        """Replace the repaired cumulative times, and the split times with them.

        Raises:
            InvalidData: If the number of times differs from the original
                number of times, or the times do not start with zero.
        """
        if len(cum_times) != len(self.original_cum_times):
            raise InvalidData(
                f"Cannot set {len(cum_times)} repaired cumulative times on a result "
                f"with {len(self.original_cum_times)} original times"
            )
        self.split_times = splits_from_cumulative(cum_times)
        self.cum_times = list(cum_times)
        self.total_time = self._compute_total_time(self.cum_times)
        self._awaiting_repair = False
        self._has_repaired_times = True

    def set_merged_cumulative_times(self, cum_times: list[Time], needs_repair: bool) -> None:
        """Set the repaired times of a team result from those of its legs.

        Unlike set_repaired_cumulative_times, this does not count as a repair:
        the team result still needs repair if any of its legs did.
        """
        self.split_times = splits_from_cumulative(cum_times)
        self.cum_times = list(cum_times)
        self._awaiting_repair = needs_repair

    def needs_repair(self) -> bool:
        """Return True if a repair step has yet to look at this result."""
        return self._awaiting_repair

    def completed(self) -> bool:
        """Return True if the result has a valid total time and counts."""
        return (
            is_valid_time(self.total_time)
            and not self.is_disqualified
            and not self.is_over_max_time
        )

    def has_any_times(self) -> bool:
        """Return True if any time other than the start was recorded."""
        return any(time is not None for time in self.original_cum_times[1:])

    def get_split_time_to(self, control_index: int) -> Time:
        """Return the split time to a control, with 0 being the start."""
        return 0 if control_index == 0 else self.split_times[control_index - 1]

    def get_original_split_time_to(self, control_index: int) -> Time:
        if self.is_non_starter:
            return None
        return 0 if control_index == 0 else self.original_split_times[control_index - 1]

    def is_split_time_dubious(self, control_index: int) -> bool:
        """Return True if the split time to a control was changed by a repair."""
        return (
            control_index > 0
            and self.original_split_times[control_index - 1] != self.split_times[control_index - 1]
        )

    def get_cumulative_time_to(self, control_index: int) -> Time:
        return self.cum_times[control_index]

    def get_original_cumulative_time_to(self, control_index: int) -> Time:
        return None if self.is_non_starter else self.original_cum_times[control_index]

    def is_cumulative_time_dubious(self, control_index: int) -> bool:
        return self.original_cum_times[control_index] != self.cum_times[control_index]

    def get_split_rank_to(self, control_index: int) -> int | None:
        return None if self.split_ranks is None else self.split_ranks[control_index]

    def get_cumulative_rank_to(self, control_index: int) -> int | None:
        return None if self.cum_ranks is None else self.cum_ranks[control_index]

    def get_time_loss_at(self, control_index: int) -> Time:
        if control_index == 0 or self.time_losses is None:
            return None
        return self.time_losses[control_index - 1]

    def get_all_cumulative_times(self) -> list[Time]:
        return self.cum_times

    def get_all_original_cumulative_times(self) -> list[Time]:
        return self.original_cum_times

    def get_all_split_times(self) -> list[Time]:
        return self.split_times

    def lacks_start_time(self) -> bool:
        """Return True if there are split times but no start time."""
        return self.start_time is None and any(t is not None for t in self.split_times)

    def set_split_and_cumulative_ranks(
        self, split_ranks: list[int | None], cum_ranks: list[int | None]
    ) -> None:
        """Set the split and cumulative ranks, which must both start with None."""
        if split_ranks[0] is not None or cum_ranks[0] is not None:
            raise InvalidData("Split and cumulative ranks arrays must both start with None")

        self.split_ranks = split_ranks
        self.cum_ranks = cum_ranks

    def _check_reference(self, reference_cum_times: Sequence[Time], action: str) -> None:
        if len(reference_cum_times) != len(self.cum_times):
            raise InvalidData(
                f"Cannot {action} because the numbers of times are different "
                f"({len(self.cum_times)} and {len(reference_cum_times)})"
            )
        if None in reference_cum_times:
            raise InvalidData(f"Cannot {action} because a missing value is in the reference data")

    def get_cum_times_adjusted_to_reference(self, reference_cum_times: Sequence[Time]) -> list[Time]:
        """Return the cumulative times minus those of a reference, e.g. the winner.

        Raises:
            InvalidData: If the reference has a different number of times,
                or is missing a time.
        """
        self._check_reference(reference_cum_times, "adjust cumulative times")
        return [
            subtract_times(time, reference)
            for time, reference in zip(self.cum_times, reference_cum_times)
        ]

    def get_cum_times_adjusted_to_reference_with_start_added(
        self, reference_cum_times: Sequence[Time], leg_index: int | None = None
    ) -> list[Time]:
        """Return the adjusted cumulative times with the start time added.

        For a team result, a leg index selects the leg whose start time is
        added, so that the times for that leg read as times of day.
        """
        adjusted_times = self.get_cum_times_adjusted_to_reference(reference_cum_times)
        if leg_index is None or leg_index == 0:
            start_time = self.start_time
        else:
            offset = self.offsets[leg_index]
            start_time = add_times(self.start_time, reference_cum_times[offset])
        return [add_times(adjusted_time, start_time) for adjusted_time in adjusted_times]

    def get_split_percents_behind_reference_cum_times(
        self, reference_cum_times: Sequence[Time]
    ) -> list[Time]:
        """Return how far behind a reference each split is, as a percentage.

        A zero reference split (e.g. a timed-out road crossing) repeats the
        previous percentage. A negative reference split gives no percentage.
        """
        self._check_reference(reference_cum_times, "determine percentages-behind")

        percents_behind: list[Time] = [0]
        for index, split_time in enumerate(self.split_times):
            reference_split = subtract_times(
                reference_cum_times[index + 1], reference_cum_times[index]
            )
            if split_time is None:
                percents_behind.append(None)
            elif split_time is INVALID or reference_split is INVALID:
                percents_behind.append(INVALID)
            elif reference_split > 0:
                percents_behind.append(100 * (split_time - reference_split) / reference_split)
            elif reference_split == 0:
                percents_behind.append(percents_behind[-1])
            else:
                percents_behind.append(None)

        return percents_behind

    def determine_time_losses(self, fastest_split_times: Sequence[Time]) -> None:
        """Estimate the time lost at each control, given the fastest splits.

        Each split is compared against the fastest split scaled by the
        median ratio of this result's splits to the fastest splits, so that
        only the time lost on top of the competitor's general pace counts.
        Controls with a zero fastest split are left out of the median.

        Only results that completed the course get time losses. If any time
        loss cannot be estimated they are all invalid.
        """
        if not self.completed():
            return

        if len(fastest_split_times) != len(self.split_times):
            raise InvalidData(
                f"Cannot determine time loss with {len(self.split_times)} split times "
                f"using {len(fastest_split_times)} fastest splits"
            )
        if INVALID in fastest_split_times:
            raise InvalidData("Cannot determine time loss when there is an invalid value in the fastest splits")

        if (
            self.is_ok_despite_missing_times
            or not all(is_valid_time(split) for split in self.split_times)
            or None in fastest_split_times
        ):
            self.time_losses = [INVALID] * len(self.split_times)
            return

        split_ratios = [
            split / fastest
            for split, fastest in zip(self.split_times, fastest_split_times)
            if fastest != 0
        ]
        if not split_ratios:
            self.time_losses = [INVALID] * len(self.split_times)
            return

        median_split_ratio = median(split_ratios)
        self.time_losses = [
            round(split - fastest * median_split_ratio)
            for split, fastest in zip(self.split_times, fastest_split_times)
        ]

    def crosses(self, other: "Result", selected_leg_index: int | None = None) -> bool:
        """Return True if this result and another one cross.

        Two results cross if, on the clock, each of them is ahead of the
        other at some control. For a team result, a leg index restricts the
        check to the controls of that leg.
        """
        if len(other.cum_times) != len(self.cum_times):
            raise InvalidData("Two results with different numbers of controls cannot cross")

        if selected_leg_index is None or self.offsets is None:
            start_index = 0
            end_index = len(self.cum_times)
        else:
            start_index = self.offsets[selected_leg_index]
            if selected_leg_index + 1 == len(self.offsets):
                end_index = len(self.cum_times)
            else:
                end_index = self.offsets[selected_leg_index + 1] + 1

        before_other = False
        after_other = False
        for control_index in range(start_index, end_index):
            this_time = add_times(self.start_time, self.cum_times[control_index])
            other_time = add_times(other.start_time, other.cum_times[control_index])
            if is_valid_time(this_time) and is_valid_time(other_time):
                if this_time < other_time:
                    before_other = True
                elif this_time > other_time:
                    after_other = True

        return before_other and after_other

    def is_time_omitted(self, time: Time) -> bool:
        """Return True if a time is invalid, or missing from an OK result."""
        return is_invalid_time(time) or (self.is_ok_despite_missing_times and time is None)

    def _get_indexes_around_omitted_times(self, times: Sequence[Time]) -> list[dict[str, int]]:
        omitted_time_info = []
        start_index = 1
        while start_index + 1 < len(times):
            if self.is_time_omitted(times[start_index]):
                end_index = start_index
                while end_index + 1 < len(times) and self.is_time_omitted(times[end_index + 1]):
                    end_index += 1

                if (
                    end_index + 1 < len(times)
                    and times[start_index - 1] is not None
                    and times[end_index + 1] is not None
                ):
                    omitted_time_info.append({"start": start_index - 1, "end": end_index + 1})

                start_index = end_index + 1
            else:
                start_index += 1

        return omitted_time_info

    def get_control_indexes_around_omitted_cumulative_times(self) -> list[dict[str, int]]:
        """Return the ranges of controls either side of runs of omitted cumulative times.

        Each range is a dict with 'start' and 'end' control indexes. Runs at
        the end, or next to an absent time, have no range.
        """
        return self._get_indexes_around_omitted_times(self.cum_times)

    def get_control_indexes_around_omitted_split_times(self) -> list[dict[str, int]]:
        return self._get_indexes_around_omitted_times([0] + self.split_times)

    def get_owner_name_for_leg(self, leg_index: int | None) -> str:
        """Return the name of the team member on a leg, or the owner's name."""
        if isinstance(self.owner, Team) and leg_index is not None:
            return self.owner.members[leg_index].name
        return self.owner.name

    def restrict_to_common_controls(
        self, original_controls: list[list[str]], common_controls: list[list[str]]
    ) -> None:
        """Restrict the original times of a team result to common controls only.

        Each leg keeps the times at that leg's common controls plus the time
        at which the leg finished. This replaces the original times, so it can
        only be used before any repaired times have been set.

        Args:
            original_controls: For each leg, the controls actually visited.
            common_controls: For each leg, the controls common to all teams.

        Raises:
            InvalidData: If the lists of controls do not fit the times.
        """
        if len(original_controls) != len(common_controls):
            raise InvalidData("Should have two equal-length arrays of common controls")
        if self._has_repaired_times:
            raise InvalidData("Cannot restrict a result to common controls after its times have been repaired")

        restricted_cum_times: list[Time] = [0]
        original_control_index = 1

        for leg_original_controls, leg_common_controls in zip(original_controls, common_controls):
            common_control_index = 0
            for control in leg_original_controls:
                if (
                    common_control_index < len(leg_common_controls)
                    and control == leg_common_controls[common_control_index]
                ):
                    if original_control_index >= len(self.original_cum_times):
                        raise InvalidData(
                            "Attempt to read too many original controls: likely that "
                            "the wrong list of controls has been passed"
                        )
                    restricted_cum_times.append(self.original_cum_times[original_control_index])
                    common_control_index += 1

                original_control_index += 1

            if common_control_index < len(leg_common_controls):
                raise InvalidData(
                    "Did not reach end of common controls: likely that they are not "
                    "a subset of the controls"
                )

            if original_control_index >= len(self.original_cum_times):
                raise InvalidData(
                    "Attempt to read too many original controls: likely that the "
                    "wrong list of controls has been passed"
                )

            # Finish time for this leg.
            restricted_cum_times.append(self.original_cum_times[original_control_index])
            original_control_index += 1

        if original_control_index < len(self.original_cum_times):
            raise InvalidData(
                "Did not reach end of original controls: likely that a wrong list "
                "of controls has been passed"
            )

        self.original_cum_times = restricted_cum_times
        self.original_split_times = splits_from_cumulative(restricted_cum_times)
        self.cum_times = list(self.original_cum_times)
        self.split_times = list(self.original_split_times)
        self.total_time = self._compute_total_time(self.cum_times)
