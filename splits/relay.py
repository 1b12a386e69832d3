"""Aggregation of the results of the legs of a relay into one team result."""

from typing import Callable, Sequence

from splits.errors import InvalidData
from splits.models import Team
from splits.result import Result
from splits.times import Time, add_times, is_valid_time


def calculate_offsets(results: Sequence[Result]) -> list[Time]:
    """Calculate the time offset of each leg from the start of the first leg.

    Each leg starts when the previous one finished, if both the previous
    leg's offset and total time are known. Failing that, the difference
    between the leg's start time and the first leg's start time is used, if
    both are known. Otherwise the offset is absent.
    """
    offsets: list[Time] = [0]
    for index in range(len(results) - 1):
        last_offset = offsets[-1]
        result = results[index]
        next_result = results[index + 1]
        if is_valid_time(last_offset) and is_valid_time(result.total_time):
            offsets.append(last_offset + result.total_time)
        elif next_result.start_time is not None and results[0].start_time is not None:
            offsets.append(next_result.start_time - results[0].start_time)
        else:
            offsets.append(None)

    return offsets


def merge_cumulative_times(
    results: Sequence[Result],
    offsets: Sequence[Time],
    times_getter: Callable[[Result], list[Time]] = Result.get_all_original_cumulative_times,
) -> list[Time]:
    """Join the cumulative times of each leg into one series for the team.

    The leading zero of every leg is dropped and each leg's times are
    shifted by that leg's offset.
    """
    times: list[Time] = [0]
    for result, offset in zip(results, offsets):
        leg_times = times_getter(result)
        times.extend(add_times(offset, time) for time in leg_times[1:])

    return times


def determine_aggregate_status(team_result: Result, results: Sequence[Result]) -> None:
    """Set the status flags of a team result from the results of its legs.

    Disqualification of any leg disqualifies the team. A team where nobody
    started is a non-starter. A team that completed some legs and then had
    a non-finisher or non-starters is a non-finisher. Otherwise the team is
    over max time if any leg was, and non-competitive and/or OK despite
    missing times if any leg was.
    """
    if any(result.is_disqualified for result in results):
        team_result.disqualify()
        return

    if all(result.is_non_starter for result in results):
        team_result.set_non_starter()
        return

    # Index of the last leg of the initial run of OK legs, -1 if none.
    ok_index = -1
    while ok_index + 1 < len(results):
        next_result = results[ok_index + 1]
        if next_result.is_non_starter or next_result.is_non_finisher or not next_result.completed():
            break
        ok_index += 1

    # Index of the first leg of the final run of non-starters, or the
    # number of legs if there are none.
    dns_index = len(results)
    while dns_index > 0 and results[dns_index - 1].is_non_starter:
        dns_index -= 1

    if ok_index < len(results) - 1:
        if ok_index + 1 == dns_index:
            team_result.set_non_finisher()
            return

        if ok_index + 2 == dns_index and results[ok_index + 1].is_non_finisher:
            team_result.set_non_finisher()
            return

    if any(result.is_over_max_time for result in results):
        team_result.set_over_max_time()
        return

    if any(result.is_non_competitive for result in results):
        team_result.set_non_competitive()

    if any(result.is_ok_despite_missing_times for result in results):
        team_result.set_ok_despite_missing_times()


def create_team_result(order: int, results: Sequence[Result], owner: Team) -> Result:
    """Create a result for a relay team from the results of its legs.

    The members of the team are set from the owners of the leg results.

    Raises:
        InvalidData: If fewer than two leg results are given.
    """
    if len(results) < 2:
        raise InvalidData("Team results can only be created from at least two other results")

    offsets = calculate_offsets(results)
    owner.set_members([result.owner for result in results])

    original_cum_times = merge_cumulative_times(results, offsets)
    team_result = Result.from_original_cum_times(order, results[0].start_time, original_cum_times, owner)

    team_result.set_merged_cumulative_times(
        merge_cumulative_times(results, offsets, Result.get_all_cumulative_times),
        needs_repair=any(result.needs_repair() for result in results),
    )

    determine_aggregate_status(team_result, results)
    return team_result
