"""Shared test helpers and fixtures."""

from pathlib import Path

import pytest

from splits.course_class import CourseClass
from splits.models import Competitor
from splits.result import Result
from splits.times import Time

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_result(
    order: int,
    cum_times: list[Time],
    name: str | None = None,
    start_time: int | float | None = 10 * 3600,
    club: str = "ABC",
) -> Result:
    """Build a Result that needs no repair from a list of cumulative times.

    Args:
        order: Position of the result in the data
        cum_times: Cumulative times, starting with 0
        name: Competitor name, defaults to "Competitor <order>"
        start_time: Start time in seconds past midnight

    Returns:
        Result owned by a new Competitor.
    """
    competitor = Competitor(name or f"Competitor {order}", club)
    return Result.from_cum_times(order, start_time, cum_times, competitor)


def make_original_result(
    order: int,
    cum_times: list[Time],
    name: str | None = None,
    start_time: int | float | None = 10 * 3600,
) -> Result:
    """Build a Result from cumulative times as read, still awaiting repair."""
    competitor = Competitor(name or f"Competitor {order}", "ABC")
    return Result.from_original_cum_times(order, start_time, cum_times, competitor)


def make_class(name: str, results: list[Result]) -> CourseClass:
    """Build a CourseClass, taking the number of controls from the first result."""
    num_controls = len(results[0].cum_times) - 2 if results else 3
    return CourseClass(name, num_controls, results)


def make_result_list(body: str, root_attributes: str = 'iofVersion="3.0" status="Complete"') -> str:
    """Wrap some ClassResult elements in an IOF XML 3.0 ResultList."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<ResultList xmlns="http://www.orienteering.org/datastandard/3.0" {root_attributes}>\n'
        f"{body}\n"
        "</ResultList>\n"
    )


@pytest.fixture
def individual_xml():
    """IOF XML 3.0 result list with individual classes.

    M21 and M35 run course A (235, 212, 189), W21 runs course B
    (212, 189, 194) and W35 has no competitors. M21 has a competitor who
    punched a wrong control, which is left out with a warning.
    """
    path = FIXTURES_DIR / "individual.xml"
    return path.read_bytes()


@pytest.fixture
def relay_xml():
    """IOF XML 3.0 result list with one relay class of two legs.

    The first leg is forked: teams visit 101, then one of 111/112/113,
    then 102. The second leg is 201, 202 for everyone. Team 'Broken Baton'
    has a gap between its first runner finishing and its second starting.
    """
    path = FIXTURES_DIR / "relay.xml"
    return path.read_bytes()
