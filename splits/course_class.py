"""A class of results that all ran the same course."""

from typing import TYPE_CHECKING

from splits.errors import InvalidData
from splits.models import ControlVisit, FastestSplit
from splits.result import Result
from splits.times import Time, is_valid_time

if TYPE_CHECKING:
    from splits.course import Course


class CourseClass:
    """A collection of results that compete against each other.

    For a relay class, each result is a team result and numbers_of_controls
    and offsets describe where each leg sits within the team's controls.
    """

    def __init__(self, name: str, num_controls: int, results: list[Result]):
        self.name = name
        self.num_controls = num_controls
        self.numbers_of_controls: list[int] | None = None
        self.offsets: list[int] | None = None
        self.results = results
        self.course: "Course | None" = None
        self.has_dubious_data = False
        self.is_team_class = False
        for result in self.results:
            result.set_class_name(name)

    def __repr__(self) -> str:
        return f"CourseClass(name={self.name!r}, num_controls={self.num_controls}, results={len(self.results)})"

    def record_has_dubious_data(self) -> None:
        """Record that a repair step found dubious data in this class."""
        self.has_dubious_data = True

    def set_is_team_class(self, numbers_of_controls: list[int]) -> None:
        """Record that this class holds relay team results.

        Args:
            numbers_of_controls: The number of controls on each leg.
        """
        self.is_team_class = True
        self.numbers_of_controls = numbers_of_controls
        self.offsets = [0]
        for index in range(1, len(numbers_of_controls)):
            self.offsets.append(self.offsets[index - 1] + numbers_of_controls[index - 1] + 1)
        for result in self.results:
            result.set_offsets(self.offsets)

    def determine_time_losses(self) -> None:
        fastest_split_times: list[Time] = []
        for control_index in range(1, self.num_controls + 2):
            fastest = self.get_fastest_split_to(control_index)
            fastest_split_times.append(None if fastest is None else fastest.split)

        for result in self.results:
            result.determine_time_losses(fastest_split_times)

    def is_empty(self) -> bool:
        return len(self.results) == 0

    def set_course(self, course: "Course") -> None:
        self.course = course

    def get_fastest_split_to(self, control_index: int) -> FastestSplit | None:
        """Return the fastest split to a control and who recorded it.

        Absent and invalid splits are ignored. If nobody has a valid split to
        the control, None is returned.

        Raises:
            InvalidData: If the control index is not between 1 and the
                finish inclusive.
        """
        if not isinstance(control_index, int) or not 1 <= control_index <= self.num_controls + 1:
            raise InvalidData(
                f"Cannot return splits to leg '{control_index}' in a course with "
                f"{self.num_controls} control(s)"
            )

        fastest_split = None
        fastest_result = None
        for result in self.results:
            split = result.get_split_time_to(control_index)
            if is_valid_time(split) and (fastest_split is None or split < fastest_split):
                fastest_split = split
                fastest_result = result

        if fastest_result is None:
            return None
        return FastestSplit(name=fastest_result.owner.name, split=fastest_split)

    def get_results_at_control_in_time_range(
        self, control_num: int, interval_start: int | float, interval_end: int | float
    ) -> list[ControlVisit]:
        """Return the results that visited a control within a time interval.

        Args:
            control_num: Number of the control, 0 for the start and
                num_controls + 1 for the finish
            interval_start: Start of the interval, in seconds past midnight
            interval_end: End of the interval, in seconds past midnight
        """
        if not isinstance(control_num, int) or not 0 <= control_num <= self.num_controls + 1:
            raise InvalidData(
                f"Control number must be a number between 0 and {self.num_controls + 1} inclusive"
            )

        matching = []
        for result in self.results:
            cum_time = result.get_cumulative_time_to(control_num)
            if is_valid_time(cum_time) and result.start_time is not None:
                time_at_control = cum_time + result.start_time
                if interval_start <= time_at_control <= interval_end:
                    matching.append(ControlVisit(name=result.owner.name, time=time_at_control))

        return matching
