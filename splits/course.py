"""A course: the controls shared by one or more classes."""

import logging
from typing import TYPE_CHECKING

from splits.errors import InvalidData
from splits.models import ControlVisit, FastestSplit

if TYPE_CHECKING:
    from splits.course_class import CourseClass

logger = logging.getLogger(__name__)

# Codes for the start and finish, which are not in the list of controls.
START = "__START__"
FINISH = "__FINISH__"

# Marks the point where one relay leg ends and the next starts, when relay
# legs are joined together on their common controls.
INTERMEDIATE = "__INTERMEDIATE__"


class Course:
    """A course, and the classes that ran it.

    Attributes:
        name: Name of the course
        classes: The classes that ran the course
        length: Length of the course in kilometres, if known
        climb: Climb of the course in metres, if known
        controls: Control codes in order, excluding the start and finish,
            or None if the controls are not known
    """

    def __init__(
        self,
        name: str,
        classes: list["CourseClass"],
        length: float | None,
        climb: int | None,
        controls: list[str] | None,
    ):
        self.name = name
        self.classes = classes
        self.length = length
        self.climb = climb
        self.controls = controls

    def __repr__(self) -> str:
        return f"Course(name={self.name!r}, classes={len(self.classes)}, controls={self.controls!r})"

    def get_other_classes(self, course_class: "CourseClass") -> list["CourseClass"]:
        """Return the classes on this course other than the one given.

        Raises:
            InvalidData: If the class given does not use this course.
        """
        other_classes = [cls for cls in self.classes if cls is not course_class]
        if len(other_classes) == len(self.classes):
            raise InvalidData("Course.get_other_classes: given class is not in this course")
        return other_classes

    def get_num_classes(self) -> int:
        return len(self.classes)

    def has_controls(self) -> bool:
        return self.controls is not None

    def get_control_code(self, control_num: int) -> str:
        """Return the code of a control, where 0 is the start.

        Raises:
            InvalidData: If the control number is out of range.
        """
        if control_num == 0:
            return START
        if 1 <= control_num <= len(self.controls):
            return self.controls[control_num - 1]
        if control_num == len(self.controls) + 1:
            return FINISH
        raise InvalidData(f"Cannot get control code of control {control_num} because it is out of range")

    def uses_leg(self, start_code: str, end_code: str) -> bool:
        return self.get_leg_number(start_code, end_code) >= 0

    def get_leg_number(self, start_code: str, end_code: str) -> int:
        """Return the number of the control at the end of a leg.

        The leg from the start to the first control is leg 1, and the leg
        from the last control to the finish is leg len(controls) + 1.

        Returns:
            The leg number, or -1 if the course has no control data or the
            leg is not on the course.
        """
        if self.controls is None:
            return -1

        if start_code == START and end_code == FINISH:
            # Only a leg if the course has no controls at all.
            return 1 if len(self.controls) == 0 else -1
        if start_code == START:
            return 1 if self.controls and self.controls[0] == end_code else -1
        if end_code == FINISH:
            return len(self.controls) + 1 if self.controls and self.controls[-1] == start_code else -1

        for control_index in range(1, len(self.controls)):
            if self.controls[control_index - 1] == start_code and self.controls[control_index] == end_code:
                return control_index + 1

        return -1

    def get_fastest_splits_for_leg(self, start_code: str, end_code: str) -> list[FastestSplit]:
        """Return the fastest split for the leg in each class on this course.

        Raises:
            InvalidData: If the leg is not part of this course.
        """
        leg_number = self.get_leg_number(start_code, end_code)
        if leg_number < 0:
            start_str = "start" if start_code in (START, INTERMEDIATE) else start_code
            end_str = "end" if end_code in (FINISH, INTERMEDIATE) else end_code
            raise InvalidData(f"Leg from {start_str} to {end_str} not found in course {self.name}")

        fastest_splits = []
        for course_class in self.classes:
            class_fastest = course_class.get_fastest_split_to(leg_number)
            if class_fastest is not None:
                fastest_splits.append(
                    FastestSplit(name=class_fastest.name, split=class_fastest.split, class_name=course_class.name)
                )

        return fastest_splits

    def get_results_at_control_in_time_range(
        self, control_code: str, interval_start: int | float, interval_end: int | float
    ) -> list[ControlVisit]:
        """Return the results that visited a control within a time interval.

        A control may appear on a course more than once, in which case visits
        to every occurrence of it are returned.
        """
        if self.controls is None:
            return []
        if control_code == START:
            return self.get_results_at_control_num_in_time_range(0, interval_start, interval_end)
        if control_code == FINISH:
            return self.get_results_at_control_num_in_time_range(
                len(self.controls) + 1, interval_start, interval_end
            )

        matching = []
        for control_index, code in enumerate(self.controls):
            if code == control_code:
                matching.extend(
                    self.get_results_at_control_num_in_time_range(control_index + 1, interval_start, interval_end)
                )
        return matching

    def get_results_at_control_num_in_time_range(
        self, control_num: int, interval_start: int | float, interval_end: int | float
    ) -> list[ControlVisit]:
        matching = []
        for course_class in self.classes:
            for visit in course_class.get_results_at_control_in_time_range(control_num, interval_start, interval_end):
                matching.append(ControlVisit(name=visit.name, time=visit.time, class_name=course_class.name))
        return matching

    def has_control(self, control_code: str) -> bool:
        return self.controls is not None and control_code in self.controls

    def get_next_controls(self, control_code: str) -> list[str]:
        """Return the controls that follow a control on this course.

        The same control can appear more than once on a course, so there may
        be more than one next control.

        Raises:
            InvalidData: If the course has no controls, the control is the
                finish, or the control is not on the course.
        """
        if self.controls is None:
            raise InvalidData("Course has no controls")
        if control_code == FINISH:
            raise InvalidData("Cannot fetch next control after the finish")
        if control_code == START:
            return [self.controls[0] if self.controls else FINISH]

        next_controls = []
        for control_index, code in enumerate(self.controls):
            if code == control_code:
                if control_index == len(self.controls) - 1:
                    next_controls.append(FINISH)
                else:
                    next_controls.append(self.controls[control_index + 1])

        if not next_controls:
            raise InvalidData(f"Control '{control_code}' not found on course {self.name}")

        logger.debug("Controls after %s on course %s: %s", control_code, self.name, next_controls)
        return next_controls
