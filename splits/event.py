"""The top-level aggregate of everything read for one competition."""

import logging

from splits.course import START, Course
from splits.course_class import CourseClass
from splits.models import ControlVisit, FastestSplit, NextControls

logger = logging.getLogger(__name__)


class Event:
    """All of the classes and courses of an event.

    Attributes:
        classes: All classes in the event
        courses: All courses in the event
        warnings: Messages about problems with the data that did not stop it
            being read
    """

    def __init__(self, classes: list[CourseClass], courses: list[Course], warnings: list[str] | None = None):
        self.classes = classes
        self.courses = courses
        self.warnings = warnings if warnings is not None else []

    def __repr__(self) -> str:
        return f"Event(classes={len(self.classes)}, courses={len(self.courses)}, warnings={len(self.warnings)})"

    def determine_time_losses(self) -> None:
        """Determine the time losses of every result in every class."""
        for course_class in self.classes:
            course_class.determine_time_losses()
        logger.debug("Determined time losses for %d classes", len(self.classes))

    def needs_repair(self) -> bool:
        """Return True if any result in the event still awaits a repair step."""
        return any(
            result.needs_repair()
            for course_class in self.classes
            for result in course_class.results
        )

    def get_fastest_splits_for_leg(self, start_code: str, end_code: str) -> list[FastestSplit]:
        """Return the fastest split for a leg in each class that runs it.

        Every course that includes the leg is searched, so classes on
        different courses that share the leg are compared. The splits are
        returned fastest first.
        """
        fastest_splits: list[FastestSplit] = []
        for course in self.courses:
            if course.uses_leg(start_code, end_code):
                fastest_splits.extend(course.get_fastest_splits_for_leg(start_code, end_code))

        fastest_splits.sort(key=lambda fastest: fastest.split)
        return fastest_splits

    def get_results_at_control_in_time_range(
        self, control_code: str, interval_start: int | float, interval_end: int | float
    ) -> list[ControlVisit]:
        """Return everyone who visited a control within a time interval, earliest first.

        Args:
            control_code: Code of the control, or START or FINISH
            interval_start: Start of the interval, in seconds past midnight
            interval_end: End of the interval, in seconds past midnight
        """
        visits: list[ControlVisit] = []
        for course in self.courses:
            visits.extend(course.get_results_at_control_in_time_range(control_code, interval_start, interval_end))

        visits.sort(key=lambda visit: visit.time)
        return visits

    def get_next_controls_after(self, control_code: str) -> list[NextControls]:
        """Return, for each course with the control, the controls that follow it.

        Every course with control data is included for the start.
        """
        if control_code == START:
            courses = [course for course in self.courses if course.has_controls()]
        else:
            courses = [course for course in self.courses if course.has_control(control_code)]

        return [NextControls(course=course, next_controls=course.get_next_controls(control_code)) for course in courses]
