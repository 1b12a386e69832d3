"""Parser for IOF XML 3.0 result lists."""

import logging
import math
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from splits.common_controls import determine_common_controls
from splits.course import INTERMEDIATE, Course
from splits.course_class import CourseClass
from splits.errors import InvalidData
from splits.event import Event
from splits.models import GENDERS, Competitor, Team
from splits.parsers import register_parser
from splits.parsers.base import EventParser, Invalid, Matched, NotThisFormat, ParseOutcome, RelayMode
from splits.relay import create_team_result
from splits.result import Result

logger = logging.getLogger(__name__)

IOF_3_NAMESPACE = "http://www.orienteering.org/datastandard/3.0"

STATUS_OK = "OK"
STATUS_NON_COMPETITIVE = "NotCompeting"
STATUS_NON_STARTER = "DidNotStart"
STATUS_NON_FINISHER = "DidNotFinish"
STATUS_DISQUALIFIED = "Disqualified"
STATUS_OVER_MAX_TIME = "OverTime"

_YEAR_RE = re.compile(r"^\d{4}")
_ISO_8601_RE = re.compile(r"^\d\d\d\d-?\d\d-?\d\dT?(\d\d):?(\d\d)(?::?(\d\d))?")


@dataclass
class _CourseData:
    """A course as read from a class, before the Course itself is built."""
    id: str | None
    name: str
    length: float | None
    climb: int | None
    number_of_controls: int | None
    classes: list[CourseClass] = field(default_factory=list)
    controls: list[str] | None = None


@dataclass
class _ClassData:
    """The results of a class as they are read."""
    name: str
    course: _CourseData
    results: list[Result] = field(default_factory=list)
    controls: list[str] | None = None
    team_size: int | None = None
    numbers_of_controls: list[int] | None = None
    # For each team result, the controls of each leg.
    team_controls: list[list[list[str]]] = field(default_factory=list)


def _child(element: Tag | None, *names: str) -> Tag | None:
    """Follow a path of direct children, returning None if any step is missing."""
    for name in names:
        if element is None:
            return None
        element = element.find(name, recursive=False)
    return element


def _child_text(element: Tag | None, *names: str) -> str:
    child = _child(element, *names)
    return "" if child is None else child.get_text(strip=True)


def _read_time(text: str) -> int | float | None:
    """Read a time in seconds, which may have a fractional part."""
    try:
        time = float(text)
    except ValueError:
        return None
    if not math.isfinite(time):
        return None
    return int(time) if time.is_integer() else time


def _read_start_time(result_element: Tag) -> int | None:
    """Read a start time as a number of seconds past midnight."""
    match = _ISO_8601_RE.match(_child_text(result_element, "StartTime"))
    if match is None:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds or 0)


def _read_competitor_name(name_element: Tag | None) -> str:
    forename = _child_text(name_element, "Given")
    surname = _child_text(name_element, "Family")
    return " ".join(part for part in (forename, surname) if part)


def _read_club_name(element: Tag) -> str:
    return _child_text(element, "Organisation", "ShortName") or _child_text(element, "Organisation", "Name")


def _team_label(team_name: str) -> str:
    return team_name if team_name else "(unnamed team)"


@register_parser
class IofXmlParser(EventParser):
    """Parser for IOF XML 3.0 ResultList documents.

    Each ClassResult holds either PersonResult elements for an individual
    class or TeamResult elements for a relay class. Split times are given
    as times in seconds since the competitor's start, one SplitTime element
    per control, and the finish time is the Time of the Result.

    Results that do not fit with the rest of their class are left out, with
    a warning added to the event, rather than stopping the whole file being
    read.
    """

    name = "IOF XML 3.0"

    def __init__(self):
        self._warnings: list[str] = []
        self._relay_mode = RelayMode.FULL

    def parse(self, content: str | bytes, relay_mode: RelayMode = RelayMode.FULL) -> ParseOutcome:
        data = content.encode("utf-8") if isinstance(content, str) else content
        if IOF_3_NAMESPACE.encode("utf-8") not in data:
            return NotThisFormat("Data apparently not of IOF XML 3.0 format")

        soup = BeautifulSoup(data, "xml")
        root = soup.find(True, recursive=False)
        if root is None:
            return Invalid("XML data not well-formed")

        if root.name != "ResultList":
            return NotThisFormat(
                f"Root element of XML document does not have expected name 'ResultList', got '{root.name}'"
            )

        iof_version = root.get("iofVersion")
        if iof_version is None:
            return NotThisFormat("Could not find IOF version number")
        if iof_version != "3.0":
            return NotThisFormat(f"Found unrecognised IOF XML data format '{iof_version}'")

        status = root.get("status")
        if status is not None and status.lower() != "complete":
            return Invalid("Only complete IOF data supported; snapshot and delta are not supported")

        class_elements = root.find_all("ClassResult", recursive=False)
        if not class_elements:
            return Invalid("No class result elements found")

        self._warnings = []
        self._relay_mode = relay_mode
        try:
            event = self._read_event(class_elements)
        except InvalidData as e:
            return Invalid(str(e))

        return Matched(event)

    def _read_event(self, class_elements: list[Tag]) -> Event:
        classes = []
        courses_data: list[_CourseData] = []
        courses_by_key: dict[str, _CourseData] = {}

        for class_element in class_elements:
            class_data = self._read_class(class_element)
            if class_data is None:
                continue

            course_data = class_data.course
            is_team_class = bool(class_data.numbers_of_controls)

            if is_team_class:
                if self._relay_mode == RelayMode.COMMON_CONTROLS:
                    controls = self._restrict_to_common_controls(class_data)
                else:
                    controls = None
                num_controls = sum(class_data.numbers_of_controls) + class_data.team_size - 1
                course_key = None
            else:
                controls = class_data.controls or []
                num_controls = len(controls)
                course_key = f"{course_data.id},{','.join(controls)}"

            course_class = CourseClass(class_data.name, num_controls, class_data.results)
            if is_team_class:
                course_class.set_is_team_class(class_data.numbers_of_controls)
            classes.append(course_class)

            if course_data.id is not None and course_key is not None and course_key in courses_by_key:
                courses_by_key[course_key].classes.append(course_class)
            else:
                course_data.classes = [course_class]
                course_data.controls = controls
                courses_data.append(course_data)
                if course_data.id is not None and course_key is not None:
                    courses_by_key[course_key] = course_data

        courses = []
        for course_data in courses_data:
            course = Course(
                course_data.name, course_data.classes, course_data.length, course_data.climb, course_data.controls
            )
            for course_class in course_data.classes:
                course_class.set_course(course)
            courses.append(course)

        logger.debug("Read %d classes on %d courses", len(classes), len(courses))
        return Event(classes, courses, self._warnings)

    def _read_course(self, class_element: Tag) -> _CourseData:
        course_element = _child(class_element, "Course")
        course_id = _child_text(course_element, "Id") or None
        name = _child_text(course_element, "Name")

        length_text = _child_text(course_element, "Length")
        length = None
        if length_text:
            try:
                length = int(float(length_text)) / 1000
            except ValueError:
                self._warnings.append(
                    f"Course '{name}' specifies a course length that was not understood: '{length_text}'"
                )

        try:
            number_of_controls = int(_child_text(course_element, "NumberOfControls"))
        except ValueError:
            number_of_controls = None

        try:
            climb = int(_child_text(course_element, "Climb"))
        except ValueError:
            climb = None

        return _CourseData(
            id=course_id, name=name, length=length, climb=climb, number_of_controls=number_of_controls
        )

    def _read_class(self, class_element: Tag) -> _ClassData | None:
        course = self._read_course(class_element)
        class_name = _child_text(class_element, "Class", "Name") or "<unnamed class>"
        class_data = _ClassData(name=class_name, course=course)

        person_results = class_element.find_all("PersonResult", recursive=False)
        team_results = class_element.find_all("TeamResult", recursive=False)

        if person_results and team_results:
            self._warnings.append(f"Class '{class_name}' has a combination of relay teams and individual results")
            return None
        elif person_results:
            for order, person_result in enumerate(person_results, start=1):
                self._add_person_result(person_result, order, class_data)
        elif team_results:
            for order, team_result in enumerate(team_results, start=1):
                self._add_team_result(team_result, order, class_data)
        else:
            self._warnings.append(f"Class '{class_name}' has no competitors")
            return None

        if course.id is None and class_data.controls:
            course.id = ",".join(class_data.controls)

        if person_results and class_data.controls:
            class_data.results = [
                self._pad_non_starter(result, len(class_data.controls)) for result in class_data.results
            ]

        return class_data

    @staticmethod
    def _pad_non_starter(result: Result, num_controls: int) -> Result:
        """Give a non-starter with no split times an absent time at every control."""
        if not result.is_non_starter or len(result.original_cum_times) != 2:
            return result
        padded = Result.from_original_cum_times(
            result.order, result.start_time, [0] + [None] * (num_controls + 1), result.owner
        )
        padded.set_non_starter()
        return padded

    def _read_competitor(self, element: Tag, order: int) -> tuple[Result, list[str]] | None:
        """Read the result of one person, and the controls they visited.

        Returns None, adding a warning, if the person has no name or no result.
        """
        name = _read_competitor_name(_child(element, "Person", "Name"))
        if not name:
            self._warnings.append("Could not find a name for a competitor")
            return None

        club = _read_club_name(element)

        year_match = _YEAR_RE.match(_child_text(element, "Person", "BirthDate"))
        year_of_birth = int(year_match.group(0)) if year_match else None

        person = _child(element, "Person")
        gender = person.get("sex") if person is not None else None
        if gender not in GENDERS:
            gender = None

        result_element = _child(element, "Result")
        if result_element is None:
            self._warnings.append(f"Could not find any result information for competitor '{name}'")
            return None

        start_time = _read_start_time(result_element)
        total_time = _read_time(_child_text(result_element, "Time"))
        status = _child_text(result_element, "Status")

        controls = []
        cum_times = [0]
        for split_time in result_element.find_all("SplitTime", recursive=False):
            if split_time.get("status") == "Additional":
                continue
            code = _child_text(split_time, "ControlCode")
            if not code:
                raise InvalidData("Control code missing for control")
            controls.append(code)
            if split_time.get("status") == "Missing":
                cum_times.append(None)
            else:
                cum_times.append(_read_time(_child_text(split_time, "Time")))

        cum_times.append(None if status == STATUS_NON_STARTER else total_time)

        competitor = Competitor(name, club, year_of_birth=year_of_birth, gender=gender)
        result = Result.from_original_cum_times(order, start_time, cum_times, competitor)

        if status == STATUS_OK and total_time is not None and None in cum_times:
            result.set_ok_despite_missing_times()
        elif status == STATUS_NON_COMPETITIVE:
            result.set_non_competitive()
        elif status == STATUS_NON_STARTER:
            result.set_non_starter()
        elif status == STATUS_NON_FINISHER:
            result.set_non_finisher()
        elif status == STATUS_DISQUALIFIED:
            result.disqualify()
        elif status == STATUS_OVER_MAX_TIME:
            result.set_over_max_time()

        return result, controls

    def _add_person_result(self, element: Tag, order: int, class_data: _ClassData) -> None:
        parsed = self._read_competitor(element, order)
        if parsed is None:
            return

        result, controls = parsed
        if class_data.controls is None and not (result.is_non_starter and not controls):
            class_data.controls = controls
            if class_data.course.number_of_controls is None:
                class_data.course.number_of_controls = len(controls)

        expected_controls = class_data.controls or []
        actual_control_count = len(result.get_all_original_cumulative_times()) - 2
        warning = None
        if result.is_non_starter and actual_control_count == 0:
            pass
        elif actual_control_count != class_data.course.number_of_controls:
            warning = (
                f"Competitor '{result.owner.name}' in class '{class_data.name}' has an unexpected number "
                f"of controls: expected {class_data.course.number_of_controls}, actual {actual_control_count}"
            )
        else:
            for control_index, (expected, actual) in enumerate(zip(expected_controls, controls), start=1):
                if expected != actual:
                    warning = (
                        f"Competitor '{result.owner.name}' has an unexpected control code at control "
                        f"{control_index}: expected '{expected}', actual '{actual}'"
                    )
                    break

        if warning is None:
            class_data.results.append(result)
        else:
            self._warnings.append(warning)

    def _add_team_result(self, element: Tag, order: int, class_data: _ClassData) -> None:
        team_name = _child_text(element, "Name")
        team_club = _read_club_name(element)
        members = element.find_all("TeamMemberResult", recursive=False)

        if not members:
            self._warnings.append(f"Ignoring team {_team_label(team_name)} with no members")
            return
        if not class_data.results and len(members) == 1:
            self._warnings.append(f"Ignoring team {_team_label(team_name)} with only a single member")
            return

        results = []
        all_controls = []
        for member in members:
            parsed = self._read_competitor(member, order)
            if parsed is None:
                return
            results.append(parsed[0])
            all_controls.append(parsed[1])

        for index in range(1, len(members)):
            previous_finish_time = _child_text(members[index - 1], "Result", "FinishTime")
            next_start_time = _child_text(members[index], "Result", "StartTime")
            if not results[index].is_non_starter and previous_finish_time != next_start_time:
                self._warnings.append(
                    f"In team {_team_label(team_name)} in class '{class_data.name}', "
                    f"{results[index - 1].owner.name} does not finish at the same time as "
                    f"{results[index].owner.name} starts"
                )
                return

        if not class_data.results:
            class_data.team_size = len(results)
            if class_data.numbers_of_controls is None:
                class_data.numbers_of_controls = [len(controls) for controls in all_controls]

        if len(results) != class_data.team_size:
            label = f"'{team_name}'" if team_name else "(unnamed team)"
            self._warnings.append(
                f"Team {label} in class '{class_data.name}' has an unexpected number of members: "
                f"expected {class_data.team_size} but was actually {len(results)}"
            )
            return

        if self._relay_mode == RelayMode.FULL:
            for expected_count, member_result in zip(class_data.numbers_of_controls, results):
                actual_count = len(member_result.get_all_original_cumulative_times()) - 2
                if actual_count != expected_count:
                    self._warnings.append(
                        f"Competitor '{member_result.owner.name}' in team '{team_name}' in class "
                        f"'{class_data.name}' has an unexpected number of controls: expected "
                        f"{expected_count}, actual {actual_count}"
                    )
                    return

        class_data.results.append(create_team_result(order, results, Team(team_name, team_club)))
        class_data.team_controls.append(all_controls)

    def _restrict_to_common_controls(self, class_data: _ClassData) -> list[str]:
        """Restrict the team results of a class to the controls every team visited.

        Returns:
            The controls of the whole relay, with the common controls of each
            leg separated by the intermediate control code.
        """
        if not class_data.results:
            return []

        common_controls = [
            determine_common_controls(
                [team_controls[leg_index] for team_controls in class_data.team_controls],
                f"leg {leg_index + 1} of class {class_data.name}",
            )
            for leg_index in range(class_data.team_size)
        ]

        for result, team_controls in zip(class_data.results, class_data.team_controls):
            result.restrict_to_common_controls(team_controls, common_controls)

        class_data.numbers_of_controls = [len(leg_controls) for leg_controls in common_controls]

        controls = []
        for leg_index, leg_controls in enumerate(common_controls):
            if leg_index > 0:
                controls.append(INTERMEDIATE)
            controls.extend(leg_controls)

        logger.debug("Class %s restricted to %d common controls", class_data.name, len(controls))
        return controls
