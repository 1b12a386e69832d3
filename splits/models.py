"""Core data models for competitors, teams and query records."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from splits.errors import InvalidData

if TYPE_CHECKING:
    from splits.course import Course


GENDERS = ("M", "F")


@dataclass
class Competitor:
    """An individual who ran at the event.

    Attributes:
        name: Full name of the competitor
        club: Name of the competitor's club (may be empty)
        year_of_birth: Four-digit year of birth, if known
        gender: "M" or "F", if known

    Example:
        >>> competitor = Competitor("Fred Brown", "DEF", year_of_birth=1984, gender="M")
    """
    name: str
    club: str
    year_of_birth: int | None = None
    gender: str | None = None

    def __post_init__(self):
        if self.gender is not None and self.gender not in GENDERS:
            raise InvalidData(f"Gender must be 'M' or 'F', got '{self.gender}' instead")


@dataclass(eq=False)
class Team:
    """A relay team.

    The members are only known once the results for each leg have been read,
    so they are set afterwards, exactly once, with set_members.
    """
    name: str
    club: str
    members: list[Competitor] | None = field(default=None, init=False)

    def set_members(self, members: list[Competitor]) -> None:
        if self.members is not None:
            raise InvalidData(f"Members of team '{self.name}' have already been set")
        self.members = list(members)


@dataclass
class FastestSplit:
    """A fastest split time to a control, and who recorded it.

    class_name is only filled in where the split is returned from a query
    spanning more than one class.
    """
    name: str
    split: int | float
    class_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "split": self.split, "className": self.class_name}


@dataclass
class ControlVisit:
    """A visit to a control, as a time of day in seconds past midnight."""
    name: str
    time: int | float
    class_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "time": self.time, "className": self.class_name}


@dataclass
class NextControls:
    """The controls that follow a given control on one course."""
    course: "Course"
    next_controls: list[str]
