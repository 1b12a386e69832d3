"""Abstract base class for event data parsers, and the outcomes of parsing."""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from splits.event import Event


class RelayMode(enum.Enum):
    """How the legs of relay teams are joined together.

    FULL keeps every control on every leg. COMMON_CONTROLS keeps only the
    controls that all teams visited on each leg, so that teams that ran
    different variations of a leg can still be compared.
    """
    FULL = "full"
    COMMON_CONTROLS = "commonControls"


@dataclass
class Matched:
    """The data was of the parser's format and was read successfully."""
    event: "Event"


@dataclass
class NotThisFormat:
    """The data is not of the parser's format, so another parser should be tried."""
    reason: str


@dataclass
class Invalid:
    """The data is of the parser's format but cannot be read."""
    message: str


ParseOutcome = Matched | NotThisFormat | Invalid


class EventParser(ABC):
    """Abstract base class for parsing results files into an Event.

    Each parser implementation handles one file format. Parsers are
    registered via the @register_parser decorator in splits/parsers/__init__.py.
    """

    name: str = ""

    @abstractmethod
    def parse(self, content: str | bytes, relay_mode: RelayMode = RelayMode.FULL) -> ParseOutcome:
        """Parse the content of a results file.

        Args:
            content: The text or raw bytes of the file
            relay_mode: How to join the legs of any relay teams

        Returns:
            Matched with the event read, NotThisFormat if the content is not
            of this parser's format, or Invalid if it is of this format but
            cannot be read.
        """
        pass
