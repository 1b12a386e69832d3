"""Parsers for results files in various formats."""

import logging

from splits.errors import InvalidData, WrongFileFormat

from .base import EventParser, Invalid, Matched, NotThisFormat, RelayMode

logger = logging.getLogger(__name__)

# Parser registry - import parsers here to register them
_parsers: list[type[EventParser]] = []


def register_parser(parser_class: type[EventParser]) -> type[EventParser]:
    """Decorator to register a parser class."""
    _parsers.append(parser_class)
    return parser_class


def get_all_parsers() -> list[type[EventParser]]:
    """Return all registered parser classes."""
    return _parsers.copy()


def parse_event_data(content: str | bytes, relay_mode: RelayMode = RelayMode.FULL):
    """Read an event from a results file, trying each registered parser in turn.

    Args:
        content: The text or raw bytes of the file
        relay_mode: How to join the legs of any relay teams

    Returns:
        The Event read by the first parser that recognises the format.

    Raises:
        InvalidData: If a parser recognises the format but the data is invalid.
        WrongFileFormat: If no parser recognises the format.
    """
    reasons = []
    for parser_class in _parsers:
        parser = parser_class()
        outcome = parser.parse(content, relay_mode)
        if isinstance(outcome, Matched):
            logger.debug("Data read by %s parser", parser.name)
            return outcome.event
        if isinstance(outcome, Invalid):
            raise InvalidData(outcome.message)
        if isinstance(outcome, NotThisFormat):
            logger.debug("%s parser rejected data: %s", parser.name, outcome.reason)
            reasons.append(f"{parser.name}: {outcome.reason}")
        else:
            raise TypeError(f"Unexpected parse outcome {outcome!r} from {parser.name} parser")

    if not reasons:
        raise WrongFileFormat("No parsers are registered")
    raise WrongFileFormat("Data is not of any recognised format.\n" + "\n".join(reasons))
