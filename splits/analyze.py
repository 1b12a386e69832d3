"""Orchestrator: read a results file and compute the statistics of the event."""

import logging

from splits.event import Event
from splits.parsers import iof_xml  # noqa: F401
from splits.parsers import parse_event_data
from splits.parsers.base import RelayMode

logger = logging.getLogger(__name__)


def load_event(content: str | bytes, relay_mode: RelayMode = RelayMode.FULL) -> Event:
    """Read an event from a results file and determine its time losses.

    Args:
        content: The text or raw bytes of the results file
        relay_mode: How to join the legs of any relay teams

    Returns:
        The Event read, with time losses determined for every class.

    Raises:
        InvalidData: If the file is of a recognised format but is invalid.
        WrongFileFormat: If the file is not of any recognised format.
    """
    event = parse_event_data(content, relay_mode)

    for warning in event.warnings:
        logger.warning(warning)

    event.determine_time_losses()

    logger.info("Loaded event with %d classes on %d courses", len(event.classes), len(event.courses))
    return event
