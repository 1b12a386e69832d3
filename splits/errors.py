"""Exceptions raised while building and querying the results model."""


class InvalidData(ValueError):
    """Raised when data is internally inconsistent.

    This covers wrong array lengths, mismatched control lists and
    out-of-range control indexes. It is not recoverable for the data being
    loaded and propagates to the caller.
    """
    pass


class WrongFileFormat(ValueError):
    """Raised when no parser recognises the format of some data."""
    pass
