"""Exception taxonomy for the field burner.

Only document load and serialization faults escalate to the caller.
Per-field problems are reported as skipped outcomes instead.
"""


class FieldBurnerError(Exception):
    """Base class for every error raised by :mod:`field_burner`."""


class InvalidPlacementError(FieldBurnerError, ValueError):
    """A placement payload could not be parsed (e.g. unknown field type)."""


class DocumentLoadError(FieldBurnerError):
    """The input bytes are not a loadable PDF document."""


class DocumentSerializationError(FieldBurnerError):
    """The modified document could not be written back to bytes."""
