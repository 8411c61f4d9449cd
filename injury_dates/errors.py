"""Error types raised inside injury_dates.

None of these reach a pipeline caller of ``InjuryDateExtension.call``;
they are converted to an empty result there.
"""


class InjuryDateError(Exception):
    """Base class for all injury_dates errors."""


class ResourceLoadError(InjuryDateError):
    """The time table file is missing, unreadable, or malformed."""


class NotFoundError(InjuryDateError, KeyError):
    """No time table entry exists for a patient ID."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class ParseError(InjuryDateError, ValueError):
    """A date or time string does not match its fixed format."""


class ConfigError(InjuryDateError):
    """A configuration value (e.g. baseDate) is malformed."""


class UnknownOperationError(InjuryDateError):
    """The requested operation name is not supported."""
