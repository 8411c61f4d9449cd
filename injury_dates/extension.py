"""Injury-relative date/time replacement values for the anonymiser.

The pipeline calls :meth:`InjuryDateExtension.call` with the function-call
arguments from its anonymiser script and a record context:

    [0]: id attribute of the extension
    [1]: operation name
    [2]: date element name (relative operations only)
    [3]: time element name (relative operations only)

e.g. ``@call(InjuryDates, getRelativeDate, StudyDate, StudyTime)``.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Mapping, Optional, Protocol, Sequence

from pydicom.dataset import Dataset
from pydicom.datadict import tag_for_keyword

from injury_dates.config import THIS_ELEMENT, DateExtensionConfig
from injury_dates.errors import (
    ConfigError,
    ParseError,
    UnknownOperationError,
)
from injury_dates.relative_time import (
    EPOCH,
    absolute_datetime,
    elapsed_breakdown,
    format_dicom_date,
    format_dicom_time,
    format_elapsed,
    parse_base_date,
    relative_instant,
)
from injury_dates.time_table import TimeTable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Record contexts
# ---------------------------------------------------------------------------

class RecordContext(Protocol):
    """Read access to fields of the record being anonymised."""

    this_element: Optional[str]

    def contents(self, name: str, default: str = "") -> str:
        ...


class MappingRecordContext:
    """Record context backed by a plain ``{field name: value}`` mapping."""

    def __init__(
        self, values: Mapping[str, str], this_element: Optional[str] = None
    ) -> None:
        self.values = values
        self.this_element = this_element

    def contents(self, name: str, default: str = "") -> str:
        value = self.values.get(name)
        return default if value is None else str(value)


class DicomRecordContext:
    """Record context over a pydicom Dataset, addressed by DICOM keyword."""

    def __init__(self, dataset: Dataset, this_element: Optional[str] = None) -> None:
        self.dataset = dataset
        self.this_element = this_element

    def contents(self, name: str, default: str = "") -> str:
        tag = tag_for_keyword(name)
        if tag is None or tag not in self.dataset:
            return default
        value = self.dataset[tag].value
        return default if value is None else str(value)


# ---------------------------------------------------------------------------
# Extension
# ---------------------------------------------------------------------------

OPERATIONS = (
    "getInjuryDate",
    "getInjuryTime",
    "getRelativeDate",
    "getRelativeTime",
    "getTimeSinceInjury",
)


class InjuryDateExtension:
    """Compute injury-relative dates and times for one time table."""

    def __init__(self, config: DateExtensionConfig) -> None:
        self.config = config
        self.base_time = self._parse_baseline(config.base_date)
        self.table = TimeTable(config.date_table_file)
        self._lock = threading.Lock()
        self._handlers: dict[str, Callable[..., str]] = {
            "getInjuryDate": self._injury_date,
            "getInjuryTime": self._injury_time,
            "getRelativeDate": self._relative_date,
            "getRelativeTime": self._relative_time,
            "getTimeSinceInjury": self._time_since_injury,
        }
        self.table.refresh_if_stale()
        logger.info("%s instantiated", config.extension_id)

    @staticmethod
    def _parse_baseline(base_date: str) -> datetime:
        try:
            return parse_base_date(base_date)
        except ParseError as exc:
            err = ConfigError(f"Illegal baseDate: {base_date!r}")
            logger.warning("%s (using %s): %s", err, EPOCH.date(), exc)
            return EPOCH

    # ----- core -----

    def injury_time(self, patient_id: str) -> datetime:
        """Refresh the table if stale and return the injury time of *patient_id*.

        Raises NotFoundError for unknown patients.
        """
        with self._lock:
            self.table.refresh_if_stale()
            return self.table.lookup(patient_id)

    def evaluate(
        self,
        patient_id: str,
        operation: str,
        date_value: Optional[str] = None,
        time_value: Optional[str] = None,
    ) -> str:
        """Run *operation* for *patient_id*, raising on any failure.

        Raises
        ------
        UnknownOperationError, NotFoundError, ParseError
        """
        handler = self._handlers.get(operation)
        if handler is None:
            raise UnknownOperationError(f"Unknown operation: {operation!r}")
        injury = self.injury_time(patient_id)
        return handler(injury, date_value, time_value)

    def _observed(self, date_value: Optional[str], time_value: Optional[str]) -> datetime:
        if not date_value or not time_value:
            raise ParseError("Operation requires a date and a time value")
        return absolute_datetime(date_value, time_value)

    def _relative(self, injury, date_value, time_value) -> datetime:
        return relative_instant(
            self._observed(date_value, time_value), injury, self.base_time
        )

    def _injury_date(self, injury, date_value, time_value) -> str:
        return format_dicom_date(injury)

    def _injury_time(self, injury, date_value, time_value) -> str:
        return format_dicom_time(injury)

    def _relative_date(self, injury, date_value, time_value) -> str:
        return format_dicom_date(self._relative(injury, date_value, time_value))

    def _relative_time(self, injury, date_value, time_value) -> str:
        return format_dicom_time(self._relative(injury, date_value, time_value))

    def _time_since_injury(self, injury, date_value, time_value) -> str:
        observed = self._observed(date_value, time_value)
        return format_elapsed(*elapsed_breakdown(observed, injury))

    # ----- pipeline call contract -----

    @staticmethod
    def _element_value(
        args: Sequence[str], index: int, context: RecordContext
    ) -> Optional[str]:
        if len(args) <= index:
            return None
        name = args[index].strip()
        if name == THIS_ELEMENT:
            name = context.this_element or ""
        if not name:
            return None
        return context.contents(name, "").strip()

    def call(self, args: Sequence[str], context: RecordContext) -> str:
        """Evaluate an anonymiser function call; any failure returns ``""``."""
        try:
            if len(args) < 2:
                raise UnknownOperationError(f"No operation in call arguments {args!r}")
            operation = args[1].strip()
            patient_id = context.contents(self.config.patient_id_field, "").strip()
            return self.evaluate(
                patient_id,
                operation,
                self._element_value(args, 2, context),
                self._element_value(args, 3, context),
            )
        except Exception:  # host context errors included
            return ""
