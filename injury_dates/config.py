"""
Centralised configuration for the injury_dates package.

Constants, date/time formats, DICOM keyword pairs, the extension
configuration object, and logging setup used across all modules.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Time table
# ---------------------------------------------------------------------------
# The table is reloaded only when the file's modification time has advanced
# by more than this many milliseconds since the last successful load.
STALENESS_THRESHOLD_MS = 5000

TABLE_ENCODING = "utf-8"
TABLE_DELIMITER = ","

# Column positions in each data line: PatientID,InjuryDate,InjuryTime,...
TABLE_ID_COLUMN = 0
TABLE_DATE_COLUMN = 1
TABLE_TIME_COLUMN = 2

# ---------------------------------------------------------------------------
# Record fields
# ---------------------------------------------------------------------------
DEFAULT_PATIENT_ID_FIELD = "PatientID"

# Element name referring to the element currently being anonymised.
THIS_ELEMENT = "this"

# (date keyword, time keyword) pairs rewritten by shift_dicom.
RELATIVE_DATE_TIME_PAIRS = (
    ("StudyDate", "StudyTime"),
    ("SeriesDate", "SeriesTime"),
    ("AcquisitionDate", "AcquisitionTime"),
    ("ContentDate", "ContentTime"),
)

# ---------------------------------------------------------------------------
# Extension configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateExtensionConfig:
    """Settings supplied once when an InjuryDateExtension is constructed."""

    base_date: str
    date_table_file: Path
    extension_id: str = "InjuryDateExtension"
    patient_id_field: str = DEFAULT_PATIENT_ID_FIELD

    @classmethod
    def from_element(cls, element: ET.Element) -> "DateExtensionConfig":
        """Build a config from a pipeline XML element.

        Reads the ``id``, ``baseDate`` and ``dateTableFile`` attributes, e.g.::

            <AnonymizerExtension id="InjuryDates" baseDate="1/1/2000"
                                 dateTableFile="injuries.csv"/>
        """
        return cls(
            base_date=element.get("baseDate", "").strip(),
            date_table_file=Path(element.get("dateTableFile", "").strip()),
            extension_id=element.get("id", "InjuryDateExtension").strip(),
            patient_id_field=element.get(
                "patientIdField", DEFAULT_PATIENT_ID_FIELD
            ).strip(),
        )


# ---------------------------------------------------------------------------
# Logging helper
# ---------------------------------------------------------------------------
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for injury_dates scripts."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
