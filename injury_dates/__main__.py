"""Entry point for ``python -m injury_dates``.

Reports injury-relative values for DICOM files, and optionally writes
date-shifted copies::

    python -m injury_dates --table injuries.csv --base-date 1/1/2000 a.dcm b.dcm
    python -m injury_dates --table injuries.csv --base-date 1/1/2000 \\
        --output shifted/ a.dcm
    python -m injury_dates --table injuries.csv --base-date 1/1/2000 \\
        --operation getTimeSinceInjury a.dcm
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import pydicom
from pydicom.errors import InvalidDicomError

from injury_dates.config import DateExtensionConfig, setup_logging
from injury_dates.extension import OPERATIONS, DicomRecordContext, InjuryDateExtension
from injury_dates.shift_dicom import shift_file

logger = logging.getLogger(__name__)

# (label, call arguments after the extension id)
_REPORT_CALLS = [
    ("Injury date", ["getInjuryDate"]),
    ("Injury time", ["getInjuryTime"]),
    ("Relative study date", ["getRelativeDate", "StudyDate", "StudyTime"]),
    ("Relative study time", ["getRelativeTime", "StudyDate", "StudyTime"]),
    ("Time since injury", ["getTimeSinceInjury", "StudyDate", "StudyTime"]),
]


def report_file(
    path: Path, extension: InjuryDateExtension, operation: Optional[str] = None
) -> dict[str, str]:
    """Return ``{label: value}`` for the standard report calls on *path*.

    When *operation* is given only the call for that operation is made.
    """
    ds = pydicom.dcmread(path, stop_before_pixels=True)
    context = DicomRecordContext(ds)
    ext_id = extension.config.extension_id
    return {
        label: extension.call([ext_id, *args], context)
        for label, args in _REPORT_CALLS
        if operation is None or args[0] == operation
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compute injury-relative dates for DICOM files.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="DICOM files")
    parser.add_argument("--table", type=Path, required=True,
                        help="CSV table: PatientID,InjuryDate,InjuryTime,...")
    parser.add_argument("--base-date", required=True,
                        help="Baseline date (M/D/YYYY) relative values start from")
    parser.add_argument("--operation", choices=OPERATIONS, default=None,
                        help="Report only this operation")
    parser.add_argument("--output", type=Path, default=None,
                        help="Write date-shifted copies into this directory")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    extension = InjuryDateExtension(
        DateExtensionConfig(base_date=args.base_date, date_table_file=args.table)
    )

    failures = 0
    for path in args.files:
        try:
            values = report_file(path, extension, args.operation)
            if args.output is not None:
                shift_file(path, args.output / path.name, extension)
        except (InvalidDicomError, OSError) as exc:
            logger.error("Could not process %s: %s", path, exc)
            failures += 1
            continue

        print(f"\n{path}")
        for label, value in values.items():
            print(f"  {label:<20} {value or '-'}")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
