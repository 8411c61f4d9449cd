"""Rewrite DICOM date/time elements relative to the patient's injury.

Each (date, time) keyword pair in RELATIVE_DATE_TIME_PAIRS is replaced with
the injury-relative date and time.  When no value can be computed (unknown
patient, malformed element) the pair is cleared so the real date never
reaches the output.
"""

import logging
from pathlib import Path

import pydicom
from pydicom.dataset import Dataset

from injury_dates.config import RELATIVE_DATE_TIME_PAIRS
from injury_dates.extension import DicomRecordContext, InjuryDateExtension

logger = logging.getLogger(__name__)


def shift_dataset_dates(
    ds: Dataset,
    extension: InjuryDateExtension,
    pairs=RELATIVE_DATE_TIME_PAIRS,
) -> list[str]:
    """Shift date/time pairs of *ds* in place.

    Pairs whose date element is absent are skipped.  Returns the keywords
    of every element written (shifted or cleared).
    """
    context = DicomRecordContext(ds)
    ext_id = extension.config.extension_id
    changed: list[str] = []

    for date_kw, time_kw in pairs:
        if date_kw not in ds:
            continue
        # Both values are computed before either element is overwritten.
        new_date = extension.call([ext_id, "getRelativeDate", date_kw, time_kw], context)
        new_time = extension.call([ext_id, "getRelativeTime", date_kw, time_kw], context)

        setattr(ds, date_kw, new_date)
        changed.append(date_kw)
        if time_kw in ds:
            setattr(ds, time_kw, new_time)
            changed.append(time_kw)

        if not new_date:
            logger.warning(
                "Cleared %s/%s: no injury-relative value for this record",
                date_kw, time_kw,
            )
    return changed


def shift_file(src: Path, dst: Path, extension: InjuryDateExtension) -> Path:
    """Read *src*, shift its dates and save the result to *dst*."""
    ds = pydicom.dcmread(src)
    changed = shift_dataset_dates(ds, extension)

    dst = Path(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    ds.save_as(dst)
    logger.info("Shifted %d elements %s -> %s", len(changed), Path(src).name, dst)
    return dst
