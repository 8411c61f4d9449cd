"""Cached patient ID → injury timestamp table backed by a CSV file.

Table format: one header line plus data lines of the form::

    PatientID,InjuryDate,InjuryTime,[the rest unused]
    1005,4/14/2010,21:40:00,4/14/2010

Fields are split on a bare comma; quoting is not supported.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from injury_dates.config import (
    STALENESS_THRESHOLD_MS,
    TABLE_DATE_COLUMN,
    TABLE_DELIMITER,
    TABLE_ENCODING,
    TABLE_ID_COLUMN,
    TABLE_TIME_COLUMN,
)
from injury_dates.errors import NotFoundError, ParseError, ResourceLoadError
from injury_dates.relative_time import parse_table_datetime

logger = logging.getLogger(__name__)


def parse_table_text(text: str) -> dict[str, datetime]:
    """Parse the full table text into a new ``{patient_id: injury}`` dict.

    The first line is a header and is skipped.  Later lines win over earlier
    lines with the same patient ID.

    Raises
    ------
    ResourceLoadError
        On the first malformed line; nothing is returned for a partial pass.
    """
    entries: dict[str, datetime] = {}
    lines = [line.rstrip("\r") for line in text.lstrip("\ufeff").split("\n")]
    if lines[-1] == "":
        lines.pop()  # final newline
    for line_no, line in enumerate(lines[1:], start=2):
        cells = line.split(TABLE_DELIMITER)
        if len(cells) <= TABLE_TIME_COLUMN:
            raise ResourceLoadError(
                f"Line {line_no}: expected at least {TABLE_TIME_COLUMN + 1} "
                f"cells, found {len(cells)}"
            )
        patient_id = cells[TABLE_ID_COLUMN].strip()
        date_cell = cells[TABLE_DATE_COLUMN].strip()
        time_cell = cells[TABLE_TIME_COLUMN].strip()
        try:
            entries[patient_id] = parse_table_datetime(f"{date_cell} {time_cell}")
        except ParseError as exc:
            raise ResourceLoadError(f"Line {line_no}: {exc}") from exc
    return entries


class TimeTable:
    """Injury timestamps keyed by patient ID, reloaded when the file changes.

    Not thread-safe on its own; :class:`~injury_dates.extension.InjuryDateExtension`
    serialises refresh-and-lookup around its own lock.
    """

    def __init__(
        self, path: Path, staleness_threshold_ms: int = STALENESS_THRESHOLD_MS
    ) -> None:
        self.path = Path(path)
        self.staleness_threshold_ms = staleness_threshold_ms
        self.last_loaded_mtime_ms: Optional[int] = None
        self._entries: dict[str, datetime] = {}
        self._failed_mtime_ms: Optional[int] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self._entries

    def _mtime_ms(self) -> int:
        try:
            return self.path.stat().st_mtime_ns // 1_000_000
        except (OSError, ValueError) as exc:  # ValueError: NUL in path
            raise ResourceLoadError(f"Cannot stat {self.path}: {exc}") from exc

    def is_stale(self, mtime_ms: int) -> bool:
        if self.last_loaded_mtime_ms is None:
            return True
        return mtime_ms - self.last_loaded_mtime_ms > self.staleness_threshold_ms

    def reload(self) -> int:
        """Load the whole file, replacing the current entries.

        Returns the number of entries loaded.

        Raises
        ------
        ResourceLoadError
            If the file cannot be read or any line is malformed.  The current
            entries are left untouched.
        """
        mtime_ms = self._mtime_ms()
        try:
            text = self.path.read_text(encoding=TABLE_ENCODING)
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceLoadError(f"Cannot read {self.path}: {exc}") from exc

        try:
            entries = parse_table_text(text)
        except ResourceLoadError as exc:
            raise ResourceLoadError(f"{self.path}: {exc}") from exc

        self._entries = entries
        self.last_loaded_mtime_ms = mtime_ms
        self._failed_mtime_ms = None
        logger.info("Loaded %d injury dates from %s", len(entries), self.path)
        return len(entries)

    def refresh_if_stale(self) -> bool:
        """Reload if never loaded or the file changed beyond the threshold.

        A failed reload keeps the previous entries and is logged once per
        file modification time.  Returns True only when a reload succeeded.
        """
        mtime_ms = -1  # file missing
        try:
            mtime_ms = self._mtime_ms()
            if not self.is_stale(mtime_ms):
                return False
            self.reload()
        except ResourceLoadError as exc:
            if mtime_ms != self._failed_mtime_ms:
                self._failed_mtime_ms = mtime_ms
                logger.warning("Keeping %d cached injury dates: %s", len(self), exc)
            return False
        return True

    def lookup(self, patient_id: str) -> datetime:
        """Return the injury timestamp for *patient_id*."""
        try:
            return self._entries[patient_id]
        except KeyError:
            raise NotFoundError(f"No injury date for patient {patient_id!r}") from None
