"""
injury_dates — Injury-relative date shifting for DICOM anonymisation.

Looks up a per-patient reference "injury" timestamp in a CSV table and
derives replacement values for date/time elements of the record being
anonymised.

Date Shifting Approach
----------------------
Real calendar dates are never written to the anonymised output.  Every
timestamp is re-anchored on a configured baseline date:

    relative = baseline + (observed - injury)

so the spacing between events for the same patient is preserved while the
absolute dates are not.  Any failure (unknown patient, malformed element
value, unreadable table) produces an empty replacement value instead of an
exception, so a single bad lookup never aborts an entire record.
"""

__version__ = "0.1.0"
