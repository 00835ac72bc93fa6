from __future__ import annotations

import re
from datetime import datetime, UTC

SECTION_START = "SectionStart"
FILE_END = "FileEnd"
VERIFIED_TIMESTAMP = "VerifiedTimestamp"

ZERO_TIME = "0.000"

# Marker values never contain ">", so a lazy match stops at the tag's own end.
SECTION_START_TAG_RE = re.compile(r"<" + SECTION_START + r"=.*?>")
STALE_FILE_END_RE = re.compile(r"^#<" + FILE_END + r"=.*?>")
ZEROS_RE = re.compile(r"^0+$")


def marker_tag(name: str, value: str) -> str:
    return f"<{name}={value}>"


def section_start_tag(time: str) -> str:
    return marker_tag(SECTION_START, time)


def format_verified_timestamp(dt: datetime) -> str:
    """ISO-8601 to the second, UTC, no offset suffix: 2026-10-18T09:15:02."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S")


def file_end_line(time: str, verified_at: datetime) -> str:
    return (
        "#"
        + marker_tag(FILE_END, time)
        + " verified at "
        + marker_tag(VERIFIED_TIMESTAMP, format_verified_timestamp(verified_at))
    )


def strip_section_starts(notes: str) -> str:
    return SECTION_START_TAG_RE.sub("", notes).rstrip()


def is_stale_file_end(notes: str) -> bool:
    return STALE_FILE_END_RE.match(notes.strip()) is not None


def is_zero_noise(notes: str) -> bool:
    return ZEROS_RE.match(notes.strip()) is not None
