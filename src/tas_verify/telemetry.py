"""
Telemetry sample parsing.

The game reports two strings per poll:
- frame status:  <LINE>[<LINE_TEXT>(<LINE_FRAME> / <MAX_LINE_FRAME> : <FRAME>)]
  e.g. "12[  20,R(1 / 20 : 315)]"
- overlay text:  free-form status block containing "Timer: 12.345"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Line text is greedy so delimiters inside it are skipped; the counter group is
# the last "(a/b:c)" in the string.
_FRAME_STATUS_RE = re.compile(
    r"^\s*(?P<line_number>\d+)\s*\["
    r"(?P<line_text>.*)"
    r"\(\s*(?P<line_frame>\d+)\s*/\s*(?P<max_line_frame>\d+)\s*:\s*(?P<frame>\d+)\s*\)",
    re.DOTALL,
)
_TIMER_RE = re.compile(r"Timer: (\d+\.\d+)")


class TelemetryParseError(ValueError):
    pass


@dataclass(frozen=True)
class FrameStatus:
    line_number: int  # 1-based
    line_text: str
    line_frame: int
    max_line_frame: int
    frame: int  # absolute replay frame

    @property
    def current_line(self) -> int:
        return self.line_number - 1


def parse_frame_status(text: str) -> FrameStatus:
    if not text or not text.strip():
        raise TelemetryParseError("empty frame status")
    m = _FRAME_STATUS_RE.match(text)
    if not m:
        raise TelemetryParseError(f"malformed frame status: {text.strip()!r}")
    return FrameStatus(
        line_number=int(m.group("line_number")),
        line_text=m.group("line_text").strip(),
        line_frame=int(m.group("line_frame")),
        max_line_frame=int(m.group("max_line_frame")),
        frame=int(m.group("frame")),
    )


def parse_timer(overlay_text: str) -> str | None:
    m = _TIMER_RE.search(overlay_text or "")
    return m.group(1) if m else None


@dataclass(frozen=True)
class TelemetrySample:
    status: FrameStatus
    time: str | None

    @classmethod
    def parse(cls, frame_status: str, overlay_text: str) -> TelemetrySample:
        if not overlay_text or not overlay_text.strip():
            raise TelemetryParseError("empty overlay text")
        return cls(status=parse_frame_status(frame_status), time=parse_timer(overlay_text))
