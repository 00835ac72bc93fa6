from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum

from .canonicalize import WorkingSequence
from .markers import ZERO_TIME, file_end_line, section_start_tag
from .telemetry import TelemetrySample


class TimeState(Enum):
    KNOWN = "known"
    # Line frame 0 already stamped; the engine can sit on frame 0 for a while
    # after a level transition, so further frame-0 samples are ignored.
    AWAITING_POST_ZERO = "awaiting_post_zero"


@dataclass(frozen=True)
class PreviousTime:
    state: TimeState
    time: str

    @classmethod
    def known(cls, time: str) -> PreviousTime:
        return cls(TimeState.KNOWN, time)

    @classmethod
    def awaiting_post_zero(cls) -> PreviousTime:
        return cls(TimeState.AWAITING_POST_ZERO, ZERO_TIME)

    def differs_from(self, time: str) -> bool:
        return self.state is not TimeState.KNOWN or self.time != time


def utc_now() -> datetime:
    return datetime.now(UTC)


def warn(msg: str) -> None:
    print(f"WARNING: {msg}", file=sys.stderr)


class MarkerStamper:
    """
    Stamps timing markers into a working sequence from telemetry samples.

    Only the notes of existing Records are mutated. One transition fires per
    sample, in priority order: replay restart (frame 1), file end (frame ==
    total frames), section boundary (line frame 0, or line frame 1 with a new
    timer value).
    """

    def __init__(
        self,
        sequence: WorkingSequence,
        *,
        clock: Callable[[], datetime] = utc_now,
        on_warning: Callable[[str], None] = warn,
    ) -> None:
        self.sequence = sequence
        self.previous_time = PreviousTime.known(ZERO_TIME)
        self.clock = clock
        self.on_warning = on_warning

    @property
    def total_frames(self) -> int:
        return self.sequence.total_frames

    def feed(self, sample: TelemetrySample) -> None:
        status = sample.status
        time = sample.time if sample.time and sample.time.strip() else None

        if status.frame == 1:
            time = ZERO_TIME
        elif status.frame == self.total_frames:
            self._stamp_file_end(time or self.previous_time.time)
        elif status.line_frame == 0 or (
            time is not None and status.line_frame == 1 and self.previous_time.differs_from(time)
        ):
            if status.line_frame == 0:
                if self.previous_time.state is TimeState.AWAITING_POST_ZERO:
                    return
                time = ZERO_TIME
            self._stamp_section_start(status.current_line, time)
            if status.line_frame == 0:
                self.previous_time = PreviousTime.awaiting_post_zero()
                return

        if time is not None:
            self.previous_time = PreviousTime.known(time)

    def _stamp_file_end(self, time: str) -> None:
        line = file_end_line(time, self.clock())
        self.sequence.first.notes = line
        self.sequence.last.notes = line

    def _stamp_section_start(self, current_line: int, time: str) -> None:
        records = self.sequence.records
        if current_line - 1 <= 0:
            return
        if current_line >= len(records):
            self.on_warning(
                f"telemetry line {current_line + 1} is past the end of the script "
                f"({len(records)} lines); sample skipped"
            )
            return
        if records[current_line - 1].is_action():
            return

        # Linear scan back to the first real line; index 0 is the marker carrier.
        for i in range(current_line - 1, 0, -1):
            rec = records[i]
            if rec.frames == 0 and not rec.fast_forward and rec.notes.strip():
                rec.notes = " ".join([rec.notes, section_start_tag(time)])
                return
        self.on_warning(f"no comment line before line {current_line + 1} to mark section start")
