from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .markers import is_stale_file_end, is_zero_noise, strip_section_starts
from .record import BREAKPOINT, Action, Record


@dataclass
class WorkingSequence:
    records: list[Record]
    total_frames: int

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def first(self) -> Record:
        return self.records[0]

    @property
    def last(self) -> Record:
        return self.records[-1]


def _mergeable(prev: Record, cur: Record) -> bool:
    if not prev.is_action() or prev.fast_forward:
        return False
    if cur.actions_signature() != prev.actions_signature():
        return False
    return not cur.has_action(Action.FEATHER) or cur.angle == prev.angle


def build_working_sequence(raw_lines: Iterable[str]) -> WorkingSequence:
    """
    Compact raw editor lines into the working sequence for a verification run.

    - fast-forward lines are dropped
    - runs of blank lines collapse to one breakpoint + blank separator
    - comments get a breakpoint in front; stale FileEnd lines, bare zeros and
      old SectionStart tags are removed
    - consecutive identical action lines merge into one
    - a blank marker carrier is reserved at both ends
    """
    records: list[Record] = [Record()]
    total_frames = 0

    for raw in raw_lines:
        cur = Record.parse(raw)
        last = records[-1]

        if cur.fast_forward:
            continue

        if cur.frames == 0:
            if not cur.notes.strip():
                if not last.is_blank():
                    records.append(Record.parse(BREAKPOINT))
                    records.append(Record())
                continue

            trimmed = cur.notes.strip()
            if is_stale_file_end(trimmed) or is_zero_noise(trimmed):
                continue
            content = strip_section_starts(cur.notes)
            cleaned = Record.parse(content)
            # A stamped line that reads as input once its tags are gone is noise.
            if cleaned.is_blank() or cleaned.is_action() or cleaned.fast_forward or is_zero_noise(content):
                continue
            records.append(Record.parse(BREAKPOINT))
            records.append(cleaned)
            continue

        total_frames += cur.frames
        if cur.has_action(Action.FEATHER):
            # Feathered lines are always written as "frames,F,angle".
            cur = Record(frames=cur.frames, actions=Action.FEATHER, angle=cur.angle)
        if _mergeable(last, cur):
            last.frames += cur.frames
        else:
            records.append(cur)

    if not records[-1].is_blank():
        records.append(Record())

    return WorkingSequence(records=records, total_frames=total_frames)
