"""
Input records: one logical line of a TAS input script.

Line shapes
- Action line:       "  20,R,J" / "5,F,45" (frames, action codes, feather angle)
- Fast-forward line: "***", "***!", "***10" (replay acceleration / breakpoints)
- Anything else:     comment, read, blank; kept verbatim in `notes`
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Flag, auto


class Action(Flag):
    NONE = 0
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()
    JUMP = auto()
    JUMP2 = auto()
    DASH = auto()
    DASH2 = auto()
    DEMO_DASH = auto()
    GRAB = auto()
    START = auto()
    RESTART = auto()
    JOURNAL = auto()
    CONFIRM = auto()
    FEATHER = auto()


# Render order matters: signatures and output both follow it.
ACTION_CODES: dict[str, Action] = {
    "L": Action.LEFT,
    "R": Action.RIGHT,
    "U": Action.UP,
    "D": Action.DOWN,
    "J": Action.JUMP,
    "K": Action.JUMP2,
    "X": Action.DASH,
    "C": Action.DASH2,
    "Z": Action.DEMO_DASH,
    "G": Action.GRAB,
    "S": Action.START,
    "Q": Action.RESTART,
    "N": Action.JOURNAL,
    "O": Action.CONFIRM,
    "F": Action.FEATHER,
}

FAST_FORWARD_PREFIX = "***"
BREAKPOINT = "***!"
MAX_FRAMES = 9999

_ACTION_LINE_RE = re.compile(r"^\s*(\d+)\s*(?:,(.*))?$")
_ANGLE_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


class RecordSyntaxError(ValueError):
    pass


def format_angle(angle: float) -> str:
    """Shortest plain decimal that parses back to the same float ("45", "0.00001")."""
    s = format(Decimal(repr(float(angle))), "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def codes_for(actions: Action) -> list[str]:
    return [code for code, flag in ACTION_CODES.items() if flag in actions]


def parse_action_line(text: str) -> tuple[int, Action, float | None]:
    """
    Strictly parse an action line into (frames, actions, angle).

    Raises RecordSyntaxError when the text is not an action line, names an
    unknown code, or carries an angle without the feather code.
    """
    m = _ACTION_LINE_RE.match(text)
    if not m:
        raise RecordSyntaxError(f"not an action line: {text.strip()!r}")
    frames = int(m.group(1))
    rest = m.group(2)

    actions = Action.NONE
    angle: float | None = None
    if rest is not None:
        for token in (t.strip() for t in rest.split(",")):
            if not token:
                continue
            if _ANGLE_RE.match(token):
                if Action.FEATHER not in actions:
                    raise RecordSyntaxError(f"angle {token!r} without feather code")
                if angle is not None:
                    raise RecordSyntaxError(f"second angle {token!r}")
                angle = float(token)
                continue
            if angle is not None:
                raise RecordSyntaxError(f"action code {token!r} after angle")
            for ch in token.upper():
                flag = ACTION_CODES.get(ch)
                if flag is None:
                    raise RecordSyntaxError(f"unknown action code {ch!r}")
                actions |= flag
    return frames, actions, angle


@dataclass
class Record:
    frames: int = 0
    actions: Action = Action.NONE
    angle: float | None = None
    fast_forward: bool = False
    notes: str = ""

    @classmethod
    def parse(cls, raw_line: str) -> Record:
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            return cls()
        if line.lstrip().startswith(FAST_FORWARD_PREFIX):
            rest = line.lstrip()[len(FAST_FORWARD_PREFIX) :]
            return cls(fast_forward=True, notes=rest.rstrip())
        try:
            frames, actions, angle = parse_action_line(line)
        except RecordSyntaxError:
            return cls(notes=line)
        if frames == 0:
            # "0" and friends carry no input; keep the text so it can be filtered.
            return cls(notes=line)
        return cls(frames=frames, actions=actions, angle=angle)

    def render(self) -> str:
        if self.fast_forward:
            return FAST_FORWARD_PREFIX + self.notes
        if self.frames == 0:
            return self.notes
        parts = [str(self.frames), *codes_for(self.actions)]
        if self.has_action(Action.FEATHER) and self.angle is not None:
            parts.append(format_angle(self.angle))
        return ",".join(parts)

    def __str__(self) -> str:
        return self.render()

    def actions_signature(self) -> str:
        return ",".join(codes_for(self.actions))

    def has_action(self, flag: Action) -> bool:
        return flag in self.actions and flag is not Action.NONE

    def is_action(self) -> bool:
        return self.frames > 0

    def is_blank(self) -> bool:
        return not self.render().strip()
