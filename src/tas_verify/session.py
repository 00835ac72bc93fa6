from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from .canonicalize import WorkingSequence, build_working_sequence
from .render import render
from .stamper import MarkerStamper, utc_now, warn
from .telemetry import TelemetryParseError, TelemetrySample


class EditorSurface(Protocol):
    def lines(self) -> list[str]: ...

    def replace_text(self, text: str) -> None: ...


class TextBuffer:
    """In-memory editor surface."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def lines(self) -> list[str]:
        return self.text.splitlines()

    def replace_text(self, text: str) -> None:
        self.text = text


class VerificationSession:
    """
    One verification run over an editor surface.

    begin() compacts the surface text and re-renders it with breakpoints,
    on_telemetry() stamps markers while the replay runs, end() publishes the
    final text without fast-forward lines.
    """

    def __init__(
        self,
        surface: EditorSurface,
        *,
        clock: Callable[[], datetime] = utc_now,
        on_warning: Callable[[str], None] = warn,
    ) -> None:
        self.surface = surface
        self.clock = clock
        self.on_warning = on_warning
        self.dropped_samples = 0
        self._stamper: MarkerStamper | None = None

    @property
    def active(self) -> bool:
        return self._stamper is not None

    @property
    def sequence(self) -> WorkingSequence | None:
        return self._stamper.sequence if self._stamper else None

    @property
    def total_frames(self) -> int:
        return self._stamper.total_frames if self._stamper else 0

    @property
    def stamper(self) -> MarkerStamper | None:
        return self._stamper

    def begin(self) -> WorkingSequence:
        sequence = build_working_sequence(self.surface.lines())
        self._stamper = MarkerStamper(sequence, clock=self.clock, on_warning=self.on_warning)
        self.dropped_samples = 0
        self.surface.replace_text(render(sequence, final_pass=False))
        return sequence

    def on_telemetry(self, frame_status: str, overlay_text: str) -> None:
        if self._stamper is None:
            return
        try:
            sample = TelemetrySample.parse(frame_status, overlay_text)
        except TelemetryParseError:
            self.dropped_samples += 1
            return
        self._stamper.feed(sample)

    def end(self) -> str:
        if self._stamper is None:
            raise RuntimeError("no verification session in progress")
        text = render(self._stamper.sequence, final_pass=True)
        self.surface.replace_text(text)
        self._stamper = None
        return text
