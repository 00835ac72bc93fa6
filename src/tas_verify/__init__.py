#!/usr/bin/env python3
"""
tas_verify

Verify and annotate a TAS input script against a recorded replay.

What it does
- Compacts the script: merges consecutive identical action lines, collapses blank
  runs, drops fast-forward lines and stale verification markers.
- Replays telemetry samples (frame status + overlay text) and stamps
  <SectionStart=...> markers onto the comment that opens each timed section.
- Stamps "#<FileEnd=...> verified at <VerifiedTimestamp=...>" onto the first and
  last line once the replay reaches the final frame.
- Writes the final script with breakpoints and fast-forwards removed.

Requirements
- Python 3.12+

Example
  tas-verify 1A.tas --telemetry 1A.telemetry.jsonl -o 1A.verified.tas --lint
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from collections.abc import Iterator
from datetime import datetime, UTC
from pathlib import Path

from .canonicalize import WorkingSequence, build_working_sequence
from .markers import file_end_line, format_verified_timestamp, section_start_tag
from .record import ACTION_CODES, Action, Record, RecordSyntaxError, parse_action_line
from .render import render
from .session import EditorSurface, TextBuffer, VerificationSession
from .stamper import MarkerStamper, PreviousTime, TimeState, utc_now
from .telemetry import (
    FrameStatus,
    TelemetryParseError,
    TelemetrySample,
    parse_frame_status,
    parse_timer,
)

__all__ = [
    "ACTION_CODES",
    "Action",
    "EditorSurface",
    "FrameStatus",
    "MarkerStamper",
    "PreviousTime",
    "Record",
    "RecordSyntaxError",
    "TelemetryParseError",
    "TelemetrySample",
    "TextBuffer",
    "TimeState",
    "VerificationSession",
    "WorkingSequence",
    "build_working_sequence",
    "file_end_line",
    "format_verified_timestamp",
    "main",
    "parse_action_line",
    "parse_frame_status",
    "parse_iso8601",
    "parse_timer",
    "read_telemetry_log",
    "render",
    "section_start_tag",
]


# -----------------------------
# Helpers
# -----------------------------


def parse_iso8601(s: str) -> datetime:
    """
    Parse a --utc-now value into an aware UTC datetime.

    Accepts "2026-10-18T09:15:02", "2026-10-18T09:15:02Z" and explicit offsets
    ("+00:00", "+0000"). Naive values are taken as UTC.
    """
    s = s.strip()
    if not s:
        raise ValueError("empty datetime string")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    # Python wants "+00:00", not "+0000".
    m = re.match(r"^(.*)([+-]\d{2})(\d{2})$", s)
    if m:
        s = f"{m.group(1)}{m.group(2)}:{m.group(3)}"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def read_telemetry_log(path: str | Path) -> Iterator[tuple[str, str]]:
    """
    Yield (frame_status, overlay_text) pairs from a JSON-lines replay log.

    Each non-empty line is an object: {"status": "...", "overlay": "..."}.
    """
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{lineno}: invalid JSON: {e}") from e
            if not isinstance(obj, dict):
                raise ValueError(f"{path}:{lineno}: expected an object")
            yield str(obj.get("status") or ""), str(obj.get("overlay") or "")


# -----------------------------
# CLI
# -----------------------------


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="tas-verify",
        description="Compact a TAS input script and stamp section/file-end timing markers from replay telemetry.",
    )
    ap.add_argument("script", help="Input script (.tas)")
    ap.add_argument(
        "-o",
        "--out",
        default=None,
        help="Output path (default: overwrite the input script)",
    )
    ap.add_argument(
        "--telemetry",
        metavar="LOG",
        default=None,
        help="JSON-lines replay log of {status, overlay} samples. Without it the script is only compacted.",
    )
    ap.add_argument(
        "--keep-fast-forward",
        action="store_true",
        help="Write the working text (breakpoints kept) instead of the final publish.",
    )
    ap.add_argument(
        "--utc-now",
        default=None,
        help="Fixed verification timestamp (ISO-8601) instead of the current time.",
    )
    ap.add_argument(
        "--lint",
        action="store_true",
        help="Lint the written script and exit non-zero on errors.",
    )
    ap.add_argument(
        "--lint-strict",
        action="store_true",
        help="Like --lint, but also fails on warnings.",
    )

    args = ap.parse_args(argv)

    script_path = Path(args.script)
    out_path = Path(args.out) if args.out else script_path

    try:
        text = script_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"ERROR: Could not read script: {script_path}\n{e}", file=sys.stderr)
        return 2

    clock = utc_now
    if args.utc_now:
        try:
            fixed = parse_iso8601(args.utc_now)
        except ValueError as e:
            print(f"ERROR: Bad --utc-now value: {args.utc_now}\n{e}", file=sys.stderr)
            return 2
        clock = lambda: fixed  # noqa: E731

    buffer = TextBuffer(text)
    session = VerificationSession(buffer, clock=clock)
    sequence = session.begin()

    print("== Script ==")
    print(f"Input: {script_path}")
    print(f"Working lines: {len(sequence)}, total frames: {sequence.total_frames}")

    samples = 0
    if args.telemetry:
        try:
            for status, overlay in read_telemetry_log(args.telemetry):
                session.on_telemetry(status, overlay)
                samples += 1
        except (OSError, ValueError) as e:
            print(f"ERROR: Could not read telemetry log: {args.telemetry}\n{e}", file=sys.stderr)
            return 2
        print("== Telemetry ==")
        print(f"Samples: {samples} ({session.dropped_samples} dropped)")
        if sequence.first.notes:
            print(f"File end: {sequence.first.notes}")
        else:
            print("WARNING: replay never reached the final frame; no FileEnd marker", file=sys.stderr)

    if args.keep_fast_forward:
        out_text = render(sequence, final_pass=False)
    else:
        out_text = session.end()

    try:
        out_path.write_text(out_text, encoding="utf-8")
    except OSError as e:
        print(f"ERROR: Could not write script: {out_path}\n{e}", file=sys.stderr)
        return 2
    print(f"Wrote script: {out_path}")

    if args.lint or args.lint_strict:
        from tas_verify.script_lint import SEVERITY_RANK, lint_script_file, print_issues

        issues = lint_script_file(out_path)
        if issues:
            print(f"== Script Lint ({len(issues)} issue(s)) ==", file=sys.stderr)
            print_issues(issues)

        fail_on = "warn" if args.lint_strict else "error"
        fail_rank = SEVERITY_RANK[fail_on]
        if any(SEVERITY_RANK.get(i.severity, 0) >= fail_rank for i in issues):
            print(f"ERROR: Script lint failed (fail-on {fail_on}).", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
