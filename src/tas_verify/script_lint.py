from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from pathlib import Path

from .markers import is_stale_file_end
from .record import FAST_FORWARD_PREFIX, MAX_FRAMES, Action, RecordSyntaxError, parse_action_line

SEVERITY_RANK = {"info": 0, "warn": 1, "error": 2}

# Starts with a frame count followed by a comma: meant to be an action line.
_LOOKS_LIKE_ACTION_RE = re.compile(r"^\s*\d+\s*,")


@dataclass(frozen=True)
class LintIssue:
    code: str
    severity: str  # "info" | "warn" | "error"
    line: int  # 1-based
    message: str


def lint_script_text(text: str) -> list[LintIssue]:
    issues: list[LintIssue] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith(FAST_FORWARD_PREFIX):
            issues.append(
                LintIssue("TAS011", "info", lineno, "fast-forward line (removed on publish)")
            )
            continue

        if is_stale_file_end(line):
            issues.append(
                LintIssue("TAS010", "info", lineno, "stale FileEnd marker (dropped on verify)")
            )
            continue

        if not _LOOKS_LIKE_ACTION_RE.match(line):
            continue

        try:
            frames, actions, angle = parse_action_line(line)
        except RecordSyntaxError as e:
            issues.append(LintIssue("TAS001", "error", lineno, f"bad action line: {e}"))
            continue

        if Action.FEATHER in actions and angle is None:
            issues.append(LintIssue("TAS002", "warn", lineno, "feather without an angle"))
        if frames > MAX_FRAMES:
            issues.append(
                LintIssue("TAS003", "warn", lineno, f"frame count {frames} exceeds {MAX_FRAMES}")
            )

    return issues


def lint_script_file(path: str | Path) -> list[LintIssue]:
    return lint_script_text(Path(path).read_text(encoding="utf-8"))


def print_issues(issues: list[LintIssue], *, file=None) -> None:
    out = file or sys.stderr
    for i in sorted(issues, key=lambda i: (i.line, -SEVERITY_RANK.get(i.severity, 0))):
        print(f"{i.severity.upper():5} {i.code} line {i.line}: {i.message}", file=out)
