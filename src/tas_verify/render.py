from __future__ import annotations

from collections.abc import Iterable

from .record import Record

NEWLINE = "\n"


def render(records: Iterable[Record], final_pass: bool = False) -> str:
    """
    Serialize records back to script text.

    The final pass drops fast-forward lines (breakpoints included); they only
    exist to speed up replay while verifying.
    """
    lines = [r.render() for r in records if not (final_pass and r.fast_forward)]
    return NEWLINE.join(lines).rstrip() + NEWLINE
