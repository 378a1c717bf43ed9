"""Write a task checkbox change back into the raw markdown, one line only."""

from __future__ import annotations

import logging
import re

log = logging.getLogger(__name__)

# "- [ ]", "- [x]" or "- [X]" anywhere on the line
TASK_MARKER_RE = re.compile(r"- \[[ xX]\]")

CHECKED_MARKER = "- [x]"
UNCHECKED_MARKER = "- [ ]"


def apply_task_toggle(raw_text: str, line_index: int, new_checked: bool) -> str:
    """Return *raw_text* with the task marker on *line_index* set to *new_checked*.

    Only the first marker on that line changes; every other character of the
    document is left as it was.  An out-of-range *line_index* (a stale
    callback after the text shrank) returns the text unchanged.
    """
    lines = raw_text.split("\n")
    if not 0 <= line_index < len(lines):
        log.debug("Task toggle for line %d ignored: text has %d lines", line_index, len(lines))
        return raw_text

    replacement = CHECKED_MARKER if new_checked else UNCHECKED_MARKER
    lines[line_index] = TASK_MARKER_RE.sub(replacement, lines[line_index], count=1)
    return "\n".join(lines)
