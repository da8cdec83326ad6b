"""In-place rewrites of org workflow documents.

Each mutator takes the full document text and returns the full replacement
text. Line-ending style and the trailing-newline state of the input are
kept.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable

from app.errors import MalformedHeading
from app.org_document import HEADING_PATTERN, Document, TaskStates
from app.org_sections import LOG_SECTION, Section, find_child_subsection
from app.org_tasks import find_task

ENTRY_HEADING_PREFIX = re.compile(r"^\*+\s+")


def set_task_state(
    text: str,
    task_id: str,
    new_state: str,
    states: TaskStates | Iterable[str] | None = None,
) -> str:
    """Replace or insert the state keyword on the task's heading line.

    The heading markers, separating whitespace and everything after the
    keyword (title and trailing tags) are kept byte for byte.
    """
    states = TaskStates.coerce(states)
    new_state = states.validate(new_state)

    document = Document.parse(text)
    task = find_task(document.lines, task_id, states)

    original = document.lines[task.start]
    match = HEADING_PATTERN.match(original)
    if not match:
        raise MalformedHeading(task_id, original)

    prefix = match.group("markers") + match.group("space")
    rest = match.group("rest")
    if task.state is not None:
        document.lines[task.start] = prefix + new_state + rest[len(task.state) :]
    elif rest:
        document.lines[task.start] = f"{prefix}{new_state} {rest}"
    else:
        document.lines[task.start] = prefix + new_state
    return document.serialize()


def sanitize_log_entry(entry: str) -> str:
    """Collapse an entry to one line that cannot be read as a heading."""
    normalized = entry.replace("\r\n", "\n").replace("\r", "\n")
    parts = []
    for line in normalized.split("\n"):
        line = ENTRY_HEADING_PREFIX.sub("", line).rstrip()
        if line:
            parts.append(line)
    return " ".join(parts).strip()


def format_log_timestamp(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    stamp = timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def append_task_log(
    text: str,
    task_id: str,
    entry: str,
    timestamp: datetime | None = None,
    states: TaskStates | Iterable[str] | None = None,
) -> str:
    """Append a timestamped bullet under the task's ``Log`` subsection.

    The subsection is created at the end of the task when missing.
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    document = Document.parse(text)
    lines = document.lines
    task = find_task(lines, task_id, states)

    log = find_child_subsection(lines, task.section, LOG_SECTION)
    if log is None:
        insert_at = task.end + 1
        document.insert_lines(
            insert_at, ["*" * (task.depth + 1) + " " + LOG_SECTION, ""]
        )
        log = Section(start=insert_at, end=insert_at + 1, depth=task.depth + 1)

    bullet = f"- [{format_log_timestamp(timestamp)}] {sanitize_log_entry(entry)}"
    insertion_point = log.end + 1
    if lines[insertion_point - 1].strip():
        document.insert_lines(insertion_point, ["", bullet])
    else:
        document.insert_lines(insertion_point, [bullet])
    return document.serialize()
