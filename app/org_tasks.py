"""Task extraction from org workflow documents.

A task is any heading whose property drawer carries a non-empty ``ID``.
Tasks are re-derived from the full text on every call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from app.errors import TaskNotFound
from app.org_document import Document, TaskStates, is_heading, parse_heading
from app.org_sections import (
    AGENT_CONTEXT_SECTION,
    Section,
    compute_range,
    find_child_subsection,
    find_properties,
    subsection_body,
)


@dataclass(frozen=True)
class OrgTask:
    id: str
    depth: int
    raw_heading: str
    title: str
    state: str | None
    properties: dict[str, str] = field(default_factory=dict)
    start: int = 0
    end: int = 0

    @property
    def section(self) -> Section:
        return Section(start=self.start, end=self.end, depth=self.depth)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "state": self.state, "title": self.title}


@dataclass(frozen=True)
class TaskContext:
    id: str
    state: str | None
    title: str
    properties: dict[str, str]
    agent_context: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state,
            "title": self.title,
            "properties": dict(self.properties),
            "agentContext": self.agent_context,
        }


def iter_tasks(
    lines: list[str], states: TaskStates | Iterable[str] | None = None
) -> Iterator[OrgTask]:
    states = TaskStates.coerce(states)
    for index, line in enumerate(lines):
        if not is_heading(line):
            continue
        heading = parse_heading(line, states)
        start, end = compute_range(lines, index)
        properties = find_properties(lines, start, end)
        task_id = properties.get("ID", "")
        if not task_id:
            continue
        yield OrgTask(
            id=task_id,
            depth=heading.depth,
            raw_heading=line,
            title=heading.title,
            state=heading.state,
            properties=properties,
            start=start,
            end=end,
        )


def extract_tasks(
    text: str, states: TaskStates | Iterable[str] | None = None
) -> list[OrgTask]:
    """Return every task in document order. Duplicate IDs are all returned."""
    return list(iter_tasks(Document.parse(text).lines, states))


def find_task(
    lines: list[str], task_id: str, states: TaskStates | Iterable[str] | None = None
) -> OrgTask:
    for task in iter_tasks(lines, states):
        if task.id == task_id:
            return task
    raise TaskNotFound(task_id)


def find_task_by_id(
    text: str, task_id: str, states: TaskStates | Iterable[str] | None = None
) -> OrgTask:
    """Return the first task carrying ``task_id``."""
    return find_task(Document.parse(text).lines, task_id, states)


def get_task_context(
    text: str, task_id: str, states: TaskStates | Iterable[str] | None = None
) -> TaskContext:
    lines = Document.parse(text).lines
    task = find_task(lines, task_id, states)
    section = find_child_subsection(lines, task.section, AGENT_CONTEXT_SECTION)
    return TaskContext(
        id=task.id,
        state=task.state,
        title=task.title,
        properties=dict(task.properties),
        agent_context=subsection_body(lines, section),
    )
