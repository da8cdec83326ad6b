"""Section boundaries, property drawers and named subsections."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from app.org_document import heading_depth, heading_remainder, is_heading

PROPERTIES_START = ":PROPERTIES:"
PROPERTIES_END = ":END:"
PROPERTY_PATTERN = re.compile(r"^:(?P<key>[A-Za-z0-9_@#%-]+):\s*(?P<value>.*)$")

AGENT_CONTEXT_SECTION = "Agent Context"
LOG_SECTION = "Log"


@dataclass(frozen=True)
class Section:
    start: int
    end: int
    depth: int


def compute_range(lines: Sequence[str], heading_index: int) -> tuple[int, int]:
    """Return the inclusive line range owned by the heading at ``heading_index``.

    The range runs until the line before the next heading of equal or
    shallower depth, or to the last line of the document.
    """
    depth = heading_depth(lines[heading_index])
    for index in range(heading_index + 1, len(lines)):
        line = lines[index]
        if is_heading(line) and heading_depth(line) <= depth:
            return heading_index, index - 1
    return heading_index, len(lines) - 1


def find_properties(lines: Sequence[str], start: int, end: int) -> dict[str, str]:
    """Read the property drawer belonging to the heading at ``start``.

    Only the heading's own body is searched; the drawer of a nested heading
    is never attributed to its parent. A drawer without ``:END:`` yields no
    properties.
    """
    index = start + 1 if is_heading(lines[start]) else start
    while index <= end:
        line = lines[index]
        if is_heading(line):
            return {}
        if line.strip() == PROPERTIES_START:
            break
        index += 1
    else:
        return {}

    properties: dict[str, str] = {}
    for index in range(index + 1, end + 1):
        if is_heading(lines[index]):
            break
        stripped = lines[index].strip()
        if stripped == PROPERTIES_END:
            return properties
        match = PROPERTY_PATTERN.match(stripped)
        if match:
            properties[match.group("key")] = match.group("value")
    return {}


def find_child_subsection(
    lines: Sequence[str], parent: Section, name: str
) -> Section | None:
    """Locate the first direct child heading titled exactly ``name``."""
    child_depth = parent.depth + 1
    for index in range(parent.start + 1, parent.end + 1):
        line = lines[index]
        if not is_heading(line) or heading_depth(line) != child_depth:
            continue
        if (heading_remainder(line) or "").strip() != name:
            continue

        end = parent.end
        for next_index in range(index + 1, parent.end + 1):
            next_line = lines[next_index]
            if is_heading(next_line) and heading_depth(next_line) <= child_depth:
                end = next_index - 1
                break
        return Section(start=index, end=end, depth=child_depth)
    return None


def subsection_body(lines: Sequence[str], section: Section | None) -> str:
    if section is None:
        return ""
    return "\n".join(lines[section.start + 1 : section.end + 1]).strip()
