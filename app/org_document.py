"""Line model and heading primitives for org workflow documents."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from app.errors import InvalidState

HEADING_PATTERN = re.compile(r"^(?P<markers>\*+)(?P<space>\s+)(?P<rest>.*)$")
LINE_BREAK_PATTERN = re.compile(r"(\r\n|\r|\n)")
STATE_KEYWORD_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

EOL_LF = "\n"
EOL_CRLF = "\r\n"
EOL_CR = "\r"

DEFAULT_STATES: tuple[str, ...] = (
    "BACKLOG",
    "TODO",
    "IN-PROGRESS",
    "IN-REVIEW",
    "DONE",
    "CANCELLED",
)


@dataclass(frozen=True)
class TaskStates:
    """Caller-configured set of status keywords.

    Keywords must be non-empty, unique and made of letters, digits, ``-``
    and ``_`` so they read back as a single heading token.
    """

    keywords: tuple[str, ...] = DEFAULT_STATES

    def __post_init__(self) -> None:
        keywords = tuple(self.keywords)
        if not keywords:
            raise ValueError("at least one state keyword is required")
        for keyword in keywords:
            if not isinstance(keyword, str) or not STATE_KEYWORD_PATTERN.fullmatch(keyword):
                raise ValueError(f"invalid state keyword: {keyword!r}")
        if len(set(keywords)) != len(keywords):
            raise ValueError("state keywords must be unique")
        object.__setattr__(self, "keywords", keywords)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and value in self.keywords

    def __iter__(self):
        return iter(self.keywords)

    def validate(self, value: object) -> str:
        """Return ``value`` if it is a configured keyword, else raise."""
        if value not in self:
            raise InvalidState(value, self.keywords)
        return value  # type: ignore[return-value]

    @classmethod
    def coerce(cls, states: "TaskStates | Iterable[str] | None") -> "TaskStates":
        if states is None:
            return cls()
        if isinstance(states, TaskStates):
            return states
        return cls(tuple(states))


@dataclass(frozen=True)
class Heading:
    depth: int
    state: str | None
    title: str


@dataclass
class Document:
    """Workflow text split into lines, each remembering its own terminator.

    ``lines`` never contains the empty artifact that follows a final line
    terminator; ``ends_with_newline`` records it instead. ``eol`` is the
    dominant terminator and is used for inserted lines.
    """

    lines: list[str] = field(default_factory=list)
    endings: list[str] = field(default_factory=list)
    eol: str = EOL_LF
    ends_with_newline: bool = False

    @classmethod
    def parse(cls, text: str) -> "Document":
        parts = LINE_BREAK_PATTERN.split(text)
        lines = parts[0::2]
        separators = parts[1::2]

        counts = Counter(separators)
        eol = counts.most_common(1)[0][0] if counts else EOL_LF
        ends_with_newline = bool(separators) and lines[-1] == ""
        if ends_with_newline or lines == [""]:
            lines.pop()
        endings = list(separators)
        if len(endings) < len(lines):
            endings.append(eol)
        return cls(
            lines=lines,
            endings=endings,
            eol=eol,
            ends_with_newline=ends_with_newline,
        )

    def insert_lines(self, index: int, new_lines: Sequence[str]) -> None:
        self.lines[index:index] = list(new_lines)
        self.endings[index:index] = [self.eol] * len(new_lines)

    def serialize(self) -> str:
        parts: list[str] = []
        for line, ending in zip(self.lines, self.endings):
            parts.append(line)
            parts.append(ending)
        if parts and not self.ends_with_newline:
            parts.pop()
        return "".join(parts)


def is_heading(line: str) -> bool:
    return HEADING_PATTERN.match(line) is not None


def heading_depth(line: str) -> int:
    match = HEADING_PATTERN.match(line)
    if not match:
        return 0
    return len(match.group("markers"))


def heading_remainder(line: str) -> str | None:
    """Text after the markers and separating whitespace, or None."""
    match = HEADING_PATTERN.match(line)
    if not match:
        return None
    return match.group("rest")


def parse_heading(
    line: str, states: TaskStates | Iterable[str] | None = None
) -> Heading | None:
    """Split a heading line into depth, optional state keyword and title."""
    match = HEADING_PATTERN.match(line)
    if not match:
        return None
    states = TaskStates.coerce(states)
    depth = len(match.group("markers"))
    rest = match.group("rest")
    parts = rest.split(None, 1)
    if parts and parts[0] in states:
        return Heading(depth=depth, state=parts[0], title=rest[len(parts[0]) :].strip())
    return Heading(depth=depth, state=None, title=rest.strip())
