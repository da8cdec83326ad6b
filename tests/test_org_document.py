import pytest

from app.errors import InvalidState
from app.org_document import (
    DEFAULT_STATES,
    Document,
    TaskStates,
    heading_depth,
    is_heading,
    parse_heading,
)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n",
        "* TODO a\nbody\n",
        "* TODO a\nbody",
        "* TODO a\r\n:PROPERTIES:\r\n:ID: 1\r\n:END:\r\n",
        "* TODO a\r:PROPERTIES:\r:ID: 1\r:END:",
        "\n\n* a\n\n",
        "* TODO a\nnote pasted\r\n* b\n",
        "a\rb\r\nc",
    ],
)
def test_document_round_trip_is_byte_exact(text):
    assert Document.parse(text).serialize() == text


def test_document_records_line_ending_style():
    crlf = Document.parse("a\r\nb\r\n")
    assert crlf.eol == "\r\n"
    assert crlf.ends_with_newline is True
    assert crlf.lines == ["a", "b"]

    bare = Document.parse("a\rb")
    assert bare.eol == "\r"
    assert bare.ends_with_newline is False
    assert bare.lines == ["a", "b"]

    assert Document.parse("").lines == []


def test_heading_detection():
    assert is_heading("* Title")
    assert is_heading("***\tDeep")
    assert not is_heading("*bold* text")
    assert not is_heading("**")
    assert not is_heading(" * indented")
    assert heading_depth("*** Three") == 3
    assert heading_depth("plain") == 0


def test_parse_heading_consumes_known_state():
    heading = parse_heading("** IN-PROGRESS Ship it  :work:", DEFAULT_STATES)

    assert heading.depth == 2
    assert heading.state == "IN-PROGRESS"
    assert heading.title == "Ship it  :work:"


def test_parse_heading_ignores_unknown_keyword():
    heading = parse_heading("* WAITING on review", DEFAULT_STATES)

    assert heading.state is None
    assert heading.title == "WAITING on review"


def test_parse_heading_uses_caller_states():
    heading = parse_heading("* WAITING on review", ["WAITING"])

    assert heading.state == "WAITING"
    assert heading.title == "on review"
    assert parse_heading("not a heading") is None


def test_task_states_validate():
    states = TaskStates(("OPEN", "CLOSED"))

    assert states.validate("OPEN") == "OPEN"
    assert "CLOSED" in states
    assert 3 not in states

    with pytest.raises(InvalidState) as excinfo:
        states.validate("DONE")

    assert excinfo.value.error.code == "INVALID_STATE"
    assert "OPEN, CLOSED" in str(excinfo.value)


def test_document_keeps_each_line_terminator():
    document = Document.parse("a\nb\r\nc\nd")

    assert document.eol == "\n"
    assert document.endings == ["\n", "\r\n", "\n", "\n"]

    document.insert_lines(2, ["x", "y"])
    document.insert_lines(len(document.lines), ["z"])

    assert document.serialize() == "a\nb\r\nx\ny\nc\nd\nz"


def test_document_dominant_terminator_wins():
    assert Document.parse("a\r\nb\nc\r\n").eol == "\r\n"
    assert Document.parse("a\r\nb\n").eol == "\r\n"
    assert Document.parse("a\nb\r\n").eol == "\n"
    assert Document.parse("single line").eol == "\n"


@pytest.mark.parametrize(
    "keywords",
    [(), ("TODO", ""), ("TODO", "NOT DONE"), ("TODO\n",), ("TODO", "TODO")],
)
def test_task_states_rejects_invalid_keywords(keywords):
    with pytest.raises(ValueError):
        TaskStates(keywords)


def test_task_states_coerce_validates_keywords():
    assert TaskStates.coerce(["OPEN", "CLOSED"]).keywords == ("OPEN", "CLOSED")
    assert TaskStates.coerce(None).keywords == DEFAULT_STATES

    with pytest.raises(ValueError):
        TaskStates.coerce(["OPEN", "waiting on review"])
