from app.org_document import Document, heading_depth, is_heading
from app.org_sections import (
    Section,
    compute_range,
    find_child_subsection,
    find_properties,
    subsection_body,
)

OUTLINE = """* A
text
** A1
*** A1a
** A2
* B
** B1
tail"""


def _lines(text):
    return Document.parse(text).lines


def test_compute_range_stops_at_equal_or_shallower_heading():
    lines = _lines(OUTLINE)

    assert compute_range(lines, 0) == (0, 4)
    assert compute_range(lines, 2) == (2, 3)
    assert compute_range(lines, 3) == (3, 3)
    assert compute_range(lines, 4) == (4, 4)
    assert compute_range(lines, 5) == (5, 7)
    assert compute_range(lines, 6) == (6, 7)


def test_compute_range_partitions_siblings_and_nests_children():
    lines = _lines(OUTLINE)
    ranges = {
        index: compute_range(lines, index)
        for index, line in enumerate(lines)
        if is_heading(line)
    }

    for index, (start, end) in ranges.items():
        depth = heading_depth(lines[index])
        for other, (other_start, other_end) in ranges.items():
            if other == index:
                continue
            other_depth = heading_depth(lines[other])
            if other_depth == depth:
                assert end < other_start or other_end < start
            elif other_depth > depth and start < other_start <= end:
                assert other_end <= end


def test_find_properties_reads_drawer():
    lines = _lines("* A\n:PROPERTIES:\n:ID: x-1\n:REPO:  /tmp/r \n:EMPTY:\n:END:\nbody")

    assert find_properties(lines, 0, len(lines) - 1) == {
        "ID": "x-1",
        "REPO": "/tmp/r",
        "EMPTY": "",
    }


def test_find_properties_without_end_is_empty():
    lines = _lines("* A\n:PROPERTIES:\n:ID: x-1\nbody")

    assert find_properties(lines, 0, len(lines) - 1) == {}


def test_find_properties_ignores_child_drawer():
    lines = _lines("* Parent\n** Child\n:PROPERTIES:\n:ID: c\n:END:\n")

    start, end = compute_range(lines, 0)
    assert find_properties(lines, start, end) == {}
    start, end = compute_range(lines, 1)
    assert find_properties(lines, start, end) == {"ID": "c"}


def test_find_child_subsection_matches_direct_child_only():
    lines = _lines(
        "* Task\n** Notes\n*** Log\nnested\n** Log\n- one\n*** Detail\nmore\n** After\nx\n* Next"
    )
    parent = Section(start=0, end=9, depth=1)

    log = find_child_subsection(lines, parent, "Log")

    assert log == Section(start=4, end=7, depth=2)
    assert find_child_subsection(lines, parent, "Missing") is None


def test_find_child_subsection_clips_to_parent():
    lines = _lines("* Task\n** Log\n- one\n* Next\n** Log\n")
    parent = Section(start=0, end=2, depth=1)

    assert find_child_subsection(lines, parent, "Log") == Section(1, 2, 2)


def test_subsection_body_keeps_nested_headings_verbatim():
    lines = _lines("* Task\n** Agent Context\n\nDo X\n*** Step one\nthen Y\n\n** Log\n")
    parent = Section(start=0, end=len(lines) - 1, depth=1)

    section = find_child_subsection(lines, parent, "Agent Context")

    assert subsection_body(lines, section) == "Do X\n*** Step one\nthen Y"
    assert subsection_body(lines, None) == ""
