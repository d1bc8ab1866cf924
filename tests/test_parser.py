import pytest

from sim.parser import ParseError, format_op, label_name, parse_line, parse_program
from sim.program_memory import ProgramMemory


@pytest.mark.parametrize(
    "line, op",
    [
        ("INBOX", ("INBOX", ())),
        ("  outbox  ", ("OUTBOX", ())),
        ("COPYFROM 9", ("COPYFROM", (9, False))),
        ("copyto [4]", ("COPYTO", (4, True))),
        ("ADD 0x0A", ("ADD", (10, False))),
        ("SUB 11   -- n - 100", ("SUB", (11, False))),
        ("BUMPUP 3", ("BUMPUP", (3, False))),
        ("BUMP- 3", ("BUMPDN", (3, False))),
        ("JUMP start", ("JUMP", ("start",))),
        ("JUMPZ done", ("JUMPZ", ("done",))),
        ("JUMPLZ neg", ("JUMPN", ("neg",))),
        ("start:", ("LABEL", ("start",))),
        ("", ("NOP", ())),
        ("# only a comment", ("NOP", ())),
    ],
)
def test_parse_line(line, op):
    assert parse_line(line) == [op]


@pytest.mark.parametrize(
    "line",
    ["FLY 3", "INBOX 2", "COPYFROM", "COPYFROM x", "COPYTO -1", "JUMP", "a:b:"],
)
def test_parse_line_rejects(line):
    with pytest.raises(ParseError):
        parse_line(line, 7)


def test_parse_error_carries_line_number():
    with pytest.raises(ParseError) as exc:
        parse_program(["INBOX", "OUTBOX", "WAT"])
    assert exc.value.line_no == 3
    assert "line 3" in str(exc.value)


def test_label_name():
    assert label_name("loop:") == "loop"
    assert label_name("loop:  -- back edge") == "loop"
    assert label_name("JUMP loop") is None
    assert label_name(":") is None


def test_format_op():
    assert format_op("COPYFROM", (9, False)) == "COPYFROM 9"
    assert format_op("COPYTO", (4, True)) == "COPYTO [4]"
    assert format_op("JUMPZ", ("ones",)) == "JUMPZ ones"
    assert format_op("OUTBOX", ()) == "OUTBOX"
    assert format_op("LABEL", ("a",)) == "a:"


def test_labels_take_no_address():
    prog = ProgramMemory()
    prog.load_program([
        "start:",
        "again:",
        "    INBOX",
        "",
        "-- spacer",
        "    OUTBOX",
        "end:",
        "    JUMP start",
        "start:",
    ])
    assert prog.size() == 3
    assert prog.exec_lines[0].strip() == "INBOX"
    # First occurrence wins
    assert prog.labels == {"start": 0, "again": 0, "end": 2}
    assert prog.line_numbers == [3, 6, 8]
    assert prog.get_op(2) == ("JUMP", ("start",))
    assert prog.fetch(3) is None
