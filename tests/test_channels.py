import io

import pytest

from exploder.channels import (
    EndOfInput,
    Inbox,
    InboxFormatError,
    Outbox,
    TeeOutbox,
    TextInbox,
    TextOutbox,
)


def _drain(src):
    out = []
    while True:
        try:
            out.append(src.read_next_integer())
        except EndOfInput:
            return out


def test_inbox_hands_out_values_then_ends():
    src = Inbox([3, 1, 4])
    assert len(src) == 3
    assert src.read_next_integer() == 3
    assert src.remaining() == 2
    assert _drain(src) == [1, 4]
    with pytest.raises(EndOfInput):
        src.read_next_integer()


def test_text_inbox_accepts_spaces_commas_and_comments():
    text = "123 5\n\n# comment line\n100, 40  # trailing\n0\n"
    assert _drain(TextInbox(io.StringIO(text))) == [123, 5, 100, 40, 0]


def test_text_inbox_reports_bad_token():
    src = TextInbox(io.StringIO("1 2\n3 x4\n"))
    assert src.read_next_integer() == 1
    assert src.read_next_integer() == 2
    assert src.read_next_integer() == 3
    with pytest.raises(InboxFormatError) as exc:
        src.read_next_integer()
    assert exc.value.line_no == 2
    assert exc.value.token == "x4"


@pytest.mark.parametrize("token", ["+5", "1_000", "0x10", "\u0663", "--2", "-"])
def test_text_inbox_is_plain_decimal_only(token):
    src = TextInbox(io.StringIO(f"7 {token}\n"))
    assert src.read_next_integer() == 7
    with pytest.raises(InboxFormatError) as exc:
        src.read_next_integer()
    assert exc.value.token == token


def test_text_inbox_accepts_negative_values():
    assert _drain(TextInbox(io.StringIO("-5 -0 007"))) == [-5, 0, 7]


def test_text_inbox_empty_stream():
    with pytest.raises(EndOfInput):
        TextInbox(io.StringIO("")).read_next_integer()


def test_outbox_collects_and_clears():
    out = Outbox()
    out.write_integer(1)
    out.write_integer(0)
    assert out.values == [1, 0]
    out.clear()
    assert out.values == []


def test_text_outbox_writes_one_value_per_line():
    buf = io.StringIO()
    sink = TextOutbox(buf)
    for v in (1, 0, 0):
        sink.write_integer(v)
    assert buf.getvalue() == "1\n0\n0\n"


def test_tee_outbox_feeds_every_sink():
    a, b = Outbox(), Outbox()
    tee = TeeOutbox(a, b)
    tee.write_integer(9)
    assert a.values == [9]
    assert b.values == [9]
