"""
Tests for the digit decomposition loop.
"""

import pytest

from exploder.channels import Inbox, Outbox
from exploder.decomposer import (
    Decomposer,
    DigitCounters,
    Stage,
    explode,
    explode_all,
)


@pytest.mark.parametrize(
    "n, digits",
    [
        (123, [1, 2, 3]),
        (5, [5]),
        (100, [1, 0, 0]),
        (105, [1, 0, 5]),
        (40, [4, 0]),
        (0, [0]),
        (10, [1, 0]),
        (99, [9, 9]),
        (999, [9, 9, 9]),
        (510, [5, 1, 0]),
    ],
)
def test_known_values(n, digits):
    assert explode(n) == digits


def test_single_digits_pass_through():
    for n in range(10):
        assert explode(n) == [n]


def test_two_digit_values():
    for n in range(10, 100):
        assert explode(n) == [n // 10, n % 10]


def test_three_digit_values_keep_zero_tens():
    for n in range(100, 1000):
        assert explode(n) == [n // 100, (n // 10) % 10, n % 10]


def test_digits_rebuild_the_value():
    for n in range(1000):
        assert int("".join(str(d) for d in explode(n))) == n


def test_stream_is_processed_in_order():
    assert explode_all([123, 5, 100, 40, 0]) == [1, 2, 3, 5, 1, 0, 0, 4, 0, 0]


def test_run_counts_values_and_stops_when_exhausted():
    out = Outbox()
    d = Decomposer(Inbox([7, 70, 700]), out)
    assert d.run() == 3
    assert out.values == [7, 7, 0, 7, 0, 0]
    assert d.step() is False


def test_run_honours_max_items():
    src = Inbox([1, 2, 3])
    out = Outbox()
    assert Decomposer(src, out).run(max_items=2) == 2
    assert out.values == [1, 2]
    assert src.remaining() == 1


def test_empty_source():
    out = Outbox()
    assert Decomposer(Inbox([]), out).run() == 0
    assert out.values == []


def test_counters_reset_between_values():
    out = Outbox()
    d = Decomposer(Inbox([250, 3]), out)
    d.step()
    assert (d.counters.hundreds, d.counters.tens) == (2, 5)
    d.step()
    assert (d.counters.hundreds, d.counters.tens) == (0, 0)
    assert out.values == [2, 5, 0, 3]


def test_out_of_range_values_are_not_guarded():
    # Four digits: the hundreds counter keeps everything above the tens
    assert explode(1234) == [12, 3, 4]
    # Negative: both loops are skipped, the value goes out as the remainder
    assert explode(-5) == [-5]


def test_stage_hook_sees_every_stage_in_order():
    seen = []
    Decomposer(Inbox([42]), Outbox(), on_stage=seen.append).run()
    assert seen == [Stage.EXTRACTING_HUNDREDS, Stage.EXTRACTING_TENS, Stage.EMITTING]


def test_debug_trace(capsys):
    Decomposer(Inbox([12]), Outbox(), debug=True).run()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "[TRACE] read 12"
    assert "[TRACE] emit 1" in lines
    assert "[TRACE] emit 2" in lines
    assert lines[-1] == "[RUN] processed=1"


def test_silent_without_debug(capsys):
    Decomposer(Inbox([12]), Outbox()).run()
    assert capsys.readouterr().out == ""


def test_digit_counters_reset():
    c = DigitCounters(hundreds=3, tens=4)
    c.reset()
    assert c == DigitCounters()
