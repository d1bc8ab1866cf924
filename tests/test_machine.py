import io

import pytest

import config
from exploder.channels import Inbox, InboxFormatError, Outbox, TextInbox
from exploder.decomposer import explode, explode_all
from sim.data_memory import DataMemory, FloorError
from sim.machine import Machine, MachineFault, run_program
from sim.programs import DIGIT_EXPLODER, DIGIT_EXPLODER_FLOOR, FLOORS, PROGRAMS


def _explode_on_machine(values):
    return run_program(DIGIT_EXPLODER, values, floor=DIGIT_EXPLODER_FLOOR)


@pytest.mark.parametrize(
    "n, digits",
    [(123, [1, 2, 3]), (5, [5]), (100, [1, 0, 0]), (40, [4, 0]), (0, [0]), (105, [1, 0, 5])],
)
def test_bundled_listing_scenarios(n, digits):
    assert _explode_on_machine([n]) == digits


def test_bundled_listing_matches_decomposer_for_every_value():
    for n in range(1000):
        assert _explode_on_machine([n]) == explode(n), n


def test_bundled_listing_matches_decomposer_out_of_range():
    values = [1234, -5, 7]
    assert _explode_on_machine(values) == explode_all(values)


def test_bundled_listing_registered():
    assert PROGRAMS["digit_exploder"] is DIGIT_EXPLODER
    assert FLOORS["digit_exploder"] == {9: 0, 10: 10, 11: 100}


def test_empty_inbox_halts_cleanly():
    m = Machine(inbox=Inbox([]))
    m.load_program(["INBOX", "OUTBOX"])
    assert m.run() == []
    assert m.halted
    assert m.fault is None


def test_echo_program_writes_to_outbox_sink():
    out = Outbox()
    lines = ["loop:", "INBOX", "OUTBOX", "JUMP loop"]
    assert run_program(lines, [1, 2, 3], outbox=out) == [1, 2, 3]
    assert out.values == [1, 2, 3]


def test_add_sub_and_bump():
    lines = [
        "INBOX",
        "COPYTO 0",
        "INBOX",
        "ADD 0",        # a + b
        "OUTBOX",
        "COPYFROM 0",
        "SUB 1",        # a - tile1 (5)
        "OUTBOX",
        "BUMPUP 1",
        "OUTBOX",
        "BUMPDN 0",
        "OUTBOX",
    ]
    assert run_program(lines, [7, 2], floor={1: 5}) == [9, 2, 6, 6]


def test_indirect_addressing():
    lines = [
        "INBOX",
        "COPYTO [0]",    # tile[tile0] = value
        "COPYFROM 4",
        "OUTBOX",
        "BUMPUP [0]",
        "OUTBOX",
    ]
    assert run_program(lines, [42], floor={0: 4}) == [42, 43]


def test_jumpz_and_jumpn():
    # Sort into sign classes: -1 for negative, 0 for zero, 1 for positive
    lines = [
        "next:",
        "INBOX",
        "JUMPZ zero",
        "JUMPN neg",
        "BUMPUP 1",
        "OUTBOX",
        "JUMP next",
        "zero:",
        "OUTBOX",
        "JUMP next",
        "neg:",
        "BUMPDN 2",
        "OUTBOX",
        "JUMP next",
    ]
    assert run_program(lines, [5, 0, -3], floor={1: 0, 2: 0}) == [1, 0, -1]


def test_falling_off_the_end_halts():
    m = Machine(inbox=Inbox([1, 2]))
    m.load_program(["INBOX", "OUTBOX"])
    assert m.run() == [1]
    assert m.halted
    assert m.fault is None


@pytest.mark.parametrize(
    "lines, match",
    [
        (["OUTBOX"], "empty hand"),
        (["COPYTO 0"], "empty hand"),
        (["ADD 0"], "empty hand"),
        (["JUMPZ x"], "empty hand"),
        (["INBOX", "JUMP nowhere"], "unknown label"),
        (["COPYFROM 100"], "off the floor"),
        (["INBOX", "BUMPDN 0", "COPYTO [0]"], "off the floor"),
    ],
)
def test_faults(lines, match):
    with pytest.raises(MachineFault, match=match):
        run_program(lines, [7])


def test_fault_is_latched_by_run(capsys):
    m = Machine(debug=True, inbox=Inbox([1]))
    m.load_program(["INBOX", "OUTBOX", "OUTBOX"])
    assert m.run() == [1]
    assert m.halted
    assert isinstance(m.fault, MachineFault)
    assert m.fault.pc == 2
    assert m.fault.line_no == 3
    assert "[FAULT] PC=02 line=3 | OUTBOX with empty hand" in capsys.readouterr().out


def test_step_limit(monkeypatch):
    monkeypatch.setattr(config, "MAX_STEPS", 50)
    with pytest.raises(MachineFault, match="step limit 50"):
        run_program(["loop:", "JUMP loop"], [])


def test_trace_output(capsys):
    run_program(["INBOX", "OUTBOX"], [3], debug=True)
    out = capsys.readouterr().out
    assert "[FETCH]  PC=00 | INBOX" in out
    assert "[EXEC]   INBOX          | hand=3" in out
    assert "[OUTBOX] 3" in out
    assert "[HALT]" in out


def test_machine_accepts_input_source():
    assert run_program(["INBOX", "OUTBOX"], Inbox([8])) == [8]


def test_data_memory():
    mem = DataMemory(size=4, preset={1: 3})
    assert mem.get(1) == 3
    assert mem.resolve(1, indirect=True) == 3
    mem.set(3, -2)
    assert mem.snapshot() == {1: 3, 3: -2}
    with pytest.raises(FloorError):
        mem.get(4)
    with pytest.raises(FloorError):
        mem.resolve(3, indirect=True)


def test_step_limit_counts_from_last_inbox(monkeypatch):
    # 999 takes under 200 steps; the whole stream takes far more
    monkeypatch.setattr(config, "MAX_STEPS", 200)
    values = [999] * 1000
    assert _explode_on_machine(values) == explode_all(values)


def test_idle_steps_reset_on_inbox():
    m = Machine(inbox=Inbox([1, 2]))
    m.load_program(["loop:", "INBOX", "OUTBOX", "JUMP loop"])
    m.step()
    m.step()
    m.step()
    assert (m.steps, m.idle_steps) == (3, 2)
    m.step()
    assert (m.steps, m.idle_steps) == (4, 0)


def test_run_pause_key_off_after_bad_input(noop_backend, led_color):
    m = Machine(inbox=TextInbox(io.StringIO("5 x")), led=True,
                floor=DataMemory(size=config.FLOOR_SIZE, preset=DIGIT_EXPLODER_FLOOR))
    m.load_program(DIGIT_EXPLODER)
    with pytest.raises(InboxFormatError):
        m.run()
    assert m.emitted == [5]
    assert led_color("grave") == (0, 0, 0)
