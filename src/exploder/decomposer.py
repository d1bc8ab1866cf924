# exploder/decomposer.py
"""
Digit decomposition loop.

Each pass reads one integer, splits off hundreds and tens by repeated
subtraction and sends the digits to the sink:

    [hundreds (if non-zero)] [tens (if hundreds or tens non-zero)] [ones]

    123 -> 1, 2, 3
    100 -> 1, 0, 0
     40 -> 4, 0
      5 -> 5

Inputs are expected in 0..999. Nothing is checked: 1234 leaves twelve
hundreds (12, 3, 4), a negative value skips both loops and is sent as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional

from exploder.channels import EndOfInput, Inbox, InputSource, Outbox, OutputSink

ZERO = 0
TEN = 10
HUNDRED = 100


class Stage(str, Enum):
    EXTRACTING_HUNDREDS = "EXTRACTING_HUNDREDS"
    EXTRACTING_TENS = "EXTRACTING_TENS"
    EMITTING = "EMITTING"


@dataclass
class DigitCounters:
    hundreds: int = ZERO
    tens: int = ZERO

    def reset(self) -> None:
        self.hundreds = ZERO
        self.tens = ZERO


StageHook = Callable[[Stage], None]


class Decomposer:
    def __init__(self, source: InputSource, sink: OutputSink, *, debug: bool = False,
                 on_stage: Optional[StageHook] = None) -> None:
        self.source = source
        self.sink = sink
        self.debug = debug
        self.on_stage = on_stage
        self.counters = DigitCounters()
        self.stage: Optional[Stage] = None
        self.n: int = ZERO

    def _println(self, s: str) -> None:
        if self.debug:
            print(s)

    def _enter(self, stage: Stage) -> None:
        self.stage = stage
        if self.on_stage is not None:
            self.on_stage(stage)

    def _emit(self, value: int) -> None:
        self._println(f"[TRACE] emit {value}")
        self.sink.write_integer(value)

    def step(self) -> bool:
        """Run one iteration. Returns False once the source is exhausted."""
        c = self.counters
        c.reset()
        try:
            n = int(self.source.read_next_integer())
        except EndOfInput:
            self.stage = None
            return False
        self._println(f"[TRACE] read {n}")

        self._enter(Stage.EXTRACTING_HUNDREDS)
        while n >= HUNDRED:
            n -= HUNDRED
            c.hundreds += 1
        self.n = n
        if c.hundreds != ZERO:
            self._emit(c.hundreds)

        self._enter(Stage.EXTRACTING_TENS)
        while n >= TEN:
            n -= TEN
            c.tens += 1
        self.n = n

        self._enter(Stage.EMITTING)
        # A zero tens digit still shows once a hundreds digit went out (100 -> 1, 0, 0)
        if c.hundreds != ZERO:
            self._emit(c.tens)
        elif c.tens != ZERO:
            self._emit(c.tens)
        self._emit(n)
        return True

    def run(self, max_items: Optional[int] = None) -> int:
        """Loop until the source runs dry; returns the number of values processed."""
        done = 0
        while max_items is None or done < max_items:
            if not self.step():
                break
            done += 1
        self._println(f"[RUN] processed={done}")
        return done


def explode(n: int) -> List[int]:
    """Digit sequence for a single value."""
    out = Outbox()
    Decomposer(Inbox([n]), out).step()
    return out.values


def explode_all(values: Iterable[int]) -> List[int]:
    out = Outbox()
    Decomposer(Inbox(values), out).run()
    return out.values


__all__ = [
    "ZERO", "TEN", "HUNDRED",
    "Stage", "DigitCounters", "Decomposer",
    "explode", "explode_all",
]
