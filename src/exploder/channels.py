"""Input sources and output sinks for the digit exploder.

A source hands out one integer per `read_next_integer()` call and raises
`EndOfInput` once it is exhausted. A sink takes one integer per
`write_integer()` call. Both are blocking and ordered.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Protocol, TextIO


class EndOfInput(Exception):
    """Raised by a source when no more integers are available."""


class InboxFormatError(ValueError):
    def __init__(self, line_no: int, token: str) -> None:
        super().__init__(f"line {line_no}: not an integer: {token!r}")
        self.line_no = line_no
        self.token = token


class InputSource(Protocol):
    def read_next_integer(self) -> int: ...


class OutputSink(Protocol):
    def write_integer(self, value: int) -> None: ...


class Inbox:
    """Source backed by any iterable of integers."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        self._pending: List[int] = [int(v) for v in values]
        self._pos = 0

    def read_next_integer(self) -> int:
        if self._pos >= len(self._pending):
            raise EndOfInput()
        v = self._pending[self._pos]
        self._pos += 1
        return v

    def remaining(self) -> int:
        return len(self._pending) - self._pos

    def __len__(self) -> int:
        return self.remaining()


# Plain decimal, optional minus sign (no "+", "_" or non-ASCII digits)
_INT_RE = re.compile(r"-?[0-9]+")


def _tokens(line: str) -> List[str]:
    s = line.split("#", 1)[0]
    return [t for t in s.replace(",", " ").split() if t]


class TextInbox:
    """Source that parses integers out of a text stream, lazily.

    Integers may be separated by whitespace or commas; `#` starts a comment.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._it: Optional[Iterator[int]] = None

    def _values(self) -> Iterator[int]:
        for line_no, line in enumerate(self._stream, start=1):
            for tok in _tokens(line):
                if not _INT_RE.fullmatch(tok):
                    raise InboxFormatError(line_no, tok)
                yield int(tok)

    def read_next_integer(self) -> int:
        if self._it is None:
            self._it = self._values()
        try:
            return next(self._it)
        except StopIteration:
            raise EndOfInput() from None


class Outbox:
    """Sink that collects every written integer in order."""

    def __init__(self) -> None:
        self.values: List[int] = []

    def write_integer(self, value: int) -> None:
        self.values.append(int(value))

    def clear(self) -> None:
        self.values.clear()


class TextOutbox:
    """Sink that writes one integer per line to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write_integer(self, value: int) -> None:
        self._stream.write(f"{int(value)}\n")
        self._stream.flush()


class TeeOutbox:
    def __init__(self, *sinks: OutputSink) -> None:
        self.sinks = list(sinks)

    def write_integer(self, value: int) -> None:
        for s in self.sinks:
            s.write_integer(value)


__all__ = [
    "EndOfInput", "InboxFormatError",
    "InputSource", "OutputSink",
    "Inbox", "TextInbox", "Outbox", "TextOutbox", "TeeOutbox",
]
