# sim/ir.py
from dataclasses import dataclass
from typing import Optional, Tuple, Any

@dataclass
class IR:
    raw: Optional[str] = None
    decoded: Optional[Tuple[str, tuple[Any, ...]]] = None
    line_no: Optional[int] = None

    def load(self, raw: str, decoded: Tuple[str, tuple[Any, ...]], line_no: Optional[int] = None) -> None:
        self.raw = raw
        self.decoded = decoded
        self.line_no = line_no

    def clear(self) -> None:
        self.raw = None
        self.decoded = None
        self.line_no = None
