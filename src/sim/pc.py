# sim/pc.py
from dataclasses import dataclass

@dataclass
class PC:
    value: int = 0
    jumps: int = 0  # taken jumps since reset

    def reset(self) -> None:
        self.value = 0
        self.jumps = 0

    def advance(self) -> int:
        """Move to the next line; returns the old value."""
        old = self.value
        self.value += 1
        return old

    def jump(self, target: int) -> int:
        old = self.value
        self.value = int(target)
        self.jumps += 1
        return old
