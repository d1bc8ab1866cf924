# sim/data_memory.py
from typing import Dict, Optional


class FloorError(IndexError):
    pass


class DataMemory:
    """Floor tiles addressed 0..size-1, every tile starts at 0."""

    def __init__(self, size: int = 100, preset: Optional[Dict[int, int]] = None) -> None:
        self.size = int(size)
        self.tiles: list[int] = [0] * self.size
        for addr, val in (preset or {}).items():
            self.set(addr, val)

    def _check(self, addr: int) -> int:
        a = int(addr)
        if not 0 <= a < self.size:
            raise FloorError(f"tile {a} is off the floor (size {self.size})")
        return a

    def get(self, addr: int) -> int:
        return self.tiles[self._check(addr)]

    def set(self, addr: int, val: int) -> None:
        self.tiles[self._check(addr)] = int(val)

    def resolve(self, addr: int, indirect: bool) -> int:
        """Effective address: `[n]` reads the address stored in tile n."""
        if indirect:
            return self._check(self.get(addr))
        return self._check(addr)

    def snapshot(self) -> Dict[int, int]:
        """Non-zero tiles only."""
        return {i: v for i, v in enumerate(self.tiles) if v != 0}
