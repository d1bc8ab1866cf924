from __future__ import annotations

from typing import Protocol, Iterable, List, Tuple, Dict
from rgb_types import RGBColor


class RGBBackend(Protocol):
    def connect(self) -> bool: ...
    def disconnect(self) -> None: ...
    def is_connected(self) -> bool: ...

    def led_names(self) -> List[Tuple[int, str]]: ...
    def device_name(self) -> str: ...

    def init_all_keys(self, total_leds: int, debug: bool = False) -> bool: ...

    def set_color(self, index: int, color: RGBColor) -> bool: ...

    def set_many(self, indices: Iterable[int], colors: Iterable[RGBColor]) -> bool: ...

    def get_color(self, index: int) -> Tuple[int, int, int]: ...


class NoopBackend:
    """A backend that never touches hardware but caches state.
    Used when no OpenRGB server is wanted (RGB_BACKEND=noop) and in tests.
    """
    def __init__(self, names: Iterable[str] = ()) -> None:
        self._conn = False
        self._names = list(names)
        self._cache: Dict[int, Tuple[int, int, int]] = {}
        self.writes = 0

    def connect(self) -> bool:
        self._conn = True
        return True

    def disconnect(self) -> None:
        self._conn = False
        self._cache.clear()

    def is_connected(self) -> bool:
        return self._conn

    def led_names(self) -> List[Tuple[int, str]]:
        return list(enumerate(self._names))

    def device_name(self) -> str:
        return "noop"

    def init_all_keys(self, total_leds: int, debug: bool = False) -> bool:
        for i in range(int(total_leds)):
            self._cache[i] = (0, 0, 0)
        return True

    def set_color(self, index: int, color: RGBColor) -> bool:
        self._cache[int(index)] = color.as_tuple()
        self.writes += 1
        return True

    def set_many(self, indices: Iterable[int], colors: Iterable[RGBColor]) -> bool:
        for i, c in zip(indices, colors):
            self._cache[int(i)] = c.as_tuple()
        self.writes += 1
        return True

    def get_color(self, index: int) -> Tuple[int, int, int]:
        return self._cache.get(int(index), (0, 0, 0))
