from __future__ import annotations

from dataclasses import dataclass


def _clamp8(x: int) -> int:
    try:
        xi = int(x)
    except (TypeError, ValueError):
        xi = 0
    return max(0, min(255, xi))


@dataclass(frozen=True)
class RGBColor:
    """Lightweight RGB color used by the LED display.

    Values are clamped to 0..255. Converted to openrgb's own RGBColor
    only at the backend boundary.
    """
    red: int
    green: int
    blue: int

    def __init__(self, red: int, green: int, blue: int) -> None:  # type: ignore[override]
        object.__setattr__(self, "red", _clamp8(red))
        object.__setattr__(self, "green", _clamp8(green))
        object.__setattr__(self, "blue", _clamp8(blue))

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

