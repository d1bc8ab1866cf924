from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from openrgb import OpenRGBClient
from openrgb.utils import RGBColor as ORGBColor

import config
from rgb_types import RGBColor


def _is_keyboard(dev: Any) -> bool:
    # d.type may be an Enum or a plain string depending on the library version
    dtype = getattr(dev.type, "name", str(dev.type)).lower()
    return dtype == "keyboard"


class OpenRGBBackend:
    """Keyboard LEDs through an OpenRGB SDK server (OpenRGB --server).

    - Picks the first device whose type is keyboard.
    - Switches it to direct mode so single LEDs can be driven.
    - Keeps a local frame so batched updates go out as one set_colors call.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 name: str = "DigitExploder", client_factory: Any = OpenRGBClient) -> None:
        self.host = host or config.OPENRGB_HOST
        self.port = int(port or config.OPENRGB_PORT)
        self.name = name
        self._factory = client_factory
        self._client: Any = None
        self._kb: Any = None
        self._frame: List[Tuple[int, int, int]] = []

    def _dbg(self, *args: Any) -> None:
        if config.env_flag("RGB_DEBUG"):
            print("[OPENRGB]", *args)

    # --------- Lifecycle ---------
    def connect(self) -> bool:
        try:
            self._client = self._factory(address=self.host, port=self.port, name=self.name)
        except (ConnectionError, OSError, TimeoutError) as ex:
            self._dbg("connect error:", ex)
            self._client = None
            return False
        devices = getattr(self._client, "devices", None) or self._client.get_devices()
        self._kb = next((d for d in devices if _is_keyboard(d)), None)
        if self._kb is None:
            self._dbg("no keyboard among", len(devices), "devices")
            return False
        try:
            self._kb.set_mode("direct")
        except (ValueError, IndexError) as ex:
            # Some models have no direct mode; per-LED writes may still work
            self._dbg("direct mode unavailable:", ex)
        self._frame = [(0, 0, 0)] * len(self._kb.leds)
        self._dbg(f"keyboard={self._kb.name} leds={len(self._frame)} @ {self.host}:{self.port}")
        return True

    def disconnect(self) -> None:
        try:
            if self._client is not None:
                self._client.disconnect()
        finally:
            self._client = None
            self._kb = None
            self._frame = []

    def is_connected(self) -> bool:
        return self._client is not None and self._kb is not None

    def led_names(self) -> List[Tuple[int, str]]:
        if self._kb is None:
            return []
        return [(i, led.name or "") for i, led in enumerate(self._kb.leds)]

    def device_name(self) -> str:
        return str(getattr(self._kb, "name", "") or "keyboard")

    # --------- Public API ---------
    def init_all_keys(self, total_leds: int, debug: bool = False) -> bool:
        if self._kb is None:
            return False
        # The device decides the frame size; total_leds comes from the label map
        n = len(self._kb.leds)
        self._frame = [(0, 0, 0)] * n
        self._kb.set_color(ORGBColor(0, 0, 0))
        if debug:
            print(f"[OPENRGB] cleared {n} leds")
        return True

    def set_color(self, index: int, color: RGBColor) -> bool:
        i = int(index)
        if self._kb is None or not 0 <= i < len(self._kb.leds):
            return False
        self._frame[i] = color.as_tuple()
        self._kb.leds[i].set_color(ORGBColor(*color.as_tuple()))
        return True

    def set_many(self, indices: Iterable[int], colors: Iterable[RGBColor]) -> bool:
        if self._kb is None:
            return False
        for i, c in zip(indices, colors):
            i = int(i)
            if 0 <= i < len(self._frame):
                self._frame[i] = c.as_tuple()
        self._kb.set_colors([ORGBColor(*t) for t in self._frame])
        return True

    def get_color(self, index: int) -> Tuple[int, int, int]:
        i = int(index)
        if 0 <= i < len(self._frame):
            return self._frame[i]
        return (0, 0, 0)
