"""RGB controller facade for the outbox display.

Default backend: OpenRGB SDK server (RGB_BACKEND=openrgb).
RGB_BACKEND=noop keeps everything in a local cache.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional, Tuple

import config
from rgb_types import RGBColor
from utils.keyboard_map import RGBLabelController

from backends.base import RGBBackend, NoopBackend
from backends.openrgb_backend import OpenRGBBackend

# Global state
_backend: Optional[RGBBackend] = None
km: Optional[RGBLabelController] = None

# Runtime toggles
_ATOMIC_DEBUG: bool = False
_APPLY_DELAY_MS: int = 20  # settle after updates (ms)

# Cache to skip no-op writes (label -> (r,g,b))
_LAST_LABEL_COLOR: Dict[str, Tuple[int, int, int]] = {}

__all__ = [
    'connect', 'disconnect', 'is_connected',
    'get_key_color', 'set_key_color', 'set_labels_atomic',
    'init_all_keys', 'export_map', 'set_apply_delay_ms', 'set_atomic_debug',
]


# --- Runtime toggles ---

def set_atomic_debug(on: bool) -> None:
    global _ATOMIC_DEBUG
    _ATOMIC_DEBUG = bool(on)


def set_apply_delay_ms(ms: int) -> None:
    """Settle delay after each write, clamped to 0..40 ms."""
    global _APPLY_DELAY_MS
    _APPLY_DELAY_MS = max(0, min(40, int(ms)))


def _atomic_debug() -> bool:
    return _ATOMIC_DEBUG or config.env_flag("RGB_ATOMIC_DEBUG")


# --- Backend management ---

def _choose_backend() -> RGBBackend:
    kind = config.RGB_BACKEND
    if kind in ("openrgb", "orgb", "sdk"):
        return OpenRGBBackend()
    return NoopBackend()


def connect(backend: Optional[RGBBackend] = None, map_path: Optional[str] = None) -> bool:
    """Prepare backend and label map.
    - Uses the OpenRGB backend unless RGB_BACKEND says otherwise.
    - Labels come from the device LED names, or from a JSON map when given.
    """
    global _backend, km
    km = None
    _backend = backend if backend is not None else _choose_backend()
    if not _backend.connect():
        _backend = None
        raise RuntimeError("Failed to initialize RGB backend.")
    if map_path:
        km = RGBLabelController(json_path=map_path)
    else:
        km = RGBLabelController(rows=_backend.led_names())
    set_apply_delay_ms(config.RGB_APPLY_DELAY_MS)
    # Clear local caches
    _LAST_LABEL_COLOR.clear()
    return True


def disconnect() -> None:
    global _backend, km
    try:
        if _backend is not None:
            _backend.disconnect()
    finally:
        _backend = None
        km = None
        _LAST_LABEL_COLOR.clear()


def is_connected() -> bool:
    return (_backend is not None and _backend.is_connected()) and (km is not None)


def _require() -> Tuple[RGBBackend, RGBLabelController]:
    if _backend is None or km is None:
        raise RuntimeError("connect() must be called before using LED functions.")
    return _backend, km


def _settle() -> None:
    if _APPLY_DELAY_MS > 0:
        time.sleep(_APPLY_DELAY_MS / 1000.0)


# --- Public LED helpers ---

def init_all_keys(debug: bool = False) -> bool:
    backend, labels = _require()
    # Approximate total by highest mapped index + 1
    total = max(labels.label_to_index.values()) + 1 if labels.label_to_index else 0
    ok = backend.init_all_keys(total_leds=total, debug=debug)
    _LAST_LABEL_COLOR.clear()
    return ok


def get_key_color(label: str) -> Tuple[int, int, int]:
    backend, labels = _require()
    idx = labels.label_to_index.get(str(label).lower())
    if idx is None:
        # Unknown label: black
        return (0, 0, 0)
    return backend.get_color(idx)


def _to_color(c: RGBColor | Tuple[int, int, int]) -> RGBColor:
    if isinstance(c, RGBColor):
        return c
    r, g, b = c
    return RGBColor(int(r), int(g), int(b))


def set_key_color(label: str, color: RGBColor | Tuple[int, int, int], debug: bool = False) -> bool:
    backend, labels = _require()
    key = str(label).lower()
    idx = labels.label_to_index.get(key)
    if idx is None:
        return False
    col = _to_color(color)
    tgt = col.as_tuple()
    if _LAST_LABEL_COLOR.get(key) == tgt:
        return True
    ok = backend.set_color(idx, col)
    _settle()
    if ok:
        _LAST_LABEL_COLOR[key] = tgt
        if debug:
            print(f"[DEBUG] {key.upper()} -> {tgt}")
    return ok


def set_labels_atomic(label_to_color: Dict[str, RGBColor | Tuple[int, int, int]]) -> bool:
    backend, labels = _require()
    dbg = _atomic_debug()

    # Resolve changes and skip cached no-ops
    keys: List[str] = []
    indices: List[int] = []
    colors: List[RGBColor] = []
    for lab, col_any in label_to_color.items():
        key = str(lab).lower()
        idx = labels.label_to_index.get(key)
        if idx is None:
            if dbg:
                print(f"[RGB-ATOMIC] unknown label='{lab}'")
            continue
        col = _to_color(col_any)
        if _LAST_LABEL_COLOR.get(key) == col.as_tuple():
            if dbg:
                print(f"[RGB-ATOMIC] skip-noop idx={idx} label='{lab}'")
            continue
        keys.append(key)
        indices.append(idx)
        colors.append(col)

    if not indices:
        if dbg:
            print("[RGB-ATOMIC] no-op (no changes)")
        return True

    ok = backend.set_many(indices, colors)
    if not ok:
        return False
    _settle()
    for key, col in zip(keys, colors):
        _LAST_LABEL_COLOR[key] = col.as_tuple()
    if dbg:
        print(f"[RGB-ATOMIC] applied; changes={len(indices)}")
    return True


def export_map(out_dir: Optional[str] = None) -> Tuple[str, str]:
    """Save the connected device's LED names under data/maps for later --led-map use."""
    backend, _ = _require()
    from utils.led_map_export import export_led_map
    return export_led_map(backend.led_names(), backend.device_name(), out_dir=out_dir)
