"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
src_dir = Path(__file__).resolve().parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

import config  # noqa: E402
import rgb_controller  # noqa: E402
from backends.base import NoopBackend  # noqa: E402

# LED names the way an OpenRGB keyboard reports them
KEYBOARD_LEDS = [
    "Key: Escape", "Key: `", "Key: 1", "Key: 2", "Key: 3", "Key: 4", "Key: 5",
    "Key: 6", "Key: 7", "Key: 8", "Key: 9", "Key: 0", "Key: -", "Key: Backspace",
    "Key: Left Arrow", "Key: Down Arrow", "Key: Right Arrow", "Key: Up Arrow",
    "Key: Left Shift",
]


@pytest.fixture
def noop_backend(monkeypatch):
    """Connected rgb_controller on a cache-only backend; disconnected afterwards."""
    monkeypatch.setattr(config, "RGB_APPLY_DELAY_MS", 0)
    backend = NoopBackend(KEYBOARD_LEDS)
    rgb_controller.connect(backend=backend)
    yield backend
    rgb_controller.disconnect()


@pytest.fixture
def led_color(noop_backend):
    """Read back the colour of a label from the cache-only backend."""
    def _read(label):
        idx = rgb_controller.km.label_to_index[label]
        return noop_backend.get_color(idx)
    return _read
