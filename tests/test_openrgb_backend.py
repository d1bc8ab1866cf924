from unittest.mock import Mock

import pytest

import rgb_controller
from backends.openrgb_backend import OpenRGBBackend
from rgb_types import RGBColor


class FakeLED:
    def __init__(self, name):
        self.name = name
        self.color = None

    def set_color(self, color):
        self.color = (color.red, color.green, color.blue)


class FakeDevice:
    def __init__(self, kind, names):
        self.type = Mock()
        self.type.name = kind
        self.name = f"fake {kind.lower()}"
        self.leds = [FakeLED(n) for n in names]
        self.mode = None
        self.frames = []

    def set_mode(self, mode):
        self.mode = mode

    def set_color(self, color):
        for led in self.leds:
            led.set_color(color)

    def set_colors(self, colors):
        self.frames.append([(c.red, c.green, c.blue) for c in colors])


class FakeClient:
    instances = []

    def __init__(self, address, port, name):
        self.address = address
        self.port = port
        self.name = name
        self.devices = [
            FakeDevice("MOUSE", ["Logo"]),
            FakeDevice("KEYBOARD", ["Key: `", "Key: 1", "Key: 2", "Key: Right Arrow"]),
        ]
        self.closed = False
        FakeClient.instances.append(self)

    def disconnect(self):
        self.closed = True


def _backend():
    return OpenRGBBackend(host="10.0.0.2", port=6743, client_factory=FakeClient)


def test_connect_picks_keyboard_in_direct_mode():
    b = _backend()
    assert b.connect()
    client = FakeClient.instances[-1]
    assert (client.address, client.port) == ("10.0.0.2", 6743)
    kb = client.devices[1]
    assert kb.mode == "direct"
    assert b.is_connected()
    assert b.led_names() == [(0, "Key: `"), (1, "Key: 1"), (2, "Key: 2"), (3, "Key: Right Arrow")]


def test_connect_without_keyboard():
    class NoKeyboard(FakeClient):
        def __init__(self, address, port, name):
            super().__init__(address, port, name)
            self.devices = self.devices[:1]

    b = OpenRGBBackend(client_factory=NoKeyboard)
    assert b.connect() is False
    assert not b.is_connected()


def test_connect_refused():
    def refuse(**kwargs):
        raise ConnectionRefusedError("no server")

    b = OpenRGBBackend(client_factory=refuse)
    assert b.connect() is False


def test_set_color_and_set_many():
    b = _backend()
    b.connect()
    kb = FakeClient.instances[-1].devices[1]
    assert b.set_color(1, RGBColor(1, 2, 3))
    assert kb.leds[1].color == (1, 2, 3)
    assert b.set_color(99, RGBColor(1, 2, 3)) is False
    assert b.set_many([0, 2], [RGBColor(9, 9, 9), RGBColor(7, 7, 7)])
    assert kb.frames[-1] == [(9, 9, 9), (1, 2, 3), (7, 7, 7), (0, 0, 0)]
    assert b.get_color(2) == (7, 7, 7)
    assert b.get_color(42) == (0, 0, 0)


def test_init_all_keys_and_disconnect():
    b = _backend()
    b.connect()
    client = FakeClient.instances[-1]
    b.set_color(2, RGBColor(5, 5, 5))
    assert b.init_all_keys(total_leds=4)
    assert b.get_color(2) == (0, 0, 0)
    assert client.devices[1].leds[2].color == (0, 0, 0)
    b.disconnect()
    assert client.closed
    assert not b.is_connected()


def test_controller_drives_openrgb_backend(monkeypatch):
    import config
    monkeypatch.setattr(config, "RGB_APPLY_DELAY_MS", 0)
    b = _backend()
    rgb_controller.connect(backend=b)
    try:
        assert rgb_controller.set_labels_atomic({"2": (4, 5, 6), "right": (0, 200, 255)})
        kb = FakeClient.instances[-1].devices[1]
        assert kb.frames[-1] == [(0, 0, 0), (0, 0, 0), (4, 5, 6), (0, 200, 255)]
    finally:
        rgb_controller.disconnect()


def test_backend_selected_from_config(monkeypatch):
    import config
    monkeypatch.setattr(config, "RGB_BACKEND", "noop")
    assert type(rgb_controller._choose_backend()).__name__ == "NoopBackend"
    monkeypatch.setattr(config, "RGB_BACKEND", "openrgb")
    assert isinstance(rgb_controller._choose_backend(), OpenRGBBackend)


@pytest.fixture(autouse=True)
def _forget_clients():
    FakeClient.instances.clear()
    yield
    FakeClient.instances.clear()
