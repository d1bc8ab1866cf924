from rgb_types import RGBColor
import rgb_controller
from utils.keyboard_presets import (
    RUN_PAUSE_LABEL,
    RUN_PAUSE_ON,
    RUN_PAUSE_OFF,
)

# Single-key RUN/PAUSE indicator using presets from keyboard_presets
_LABEL = RUN_PAUSE_LABEL
_RUN_ON: RGBColor = RGBColor(*RUN_PAUSE_ON)
_RUN_OFF: RGBColor = RGBColor(*RUN_PAUSE_OFF)


def set_run(is_running: bool) -> None:
    # Indicator is best-effort: nothing to show without a connected keyboard
    if not rgb_controller.is_connected():
        return
    rgb_controller.set_key_color(_LABEL, _RUN_ON if is_running else _RUN_OFF)


def run_on() -> None:
    set_run(True)


def run_off() -> None:
    set_run(False)
