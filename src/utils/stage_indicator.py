from typing import Optional
from rgb_types import RGBColor
from rgb_controller import set_labels_atomic
import utils.color_presets as cp

# Decomposer stage -> arrow key mapping (left to right as the value is consumed)
STAGE_KEYS: dict[str, str] = {
    "EXTRACTING_HUNDREDS": "left",
    "EXTRACTING_TENS": "down",
    "EMITTING": "right",
}

# Single ON color for all stages
STAGE_ON: RGBColor = cp.CYAN
STAGE_OFF: RGBColor = cp.BLACK

_current: Optional[str] = None


def clear_stages() -> None:
    global _current
    set_labels_atomic({lab: STAGE_OFF for lab in STAGE_KEYS.values()})
    _current = None


def post_stage(stage: str) -> None:
    """Light the key of `stage` and turn the other stage keys off.
    Accepts a Stage enum member or its name.
    """
    global _current
    name = getattr(stage, "value", str(stage))
    target = STAGE_KEYS.get(name)
    if not target or name == _current:
        return
    payload = {lab: STAGE_OFF for lab in STAGE_KEYS.values()}
    payload[target] = STAGE_ON
    if set_labels_atomic(payload):
        _current = name
