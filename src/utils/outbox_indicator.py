from typing import Dict, Optional
from rgb_types import RGBColor
from rgb_controller import set_labels_atomic, set_key_color
import utils.color_presets as cp
from utils.keyboard_presets import OUTBOX as OUTBOX_LABELS, OUTBOX_OVERFLOW_LABEL


OFF: RGBColor = cp.DARK_GRAY
DIGIT_ON: RGBColor = cp.PINK
REPEAT_ON: RGBColor = cp.ORANGE
OVERFLOW_ON: RGBColor = cp.RED

# Last digit shown, so a repeated digit gets its own colour
_last: Optional[int] = None


def _digit_to_label(d: int) -> str:
    """Map 0..9 to the corresponding number-key label."""
    return str(int(d) % 10)


def _apply(payload: Dict[str, RGBColor]) -> None:
    if set_labels_atomic(payload):
        return
    # Fallback to individual updates
    for lab, col in payload.items():
        set_key_color(lab, col)


def show_digit(value: int) -> None:
    """Light the number key of an outbox value.

    All outbox keys go OFF, then the key for `value` lights in DIGIT_ON,
    or REPEAT_ON when the previous value was the same digit. Values that
    are not a single digit light the overflow key instead.
    """
    global _last
    v = int(value)
    payload: Dict[str, RGBColor] = {lab: OFF for lab in OUTBOX_LABELS}
    payload[OUTBOX_OVERFLOW_LABEL] = OFF
    if 0 <= v <= 9:
        payload[_digit_to_label(v)] = REPEAT_ON if v == _last else DIGIT_ON
        _last = v
    else:
        payload[OUTBOX_OVERFLOW_LABEL] = OVERFLOW_ON
        _last = None
    _apply(payload)


def clear_outbox() -> None:
    """Turn all outbox labels to OFF color."""
    global _last
    _last = None
    payload: Dict[str, RGBColor] = {lab: OFF for lab in OUTBOX_LABELS}
    payload[OUTBOX_OVERFLOW_LABEL] = OFF
    _apply(payload)
