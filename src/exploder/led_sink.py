"""Outbox display on the keyboard number row."""

from __future__ import annotations

from exploder.decomposer import Stage
from utils.outbox_indicator import show_digit, clear_outbox
from utils.stage_indicator import post_stage, clear_stages


class LedOutbox:
    """Output sink that lights the number key of every emitted digit.

    rgb_controller.connect() must have been called first.
    """

    def __init__(self) -> None:
        self.count = 0

    def write_integer(self, value: int) -> None:
        show_digit(value)
        self.count += 1

    def on_stage(self, stage: Stage) -> None:
        post_stage(stage)

    def clear(self) -> None:
        clear_outbox()
        clear_stages()
        self.count = 0
