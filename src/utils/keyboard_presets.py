# keyboard_presets
# Key layout for the outbox display
# - Number row = outbox digit (one key lit per emitted digit)
# - Arrows     = decomposer stage (see utils/stage_indicator.py)
# - Grave      = RUN/PAUSE

# ---------------------------------------------------------------------
# OUTBOX (number row, digit -> key label)
# ---------------------------------------------------------------------
OUTBOX = ["1", "2", "3", "4", "5", "6", "7", "8", "9", "0"]

# Lit when the emitted value is not a single digit (input outside 0..999)
OUTBOX_OVERFLOW_LABEL = "backspace"

# ---------------------------------------------------------------------
# RUN/PAUSE indicator (single key + adjustable colors)
# ---------------------------------------------------------------------
# ON while the decomposer or machine is running, OFF when idle/halted
RUN_PAUSE_LABEL = "grave"
RUN_PAUSE_ON  = (0, 255, 0)  # Green
RUN_PAUSE_OFF = (0,   0, 0)  # Black
