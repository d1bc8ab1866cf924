# -*- coding: utf-8 -*-
"""
Dump the connected keyboard's LED names to data/maps/<keyboard>_leds.{csv,json}.

The JSON file can be fed back with `digit-exploder --led --led-map FILE`
when a device reports names the alias heuristics do not pick up (edit the
`name_raw` fields by hand).
"""

import csv
import json
import os
import re
from typing import Dict, List, Optional, Tuple

import config


def _safe_name(name: str) -> str:
    s = re.sub(r"[^\w.-]+", "_", (name or "keyboard").strip())
    return s.strip("_") or "keyboard"


def export_led_map(rows: List[Tuple[int, str]], keyboard: str,
                   out_dir: Optional[str] = None) -> Tuple[str, str]:
    """Write `(index, name)` rows as CSV and JSON; returns both paths."""
    out_dir = str(out_dir or config.MAPS_DIR)
    os.makedirs(out_dir, exist_ok=True)
    leds: List[Dict[str, object]] = [{"index": int(i), "name_raw": n or ""} for i, n in rows]
    base = _safe_name(keyboard)

    csv_path = os.path.join(out_dir, f"{base}_leds.csv")
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=["index", "name_raw"])
        w.writeheader()
        w.writerows(leds)

    json_path = os.path.join(out_dir, f"{base}_leds.json")
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump({"keyboard": keyboard, "leds": leds}, f, ensure_ascii=False, indent=2)

    print(f"[OK] CSV saved: {csv_path}")
    print(f"[OK] JSON saved: {json_path}")
    return csv_path, json_path


__all__ = ["export_led_map"]
