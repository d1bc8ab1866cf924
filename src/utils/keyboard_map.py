# -*- coding: utf-8 -*-
"""
Keyboard label mapping utilities.

- Builds a label -> LED index map from LED names, either straight from the
  backend ((index, name) rows) or from a JSON map exported earlier
  (data/maps/*_leds.json), using simple alias heuristics.
- No direct device control here; rgb_controller consumes the label map.
"""

import json
import re
from typing import Dict, Iterable, List, Optional, Tuple


def _norm(s: str) -> str:
    s = (s or "").strip().lower()
    s = s.replace("key:", "").replace("key ", "")
    s = s.replace("keyboard", "").replace("kbd", "")
    s = re.sub(r"\s+", " ", s)
    return s.strip()

# Labels the display uses, with the LED names they go by on common devices
ALIASES: Dict[str, List[str]] = {
    # Number row (outbox digits)
    "grave": ["`", "grave", "backtick", "tilde"],
    "1": ["1"], "2": ["2"], "3": ["3"], "4": ["4"], "5": ["5"],
    "6": ["6"], "7": ["7"], "8": ["8"], "9": ["9"], "0": ["0"],
    "minus": ["-"],
    "backspace": ["backspace"],
    # Arrows (decomposer stage)
    "up": ["up arrow", "up"], "down": ["down arrow", "down"],
    "left": ["left arrow", "left"], "right": ["right arrow", "right"],
}


class RGBLabelController:
    def __init__(self, json_path: Optional[str] = None,
                 rows: Optional[Iterable[Tuple[int, str]]] = None):
        if rows is not None:
            self.label_to_index: Dict[str, int] = self._build_label_map(rows)
        elif json_path is not None:
            self.label_to_index = self._build_label_map(self._rows_from_json(json_path))
        else:
            raise ValueError("RGBLabelController needs LED rows or a JSON map")

    @staticmethod
    def _rows_from_json(path: str) -> List[Tuple[int, str]]:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        rows: List[Tuple[int, str]] = []
        for row in data.get("leds", []):
            try:
                rows.append((int(row["index"]), str(row.get("name_raw", ""))))
            except (KeyError, TypeError, ValueError):
                continue
        return rows

    @staticmethod
    def _build_label_map(rows: Iterable[Tuple[int, str]]) -> Dict[str, int]:
        name_to_indices: Dict[str, List[int]] = {}
        for idx, name in rows:
            name_to_indices.setdefault(_norm(name), []).append(int(idx))
        label_map: Dict[str, int] = {}
        for label, alias_list in ALIASES.items():
            candidates: List[int] = []
            for a in alias_list:
                key = _norm(a)
                if key in name_to_indices:
                    candidates.extend(name_to_indices[key])
            if not candidates:
                # Loose match only for multi-character aliases ("up" in "up arrow")
                for a in alias_list:
                    key = _norm(a)
                    if len(key) < 2:
                        continue
                    for nrm_name, idxs in name_to_indices.items():
                        if key in nrm_name:
                            candidates.extend(idxs)
            uniq = sorted(set(candidates))
            if len(uniq) == 1:
                label_map[label] = uniq[0]
        return label_map

    def available_labels(self) -> Dict[str, int]:
        return dict(self.label_to_index)
