# sim/programs.py
"""Bundled machine listings, compiled from the C sources in sim/listings/."""

from pathlib import Path
from typing import Dict, List

from exploder.decomposer import HUNDRED, TEN, ZERO
from sim.codegen import compile_file

LISTINGS_DIR = Path(__file__).resolve().parent / "listings"

# Floor constants the digit exploder source points at
ZERO_TILE = 9
TEN_TILE = 10
HUNDRED_TILE = 11

DIGIT_EXPLODER_FLOOR: Dict[int, int] = {
    ZERO_TILE: ZERO,
    TEN_TILE: TEN,
    HUNDRED_TILE: HUNDRED,
}

SOURCES: Dict[str, Path] = {
    "digit_exploder": LISTINGS_DIR / "digit_exploder.c",
}

DIGIT_EXPLODER: List[str] = compile_file(SOURCES["digit_exploder"])

PROGRAMS: Dict[str, List[str]] = {
    "digit_exploder": DIGIT_EXPLODER,
}

FLOORS: Dict[str, Dict[int, int]] = {
    "digit_exploder": DIGIT_EXPLODER_FLOOR,
}
