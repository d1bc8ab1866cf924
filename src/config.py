import os
import sys
from pathlib import Path

# Project root
def _resolve_project_root() -> Path:
    try:
        # Frozen executable (PyInstaller onedir/onefile)
        if getattr(sys, 'frozen', False):
            return Path(sys.executable).resolve().parent
        # Source checkout
        return Path(__file__).resolve().parents[1]
    except OSError:
        # Last resort: current working directory
        return Path.cwd()

PROJECT_ROOT = _resolve_project_root()

def _resolve_data_dir(project_root: Path) -> Path:
    """Best-effort resolution of the data directory.
    Tries these locations in order:
      1) $EXPLODER_DATA_DIR
      2) <project_root>/data
      3) sys._MEIPASS/data (PyInstaller onefile)
    Returns the first existing path; falls back to project_root/data.
    """
    candidates = []
    env = os.environ.get("EXPLODER_DATA_DIR", "").strip()
    if env:
        candidates.append(Path(env))
    candidates.append(project_root / "data")
    meipass = getattr(sys, "_MEIPASS", None)
    if meipass:
        candidates.append(Path(meipass) / "data")
    for p in candidates:
        if p.exists():
            return p
    return project_root / "data"

DATA_DIR = _resolve_data_dir(PROJECT_ROOT)
MAPS_DIR = DATA_DIR / "maps"


def env_flag(name: str, default: bool = False) -> bool:
    raw = str(os.environ.get(name, "")).strip().lower()
    if not raw:
        return default
    return raw in ("1", "y", "yes", "true", "on")


def env_int(name: str, default: int) -> int:
    raw = str(os.environ.get(name, "")).strip()
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        return default


# Runtime toggles (read once at import; tests patch the module attributes)
DEBUG: bool = env_flag("EXPLODER_DEBUG")
MAX_STEPS: int = env_int("EXPLODER_MAX_STEPS", 100_000)
FLOOR_SIZE: int = env_int("EXPLODER_FLOOR_SIZE", 100)

RGB_BACKEND: str = str(os.environ.get("RGB_BACKEND", "openrgb")).strip().lower()
OPENRGB_HOST: str = str(os.environ.get("OPENRGB_HOST", "127.0.0.1")).strip()
OPENRGB_PORT: int = env_int("OPENRGB_PORT", 6742)
RGB_APPLY_DELAY_MS: int = env_int("RGB_APPLY_DELAY_MS", 20)
