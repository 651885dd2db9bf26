# backend/settings.py
import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
REPO_ROOT = BASE_DIR.parent

# Load .env next to backend/main.py
load_dotenv(BASE_DIR / ".env")

def require_env(name: str, default: str | None = None) -> str:
    val = os.getenv(name, default)
    if val is None or (isinstance(val, str) and val.strip() == ""):
        raise RuntimeError(f"Missing required env var: {name}")
    return val

def int_env(name: str, default: int) -> int:
    raw = require_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Env var {name} must be an integer, got {raw!r}")

def int_list_env(name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
    raw = require_env(name, ",".join(str(d) for d in default))
    try:
        vals = tuple(int(p) for p in raw.split(",") if p.strip())
    except ValueError:
        raise RuntimeError(f"Env var {name} must be comma separated integers, got {raw!r}")
    if not vals:
        raise RuntimeError(f"Env var {name} is empty")
    return vals

def resolve_path(maybe: str) -> Path:
    """
    Resolve a file/directory path tried in this order:
      1) as-is
      2) REPO_ROOT / maybe
      3) BASE_DIR / maybe
    Returns absolute Path.
    """
    candidates = [
        Path(maybe),
        REPO_ROOT / maybe,
        BASE_DIR / maybe,
    ]
    for c in candidates:
        if c.exists():
            return c.resolve()
    # return best-guess absolute even if missing (caller can check exists)
    return (REPO_ROOT / maybe).resolve()

# --- Settings (read once) ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int_env("PORT", 8080)
MAX_DIMENSION = int_env("MAX_DIMENSION", 2000)
STATS_LIMIT = int_env("STATS_LIMIT", 10)
HIT_BUCKETS_MS = int_list_env("HIT_BUCKETS_MS", (5000, 10000, 15000))
RENDER_CACHE_SIZE = int_env("RENDER_CACHE_SIZE", 64)
STATIC_DIR = resolve_path(os.getenv("STATIC_DIR", "public"))
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")
