# backend/main.py - FastAPI app: startup config, CORS, image + stats endpoints
import os
import re
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from imager import send_image
from schemas import HitBucketOut, SizeOut, TopReferrerOut, TopSizeOut
from settings import (
    BASE_DIR,
    FRONTEND_ORIGIN,
    HIT_BUCKETS_MS,
    HOST,
    MAX_DIMENSION,
    PORT,
    RENDER_CACHE_SIZE,
    REPO_ROOT,
    STATIC_DIR,
    STATS_LIMIT,
)
from state import StatsState, get_stats

app = FastAPI(title="Placeholder Image Gateway")

# One aggregation state per process; routes reach it through get_stats
app.state.stats = StatsState(buckets_ms=HIT_BUCKETS_MS)

# Terse error surfaces for client; keep server logs for details
@app.exception_handler(Exception)
async def unhandled_exc_handler(request, exc):
    return JSONResponse(status_code=500, content={"detail": "Server error", "hint": str(exc)[:200]})

@app.exception_handler(RequestValidationError)
async def validation_exc_handler(request, exc):
    return JSONResponse(status_code=422, content={"detail": "Validation error", "errors": exc.errors()})

# --- CORS (localhost + 127.0.0.1) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_ORIGIN,
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def on_startup():
    print(f"[CONFIG] max_dimension={MAX_DIMENSION} stats_limit={STATS_LIMIT} "
          f"hit_buckets_ms={list(HIT_BUCKETS_MS)} render_cache={RENDER_CACHE_SIZE}")
    if STATIC_DIR.is_dir():
        print("[CONFIG] serving static assets from", STATIC_DIR)

@app.get("/health")
def health():
    return {"status": "ok"}

# --- Config probe (optional) ---
CONFIG_KEYS = {"HOST", "PORT", "MAX_DIMENSION", "STATS_LIMIT", "HIT_BUCKETS_MS",
               "RENDER_CACHE_SIZE", "STATIC_DIR", "FRONTEND_ORIGIN"}

@app.get("/api/config")
def api_config_probe():
    env_pairs: Dict[str, str] = {k: v for k, v in os.environ.items() if k in CONFIG_KEYS}
    return {
        "cwd": os.getcwd(),
        "base_dir": str(BASE_DIR),
        "repo_root": str(REPO_ROOT),
        "static_dir": str(STATIC_DIR),
        "env": env_pairs,
    }

# --- Image request validation ---
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

def parse_leading_int(raw: Optional[str]) -> Optional[int]:
    """Leading integer of raw ("12px" -> 12), None when there isn't one."""
    if raw is None:
        return None
    m = LEADING_INT.match(raw)
    return int(m.group(1)) if m else None

def is_integral(raw: str) -> bool:
    # float() accepts "1_000"; a URL parameter shouldn't
    if "_" in raw:
        return False
    try:
        return float(raw).is_integer()
    except ValueError:
        return False

def reject(status: int, why: str):
    print(f"[IMG] rejected ({status}): {why}")
    raise HTTPException(status_code=status, detail=why)

def validate_dimensions(width_raw: str, height_raw: str):
    width = parse_leading_int(width_raw)
    height = parse_leading_int(height_raw)

    if not width or not height:
        reject(400, "width and height must be non-zero integers")
    if not is_integral(width_raw) or not is_integral(height_raw):
        reject(400, "width and height must be whole numbers")
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        reject(403, f"width and height must not exceed {MAX_DIMENSION}")
    if width <= 0 or height <= 0:
        reject(400, "width and height must be positive")
    return width, height

def validate_square(square_raw: Optional[str]) -> Optional[int]:
    # absent or without a leading number means no square crop
    square = parse_leading_int(square_raw)

    if square and not is_integral(square_raw):
        reject(400, "square must be a whole number")
    if square_raw is not None and len(square_raw) == 0:
        reject(400, "square must not be empty")
    if square is not None and square <= 0:
        reject(400, "square must be positive")
    return square

# encodeURIComponent leaves these unescaped on top of quote()'s defaults
URI_COMPONENT_SAFE = "!~*'()"

def raw_path(request: Request) -> str:
    # Starlette decodes url.path; recorded paths keep the client's encoding
    raw = request.scope.get("raw_path")
    return raw.decode("latin-1") if raw else request.url.path

def normalized_path(path: str, square: Optional[int], text: Optional[str]) -> str:
    # rebuilt so the same request always records the same path
    if square:
        path += f"?square={square}"
    if text:
        sep = "&" if square else "?"
        path += f"{sep}text={quote(text, safe=URI_COMPONENT_SAFE)}"
    return path

# --- Image endpoint (records into stats, then renders) ---
@app.get("/img/{width}/{height}")
def get_image(
    width: str,
    height: str,
    request: Request,
    referer: Optional[str] = Header(None),
    stats: StatsState = Depends(get_stats),
):
    w, h = validate_dimensions(width, height)
    square = validate_square(request.query_params.get("square"))
    text = request.query_params.get("text")

    stats.append("paths", normalized_path(raw_path(request), square, text))
    if text:
        stats.append("texts", text)
    stats.append("sizes", {"w": w, "h": h})
    if referer:
        stats.append("referrers", referer)
    stats.record_hit()

    return send_image(w, h, square, text)

# --- Stats reporting ---
@app.get("/stats/paths/recent", response_model=List[str])
def recent_paths(stats: StatsState = Depends(get_stats)):
    return stats.recent("paths", STATS_LIMIT)

@app.get("/stats/texts/recent", response_model=List[str])
def recent_texts(stats: StatsState = Depends(get_stats)):
    return stats.recent("texts", STATS_LIMIT)

@app.get("/stats/sizes/recent", response_model=List[SizeOut])
def recent_sizes(stats: StatsState = Depends(get_stats)):
    return stats.recent("sizes", STATS_LIMIT)

@app.get("/stats/sizes/top", response_model=List[TopSizeOut])
def top_sizes(stats: StatsState = Depends(get_stats)):
    return stats.top_sizes(STATS_LIMIT)

@app.get("/stats/referrers/top", response_model=List[TopReferrerOut])
def top_referrers(stats: StatsState = Depends(get_stats)):
    return stats.top_referrers(STATS_LIMIT)

@app.get("/stats/hits", response_model=List[HitBucketOut])
def hits(stats: StatsState = Depends(get_stats)):
    return stats.hit_buckets()

@app.delete("/stats")
def reset_stats(stats: StatsState = Depends(get_stats)):
    stats.reset()
    print("[STATS] reset: all stores and the hit window cleared")
    return Response(status_code=200)

# --- Static assets (mounted last so the routes above win) ---
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")

if __name__ == "__main__":
    import uvicorn

    print(f"Server running on port {PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
