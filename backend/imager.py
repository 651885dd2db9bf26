# backend/imager.py - placeholder PNG rendering (Pillow + numpy)
import io
from functools import lru_cache
from typing import Optional

import numpy as np
from fastapi.responses import Response
from PIL import Image, ImageDraw, ImageFont

from settings import RENDER_CACHE_SIZE

BG_TOP = 220
BG_BOTTOM = 170
FG = (90, 90, 90)

def gradient(width: int, height: int) -> np.ndarray:
    """Vertical grey gradient, shape (height, width, 3), uint8."""
    col = np.linspace(BG_TOP, BG_BOTTOM, num=height, dtype=np.float32)
    rows = np.repeat(col[:, None], width, axis=1)
    return np.stack([rows] * 3, axis=-1).round().astype(np.uint8)

def crop_square(img: Image.Image, square: int) -> Image.Image:
    side = min(square, img.width, img.height)
    left = (img.width - side) // 2
    top = (img.height - side) // 2
    return img.crop((left, top, left + side, top + side))

def draw_label(img: Image.Image, label: str):
    draw = ImageDraw.Draw(img)
    # roughly a tenth of the short side, never unreadably small
    size = max(10, min(img.width, img.height) // 10)
    font = ImageFont.load_default(size=size)
    left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
    x = (img.width - (right - left)) // 2 - left
    y = (img.height - (bottom - top)) // 2 - top
    draw.text((x, y), label, fill=FG, font=font)

@lru_cache(maxsize=RENDER_CACHE_SIZE)
def render_png(width: int, height: int, square: Optional[int] = None, text: Optional[str] = None) -> bytes:
    img = Image.fromarray(gradient(width, height))
    if square:
        img = crop_square(img, square)
    draw_label(img, text if text else f"{width}x{height}")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

def send_image(width: int, height: int, square: Optional[int] = None, text: Optional[str] = None) -> Response:
    return Response(content=render_png(width, height, square, text), media_type="image/png")
