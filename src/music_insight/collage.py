from __future__ import annotations

import math
import re
from datetime import datetime
from pathlib import Path

from PIL import Image

from .filters import Criteria
from .models import AlbumCover


MAX_WIDTH = 3840
MAX_HEIGHT = 2160
SLUG_CHARS = re.compile(r"[,\s]")
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tif", ".tiff"}


def grid_dimensions(count: int) -> tuple[int, int]:
    if count <= 0:
        raise ValueError("collage needs at least one image")
    cols = math.ceil(math.sqrt(count))
    rows = math.ceil(count / cols)
    return cols, rows


def tile_size(count: int, max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT) -> int:
    cols, rows = grid_dimensions(count)
    return min(max_width // cols, max_height // rows)


def _thumbnail(cover: AlbumCover) -> Image.Image:
    image = cover.image
    return Image.frombytes("RGB", (image.width, image.height), image.pixels)


def create_collage(
    covers: list[AlbumCover],
    max_width: int = MAX_WIDTH,
    max_height: int = MAX_HEIGHT,
) -> Image.Image:
    cols, rows = grid_dimensions(len(covers))
    size = tile_size(len(covers), max_width, max_height)
    collage = Image.new("RGB", (cols * size, max_height))

    for row in range(rows):
        for col in range(cols):
            index = col + cols * row
            if index >= len(covers):
                break
            tile = _thumbnail(covers[index]).resize((size, size), Image.Resampling.BILINEAR)
            collage.paste(tile, (col * size, row * size))

    return collage


def _subject(criteria: Criteria) -> str:
    if criteria.genre is not None:
        return "genre"
    if criteria.week:
        return "week"
    for name in ("moods", "artist", "year", "month", "day", "decade"):
        if getattr(criteria, name) is not None:
            return name
    return "all"


def _slug(value: str) -> str:
    return SLUG_CHARS.sub("-", value).lower()


def collage_filename(criteria: Criteria, now: datetime | None = None) -> str:
    for value in (criteria.genre, criteria.moods, criteria.artist):
        if value is not None:
            return f"{_slug(value)}.png"
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return f"{stamp}-{_subject(criteria)}.png"


def is_image_filename(name: str) -> bool:
    return Path(name).suffix.lower() in IMAGE_SUFFIXES


def save_collage(collage: Image.Image, path: Path) -> Path:
    if not is_image_filename(path.name):
        raise ValueError(f"unsupported image file name: {path.name}")
    path.parent.mkdir(parents=True, exist_ok=True)
    collage.save(path)
    return path
