from __future__ import annotations

from pathlib import Path

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from .errors import ExtractionError, ImageDecodeError
from .models import AlbumCover, ImageCache, Track
from .palette import DEFAULT_CLUSTERS, DEFAULT_ITERATIONS, extract_palette


def read_cover_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(path, f"failed to decode image: {exc}") from exc


def build_image_cache(
    img: Image.Image,
    size: int = 480,
    k: int = DEFAULT_CLUSTERS,
    max_iterations: int = DEFAULT_ITERATIONS,
    rng: np.random.Generator | None = None,
) -> ImageCache:
    resized = img.convert("RGB").resize((size, size), Image.Resampling.BILINEAR)
    width, height = resized.size
    pixels = resized.tobytes()
    colors = extract_palette(pixels, width, k, max_iterations, rng)
    return ImageCache(width=width, height=height, pixels=pixels, dominant_colors=tuple(colors))


def album_for_cover(cover_path: Path, albums: list[Track]) -> Track:
    directory = str(cover_path.parent)
    for album in albums:
        if album.directory == directory:
            return album
    raise ExtractionError(cover_path, "no album track found next to cover")


class CoverExtractor:
    def __init__(
        self,
        albums: list[Track],
        size: int = 480,
        k: int = DEFAULT_CLUSTERS,
        max_iterations: int = DEFAULT_ITERATIONS,
    ) -> None:
        self.albums = albums
        self.size = size
        self.k = k
        self.max_iterations = max_iterations

    def __call__(self, path: Path) -> AlbumCover:
        album = album_for_cover(path, self.albums)
        image = build_image_cache(read_cover_image(path), self.size, self.k, self.max_iterations)
        logger.debug(f"built palette for {path}: {image.dominant_colors}")
        return AlbumCover(path=str(path), image=image, album=album)
