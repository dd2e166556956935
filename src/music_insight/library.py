from __future__ import annotations

from pathlib import Path
from typing import Callable

from loguru import logger

from .cache import AttributeCache
from .config import Config
from .covers import CoverExtractor
from .errors import CacheIOError
from .metadata import read_track
from .models import AlbumCover, ScanResult, Track
from .scanner import discover


ProgressCallback = Callable[[int, int], None]


def _save(cache: AttributeCache, result: ScanResult) -> None:
    try:
        cache.save()
    except CacheIOError as exc:
        # Results are still usable; the caller decides how loud to be.
        logger.error(str(exc))
        result.cache_error = exc


def _scan_tracks(
    config: Config,
    patterns: tuple[str, ...],
    extract: Callable[[Path], Track],
    progress_callback: ProgressCallback | None,
) -> ScanResult[Track]:
    warnings: list[str] = []
    paths = discover(config.music_dir, patterns, warnings)
    cache = AttributeCache(config.songs_cache_path, Track).load()
    result = cache.populate(
        paths,
        extract,
        workers=config.workers,
        strict=config.strict,
        progress_callback=progress_callback,
    )
    result.warnings[:0] = warnings
    _save(cache, result)
    logger.info(f"{len(result.records)} tracks ({result.extracted} new, {result.reused} cached)")
    return result


def load_songs(
    config: Config,
    extract: Callable[[Path], Track] = read_track,
    progress_callback: ProgressCallback | None = None,
) -> ScanResult[Track]:
    return _scan_tracks(config, config.song_patterns, extract, progress_callback)


def load_albums(
    config: Config,
    extract: Callable[[Path], Track] = read_track,
    progress_callback: ProgressCallback | None = None,
) -> ScanResult[Track]:
    return _scan_tracks(config, config.album_patterns, extract, progress_callback)


def load_covers(
    config: Config,
    extract: Callable[[Path], Track] = read_track,
    progress_callback: ProgressCallback | None = None,
) -> ScanResult[AlbumCover]:
    albums = load_albums(config, extract)
    warnings = list(albums.warnings)
    paths = discover(config.music_dir, config.cover_patterns, warnings)

    cache = AttributeCache(config.covers_cache_path, AlbumCover).load()
    extractor = CoverExtractor(
        albums.records,
        size=config.cover_size,
        k=config.palette_size,
        max_iterations=config.palette_iterations,
    )
    result = cache.populate(
        paths,
        extractor,
        workers=config.workers,
        strict=config.strict,
        progress_callback=progress_callback,
    )
    result.warnings[:0] = warnings
    result.cache_error = albums.cache_error
    _save(cache, result)
    logger.info(f"{len(result.records)} covers ({result.extracted} new, {result.reused} cached)")
    return result
