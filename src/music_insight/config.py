from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import platformdirs


APP_NAME = "mic"
AUDIO_SUFFIXES = (".flac", ".mp3", ".wav")


@dataclass(frozen=True)
class Config:
    music_dir: Path
    cache_dir: Path
    collage_dir: Path
    songs_cache_name: str = "songs_cache.json"
    covers_cache_name: str = "cover_cache.json"
    workers: int = 4
    strict: bool = False
    cover_size: int = 480
    palette_size: int = 5
    palette_iterations: int = 10
    collage_max_width: int = 3840
    collage_max_height: int = 2160
    song_patterns: tuple[str, ...] = tuple(f"*/*/*{suffix}" for suffix in AUDIO_SUFFIXES)
    album_patterns: tuple[str, ...] = tuple(f"*/*/01-*{suffix}" for suffix in AUDIO_SUFFIXES)
    cover_patterns: tuple[str, ...] = ("*/*/cover.*",)

    @property
    def songs_cache_path(self) -> Path:
        return self.cache_dir / self.songs_cache_name

    @property
    def covers_cache_path(self) -> Path:
        return self.cache_dir / self.covers_cache_name

    @classmethod
    def default(cls) -> Config:
        return cls(
            music_dir=Path(platformdirs.user_music_dir()),
            cache_dir=Path(platformdirs.user_cache_dir(APP_NAME)),
            collage_dir=Path(platformdirs.user_pictures_dir()) / "accg",
        )
