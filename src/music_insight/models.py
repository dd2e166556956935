from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Generic, TypeVar


Color = tuple[int, int, int]

LIST_FIELDS = (
    "genres",
    "moods",
    "lyrics",
    "arrangers",
    "composers",
    "conductors",
    "engineers",
    "lyricists",
    "performers",
    "producers",
    "writers",
    "mix_djs",
    "mix_engineers",
)


@dataclass(frozen=True)
class Track:
    path: str
    title: str = ""
    artist: str = ""
    album_artist: str = ""
    album: str = ""
    track_number: str = ""
    track_total: str = ""
    genres: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()
    recording_date: str = ""
    duration: int = 0
    lyrics: tuple[str, ...] = ()
    # Production credits
    arrangers: tuple[str, ...] = ()
    composers: tuple[str, ...] = ()
    conductors: tuple[str, ...] = ()
    engineers: tuple[str, ...] = ()
    lyricists: tuple[str, ...] = ()
    performers: tuple[str, ...] = ()
    producers: tuple[str, ...] = ()
    writers: tuple[str, ...] = ()
    mix_djs: tuple[str, ...] = ()
    mix_engineers: tuple[str, ...] = ()
    remixer: str = ""
    # Details and comments
    comment: str = ""
    label: str = ""
    publisher: str = ""
    copyright: str = ""
    language: str = ""
    catalog_number: str = ""

    @property
    def directory(self) -> str:
        return str(Path(self.path).parent)

    @property
    def track(self) -> Track:
        return self

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for name in LIST_FIELDS:
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Track:
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        for name in LIST_FIELDS:
            if name in values:
                values[name] = tuple(values[name])
        return cls(**values)


@dataclass(frozen=True)
class ImageCache:
    width: int
    height: int
    pixels: bytes
    dominant_colors: tuple[Color, ...]

    @property
    def brightness(self) -> int:
        return sum(sum(color) for color in self.dominant_colors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "pixels": base64.b64encode(self.pixels).decode("ascii"),
            "dominant_colors": [list(color) for color in self.dominant_colors],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageCache:
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            pixels=base64.b64decode(data["pixels"]),
            dominant_colors=tuple(tuple(color) for color in data["dominant_colors"]),
        )


@dataclass(frozen=True)
class AlbumCover:
    path: str
    image: ImageCache
    album: Track

    @property
    def track(self) -> Track:
        return self.album

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "image": self.image.to_dict(),
            "album": self.album.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AlbumCover:
        return cls(
            path=data["path"],
            image=ImageCache.from_dict(data["image"]),
            album=Track.from_dict(data["album"]),
        )


R = TypeVar("R")


@dataclass
class ScanResult(Generic[R]):
    records: list[R]
    warnings: list[str] = field(default_factory=list)
    extracted: int = 0
    reused: int = 0
    cache_error: Exception | None = None
