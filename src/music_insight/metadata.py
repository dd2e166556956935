from __future__ import annotations

from pathlib import Path

from loguru import logger
from mutagen import File, MutagenError

from .errors import ExtractionError
from .models import Track


# Candidate keys per field: Vorbis comments, ID3 frames, MP4 atoms.
TAG_KEYS: dict[str, tuple[str, ...]] = {
    "title": ("title", "TIT2", "©nam"),
    "artist": ("artist", "TPE1", "©ART"),
    "album_artist": ("albumartist", "album artist", "TPE2", "aART"),
    "album": ("album", "TALB", "©alb"),
    "track_number": ("tracknumber", "TRCK", "trkn"),
    "track_total": ("tracktotal", "totaltracks"),
    "genres": ("genre", "TCON", "©gen"),
    "moods": ("mood", "TMOO", "----:com.apple.iTunes:MOOD"),
    "recording_date": ("date", "year", "TDRC", "TYER", "©day"),
    "arrangers": ("arranger", "TXXX:ARRANGER"),
    "composers": ("composer", "TCOM", "©wrt"),
    "conductors": ("conductor", "TPE3"),
    "engineers": ("engineer", "TXXX:ENGINEER"),
    "lyricists": ("lyricist", "TEXT"),
    "performers": ("performer", "TXXX:PERFORMER"),
    "producers": ("producer", "TXXX:PRODUCER"),
    "writers": ("writer", "TXXX:WRITER"),
    "mix_djs": ("djmixer", "TXXX:DJMIXER"),
    "mix_engineers": ("mixer", "TXXX:MIXER"),
    "remixer": ("remixer", "TPE4"),
    "comment": ("comment", "COMM::eng", "©cmt"),
    "label": ("label", "organization", "TXXX:LABEL"),
    "publisher": ("publisher", "TPUB"),
    "copyright": ("copyright", "TCOP", "cprt"),
    "language": ("language", "TLAN"),
    "catalog_number": ("catalognumber", "TXXX:CATALOGNUMBER"),
}
LYRICS_KEYS = ("lyrics", "unsyncedlyrics", "©lyr")

GENRE_SEPARATOR = ";"
LIST_SEPARATOR = ","
SINGLE_FIELDS = {
    "title",
    "artist",
    "album_artist",
    "album",
    "track_number",
    "track_total",
    "recording_date",
    "remixer",
    "comment",
    "label",
    "publisher",
    "copyright",
    "language",
    "catalog_number",
}


def _texts(value: object) -> list[str]:
    if value is None:
        return []
    # ID3 frames carry their values in .text
    text = getattr(value, "text", None)
    if text is not None and not isinstance(value, str):
        return _texts(text)
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(item, int) for item in value):
            # MP4 "trkn" pairs: (number, total)
            return [str(value[0])] if value[0] else []
        out: list[str] = []
        for item in value:
            out.extend(_texts(item))
        return out
    if isinstance(value, bytes):
        return [value.decode("utf-8", errors="replace").strip()]
    return [str(value).strip()]


def _tag_values(tags: object, *keys: str) -> list[str]:
    if tags is None:
        return []

    for key in keys:
        try:
            value = tags.get(key)
        except (KeyError, ValueError, TypeError):
            value = None
        values = [v for v in _texts(value) if v]
        if values:
            return values

    return []


def _tag_value(tags: object, *keys: str) -> str:
    values = _tag_values(tags, *keys)
    return values[0] if values else ""


def split_values(values: list[str], separator: str) -> tuple[str, ...]:
    parts: list[str] = []
    for value in values:
        parts.extend(part.strip() for part in value.split(separator))
    return tuple(part for part in parts if part)


def lyric_blocks(text: str) -> tuple[str, ...]:
    return tuple(line.strip() for line in text.splitlines() if line.strip())


def _lyrics(tags: object) -> tuple[str, ...]:
    getall = getattr(tags, "getall", None)
    if callable(getall):
        frames = getall("USLT")
        if frames:
            return lyric_blocks("\n".join(str(frame.text) for frame in frames))
    return lyric_blocks("\n".join(_tag_values(tags, *LYRICS_KEYS)))


def tags_to_fields(tags: object) -> dict[str, object]:
    values: dict[str, object] = {}
    for name, keys in TAG_KEYS.items():
        if name in SINGLE_FIELDS:
            values[name] = _tag_value(tags, *keys)
        elif name == "genres":
            values[name] = split_values(_tag_values(tags, *keys), GENRE_SEPARATOR)
        else:
            values[name] = split_values(_tag_values(tags, *keys), LIST_SEPARATOR)

    # "3/12" style track numbers
    number = str(values["track_number"])
    if "/" in number:
        number, _, total = number.partition("/")
        values["track_number"] = number.strip()
        if not values["track_total"]:
            values["track_total"] = total.strip()

    values["lyrics"] = _lyrics(tags)
    return values


def read_track(path: Path) -> Track:
    try:
        audio = File(path)
    except (MutagenError, OSError) as exc:
        raise ExtractionError(path, f"failed to read file: {exc}") from exc

    if audio is None:
        raise ExtractionError(path, "unsupported or unrecognized file")

    tags = getattr(audio, "tags", None)
    if not tags:
        raise ExtractionError(path, "no tags found")

    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    duration = int(length) if isinstance(length, (int, float)) else 0

    logger.debug(f"extracted tags from {path}")
    return Track(path=str(path), duration=duration, **tags_to_fields(tags))
