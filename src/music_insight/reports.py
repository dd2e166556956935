from __future__ import annotations

import random
import re
from collections import Counter, defaultdict
from dataclasses import dataclass
from pathlib import Path

from .dates import parse_recording_date
from .errors import UnparsableDateError
from .models import Track
from .ordering import shuffled, sort_chronologically, truncate


WORD_SPLIT = re.compile(r"[^\w']+")


@dataclass
class TimeSummary:
    shortest_album: int
    average_album: int
    longest_album: int
    shortest_song: int
    average_song: int
    longest_song: int
    total: int


def count_summary(tracks: list[Track], albums_only: bool = False) -> list[tuple[str, int]]:
    rows: list[tuple[str, int]] = []
    if not albums_only:
        rows.append(("Songs", len(tracks)))
    rows.append(("Albums", len({t.album for t in tracks})))
    rows.append(("Artists", len({t.artist for t in tracks})))
    rows.append(("Genres", len({g for t in tracks for g in t.genres})))
    rows.append(("Moods", len({m for t in tracks for m in t.moods})))
    return rows


def _ranked(counter: Counter, length: int | None = None) -> list[tuple[str, int]]:
    rows = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return truncate(rows, length)


def count_years(tracks: list[Track]) -> list[tuple[int, int]]:
    years: Counter = Counter()
    for track in tracks:
        try:
            years[parse_recording_date(track.recording_date, track.path).year] += 1
        except UnparsableDateError:
            continue
    return sorted(years.items())


def count_genres(tracks: list[Track], length: int | None = None) -> list[tuple[str, int]]:
    return _ranked(Counter(g for t in tracks for g in t.genres), length)


def count_moods(tracks: list[Track], length: int | None = None) -> list[tuple[str, int]]:
    return _ranked(Counter(m for t in tracks for m in t.moods), length)


def phrase_words(phrase: str) -> list[str]:
    return [word for word in WORD_SPLIT.split(phrase.lower()) if word.strip("'")]


def count_words(tracks: list[Track], length: int | None = None) -> list[tuple[str, int]]:
    words: Counter = Counter()
    for track in tracks:
        for block in track.lyrics:
            words.update(phrase_words(block))
    return _ranked(words, length)


def time_summary(tracks: list[Track]) -> TimeSummary:
    if not tracks:
        raise ValueError("no tracks to summarize")

    album_lengths: dict[str, int] = defaultdict(int)
    for track in tracks:
        album_lengths[track.album] += track.duration

    durations = [t.duration for t in tracks]
    total = sum(durations)
    return TimeSummary(
        shortest_album=min(album_lengths.values()),
        average_album=total // len(album_lengths),
        longest_album=max(album_lengths.values()),
        shortest_song=min(durations),
        average_song=total // len(durations),
        longest_song=max(durations),
        total=total,
    )


def format_duration(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 9:
        return f"{hours:03d}:{minutes:02d}:{secs:02d}"
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def what_to_play(albums: list[Track]) -> list[str]:
    return [
        f"{album.recording_date} {album.artist} - {album.album}"
        for album in sort_chronologically(albums)
    ]


def missing_lyrics_dirs(tracks: list[Track]) -> list[str]:
    return sorted({t.directory for t in tracks if not t.lyrics})


def playlist_entries(
    tracks: list[Track],
    music_dir: Path,
    randomize: bool = False,
    length: int | None = None,
    rng: random.Random | None = None,
) -> list[str]:
    ordered = shuffled(tracks, rng) if randomize else sort_chronologically(tracks)
    entries = []
    for track in ordered:
        path = Path(track.path)
        try:
            entries.append(path.relative_to(music_dir).as_posix())
        except ValueError:
            entries.append(str(path))
    return truncate(entries, length)


def write_playlist(name: str, entries: list[str], directory: Path) -> Path:
    target = directory / f"{name}.m3u"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("\n".join(entries), encoding="utf-8")
    return target
