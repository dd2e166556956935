"""Declarative record filtering: one ``Predicate`` per filterable attribute."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import date
from typing import Callable, Iterable, TypeVar

from loguru import logger

from .dates import RecordingDate, in_week_window, on_or_after, parse_recording_date
from .errors import UnparsableDateError
from .models import AlbumCover, Track


NON_WORD = re.compile(r"[^\w\s']")


@dataclass(frozen=True)
class Criteria:
    artist: str | None = None
    album: str | None = None
    track: str | None = None
    year: int | None = None
    month: int | None = None
    day: int | None = None
    decade: int | None = None
    genre: str | None = None
    moods: str | None = None
    words: str | None = None
    week: bool = False
    instrumental: bool = False
    upcoming: bool = False
    reference_date: date | None = None

    @property
    def today(self) -> date:
        return self.reference_date or date.today()

    @property
    def is_wildcard(self) -> bool:
        return not any(predicate.applies(self) for predicate in PREDICATES)

    def active(self) -> list[str]:
        return [predicate.name for predicate in PREDICATES if predicate.applies(self)]


@dataclass(frozen=True)
class Predicate:
    name: str
    applies: Callable[[Criteria], bool]
    test: Callable[[Track, RecordingDate, Criteria], bool]


def split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def clean_phrase(phrase: str) -> str:
    return NON_WORD.sub("", phrase.lower())


def shares_any(wanted: str, values: Iterable[str]) -> bool:
    return not set(split_csv(wanted)).isdisjoint(values)


def lyrics_contain_any(words: str, lyrics: Iterable[str]) -> bool:
    cleaned = [clean_phrase(block) for block in lyrics]
    return any(word.lower() in block for word in split_csv(words) for block in cleaned)


def _is_set(name: str) -> Callable[[Criteria], bool]:
    return lambda criteria: getattr(criteria, name) is not None


def _flag(name: str) -> Callable[[Criteria], bool]:
    return lambda criteria: bool(getattr(criteria, name))


def _in_week(track: Track, when: RecordingDate, criteria: Criteria) -> bool:
    return when.yearless is not None and in_week_window(when.yearless, criteria.today)


def _upcoming(track: Track, when: RecordingDate, criteria: Criteria) -> bool:
    return when.yearless is not None and on_or_after(when.yearless, criteria.today)


PREDICATES: tuple[Predicate, ...] = (
    Predicate("genre", _is_set("genre"), lambda t, d, c: shares_any(c.genre, t.genres)),
    Predicate("moods", _is_set("moods"), lambda t, d, c: shares_any(c.moods, t.moods)),
    Predicate("words", _is_set("words"), lambda t, d, c: lyrics_contain_any(c.words, t.lyrics)),
    Predicate("year", _is_set("year"), lambda t, d, c: d.year == c.year),
    Predicate("month", _is_set("month"), lambda t, d, c: d.month == c.month),
    Predicate("day", _is_set("day"), lambda t, d, c: d.day == c.day),
    Predicate("decade", _is_set("decade"), lambda t, d, c: d.decade == c.decade),
    Predicate("artist", _is_set("artist"), lambda t, d, c: t.artist == c.artist),
    Predicate("album", _is_set("album"), lambda t, d, c: t.album == c.album),
    Predicate("track", _is_set("track"), lambda t, d, c: t.track_number == c.track),
    Predicate("week", _flag("week"), _in_week),
    Predicate("upcoming", _flag("upcoming"), _upcoming),
    Predicate("instrumental", _flag("instrumental"), lambda t, d, c: not t.lyrics),
)


def evaluate(record: Track | AlbumCover, criteria: Criteria) -> bool:
    track = record.track
    # The date is required even when no date criterion is set.
    when = parse_recording_date(track.recording_date, track.path)
    return all(
        predicate.test(track, when, criteria)
        for predicate in PREDICATES
        if predicate.applies(criteria)
    )


def matches(record: Track | AlbumCover, criteria: Criteria) -> bool:
    try:
        return evaluate(record, criteria)
    except UnparsableDateError as exc:
        logger.warning(f"excluding record: {exc}")
        return False


T = TypeVar("T", Track, AlbumCover)


def filter_records(records: Iterable[T], criteria: Criteria) -> list[T]:
    return [record for record in records if matches(record, criteria)]


def criteria_fields() -> list[str]:
    return [f.name for f in fields(Criteria) if f.name != "reference_date"]
