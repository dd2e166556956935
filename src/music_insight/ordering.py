from __future__ import annotations

import random
from typing import Sequence, TypeVar

from .dates import yearless_sort_key
from .models import AlbumCover, Track


T = TypeVar("T")
R = TypeVar("R", Track, AlbumCover)


def sort_chronologically(records: Sequence[R]) -> list[R]:
    return sorted(
        records,
        key=lambda r: (yearless_sort_key(r.track.recording_date), r.track.path),
    )


def sort_by_palette(covers: Sequence[AlbumCover]) -> list[AlbumCover]:
    return sorted(covers, key=lambda c: (c.image.brightness, c.path))


def shuffled(records: Sequence[T], rng: random.Random | None = None) -> list[T]:
    items = list(records)
    (rng or random.Random()).shuffle(items)
    return items


def truncate(records: Sequence[T], length: int | None) -> list[T]:
    if length is None:
        return list(records)
    return list(records[: max(0, length)])
