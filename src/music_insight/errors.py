from __future__ import annotations

from pathlib import Path


class MusicInsightError(Exception):
    pass


class ExtractionError(MusicInsightError):
    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


class ImageDecodeError(ExtractionError):
    pass


class UnparsableDateError(MusicInsightError, ValueError):
    def __init__(self, value: str, path: str = "") -> None:
        where = f" ({path})" if path else ""
        super().__init__(f"unparsable recording date {value!r}{where}")
        self.value = value
        self.path = path


class EmptyImageError(MusicInsightError, ValueError):
    pass


class CacheIOError(MusicInsightError, OSError):
    pass
