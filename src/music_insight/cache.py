"""Persistent path -> record cache backed by a single JSON snapshot."""

from __future__ import annotations

import json
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Generic, Iterable, Protocol, TypeVar

from loguru import logger

from .errors import CacheIOError, ExtractionError
from .models import ScanResult


class Record(Protocol):
    def to_dict(self) -> dict: ...


R = TypeVar("R", bound=Record)


class AttributeCache(Generic[R]):
    def __init__(self, snapshot_path: Path, record_type: type[R]) -> None:
        self.snapshot_path = snapshot_path
        self.record_type = record_type
        self.extraction_count = 0
        self._entries: dict[str, R] = {}
        self._lock = threading.Lock()

    def __contains__(self, path: object) -> bool:
        return str(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: Path | str) -> R | None:
        return self._entries.get(str(path))

    def paths(self) -> list[str]:
        return list(self._entries)

    def records(self) -> list[R]:
        return list(self._entries.values())

    def load(self) -> AttributeCache[R]:
        self._entries = {}
        if not self.snapshot_path.exists():
            logger.debug(f"no cache snapshot at {self.snapshot_path}, starting empty")
            return self

        try:
            raw = json.loads(self.snapshot_path.read_text(encoding="utf-8"))
            data = raw["data"] if isinstance(raw, dict) else None
            if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
                raise ValueError("expected an object of record objects under 'data'")
            entries = {key: self.record_type.from_dict(value) for key, value in data.items()}
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(f"ignoring unreadable cache snapshot {self.snapshot_path}: {exc}")
            return self

        self._entries = entries
        logger.info(f"loaded {len(entries)} cached records from {self.snapshot_path}")
        return self

    def save(self) -> None:
        payload = {"data": {key: record.to_dict() for key, record in self._entries.items()}}
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            self.snapshot_path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            raise CacheIOError(f"failed to write cache snapshot {self.snapshot_path}: {exc}") from exc
        logger.info(f"saved {len(self._entries)} records to {self.snapshot_path}")

    def get_or_extract(self, path: Path, extract: Callable[[Path], R]) -> R:
        key = str(path)
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached

        record = extract(path)
        with self._lock:
            # First insert wins if another caller raced us here.
            record = self._entries.setdefault(key, record)
            self.extraction_count += 1
        return record

    def populate(
        self,
        paths: Iterable[Path],
        extract: Callable[[Path], R],
        workers: int = 4,
        strict: bool = False,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> ScanResult[R]:
        ordered = list(dict.fromkeys(str(path) for path in paths))
        pending = [key for key in ordered if key not in self._entries]
        result: ScanResult[R] = ScanResult(records=[], reused=len(ordered) - len(pending))
        failed: set[str] = set()

        total = len(pending)
        if progress_callback:
            progress_callback(0, total)

        if pending:
            logger.debug(f"extracting {total} new files with {workers} workers")
            with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
                futures: dict[Future[R], str] = {
                    pool.submit(extract, Path(key)): key for key in pending
                }
                # Only this thread touches the map; workers just hand back records.
                for done, future in enumerate(as_completed(futures), start=1):
                    key = futures[future]
                    try:
                        record = future.result()
                    except ExtractionError as exc:
                        if strict:
                            for other in futures:
                                other.cancel()
                            raise
                        failed.add(key)
                        result.warnings.append(f"file skipped: {exc}")
                        logger.warning(f"file skipped: {exc}")
                    else:
                        self._entries[key] = record
                        result.extracted += 1
                    finally:
                        self.extraction_count += 1
                        if progress_callback:
                            progress_callback(done, total)

        result.records = [self._entries[key] for key in ordered if key not in failed]
        return result
