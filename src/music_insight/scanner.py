from __future__ import annotations

import fnmatch
import os
import re
from pathlib import Path

from loguru import logger


def compile_patterns(patterns: list[str] | tuple[str, ...]) -> list[re.Pattern[str]]:
    # fnmatch's "*" already crosses path separators.
    return [re.compile(fnmatch.translate(pattern), re.IGNORECASE) for pattern in patterns]


def discover(
    root: Path,
    patterns: list[str] | tuple[str, ...],
    warnings: list[str] | None = None,
) -> list[Path]:
    compiled = compile_patterns(patterns)
    found: set[Path] = set()

    def _on_walk_error(err: OSError) -> None:
        target = getattr(err, "filename", None) or str(root)
        message = f"walk error: {target}: {err.strerror or str(err)}"
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)

    for dirpath, _, filenames in os.walk(root, onerror=_on_walk_error):
        base = Path(dirpath)
        for name in filenames:
            # macOS AppleDouble sidecar files (._*) are metadata blobs.
            if name.startswith("._"):
                continue
            path = base / name
            relative = path.relative_to(root).as_posix()
            if any(pattern.match(relative) for pattern in compiled):
                found.add(path)

    logger.debug(f"discovered {len(found)} files under {root}")
    return sorted(found)
