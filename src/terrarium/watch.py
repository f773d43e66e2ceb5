"""Hot reload: re-bundle the entry file whenever it changes.

The file is polled by modification time (editors that save by
write-temp-then-rename briefly remove the file; a missing file is simply
waited out). Rebuilds closer together than the debounce window are deferred to
a later poll, not dropped. Every build is reported as one event:

    {"event": "bundle-ready", "payload": "<script>"}
    {"event": "bundle-error", "payload": {"error": true, "type": ..., ...}}
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable

from terrarium.core.model import BuildResult, BuildSuccess

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300
DEFAULT_POLL_INTERVAL_S = 0.25

BUNDLE_READY = "bundle-ready"
BUNDLE_ERROR = "bundle-error"


def should_rebuild(last_rebuild: float, debounce_ms: int, now: float) -> bool:
    """True if at least `debounce_ms` elapsed since `last_rebuild` (seconds, same clock as `now`)."""
    return (now - last_rebuild) * 1000.0 >= debounce_ms


def event_for(result: BuildResult) -> dict[str, Any]:
    if isinstance(result, BuildSuccess):
        return {"event": BUNDLE_READY, "payload": result.script}
    return {"event": BUNDLE_ERROR, "payload": result.envelope.to_dict()}


def _mtime(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def watch(
    entry: Path,
    build: Callable[[Path], BuildResult],
    emit: Callable[[dict[str, Any]], None],
    *,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    poll_interval: float = DEFAULT_POLL_INTERVAL_S,
    max_builds: int | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Build once, then rebuild on every change. Returns the number of builds.

    Runs until interrupted unless `max_builds` is given.
    """
    path = Path(entry).expanduser().resolve()

    emit(event_for(build(path)))
    builds = 1
    last_mtime = _mtime(path)
    last_rebuild = clock()

    while max_builds is None or builds < max_builds:
        sleep(poll_interval)
        mtime = _mtime(path)
        if mtime is None or mtime == last_mtime:
            continue
        now = clock()
        if not should_rebuild(last_rebuild, debounce_ms, now):
            continue
        logger.info("Change detected in %s, rebuilding", path.name)
        last_mtime = mtime
        last_rebuild = now
        emit(event_for(build(path)))
        builds += 1
    return builds
