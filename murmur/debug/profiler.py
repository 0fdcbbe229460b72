# murmur/debug/profiler.py
from __future__ import annotations

import cProfile
import functools
import io
import logging
import pstats
from pathlib import Path
from typing import Callable, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)

# Calls counted as one presented frame
_FRAME_MARKERS = (
    "<built-in method pygame.display.flip>",
    "<built-in method pygame.display.update>",
)


def write_reports(profiler: cProfile.Profile, out_dir: Path, base: str) -> list[Path]:
    """Dump raw stats plus tottime/cumtime/calls text reports; return the paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    prof_path = out_dir / f"{base}.prof"
    profiler.dump_stats(prof_path)
    written = [prof_path]

    try:
        stats = pstats.Stats(str(prof_path))
    except (EOFError, TypeError):
        logger.warning("Profiler collected no data for %s", base)
        return written

    for key in ("tottime", "cumtime", "calls"):
        buf = io.StringIO()
        pstats.Stats(str(prof_path), stream=buf).sort_stats(key).print_stats(30)
        path = out_dir / f"{base}.{key}.txt"
        path.write_text(buf.getvalue())
        written.append(path)

    frames = sum(
        nc
        for (_, _, name), (_, nc, _, _, _) in getattr(stats, "stats", {}).items()
        if name in _FRAME_MARKERS
    )
    total = getattr(stats, "total_tt", 0.0)
    logger.info("Profile %s: %.3fs total", base, total)
    if frames and total > 0:
        logger.info("Profile %s: %.1f fps average over %d frames", base, frames / total, frames)

    return written


def profile(
    *, out_dir: Path, enabled: bool = True
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Profile every call of the decorated function (usually the main loop) and
    write reports to `out_dir` when it returns or raises.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        if not enabled:
            return fn

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            profiler = cProfile.Profile()
            profiler.enable()
            try:
                return fn(*args, **kwargs)
            finally:
                profiler.disable()
                write_reports(profiler, out_dir, fn.__name__)

        return wrapper

    return decorator
