"""Find GTFS files on disk.

The indexing code never touches the filesystem beyond reading what it is
given. This module holds the search heuristics used by the command line tool:
look next to the working directory and its parents, then next to the running
program. Both ``stops.txt`` (GTFS) and ``stops.csv`` exports are accepted.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

MAX_PARENT_LEVELS = 6
GTFS_EXTENSIONS: tuple[str, ...] = (".txt", ".csv")
DEFAULT_SUBFOLDERS: tuple[str, ...] = (".", "csv_files", "gtfs")
REQUIRED_STEMS: tuple[str, ...] = ("stops", "stop_times")


def find_file_in_ancestors(
    relative: PathLike,
    start: Optional[PathLike] = None,
    max_levels: int = MAX_PARENT_LEVELS,
) -> Optional[Path]:
    """Look for *relative* under *start* and up to *max_levels* parents.

    Args:
        relative: Path to look for, relative to each candidate directory.
        start: First directory to try. Defaults to the working directory.
        max_levels: How many parent directories to climb.

    Returns:
        The first existing candidate, or None.
    """
    base = Path(start) if start is not None else Path.cwd()
    base = base.resolve()
    for level, directory in enumerate([base, *base.parents]):
        if level > max_levels:
            break
        candidate = directory / relative
        if candidate.exists():
            return candidate
    return None


def program_directory() -> Optional[Path]:
    """Directory of the running program, if it can be determined."""
    if not sys.argv or not sys.argv[0]:
        return None
    return Path(sys.argv[0]).resolve().parent


def _candidate_starts(
    search_dirs: Optional[Sequence[PathLike]], include_program_dir: bool
) -> list[Path]:
    starts = [Path(d) for d in search_dirs] if search_dirs else [Path.cwd()]
    exe_dir = program_directory() if include_program_dir else None
    if exe_dir is not None and exe_dir not in starts:
        starts.append(exe_dir)
    return starts


def locate_gtfs_file(
    stem: str,
    search_dirs: Optional[Sequence[PathLike]] = None,
    subfolders: Sequence[str] = DEFAULT_SUBFOLDERS,
    max_levels: int = MAX_PARENT_LEVELS,
    include_program_dir: bool = True,
) -> Path:
    """Find the file holding the GTFS table *stem* (``stops``, ``stop_times``...).

    Raises:
        FileNotFoundError: Nothing matched; the message lists the starts tried.
    """
    starts = _candidate_starts(search_dirs, include_program_dir)
    for start in starts:
        for sub in subfolders:
            for ext in GTFS_EXTENSIONS:
                found = find_file_in_ancestors(Path(sub) / f"{stem}{ext}", start, max_levels)
                if found is not None:
                    logger.info("Found %s file at: %s", stem, found)
                    return found
    tried = ", ".join(str(s) for s in starts)
    raise FileNotFoundError(f"Could not find a '{stem}' table near: {tried}")


def _table_in(directory: Path, stem: str) -> Optional[Path]:
    for ext in GTFS_EXTENSIONS:
        candidate = directory / f"{stem}{ext}"
        if candidate.is_file():
            return candidate
    return None


def locate_gtfs_folder(
    search_dirs: Optional[Sequence[PathLike]] = None,
    stems: Sequence[str] = REQUIRED_STEMS,
    subfolders: Sequence[str] = DEFAULT_SUBFOLDERS,
    max_levels: int = MAX_PARENT_LEVELS,
    include_program_dir: bool = True,
) -> dict[str, Path]:
    """Find every table in *stems*; returns a stem to path mapping.

    The first directory that holds all of *stems* wins, searched in the same
    order as :func:`locate_gtfs_file`. Only if no directory holds them all is
    each table looked up on its own, which may mix files from different feeds.

    Raises:
        FileNotFoundError: One of *stems* could not be found anywhere.
    """
    for start in _candidate_starts(search_dirs, include_program_dir):
        base = start.resolve()
        for sub in subfolders:
            for level, directory in enumerate([base, *base.parents]):
                if level > max_levels:
                    break
                found = {stem: _table_in(directory / sub, stem) for stem in stems}
                if all(path is not None for path in found.values()):
                    logger.info("Found GTFS tables in: %s", (directory / sub).resolve())
                    return {stem: path.resolve() for stem, path in found.items()}

    paths = {
        stem: locate_gtfs_file(
            stem,
            search_dirs=search_dirs,
            subfolders=subfolders,
            max_levels=max_levels,
            include_program_dir=include_program_dir,
        )
        for stem in stems
    }
    logger.warning(
        "No single folder holds %s; using files from: %s",
        ", ".join(stems),
        ", ".join(str(path.parent) for path in paths.values()),
    )
    return paths
