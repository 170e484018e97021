import logging
import os
from typing import Callable, Iterable

from core.errors import InvalidRootError, emit_warning
from core.models import CandidateFile, ProgressEvent, ProgressKind
from core.wildcard import WildcardPattern, compile_patterns, first_match

logger = logging.getLogger(__name__)


def check_root(root: str | os.PathLike) -> str:
    root_dir = os.fspath(root)

    if not os.path.isdir(root_dir):
        raise InvalidRootError(f"Not a directory: {root_dir}")

    # Only the root is fatal when it cannot be listed; deeper nodes just warn
    try:
        with os.scandir(root_dir):
            pass
    except OSError as e:
        raise InvalidRootError(f"Cannot list search root {root_dir}: {e}") from e

    return root_dir


def portable_path(path: str, sep: str = os.sep, altsep: str | None = os.altsep) -> str:
    # Exclude patterns are written with '/', whatever the platform separator
    if sep != "/":
        path = path.replace(sep, "/")
    if altsep and altsep != "/":
        path = path.replace(altsep, "/")

    return path


def _list_directory(directory: str,
                    on_warning: Callable[[str], None] | None) -> tuple[list[str], list[os.DirEntry]]:
    # Returns (subdirectory paths, file entries). A listing failure yields
    # nothing for this node.
    subdirectories: list[str] = []
    files: list[os.DirEntry] = []

    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirectories.append(entry.path)
                    elif entry.is_file():
                        files.append(entry)
                except OSError as e:
                    emit_warning(logger, f"Cannot inspect {entry.path}: {e}", on_warning)
    except OSError as e:
        emit_warning(logger, f"Cannot list directory {directory}: {e}", on_warning)
        return [], []

    return subdirectories, files


def _is_candidate(entry: os.DirEntry,
                  include: list[WildcardPattern],
                  exclude: list[WildcardPattern]) -> bool:
    if first_match(include, entry.name) is None:
        return False

    return first_match(exclude, portable_path(entry.path)) is None


def walk_candidates(root_dir: str,
                    include: list[WildcardPattern],
                    exclude: list[WildcardPattern],
                    *,
                    on_progress: Callable[[ProgressEvent], None] | None = None,
                    on_warning: Callable[[str], None] | None = None) -> list[CandidateFile]:
    candidates: list[CandidateFile] = []

    # Explicit LIFO work list of (directory, depth); no recursion
    stack: list[tuple[str, int]] = [(root_dir, 0)]
    directories_seen = 0

    while stack:
        directory, depth = stack.pop()
        directories_seen += 1

        if on_progress is not None:
            on_progress(ProgressEvent(ProgressKind.DIRECTORY_ENTERED, directory, depth))

        subdirectories, files = _list_directory(directory, on_warning)

        for subdirectory in sorted(subdirectories, reverse=True):
            stack.append((subdirectory, depth + 1))

        for entry in files:
            if not _is_candidate(entry, include, exclude):
                continue

            try:
                size = entry.stat().st_size
            except OSError as e:
                emit_warning(logger, f"Cannot read size of {entry.path}: {e}", on_warning)
                continue

            candidates.append(CandidateFile(full_path=entry.path, name=entry.name,
                                            depth=depth, size_bytes=int(size)))

    # Deepest directories first, alphabetical within a depth
    candidates.sort(key=lambda c: (-c.depth, c.name.casefold(), c.full_path))

    logger.debug("Visited %d directories under %s, %d candidate files",
                 directories_seen, root_dir, len(candidates))
    return candidates


# Return all files under root whose name matches an include pattern and whose
# full path matches no exclude pattern, deepest first.
def discover(root: str | os.PathLike,
             include: str | Iterable[str],
             exclude: str | Iterable[str] | None = None,
             *,
             on_progress: Callable[[ProgressEvent], None] | None = None,
             on_warning: Callable[[str], None] | None = None) -> list[CandidateFile]:
    root_dir = check_root(root)
    include_patterns = compile_patterns(include, required=True, what="include pattern")
    exclude_patterns = compile_patterns(exclude, required=False)

    return walk_candidates(root_dir, include_patterns, exclude_patterns,
                           on_progress=on_progress, on_warning=on_warning)
