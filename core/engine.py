import logging
import os
from typing import Iterable

from core import normalize, scanner, traverse
from core.config import SearchOptions
from core.errors import EmptyPatternError
from core.models import FileReport, MatchHit, ProgressEvent, ProgressKind
from core.traverse import discover
from core.wildcard import compile_pattern, compile_patterns

logger = logging.getLogger(__name__)

__all__ = ["discover", "search", "search_grouped_by_file"]


def search(
    root: str | os.PathLike,
    include: str | Iterable[str],
    exclude: str | Iterable[str] | None,
    text_pattern: str,
    options: SearchOptions | None = None
) -> list[MatchHit]:
    """
    Find every line matching text_pattern in the files under root whose
    names match include and whose paths match no exclude pattern.

    Hits are grouped by file in deepest-first traversal order and ordered by
    line number within a file.

    Raises:
        InvalidRootError when root is not a directory
        EmptyPatternError when include or text_pattern is empty
    """
    options = options or SearchOptions()

    # Everything fatal is checked before the first directory is listed
    root_dir = traverse.check_root(root)
    include_patterns = compile_patterns(include, required=True, what="include pattern")
    exclude_patterns = compile_patterns(exclude, required=False)

    # Surrounding spaces are part of the pattern; only blank input is rejected
    if text_pattern is None or not text_pattern.strip():
        raise EmptyPatternError("No usable text pattern given")
    content_pattern = compile_pattern(text_pattern)

    candidates = traverse.walk_candidates(root_dir, include_patterns, exclude_patterns,
                                          on_progress=options.on_progress,
                                          on_warning=options.on_warning)

    hits: list[MatchHit] = []
    for candidate in candidates:
        file_hits = scanner.scan_file(candidate, content_pattern,
                                      max_bytes=options.max_file_size_bytes,
                                      max_snippet_chars=options.max_snippet_chars,
                                      allow_encoding_fallback=options.allow_encoding_fallback,
                                      default_encoding=options.default_encoding,
                                      on_warning=options.on_warning)
        hits.extend(file_hits)

        if options.on_progress is not None:
            options.on_progress(ProgressEvent(ProgressKind.FILE_SCANNED, candidate.full_path, candidate.depth))

    logger.info("Searched %d files under %s for %r: %d matching lines",
                len(candidates), root_dir, text_pattern, len(hits))
    return hits


def search_grouped_by_file(
    root: str | os.PathLike,
    include: str | Iterable[str],
    exclude: str | Iterable[str] | None,
    text_pattern: str,
    options: SearchOptions | None = None
) -> list[FileReport]:
    hits = search(root, include, exclude, text_pattern, options)
    return normalize.group_hits_by_file(hits)
