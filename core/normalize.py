import os

from core.models import FileReport, LineMatch, MatchHit


def normalize_lines(*, lines: list[LineMatch]) -> tuple[LineMatch, ...]:
    # One entry per line number, ascending
    unique: dict[int, LineMatch] = {}
    for line in lines:
        unique.setdefault(line.line_number, line)

    return tuple(unique[number] for number in sorted(unique))


def merge_hits_for_same_file(*, hits: list[MatchHit]) -> FileReport:
    if not hits:
        raise ValueError("Cannot merge an empty hits list")

    # The scanner uses a single encoding and newline style per file,
    # so the first hit speaks for all of them.
    first = hits[0]
    lines = normalize_lines(lines=[LineMatch(hit.line_number, hit.snippet) for hit in hits])

    return FileReport(path=first.path,
                      file_name=os.path.basename(first.path),
                      encoding=first.encoding,
                      newline_style=first.newline_style,
                      lines=lines)


def group_hits_by_file(hits: list[MatchHit]) -> list[FileReport]:
    """
    Group a flat hit list into one FileReport per path.

    Reports keep the order in which their files first appear in hits, which
    for engine.search output is the deepest-first traversal order.
    """
    groups: dict[str, list[MatchHit]] = {}

    for hit in hits:
        groups.setdefault(hit.path, []).append(hit)

    return [merge_hits_for_same_file(hits=file_hits) for file_hits in groups.values()]
