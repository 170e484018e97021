import pytest

from core.models import LineMatch, MatchHit, NewlineStyle
from core.normalize import group_hits_by_file, merge_hits_for_same_file


def hit(path: str, line: int, encoding: str = "latin-1",
        newline_style: NewlineStyle = NewlineStyle.LF) -> MatchHit:
    return MatchHit(path=path, line_number=line, snippet=f"{path}:{line}",
                    encoding=encoding, newline_style=newline_style)


def test_groups_keep_first_seen_file_order() -> None:
    hits = [hit("/r/a/b/deep.txt", 1), hit("/r/a/b/deep.txt", 7), hit("/r/top.txt", 2)]

    reports = group_hits_by_file(hits)

    assert [r.path for r in reports] == ["/r/a/b/deep.txt", "/r/top.txt"]
    assert [r.file_name for r in reports] == ["deep.txt", "top.txt"]
    assert reports[0].lines == (LineMatch(1, "/r/a/b/deep.txt:1"), LineMatch(7, "/r/a/b/deep.txt:7"))


def test_lines_are_sorted_and_unique() -> None:
    hits = [hit("/r/x.txt", 9), hit("/r/x.txt", 3), hit("/r/x.txt", 3), hit("/r/x.txt", 5)]

    [report] = group_hits_by_file(hits)

    assert [line.line_number for line in report.lines] == [3, 5, 9]


def test_metadata_comes_from_first_hit() -> None:
    hits = [hit("/r/x.txt", 1, "utf-16-le", NewlineStyle.CRLF), hit("/r/x.txt", 2, "utf-16-le", NewlineStyle.CRLF)]

    [report] = group_hits_by_file(hits)

    assert report.encoding == "utf-16-le"
    assert report.newline_style is NewlineStyle.CRLF


def test_no_hits_no_reports() -> None:
    assert group_hits_by_file([]) == []

    with pytest.raises(ValueError):
        merge_hits_for_same_file(hits=[])
