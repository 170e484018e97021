from pathlib import Path

import pytest

from core import engine
from core.config import SearchOptions
from core.errors import EmptyPatternError, InvalidRootError
from core.models import LineMatch, NewlineStyle, ProgressKind


@pytest.fixture
def sample_root(make_tree) -> Path:
    return make_tree({
        "a/b/x.txt": "first\nsecond\ncall TODO later\nfourth\n",
        "a/y.txt": "todo: one\nnothing\nTODO two\n",
        "a/skip.md": "TODO in markdown\n",
        "top.txt": "no match here\n",
    })


def test_end_to_end_single_hit(make_tree) -> None:
    root = make_tree({"a/b/x.txt": "one\ntwo\ncall TODO later\n"})

    [hit] = engine.search(root, ["*.txt"], [], "*TODO*")

    assert hit.path == str(root / "a" / "b" / "x.txt")
    assert hit.line_number == 3
    assert "TODO" in hit.snippet
    assert hit.newline_style is NewlineStyle.LF

    [report] = engine.search_grouped_by_file(root, ["*.txt"], [], "*TODO*")

    assert report.file_name == "x.txt"
    assert report.lines == (LineMatch(3, hit.snippet),)


def test_hits_follow_deepest_first_file_order(sample_root: Path) -> None:
    hits = engine.search(sample_root, ["*.txt"], [], "*TODO*")

    assert [(Path(h.path).name, h.line_number) for h in hits] == [
        ("x.txt", 3),
        ("y.txt", 1),
        ("y.txt", 3),
    ]


def test_grouped_reports(sample_root: Path) -> None:
    reports = engine.search_grouped_by_file(sample_root, ["*.txt", "*.md"], ["*skip*"], "*TODO*")

    assert [r.file_name for r in reports] == ["x.txt", "y.txt"]
    assert [line.line_number for line in reports[1].lines] == [1, 3]


def test_search_is_idempotent(sample_root: Path) -> None:
    first = engine.search(sample_root, ["*"], [], "*todo*")
    second = engine.search(sample_root, ["*"], [], "*todo*")

    assert first == second
    assert len(first) == 4


def test_progress_events(sample_root: Path) -> None:
    events = []
    options = SearchOptions(on_progress=events.append)

    engine.search(sample_root, ["*.txt"], [], "*TODO*", options)

    scanned = [e.path for e in events if e.kind is ProgressKind.FILE_SCANNED]
    entered = [e for e in events if e.kind is ProgressKind.DIRECTORY_ENTERED]

    assert [Path(p).name for p in scanned] == ["x.txt", "y.txt", "top.txt"]
    assert len(entered) == 3


def test_size_limit_caps_scanning_only(sample_root: Path) -> None:
    options = SearchOptions(max_file_size_bytes=10)

    assert engine.search(sample_root, ["*.txt"], [], "*TODO*", options) == []
    assert len(engine.discover(sample_root, ["*.txt"], [])) == 3


def test_invalid_root(tmp_path: Path) -> None:
    with pytest.raises(InvalidRootError):
        engine.search(tmp_path / "nope", ["*"], [], "*TODO*")


@pytest.mark.parametrize(
    "include, text_pattern",
    [
        ([], "*TODO*"),
        (["  "], "*TODO*"),
        (["*.txt"], ""),
        (["*.txt"], "   "),
    ],
)
def test_empty_patterns_abort_before_traversal(sample_root: Path, include, text_pattern) -> None:
    events = []

    with pytest.raises(EmptyPatternError):
        engine.search(sample_root, include, [], text_pattern, SearchOptions(on_progress=events.append))

    assert events == []


def test_unreadable_file_does_not_stop_search(sample_root: Path, monkeypatch, warnings_sink) -> None:
    from core import scanner

    bad = str(sample_root / "a" / "b" / "x.txt")
    real_detect = scanner.detect_primary_encoding

    def flaky_detect(path, default_encoding):
        if path == bad:
            raise PermissionError(13, "Permission denied", path)
        return real_detect(path, default_encoding)

    monkeypatch.setattr(scanner, "detect_primary_encoding", flaky_detect)

    hits = engine.search(sample_root, ["*.txt"], [], "*TODO*", SearchOptions(on_warning=warnings_sink.append))

    assert [Path(h.path).name for h in hits] == ["y.txt", "y.txt"]
    assert len(warnings_sink) == 1
    assert "x.txt" in warnings_sink[0]


def test_encoding_fallback_option(make_tree) -> None:
    root = make_tree({"wide.txt": "intro\r\nTODO wide\r\n".encode("utf-16-le")})

    assert engine.search(root, ["*.txt"], [], "*TODO*") == []

    [hit] = engine.search(root, ["*.txt"], [], "*TODO*", SearchOptions(allow_encoding_fallback=True))
    assert hit.line_number == 2
    assert hit.encoding == "utf-16-le"


def test_spaces_in_text_pattern_are_kept(make_tree) -> None:
    root = make_tree({"notes.txt": "fix TODO \nfix TODO\n"})

    hits = engine.search(root, ["*.txt"], [], "*TODO ")

    assert [h.line_number for h in hits] == [1]
    assert len(engine.search(root, ["*.txt"], [], "*TODO")) == 1
