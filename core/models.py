from enum import Enum
from typing import NamedTuple


class NewlineStyle(Enum):
    # Line terminator convention detected once per scanned file
    CRLF = "CRLF"
    LF = "LF"
    CR = "CR"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"


class ProgressKind(Enum):
    DIRECTORY_ENTERED = 1
    FILE_SCANNED = 2


class CandidateFile(NamedTuple):
    # A file that passed the name filters during traversal
    full_path: str
    name: str
    depth: int       # Directory depth relative to the search root (root = 0)
    size_bytes: int


class MatchHit(NamedTuple):
    # Represents a single matching line inside a file
    path: str
    line_number: int  # 1-based
    snippet: str
    encoding: str     # Encoding of the pass that produced the hit
    newline_style: NewlineStyle


class LineMatch(NamedTuple):
    line_number: int
    snippet: str


class FileReport(NamedTuple):
    # Aggregated hits for one file, lines ordered by line number
    path: str
    file_name: str
    encoding: str
    newline_style: NewlineStyle
    lines: tuple[LineMatch, ...]


class ProgressEvent(NamedTuple):
    kind: ProgressKind
    path: str
    depth: int = 0
