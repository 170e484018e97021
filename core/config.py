import codecs
import os
from dataclasses import dataclass
from typing import Callable

from core.models import ProgressEvent

# content scanning constants
DEFAULT_MAX_FILE_SIZE_BYTES = 1024 * 1024
DEFAULT_MAX_SNIPPET_CHARS = 256
DEFAULT_ENCODING = "latin-1"        # Used when a file carries no BOM
FALLBACK_ENCODINGS = ("utf-8", "utf-16-le")
NEWLINE_SAMPLE_BYTES = 128 * 1024

# environment overrides read by SearchOptions.from_env()
ENV_MAX_FILE_SIZE_BYTES = "DEEPFIND_MAX_FILE_SIZE_BYTES"
ENV_MAX_SNIPPET_CHARS = "DEEPFIND_MAX_SNIPPET_CHARS"
ENV_ENCODING_FALLBACK = "DEEPFIND_ENCODING_FALLBACK"
ENV_DEFAULT_ENCODING = "DEEPFIND_DEFAULT_ENCODING"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class SearchOptions:
    """
    Per-call search settings.

    - max_file_size_bytes caps content scanning only; larger files are still
      discovered but never opened.
    - max_snippet_chars bounds the displayed excerpt of each matching line.
    - allow_encoding_fallback enables the UTF-8 / UTF-16LE retry for files
      without a BOM that produced no hits.
    - on_progress / on_warning are observational callbacks and never change
      the results.
    """
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    max_snippet_chars: int = DEFAULT_MAX_SNIPPET_CHARS
    allow_encoding_fallback: bool = False
    default_encoding: str = DEFAULT_ENCODING
    on_progress: Callable[[ProgressEvent], None] | None = None
    on_warning: Callable[[str], None] | None = None

    def __post_init__(self) -> None:
        if self.max_file_size_bytes < 0:
            raise ValueError(f"max_file_size_bytes must be >= 0, got {self.max_file_size_bytes}")

        if self.max_snippet_chars < 1:
            raise ValueError(f"max_snippet_chars must be >= 1, got {self.max_snippet_chars}")

        try:
            codecs.lookup(self.default_encoding)
        except LookupError as e:
            raise ValueError(f"Unknown default encoding: {self.default_encoding}") from e

    @classmethod
    def from_env(cls, **overrides) -> "SearchOptions":
        values: dict = {}

        raw_size = os.getenv(ENV_MAX_FILE_SIZE_BYTES)
        if raw_size is not None:
            values["max_file_size_bytes"] = _parse_int(ENV_MAX_FILE_SIZE_BYTES, raw_size)

        raw_snippet = os.getenv(ENV_MAX_SNIPPET_CHARS)
        if raw_snippet is not None:
            values["max_snippet_chars"] = _parse_int(ENV_MAX_SNIPPET_CHARS, raw_snippet)

        raw_fallback = os.getenv(ENV_ENCODING_FALLBACK)
        if raw_fallback is not None:
            values["allow_encoding_fallback"] = _parse_bool(ENV_ENCODING_FALLBACK, raw_fallback)

        raw_encoding = os.getenv(ENV_DEFAULT_ENCODING)
        if raw_encoding:
            values["default_encoding"] = raw_encoding.strip()

        values.update(overrides)
        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().casefold()

    if value in _TRUE_VALUES:
        return True
    elif value in _FALSE_VALUES:
        return False

    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")
