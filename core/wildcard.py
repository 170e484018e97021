"""
Wildcard dialect shared by the file name filters and the content filter.

    *        any run of characters (including none)
    ?        exactly one character
    [abc]    one character from the class, ranges like [0-9] allowed
    [!abc]   one character not in the class
    \\*  `*   literal '*' (same for ? [ ] \\ and `)

Matching is always case-insensitive and covers the whole string. A '['
without a closing ']' is matched literally instead of raising an error.
"""
import logging
import re
from functools import lru_cache
from typing import Iterable

from core.errors import EmptyPatternError, PatternCompileError

logger = logging.getLogger(__name__)

ESCAPE_CHARS = ("\\", "`")
ESCAPABLE_CHARS = set("*?[]\\`")

# Characters that keep a special meaning inside a regex character class.
# '-' is left alone so ranges survive the translation.
_CLASS_SPECIALS = set("\\^[]&~|")

_STAR = ".*"


class WildcardPattern:
    __slots__ = ("source", "regex", "_locator", "_segments")

    def __init__(self, source: str, regex: re.Pattern, locator: re.Pattern | None,
                 segments: tuple[re.Pattern, ...] = ()) -> None:
        self.source = source
        self.regex = regex
        self._locator = locator
        self._segments = segments

    def matches(self, text: str) -> bool:
        return self.regex.fullmatch(text) is not None

    def locate(self, text: str) -> tuple[int, int] | None:
        """
        Return (start, length) of the matched region of text, or None when
        the pattern does not match. Leading and trailing '*' runs are not
        part of the region, so "*TODO*" locates "TODO" inside the line.
        """
        if not self.matches(text):
            return None

        if self._locator is None:
            return 0, len(text)

        found = self._locator.search(text)
        if found is None:
            return 0, len(text)

        return found.start(), found.end() - found.start()

    def find(self, text: str) -> tuple[int, int] | None:
        """
        Search a fragment of a matching line (e.g. a shortened snippet) for
        the matched region. The whole pattern core is tried first, then each
        run between '*'s, longest first.
        """
        for searcher in ((self._locator,) if self._locator is not None else ()) + self._segments:
            found = searcher.search(text)
            if found is not None and found.end() > found.start():
                return found.start(), found.end() - found.start()

        return None

    def __repr__(self) -> str:
        return f"WildcardPattern({self.source!r})"


def _translate_class(body: str, negated: bool) -> str:
    escaped_body = "".join("\\" + ch if ch in _CLASS_SPECIALS else ch for ch in body)
    return f"[{'^' if negated else ''}{escaped_body}]"


def translate(pattern: str) -> list[str]:
    # Translate the wildcard into regex fragments, one per wildcard element.
    fragments: list[str] = []
    i = 0
    length = len(pattern)

    while i < length:
        ch = pattern[i]

        if ch == "*":
            # Collapse runs of '*' so ".*.*" never appears
            if not fragments or fragments[-1] != _STAR:
                fragments.append(_STAR)
        elif ch == "?":
            fragments.append(".")
        elif ch in ESCAPE_CHARS and i + 1 < length and pattern[i + 1] in ESCAPABLE_CHARS:
            fragments.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        elif ch == "[":
            close = pattern.find("]", i + 1)
            body = pattern[i + 1:close] if close != -1 else ""
            negated = body.startswith("!")
            if negated:
                body = body[1:]

            if close == -1 or not body:
                fragments.append(re.escape("["))
            else:
                fragments.append(_translate_class(body, negated))
                i = close + 1
                continue
        else:
            fragments.append(re.escape(ch))

        i += 1

    return fragments


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> WildcardPattern:
    fragments = translate(pattern)
    flags = re.IGNORECASE | re.DOTALL

    core_fragments = list(fragments)
    while core_fragments and core_fragments[0] == _STAR:
        core_fragments.pop(0)
    while core_fragments and core_fragments[-1] == _STAR:
        core_fragments.pop()

    # Runs between inner '*'s, longest first
    segments: list[list[str]] = [[]]
    for fragment in core_fragments:
        if fragment == _STAR:
            segments.append([])
        else:
            segments[-1].append(fragment)
    segments = sorted((segment for segment in segments if segment), key=len, reverse=True)

    try:
        regex = re.compile("".join(fragments), flags)
        locator = re.compile("".join(core_fragments), flags) if core_fragments else None
        segment_regexes = tuple(re.compile("".join(segment), flags) for segment in segments) \
            if len(segments) > 1 else ()
    except re.error as e:
        raise PatternCompileError(f"Cannot compile wildcard {pattern!r}: {e}") from e

    logger.debug("Compiled wildcard %r -> %r", pattern, regex.pattern)
    return WildcardPattern(pattern, regex, locator, segment_regexes)


def normalize_patterns(patterns: str | Iterable[str] | None) -> list[str]:
    # Strip entries and drop blanks. A bare string is a one-entry list.
    if patterns is None:
        return []

    if isinstance(patterns, str):
        patterns = [patterns]

    normalized: list[str] = []
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern and pattern not in normalized:
            normalized.append(pattern)

    return normalized


def compile_patterns(patterns: str | Iterable[str] | None, *,
                     required: bool, what: str = "pattern") -> list[WildcardPattern]:
    normalized = normalize_patterns(patterns)

    if required and not normalized:
        raise EmptyPatternError(f"No usable {what} given")

    return [compile_pattern(pattern) for pattern in normalized]


def first_match(patterns: list[WildcardPattern], text: str) -> WildcardPattern | None:
    for pattern in patterns:
        if pattern.matches(text):
            return pattern

    return None
