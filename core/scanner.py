"""
Line-by-line content scanning with layered encoding detection.

The primary pass trusts a byte-order mark when one is present and otherwise
decodes with the configured 8-bit default. When that default pass finds
nothing and the caller allows it, the file is scanned again as UTF-8 and
then as UTF-16LE, since BOM-less files in those encodings are common and
read as noise under an 8-bit codec.
"""
import codecs
import logging
from typing import Callable, NamedTuple

from core.config import (DEFAULT_ENCODING, DEFAULT_MAX_FILE_SIZE_BYTES, DEFAULT_MAX_SNIPPET_CHARS,
                         FALLBACK_ENCODINGS, NEWLINE_SAMPLE_BYTES)
from core.errors import emit_warning
from core.models import CandidateFile, LineMatch, MatchHit, NewlineStyle
from core.snippets import build_snippet
from core.wildcard import WildcardPattern

logger = logging.getLogger(__name__)


class EncodingPass(NamedTuple):
    label: str      # Reported on every hit the pass produces
    codec: str      # Codec handed to open(); BOM-aware where a BOM was seen
    from_bom: bool


# Longest marks first: the UTF-32LE mark starts with the UTF-16LE one
_BOMS: tuple[tuple[bytes, str, str], ...] = (
    (codecs.BOM_UTF32_LE, "utf-32-le", "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32-be", "utf-32"),
    (codecs.BOM_UTF8, "utf-8", "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16-le", "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16-be", "utf-16"),
)


def detect_primary_encoding(path: str, default_encoding: str = DEFAULT_ENCODING) -> EncodingPass:
    with open(path, "rb") as file:
        head = file.read(4)

    for bom, label, codec in _BOMS:
        if head.startswith(bom):
            return EncodingPass(label=label, codec=codec, from_bom=True)

    return EncodingPass(label=default_encoding, codec=default_encoding, from_bom=False)


def classify_newlines(text: str) -> NewlineStyle:
    crlf = text.count("\r\n")
    remaining = text.replace("\r\n", "")
    cr = remaining.count("\r")
    lf = remaining.count("\n")

    present = [style for style, count in ((NewlineStyle.CRLF, crlf),
                                          (NewlineStyle.CR, cr),
                                          (NewlineStyle.LF, lf)) if count]

    if not present:
        return NewlineStyle.UNKNOWN
    elif len(present) == 1:
        return present[0]

    return NewlineStyle.MIXED


def detect_newline_style(path: str, codec: str, *, sample_bytes: int = NEWLINE_SAMPLE_BYTES) -> NewlineStyle:
    with open(path, "rb") as file:
        sample = file.read(sample_bytes)

    return classify_newlines(sample.decode(codec, errors="replace"))


def scan_lines(path: str, pattern: WildcardPattern, *, codec: str, max_snippet_chars: int) -> list[LineMatch]:
    matches: list[LineMatch] = []

    # newline="" keeps \r, \n and \r\n all acting as line breaks
    with open(path, "r", encoding=codec, errors="replace", newline="") as file:
        for line_number, line in enumerate(file, start=1):
            line = line.rstrip("\r\n")

            span = pattern.locate(line)
            if span is None:
                continue

            match_start, match_length = span
            matches.append(LineMatch(line_number=line_number,
                                     snippet=build_snippet(line, match_start, match_length,
                                                           max_snippet_chars)))

    return matches


def _encoding_passes(primary: EncodingPass, allow_encoding_fallback: bool) -> list[EncodingPass]:
    passes = [primary]

    # Fallback only when no BOM confirmed the primary encoding
    if allow_encoding_fallback and not primary.from_bom:
        for encoding in FALLBACK_ENCODINGS:
            if codecs.lookup(encoding).name != codecs.lookup(primary.codec).name:
                passes.append(EncodingPass(label=encoding, codec=encoding, from_bom=False))

    return passes


def scan_file(candidate: CandidateFile,
              pattern: WildcardPattern,
              *,
              max_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
              max_snippet_chars: int = DEFAULT_MAX_SNIPPET_CHARS,
              allow_encoding_fallback: bool = False,
              default_encoding: str = DEFAULT_ENCODING,
              on_warning: Callable[[str], None] | None = None) -> list[MatchHit]:
    # Size cap is configured policy, not an error: skip quietly
    if candidate.size_bytes > max_bytes:
        logger.debug("Skipping %s (%d bytes > %d)", candidate.full_path, candidate.size_bytes, max_bytes)
        return []

    path = candidate.full_path

    try:
        primary = detect_primary_encoding(path, default_encoding)

        matches: list[LineMatch] = []
        used = primary
        for encoding_pass in _encoding_passes(primary, allow_encoding_fallback):
            matches = scan_lines(path, pattern, codec=encoding_pass.codec,
                                 max_snippet_chars=max_snippet_chars)
            if matches:
                used = encoding_pass
                break

        if not matches:
            return []

        newline_style = detect_newline_style(path, used.codec)
    except OSError as e:
        emit_warning(logger, f"Cannot read {path}: {e}", on_warning)
        return []

    logger.debug("%s: %d matching lines (%s, %s)", path, len(matches), used.label, newline_style.value)

    return [MatchHit(path=path, line_number=match.line_number, snippet=match.snippet,
                     encoding=used.label, newline_style=newline_style)
            for match in matches]
