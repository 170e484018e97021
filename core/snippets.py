from core.models import FileReport

NUM_OF_SEPARATORS_BETWEEN_REPORTS = 120
ELLIPSIS = "..."


def build_snippet(line: str, match_start: int, match_length: int, max_chars: int) -> str:
    """
    Return at most max_chars characters of line, centred on the match.

    Lines that already fit are returned unchanged. Otherwise an ellipsis
    marks each side where the window was cut, and surrounding whitespace is
    stripped.
    """
    if len(line) <= max_chars:
        return line

    context = max(0, (max_chars - match_length) // 2)
    start = max(0, match_start - context)

    # Never let the window run past the end of the line
    if start + max_chars > len(line):
        start = max(0, len(line) - max_chars)

    end = start + max_chars
    window = line[start:end]

    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(line) else ""

    return f"{prefix}{window}{suffix}".strip()


def format_report(report: FileReport) -> str:
    hits = len(report.lines)
    header = f"{report.path} ({hits} {'line' if hits == 1 else 'lines'}, " \
             f"{report.encoding}, {report.newline_style.value})"

    width = len(str(report.lines[-1].line_number)) if report.lines else 1
    rows = [f"  {line.line_number:>{width}}: {line.snippet}" for line in report.lines]

    block = header
    if rows:
        block += "\n" + "\n".join(rows)
    block += f"\n{'-' * NUM_OF_SEPARATORS_BETWEEN_REPORTS}\n"

    return block


def format_reports(reports: list[FileReport]) -> str:
    return "".join(format_report(report) for report in reports)
