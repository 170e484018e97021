import logging
from typing import Callable


class SearchError(Exception):
    """Base class for failures that abort a whole search."""


class InvalidRootError(SearchError, NotADirectoryError):
    # The search root does not exist or is not a directory
    pass


class EmptyPatternError(SearchError, ValueError):
    # An include list or the text pattern normalized to nothing
    pass


class PatternCompileError(SearchError, ValueError):
    # The translated wildcard could not be compiled as a regex
    pass


def emit_warning(logger: logging.Logger, message: str,
                 on_warning: Callable[[str], None] | None) -> None:
    # Recoverable failures are logged and forwarded to the caller's sink
    logger.warning(message)
    if on_warning is not None:
        on_warning(message)
