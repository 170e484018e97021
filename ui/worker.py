from PyQt6.QtCore import pyqtSignal, QObject

from core import engine
from core.config import SearchOptions
from core.models import ProgressEvent, ProgressKind

# Emit a status line every this many scanned files to keep the UI thread calm.
STATUS_EVERY_N_FILES = 25


# Background worker that runs one search. It lives in a QThread and talks to
# the UI exclusively via signals.
class SearchWorker(QObject):
    # Emitted to report progress (directory entered, files scanned so far).
    status = pyqtSignal(str)

    # Emitted for every recoverable problem (unreadable folder or file).
    warning = pyqtSignal(str)

    # Emitted when the search cannot run at all (bad folder, empty pattern).
    error = pyqtSignal(str)

    # Emitted once on success with the list[FileReport].
    finished = pyqtSignal(list)

    def __init__(self,
                 root_dir: str,
                 include: list[str],
                 exclude: list[str],
                 text_pattern: str,
                 *,
                 allow_encoding_fallback: bool = False) -> None:
        super().__init__()
        # Configuration captured at creation time; not modified during execution.
        self.root_dir = root_dir
        self.include = include
        self.exclude = exclude
        self.text_pattern = text_pattern
        self.allow_encoding_fallback = allow_encoding_fallback
        self.files_scanned = 0

    def _on_progress(self, event: ProgressEvent) -> None:
        if event.kind is ProgressKind.DIRECTORY_ENTERED:
            self.status.emit(f"Scanning {event.path}")
        elif event.kind is ProgressKind.FILE_SCANNED:
            self.files_scanned += 1
            if self.files_scanned % STATUS_EVERY_N_FILES == 0:
                self.status.emit(f"Scanned {self.files_scanned} files...")

    """
       Worker entry point executed inside a background thread.

       Flow:
       1) Emit status(...) while folders are entered and files scanned.
       2) Emit warning(...) for each folder or file that could not be read.
       3) Emit finished(reports) on success.
       On a fatal error: emit error(...) and stop.
    """
    def run(self) -> None:
        self.files_scanned = 0

        try:
            options = SearchOptions.from_env(allow_encoding_fallback=self.allow_encoding_fallback,
                                             on_progress=self._on_progress,
                                             on_warning=self.warning.emit)
            reports = engine.search_grouped_by_file(self.root_dir, self.include, self.exclude,
                                                    self.text_pattern, options)
        except Exception as e:
            self.error.emit(f"Search Error: {e}")
            return
        else:
            self.finished.emit(reports)
