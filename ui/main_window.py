import os
import re
import subprocess
import sys
from pathlib import Path

from PyQt6.QtCore import Qt, QThread
from PyQt6.QtWidgets import QMainWindow, QLabel, QLineEdit, QPushButton, QProgressBar, QListWidget, QPlainTextEdit, \
    QVBoxLayout, QHBoxLayout, QWidget, QSplitter, QFileDialog, QTextEdit, QAbstractItemView, QSizePolicy, QCheckBox, \
    QApplication
from PyQt6.QtGui import QColor, QTextCursor, QTextCharFormat, QTextDocument, QFont

from core import snippets
from core.errors import PatternCompileError
from core.models import FileReport
from core.wildcard import WildcardPattern, compile_pattern, normalize_patterns
from ui.worker import SearchWorker

# Defaults offered in the filter fields.
DEFAULT_INCLUDE = "*.txt, *.log, *.md, *.py, *.csv, *.json, *.xml"
DEFAULT_EXCLUDE = "*/.git/*, */node_modules/*"

# "  12: snippet text" rows produced by snippets.format_report
_REPORT_ROW = re.compile(r"^\s*(\d+): ")


def split_pattern_field(text: str) -> list[str]:
    # Comma or semicolon separated wildcard list typed by the user
    return normalize_patterns(re.split(r"[,;]", text))


class MainWindow(QMainWindow):
    def __init__(self, root_dir: str | None = None):
        super().__init__()

        self.setWindowTitle("deepfind")
        self.resize(1000, 700)

        # Keep references to avoid garbage-collection while the background thread is running.
        self.thread: QThread | None = None
        self.worker: SearchWorker | None = None

        # Results of the last finished search (row i of results_list -> last_reports[i]).
        self.last_reports: list[FileReport] = []
        self.last_text_pattern: WildcardPattern | None = None
        self.warnings_count = 0

        self._build_ui()
        self._apply_style()
        self._connect_signals()

        if root_dir:
            self.path_edit.setText(root_dir)

    # Create widgets and layouts.
    def _build_ui(self) -> None:
        # --- Widget Initialization ---
        self.status_label = QLabel("Ready")
        self.status_label.setObjectName("statusLabel")
        self.status_label.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)

        self.path_edit = QLineEdit()
        self.path_edit.setPlaceholderText("Folder to search")

        self.include_edit = QLineEdit(DEFAULT_INCLUDE)
        self.exclude_edit = QLineEdit(DEFAULT_EXCLUDE)
        self.text_edit = QLineEdit()
        self.text_edit.setPlaceholderText("Text pattern, e.g. *TODO*")

        self.fallback_checkbox = QCheckBox("Encoding fallback (UTF-8 / UTF-16LE)")
        self.fallback_checkbox.setChecked(False)

        self.browse_btn = QPushButton("Browse...")
        self.search_btn = QPushButton("Search")
        self.search_btn.setObjectName("searchButton")
        self.copy_btn = QPushButton("Copy results")
        self.copy_btn.setEnabled(False)

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.hide()

        self.results_list = QListWidget()
        self.lines_box = QPlainTextEdit()
        self.lines_box.setReadOnly(True)

        self.warnings_list = QListWidget()
        self.warnings_list.setMinimumWidth(220)
        self.warnings_list.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)

        # --- Layout Construction ---
        main_layout = QVBoxLayout()
        main_widget = QWidget()

        # 1. Folder Row
        folder_layout = QHBoxLayout()
        folder_layout.addWidget(QLabel("Folder:"))
        folder_layout.addWidget(self.path_edit)
        folder_layout.addWidget(self.browse_btn)

        # 2. Filter Rows
        include_layout = QHBoxLayout()
        include_layout.addWidget(QLabel("Include:"))
        include_layout.addWidget(self.include_edit)
        include_layout.addWidget(QLabel("Exclude:"))
        include_layout.addWidget(self.exclude_edit)

        # 3. Search & Status Row
        search_layout = QHBoxLayout()
        search_layout.addWidget(self.text_edit)
        search_layout.addWidget(self.search_btn)
        search_layout.addWidget(self.fallback_checkbox)
        search_layout.addWidget(self.copy_btn)
        search_layout.addWidget(self.progress)
        search_layout.addStretch(1)
        search_layout.addWidget(self.status_label)

        # 4. Main Content Splitters
        self.main_splitter = QSplitter(Qt.Orientation.Horizontal)

        # Vertical split: Files (top) vs Lines (bottom)
        results_lines_splitter = QSplitter(Qt.Orientation.Vertical)
        results_lines_splitter.addWidget(self.results_list)
        results_lines_splitter.addWidget(self.lines_box)
        results_lines_splitter.setStretchFactor(0, 2)
        results_lines_splitter.setStretchFactor(1, 3)

        self.main_splitter.addWidget(results_lines_splitter)
        self.main_splitter.addWidget(self.warnings_list)
        self.main_splitter.setSizes([720, 260])

        main_layout.addLayout(folder_layout)
        main_layout.addLayout(include_layout)
        main_layout.addLayout(search_layout)
        main_layout.addWidget(self.main_splitter)

        main_widget.setLayout(main_layout)
        self.setCentralWidget(main_widget)

    def _apply_style(self) -> None:
        self.setStyleSheet("""
            QWidget {
                background: #111827;
                color: #e5e7eb;
                font-family: 'Segoe UI', 'Inter', system-ui, sans-serif;
                font-size: 13px;
            }

            QLabel#statusLabel {
                background: #1f2937;
                border: 1px solid #374151;
                border-radius: 12px;
                padding: 4px 14px;
                color: #34d399;
                font-weight: 600;
                font-size: 11px;
            }

            QLineEdit, QListWidget, QPlainTextEdit {
                background: #030712;
                border: 1px solid #1f2937;
                border-radius: 6px;
                padding: 6px;
                selection-background-color: #059669;
            }
            QLineEdit:focus {
                border: 1px solid #10b981;
            }
            QPlainTextEdit {
                font-family: 'Cascadia Mono', 'Consolas', monospace;
            }

            QListWidget::item {
                padding: 6px;
                border-bottom: 1px solid #1f2937;
            }
            QListWidget::item:selected {
                background: #047857;
                color: white;
            }

            QPushButton {
                background: #1f2937;
                border: 1px solid #374151;
                border-radius: 6px;
                padding: 6px 16px;
                min-height: 24px;
            }
            QPushButton:hover {
                background: #374151;
            }
            QPushButton#searchButton {
                background: #059669;
                font-weight: bold;
                padding: 8px 20px;
            }
            QPushButton#searchButton:hover {
                background: #10b981;
            }

            QProgressBar {
                border: 1px solid #1f2937;
                border-radius: 4px;
                background: #030712;
                height: 12px;
            }
            QProgressBar::chunk {
                background: #10b981;
            }

            QSplitter::handle {
                background: #1f2937;
            }
        """)

    # Connect buttons and worker signals
    def _connect_signals(self) -> None:
        self.browse_btn.clicked.connect(self.on_browse_clicked)
        self.search_btn.clicked.connect(self.on_search_clicked)
        self.copy_btn.clicked.connect(self.on_copy_clicked)
        self.text_edit.returnPressed.connect(self.on_search_clicked)

        self.results_list.itemSelectionChanged.connect(self.on_result_selected)
        self.results_list.itemDoubleClicked.connect(self.on_result_double_clicked)

    def on_browse_clicked(self) -> None:
        explorer_dialog = QFileDialog()
        explorer_dialog.setFileMode(QFileDialog.FileMode.Directory)
        dialog_success = explorer_dialog.exec()

        if dialog_success and len(explorer_dialog.selectedFiles()) > 0:
            # A new folder invalidates the previous results.
            self.path_edit.setText(explorer_dialog.selectedFiles()[0])
            self._clear_results()

    def _clear_results(self) -> None:
        self.last_reports = []
        self.copy_btn.setEnabled(False)
        self.results_list.clear()
        self.lines_box.clear()
        self.warnings_list.clear()
        self.warnings_count = 0

    def _set_controls_enabled(self, enabled: bool) -> None:
        for widget in (self.browse_btn, self.search_btn, self.path_edit,
                       self.include_edit, self.exclude_edit, self.text_edit, self.fallback_checkbox):
            widget.setEnabled(enabled)

    def on_search_clicked(self) -> None:
        if self.thread is not None:
            return

        root_dir = self.path_edit.text().strip()
        if not root_dir:
            self.status_label.setText("No folder...")
            return

        # Spaces around the pattern are significant, only blank input is rejected
        text_pattern = self.text_edit.text()
        if not text_pattern.strip():
            self.status_label.setText("Enter a text pattern")
            return

        try:
            self.last_text_pattern = compile_pattern(text_pattern)
        except PatternCompileError:
            self.status_label.setText("Invalid pattern")
            return

        self._set_controls_enabled(False)
        self._clear_results()

        self.progress.show()
        self.progress.setRange(0, 0)  # Busy/indeterminate mode while background work runs.
        self.status_label.setText("Starting...")

        # Worker does the heavy lifting in its own thread; UI stays responsive.
        self.thread = QThread()
        self.worker = SearchWorker(root_dir,
                                   split_pattern_field(self.include_edit.text()),
                                   split_pattern_field(self.exclude_edit.text()),
                                   text_pattern,
                                   allow_encoding_fallback=self.fallback_checkbox.isChecked())

        self.worker.moveToThread(self.thread)
        self.thread.started.connect(self.worker.run)

        # Worker -> UI communication (always delivered on the main thread).
        self.worker.status.connect(self.on_search_status)
        self.worker.warning.connect(self.on_search_warning)
        self.worker.error.connect(self.on_search_error)
        self.worker.finished.connect(self.on_search_finished)

        # Always stop and clean up the thread when work ends (success or error).
        self.worker.finished.connect(self.thread.quit)
        self.worker.error.connect(self.thread.quit)
        self.thread.finished.connect(self.worker.deleteLater)
        self.thread.finished.connect(self.thread.deleteLater)
        self.thread.finished.connect(self._on_thread_finished)

        self.thread.start()

    def _on_thread_finished(self) -> None:
        self.thread = None
        self.worker = None

    def _stop_progress(self) -> None:
        self.progress.setRange(0, 100)
        self.progress.setValue(100)
        self.progress.hide()
        self._set_controls_enabled(True)

    def on_search_status(self, message: str) -> None:
        self.status_label.setText(message)

    def on_search_warning(self, message: str) -> None:
        self.warnings_count += 1
        self.warnings_list.addItem(message)

    def on_search_error(self, message: str) -> None:
        self.status_label.setText(message)
        self._stop_progress()

    def on_search_finished(self, reports: list[FileReport]) -> None:
        self.last_reports = reports
        self._stop_progress()

        if not reports:
            self.status_label.setText("No results")
            return

        for report in reports:
            self.results_list.addItem(f"{report.file_name} | lines: {len(report.lines)} | "
                                      f"{report.encoding} | {report.newline_style.value} | {report.path}")

        self.copy_btn.setEnabled(True)

        total_lines = sum(len(report.lines) for report in reports)
        status = f"{total_lines} lines in {len(reports)} files"
        if self.warnings_count:
            status += f" ({self.warnings_count} warnings)"
        self.status_label.setText(status)

    def on_result_selected(self) -> None:
        row = self.results_list.currentRow()

        # currentRow() maps directly to last_reports because items are added in the same order.
        if row < 0 or row >= len(self.last_reports):
            self.lines_box.clear()
            return

        report = self.last_reports[row]
        self.show_report_with_highlight(report)
        self.status_label.setText(f"Showing: {report.file_name}")

    """
        Render the report into the QPlainTextEdit, highlight the part of each
        row matched by the text pattern and style the header line.
    """
    def show_report_with_highlight(self, report: FileReport) -> None:
        self.lines_box.setExtraSelections([])
        self.lines_box.setPlainText(snippets.format_report(report))

        match_format = QTextCharFormat()
        match_format.setBackground(QColor("yellow"))
        match_format.setForeground(QColor("Black"))

        header_format = QTextCharFormat()
        header_format.setForeground(QColor("#00FFFF"))
        header_format.setFontWeight(QFont.Weight.Bold)

        selections: list[QTextEdit.ExtraSelection] = []
        doc: QTextDocument = self.lines_box.document()

        header_block = doc.firstBlock()
        if header_block.isValid():
            selections.append(self._block_selection(header_block, 0, len(header_block.text()), header_format))

        block = header_block.next()
        while block.isValid():
            row_match = _REPORT_ROW.match(block.text())

            if row_match and self.last_text_pattern is not None:
                offset = row_match.end()
                span = self.last_text_pattern.find(block.text()[offset:])
                if span is not None and span[1] > 0:
                    selections.append(self._block_selection(block, offset + span[0], span[1], match_format))

            block = block.next()

        self.lines_box.setExtraSelections(selections)

    @staticmethod
    def _block_selection(block, start: int, length: int, fmt: QTextCharFormat) -> QTextEdit.ExtraSelection:
        cursor = QTextCursor(block)
        cursor.setPosition(block.position() + start)
        cursor.setPosition(block.position() + start + length, QTextCursor.MoveMode.KeepAnchor)

        selection = QTextEdit.ExtraSelection()
        selection.cursor = cursor
        selection.format = fmt
        return selection

    def on_copy_clicked(self) -> None:
        # Plain-text dump of every report, ready to paste into a ticket or terminal
        if not self.last_reports:
            return

        QApplication.clipboard().setText(snippets.format_reports(self.last_reports))
        self.status_label.setText(f"Copied {len(self.last_reports)} files to clipboard")

    @staticmethod
    def _open_file_with_default_app(path: str) -> None:
        if sys.platform.startswith("win"):
            os.startfile(path)
        elif sys.platform == "darwin":
            subprocess.Popen(["open", path])
        else:
            subprocess.Popen(["xdg-open", path])

    def on_result_double_clicked(self) -> None:
        row_selected = self.results_list.currentRow()

        if len(self.last_reports) > row_selected >= 0:
            pathlib_path = Path(self.last_reports[row_selected].path).resolve()

            if not pathlib_path.is_file():
                self.status_label.setText("File no longer exists")
                return

            try:
                self._open_file_with_default_app(str(pathlib_path))
            except OSError as e:
                self.status_label.setText(f"Cannot open file: {e}")
