import logging
import sys

from PyQt6.QtWidgets import QApplication
from ui import main_window


# Create QApplication, show MainWindow, exec(). An optional first argument
# pre-fills the folder to search.
def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    window = main_window.MainWindow(sys.argv[1] if len(sys.argv) > 1 else None)

    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
