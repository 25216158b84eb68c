"""Entry point for the clinic point-of-sale desktop app."""

import logging
import sys

from PyQt5.QtWidgets import QApplication

from clinic_pos import config
from clinic_pos.ui.main_window import MainWindow


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
