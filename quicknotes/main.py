from __future__ import annotations

from PySide6.QtWidgets import QApplication

from quicknotes.logging_setup import SESSION_ID, install_global_exception_hooks, setup_logging
from quicknotes.session import SessionController
from quicknotes.settings import APP_NAME
from quicknotes.ui.main_window import NotesWindow


def main() -> int:
    log = setup_logging()
    install_global_exception_hooks(log)

    app = QApplication([])
    app.setApplicationName(APP_NAME)

    controller = SessionController()
    win = NotesWindow(controller)
    win.show()
    log.info("Application started, SID=%s notes=%r todos=%r", SESSION_ID, controller.notes, controller.todos)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
