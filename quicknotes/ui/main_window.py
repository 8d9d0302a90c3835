from __future__ import annotations

import logging

from PySide6.QtCore import QDateTime, QSettings, Qt, QTimer
from PySide6.QtGui import QAction, QActionGroup, QKeySequence
from PySide6.QtWidgets import (
    QCheckBox, QDateTimeEdit, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QMainWindow, QMessageBox, QPlainTextEdit, QPushButton, QSplitter,
    QTextBrowser, QVBoxLayout, QWidget,
)

from quicknotes.session import SessionController
from quicknotes.services.markdown_renderer import MarkdownRenderer
from quicknotes.settings import (
    APP_NAME, FLUSH_INTERVAL_MS, PREVIEW_DEBOUNCE_MS, normalize_theme,
)
from quicknotes.ui.app_settings import SettingsKeys
from quicknotes.ui.qt_utils import apply_theme, blocked_signals, get_str

log = logging.getLogger(f"{APP_NAME}.ui")


class NotesWindow(QMainWindow):
    """Notes on the left, editor + preview in the middle, todos on the right."""

    def __init__(self, controller: SessionController):
        super().__init__()
        self.setWindowTitle("Notes & Todos")

        self.ctrl = controller
        self._settings = QSettings(APP_NAME, APP_NAME)
        self._theme = normalize_theme(get_str(self._settings, SettingsKeys.UI_THEME, "dark"))
        self.renderer = MarkdownRenderer(theme=self._theme)
        # one message box per failure streak, not one per timer tick
        self._flush_error_shown = False

        # ---- notes panel ----
        self.notes_list = QListWidget()
        self.btn_new_note = QPushButton("Create Note")
        self.btn_delete_note = QPushButton("Delete Note")

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(8, 8, 8, 8)
        left_layout.addWidget(QLabel("<b>Notes</b>"))
        left_layout.addWidget(self.notes_list)
        left_layout.addWidget(self.btn_new_note)
        left_layout.addWidget(self.btn_delete_note)

        # ---- editor + preview ----
        self.editor = QPlainTextEdit()
        self.editor.setPlaceholderText("Select a note to edit")
        self.preview = QTextBrowser()
        self.preview.setOpenExternalLinks(True)

        self.center = QSplitter(Qt.Vertical)
        self.center.addWidget(self.editor)
        self.center.addWidget(self.preview)
        self.center.setStretchFactor(0, 3)
        self.center.setStretchFactor(1, 2)

        # ---- todos panel ----
        self.todo_list = QListWidget()
        self.todo_input = QLineEdit()
        self.todo_input.setPlaceholderText("New todo… (Enter to add)")
        self.todo_has_due = QCheckBox("Due")
        self.todo_due = QDateTimeEdit(QDateTime.currentDateTime().addDays(1))
        self.todo_due.setCalendarPopup(True)
        self.todo_due.setDisplayFormat("yyyy-MM-dd HH:mm")
        self.todo_due.setEnabled(False)
        self.btn_add_todo = QPushButton("Create Todo")
        self.btn_delete_todo = QPushButton("Delete Todo")

        due_row = QHBoxLayout()
        due_row.addWidget(self.todo_has_due)
        due_row.addWidget(self.todo_due, 1)

        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(8, 8, 8, 8)
        right_layout.addWidget(QLabel("<b>Todos</b>"))
        right_layout.addWidget(self.todo_list)
        right_layout.addWidget(self.todo_input)
        right_layout.addLayout(due_row)
        right_layout.addWidget(self.btn_add_todo)
        right_layout.addWidget(self.btn_delete_todo)

        self.splitter = QSplitter(Qt.Horizontal)
        self.splitter.addWidget(left)
        self.splitter.addWidget(self.center)
        self.splitter.addWidget(right)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 3)
        self.splitter.setStretchFactor(2, 1)
        self.setCentralWidget(self.splitter)

        # ---- timers ----
        self.flush_timer = QTimer(self)
        self.flush_timer.setInterval(FLUSH_INTERVAL_MS)
        self.flush_timer.timeout.connect(self._flush_current)

        self.preview_timer = QTimer(self)
        self.preview_timer.setInterval(PREVIEW_DEBOUNCE_MS)
        self.preview_timer.setSingleShot(True)
        self.preview_timer.timeout.connect(self._render_preview)

        # ---- signals ----
        self.notes_list.itemSelectionChanged.connect(self._on_select_note)
        self.btn_new_note.clicked.connect(self.create_note)
        self.btn_delete_note.clicked.connect(self.delete_note)
        self.editor.textChanged.connect(self._on_text_changed)
        self.todo_input.returnPressed.connect(self.add_todo)
        self.todo_has_due.toggled.connect(self.todo_due.setEnabled)
        self.btn_add_todo.clicked.connect(self.add_todo)
        self.btn_delete_todo.clicked.connect(self.delete_todo)

        self._build_menu()
        self._restore_ui_state()
        self._apply_theme(self._theme, save=False)

        self.refresh_notes()
        self.refresh_todos()
        self._show_note(None)
        self._reopen_last_note()
        self.flush_timer.start()

        for msg in self.ctrl.startup_errors:
            QTimer.singleShot(0, lambda m=msg: self._warn("Startup", m))

    # ───────────────────────── menu ─────────────────────────

    def _build_menu(self) -> None:
        menubar = self.menuBar()
        filem = menubar.addMenu("File")

        act_new = QAction("New Note", self)
        act_new.setShortcut(QKeySequence.New)
        act_new.triggered.connect(self.create_note)

        act_delete = QAction("Delete Note", self)
        act_delete.triggered.connect(self.delete_note)

        act_save = QAction("Save", self)
        act_save.setShortcut(QKeySequence.Save)
        act_save.triggered.connect(self._save_now)

        act_reload = QAction("Reload Notes", self)
        act_reload.setShortcut(QKeySequence.Refresh)
        act_reload.triggered.connect(self.reload_notes)

        act_quit = QAction("Quit", self)
        act_quit.setShortcut(QKeySequence.Quit)
        act_quit.triggered.connect(self.close)

        filem.addAction(act_new)
        filem.addAction(act_delete)
        filem.addSeparator()
        filem.addAction(act_save)
        filem.addAction(act_reload)
        filem.addSeparator()
        filem.addAction(act_quit)

        viewm = menubar.addMenu("View")
        group = QActionGroup(self)
        self._act_dark = QAction("Theme: Dark", self, checkable=True)
        self._act_light = QAction("Theme: Light", self, checkable=True)
        group.addAction(self._act_dark)
        group.addAction(self._act_light)
        self._act_dark.triggered.connect(lambda: self._apply_theme("dark"))
        self._act_light.triggered.connect(lambda: self._apply_theme("light"))
        viewm.addAction(self._act_dark)
        viewm.addAction(self._act_light)

    def _apply_theme(self, name: str, *, save: bool = True) -> None:
        self._theme = normalize_theme(name)
        with blocked_signals(self._act_dark), blocked_signals(self._act_light):
            self._act_dark.setChecked(self._theme == "dark")
            self._act_light.setChecked(self._theme == "light")
        apply_theme(self._theme)
        self.renderer.theme = self._theme
        self._render_preview()
        if save:
            self._settings.setValue(SettingsKeys.UI_THEME, self._theme)

    # ───────────────────────── notes ─────────────────────────

    def refresh_notes(self) -> None:
        current = self.ctrl.selected_note
        with blocked_signals(self.notes_list):
            self.notes_list.clear()
            for title in self.ctrl.note_titles():
                self.notes_list.addItem(title)
            self._select_in_list(current)

    def _select_in_list(self, title: str | None) -> None:
        with blocked_signals(self.notes_list):
            if title is None:
                self.notes_list.clearSelection()
                return
            for i in range(self.notes_list.count()):
                if self.notes_list.item(i).text() == title:
                    self.notes_list.setCurrentRow(i)
                    return

    def _on_select_note(self) -> None:
        items = self.notes_list.selectedItems()
        if not items:
            return
        title = items[0].text()
        ok, err = self.ctrl.select_note(title)
        if not ok:
            self._warn("Open note", err)
            self.refresh_notes()
            return
        self._show_note(title)

    def _show_note(self, title: str | None) -> None:
        with blocked_signals(self.editor):
            self.editor.setPlainText(self.ctrl.current_text if title else "")
        self.editor.setReadOnly(title is None)
        self.btn_delete_note.setEnabled(title is not None)
        self._update_title()
        self._render_preview()
        if title:
            self._settings.setValue(SettingsKeys.LAST_NOTE, title)

    def _reopen_last_note(self) -> None:
        last = get_str(self._settings, SettingsKeys.LAST_NOTE, "")
        if last and last in self.ctrl.note_titles():
            ok, _ = self.ctrl.select_note(last)
            if ok:
                self._select_in_list(last)
                self._show_note(last)

    def create_note(self) -> None:
        ok, err = self.ctrl.create_note()
        if not ok:
            self._warn("Create note", err)
            return
        self.refresh_notes()
        self._show_note(self.ctrl.selected_note)
        self.editor.setFocus()

    def delete_note(self) -> None:
        title = self.ctrl.selected_note
        if title is None:
            return
        answer = QMessageBox.question(self, "Delete note", f"Delete note '{title}'?")
        if answer != QMessageBox.Yes:
            return
        ok, err = self.ctrl.delete_note(title)
        if not ok:
            self._warn("Delete note", err)
        self.refresh_notes()
        self._show_note(self.ctrl.selected_note)

    def reload_notes(self) -> None:
        ok, err = self.ctrl.reload_notes()
        if not ok:
            self._warn("Reload notes", err)
        self.refresh_notes()

    def _on_text_changed(self) -> None:
        self.ctrl.edit_current(self.editor.toPlainText())
        self._update_title()
        self.preview_timer.start()

    def _flush_current(self) -> None:
        ok, err = self.ctrl.flush_current()
        if ok:
            self._flush_error_shown = False
        elif not self._flush_error_shown:
            self._flush_error_shown = True
            self._warn("Save note", err)
        self._update_title()

    def _save_now(self) -> None:
        self._flush_error_shown = False
        self._flush_current()

    def _render_preview(self) -> None:
        self.preview.setHtml(self.renderer.render_page(self.editor.toPlainText()))

    def _update_title(self) -> None:
        title = self.ctrl.selected_note
        if title is None:
            self.setWindowTitle("Notes & Todos")
            return
        mark = "*" if self.ctrl.is_dirty else ""
        self.setWindowTitle(f"{mark}{title} - Notes & Todos")

    # ───────────────────────── todos ─────────────────────────

    def refresh_todos(self) -> None:
        self.todo_list.clear()
        for todo in self.ctrl.todos:
            due = todo.due_label()
            self.todo_list.addItem(f"{todo.description}  (due {due})" if due else todo.description)

    def add_todo(self) -> None:
        due = None
        if self.todo_has_due.isChecked():
            due = int(self.todo_due.dateTime().toSecsSinceEpoch())
        ok, err = self.ctrl.add_todo(self.todo_input.text(), due)
        if not ok:
            self._warn("Create todo", err)
            return
        self.todo_input.clear()
        self.refresh_todos()

    def delete_todo(self) -> None:
        row = self.todo_list.currentRow()
        if row < 0:
            return
        ok, err = self.ctrl.delete_todo(row)
        if not ok:
            self._warn("Delete todo", err)
        self.refresh_todos()

    # ───────────────────────── window state ─────────────────────────

    def _restore_ui_state(self) -> None:
        geo = self._settings.value(SettingsKeys.UI_GEOMETRY)
        if geo:
            self.restoreGeometry(geo)
        else:
            self.resize(1100, 700)
        sizes = self._settings.value(SettingsKeys.UI_SPLITTER)
        if isinstance(sizes, (list, tuple)):
            try:
                self.splitter.setSizes([int(s) for s in sizes])
            except (TypeError, ValueError):
                log.warning("Ignoring stored splitter sizes: %r", sizes)

    def closeEvent(self, event):  # type: ignore[override]
        """Flush the open note before the window goes away."""
        self.flush_timer.stop()
        self.preview_timer.stop()
        ok, err = self.ctrl.close()
        if not ok:
            self._warn("Save note", err)
        self._settings.setValue(SettingsKeys.UI_GEOMETRY, self.saveGeometry())
        self._settings.setValue(SettingsKeys.UI_SPLITTER, self.splitter.sizes())
        super().closeEvent(event)

    def _warn(self, title: str, message: str | None) -> None:
        log.warning("%s: %s", title, message)
        QMessageBox.warning(self, title, message or "Unknown error")
