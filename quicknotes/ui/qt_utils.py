from __future__ import annotations

from contextlib import contextmanager

from PySide6.QtCore import QSettings
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication


@contextmanager
def blocked_signals(obj):
    """Temporarily silence a widget's signals (programmatic updates)."""
    if obj is None:
        yield
        return
    previous = obj.blockSignals(True)
    try:
        yield
    finally:
        obj.blockSignals(previous)


def get_str(settings: QSettings, key: str, default: str) -> str:
    val = settings.value(key, default)
    return str(val) if val is not None else default


def build_palette(theme: str) -> QPalette:
    if theme == "light":
        return QApplication.style().standardPalette()

    pal = QPalette()
    base = QColor(30, 30, 30)
    window = QColor(45, 45, 45)
    text = QColor(230, 230, 230)
    pal.setColor(QPalette.Window, window)
    pal.setColor(QPalette.WindowText, text)
    pal.setColor(QPalette.Base, base)
    pal.setColor(QPalette.AlternateBase, window)
    pal.setColor(QPalette.Text, text)
    pal.setColor(QPalette.Button, window)
    pal.setColor(QPalette.ButtonText, text)
    pal.setColor(QPalette.ToolTipBase, window)
    pal.setColor(QPalette.ToolTipText, text)
    pal.setColor(QPalette.PlaceholderText, QColor(140, 140, 140))
    pal.setColor(QPalette.Highlight, QColor(42, 130, 218))
    pal.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    pal.setColor(QPalette.Link, QColor(138, 180, 248))
    return pal


def apply_theme(theme: str) -> None:
    app = QApplication.instance()
    if app is None:
        return
    app.setStyle("Fusion")
    app.setPalette(build_palette(theme))
