from __future__ import annotations

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from quicknotes.settings import APP_NAME, LOG_PATH

SESSION_ID = uuid.uuid4().hex[:8]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s | sid=%(session)s"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class EnsureSessionFilter(logging.Filter):
    """Child loggers (quicknotes.notes, ...) don't go through the adapter."""
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session"):
            record.session = SESSION_ID
        return True


class SessionAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).setdefault("session", SESSION_ID)
        return msg, kwargs


def _make_handlers(log_path: Path) -> list[logging.Handler]:
    log_path.parent.mkdir(parents=True, exist_ok=True)

    to_file = RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    to_file.setLevel(logging.DEBUG)
    to_console = logging.StreamHandler(sys.stdout or sys.stderr)
    to_console.setLevel(logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    tag = EnsureSessionFilter()
    for handler in (to_file, to_console):
        handler.setFormatter(formatter)
        handler.addFilter(tag)
    return [to_file, to_console]


def setup_logging(log_path: Path = LOG_PATH) -> SessionAdapter:
    """
    Attach a rotating file handler (everything) and a console handler (INFO
    and up) to the `quicknotes` logger. Records of every child logger carry
    the session id.

    Only the first call installs handlers; later calls return a new adapter
    over the same logger, whatever `log_path` they pass.
    """
    logger = logging.getLogger(APP_NAME)
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        for handler in _make_handlers(Path(log_path)):
            logger.addHandler(handler)
        logger.info("Logging to %s", log_path)
    return SessionAdapter(logger, {})


def _qt_level(mode) -> int:
    from PySide6.QtCore import QtMsgType

    return {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }.get(mode, logging.WARNING)


def install_global_exception_hooks(log: logging.LoggerAdapter) -> None:
    """Route uncaught Python exceptions and Qt's own messages into `log`."""
    from PySide6.QtCore import qInstallMessageHandler

    def on_uncaught(exc_type, exc, tb):
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    def on_qt_message(mode, context, message):
        where = ":".join(
            str(part)
            for part in (getattr(context, attr, None) for attr in ("file", "line", "function"))
            if part
        )
        log.log(_qt_level(mode), "Qt: %s | where=%s", message, where or "unknown")

    sys.excepthook = on_uncaught
    qInstallMessageHandler(on_qt_message)
    log.info("Exception hook and Qt message handler installed")
