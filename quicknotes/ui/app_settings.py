from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SettingsKeys:
    UI_THEME: str = "ui/theme"
    UI_GEOMETRY: str = "ui/geometry"
    UI_SPLITTER: str = "ui/splitter_sizes"
    LAST_NOTE: str = "nav/last_note"
