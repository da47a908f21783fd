"""Save tiers backed by Qt: file dialog, downloads folder, clipboard."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from PyQt6.QtCore import QStandardPaths
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import QApplication, QFileDialog, QWidget

from overlay_positions.persistence import SaveOutcome, SaveTier
from overlay_positions.settings import EditorSettings

SavePrompt = Callable[[Optional[QWidget], str], Optional[str]]


def prompt_save_path(parent: Optional[QWidget], suggested: str) -> Optional[str]:
    path, _selected_filter = QFileDialog.getSaveFileName(
        parent,
        "Save positions",
        suggested,
        "JSON Files (*.json)",
    )
    return path or None


def resolve_downloads_dir() -> Optional[Path]:
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DownloadLocation)
    if not location:
        return None
    return Path(location)


def unique_download_path(directory: Path, filename: str) -> Path:
    """Pick ``filename`` or the first free ``stem (n).suffix`` variant, as browsers do."""
    candidate = directory / filename
    if not candidate.exists():
        return candidate
    stem = Path(filename).stem
    suffix = Path(filename).suffix
    index = 1
    while True:
        candidate = directory / f"{stem} ({index}){suffix}"
        if not candidate.exists():
            return candidate
        index += 1


class NativeFileTier:
    name = "native_file"

    def __init__(
        self,
        parent_fn: Callable[[], Optional[QWidget]],
        *,
        suggested_path: Path,
        enabled: bool = True,
        prompt: SavePrompt = prompt_save_path,
    ) -> None:
        self._parent_fn = parent_fn
        self._suggested_path = suggested_path
        self._enabled = enabled
        self._prompt = prompt

    def is_available(self) -> bool:
        return self._enabled and QApplication.instance() is not None

    def commit(self, document: str) -> SaveOutcome:
        chosen = self._prompt(self._parent_fn(), str(self._suggested_path))
        if not chosen:
            return SaveOutcome.cancelled(self.name)
        target = Path(chosen)
        target.write_text(document, encoding="utf-8")
        return SaveOutcome.saved(self.name, "Positions saved to file!", str(target))


class DownloadTier:
    name = "download"

    def __init__(
        self,
        *,
        filename: str,
        downloads_dir: Optional[Path] = None,
        downloads_dir_fn: Callable[[], Optional[Path]] = resolve_downloads_dir,
    ) -> None:
        self._filename = filename
        self._downloads_dir = downloads_dir
        self._downloads_dir_fn = downloads_dir_fn

    def _directory(self) -> Optional[Path]:
        return self._downloads_dir or self._downloads_dir_fn()

    def is_available(self) -> bool:
        return self._directory() is not None

    def commit(self, document: str) -> SaveOutcome:
        directory = self._directory()
        if directory is None:
            return SaveOutcome.unavailable(self.name)
        directory.mkdir(parents=True, exist_ok=True)
        target = unique_download_path(directory, self._filename)
        target.write_text(document, encoding="utf-8")
        return SaveOutcome.saved(
            self.name,
            f"Positions downloaded! Replace {self._filename} with this file.",
            str(target),
        )


def _application_clipboard():
    if QGuiApplication.instance() is None:
        return None
    return QGuiApplication.clipboard()


class ClipboardTier:
    name = "clipboard"

    def __init__(self, *, filename: str, clipboard_fn: Callable[[], object] = _application_clipboard) -> None:
        self._filename = filename
        self._clipboard_fn = clipboard_fn

    def is_available(self) -> bool:
        return self._clipboard_fn() is not None

    def commit(self, document: str) -> SaveOutcome:
        clipboard = self._clipboard_fn()
        if clipboard is None:
            return SaveOutcome.unavailable(self.name)
        clipboard.setText(document)  # type: ignore[attr-defined]
        return SaveOutcome.saved(self.name, f"Positions copied to clipboard! Paste into {self._filename}")


def build_save_tiers(settings: EditorSettings, parent_fn: Callable[[], Optional[QWidget]]) -> List[SaveTier]:
    suggested = settings.positions_path.with_name(settings.export_filename)
    return [
        NativeFileTier(parent_fn, suggested_path=suggested, enabled=settings.native_dialog),
        DownloadTier(filename=settings.export_filename, downloads_dir=settings.downloads_dir),
        ClipboardTier(filename=settings.export_filename),
    ]
