from __future__ import annotations

import json
import logging

import pytest

from overlay_positions.descriptors import TranslationDescriptor
from overlay_positions.persistence import (
    SAVE_FAILED_MESSAGE,
    PersistencePipeline,
    SaveOutcome,
    SaveStatus,
)
from overlay_positions.position_store import PositionStore


class _FakeTier:
    def __init__(self, name, *, available=True, result=None, error=None):
        self.name = name
        self._available = available
        self._result = result
        self._error = error
        self.documents = []

    def is_available(self):
        return self._available

    def commit(self, document):
        self.documents.append(document)
        if self._error is not None:
            raise self._error
        return self._result or SaveOutcome.saved(self.name, f"saved via {self.name}")


def _store():
    store = PositionStore()
    store.set("panel1", "worldAvgLabel", TranslationDescriptor(y=5))
    return store


def test_first_available_tier_wins():
    native = _FakeTier("native_file")
    download = _FakeTier("download")
    pipeline = PersistencePipeline([native, download])

    report = pipeline.save(_store())

    assert report.outcome.status is SaveStatus.SAVED
    assert report.outcome.tier == "native_file"
    assert json.loads(native.documents[0]) == {"panel1": {"worldAvgLabel": {"y": 5}}}
    assert download.documents == []


def test_falls_through_unavailable_and_failing_tiers_once_each():
    native = _FakeTier("native_file", available=False)
    download = _FakeTier("download", error=OSError("disk full"))
    clipboard = _FakeTier("clipboard")
    pipeline = PersistencePipeline([native, download, clipboard])

    report = pipeline.save(_store())

    assert report.outcome.tier == "clipboard"
    assert [attempt.status for attempt in report.attempts] == [
        SaveStatus.UNAVAILABLE,
        SaveStatus.FAILED,
        SaveStatus.SAVED,
    ]
    assert native.documents == []
    assert len(download.documents) == 1
    assert len(clipboard.documents) == 1


def test_cancel_stops_without_falling_back():
    notices = []
    native = _FakeTier("native_file", result=SaveOutcome.cancelled("native_file"))
    clipboard = _FakeTier("clipboard")
    pipeline = PersistencePipeline([native, clipboard], notify=notices.append)

    report = pipeline.save(_store())

    assert report.outcome.status is SaveStatus.CANCELLED
    assert clipboard.documents == []
    assert notices == [report.outcome]


def test_all_tiers_failing_reports_failure(caplog: pytest.LogCaptureFixture):
    notices = []
    tiers = [
        _FakeTier("native_file", available=False),
        _FakeTier("download", result=SaveOutcome.failed("download", "no downloads dir")),
        _FakeTier("clipboard", error=RuntimeError("clipboard locked")),
    ]
    pipeline = PersistencePipeline(tiers, notify=notices.append)

    with caplog.at_level(logging.WARNING, logger="OverlayPositions.Persistence"):
        report = pipeline.save(_store())

    assert report.outcome.status is SaveStatus.FAILED
    assert report.outcome.message == SAVE_FAILED_MESSAGE
    assert len(report.attempts) == 3
    assert notices == [report.outcome]
    assert any(record.levelno == logging.ERROR for record in caplog.records)


def test_missing_store_warns_and_does_nothing(caplog: pytest.LogCaptureFixture):
    tier = _FakeTier("native_file")
    notices = []
    pipeline = PersistencePipeline([tier], notify=notices.append)

    with caplog.at_level(logging.WARNING, logger="OverlayPositions.Persistence"):
        assert pipeline.save(None) is None

    assert tier.documents == []
    assert notices == []
    assert "No positions to save" in caplog.text


def test_notify_failure_is_not_raised():
    def _broken(_outcome):
        raise RuntimeError("toast host gone")

    pipeline = PersistencePipeline([_FakeTier("download")], notify=_broken)

    report = pipeline.save(_store())

    assert report.outcome.succeeded


def test_native_failure_falls_through_to_download_exactly_once():
    native = _FakeTier("native_file", error=OSError("dialog crashed"))
    download = _FakeTier("download")
    clipboard = _FakeTier("clipboard")
    pipeline = PersistencePipeline([native, download, clipboard])

    report = pipeline.save(_store())

    assert report.outcome.tier == "download"
    assert len(native.documents) == 1
    assert len(download.documents) == 1
    assert clipboard.documents == []


def test_native_and_download_failures_reach_clipboard_once():
    native = _FakeTier("native_file", error=OSError("dialog crashed"))
    download = _FakeTier("download", error=PermissionError("downloads read-only"))
    clipboard = _FakeTier("clipboard")
    pipeline = PersistencePipeline([native, download, clipboard])

    report = pipeline.save(_store())

    assert report.outcome.tier == "clipboard"
    assert [attempt.status for attempt in report.attempts] == [
        SaveStatus.FAILED,
        SaveStatus.FAILED,
        SaveStatus.SAVED,
    ]
    assert len(native.documents) == 1
    assert len(download.documents) == 1
    assert len(clipboard.documents) == 1
