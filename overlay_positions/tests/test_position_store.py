from __future__ import annotations

import json
import logging

import pytest

from overlay_positions.descriptors import BoxDescriptor, LabelOffsetDescriptor, TranslationDescriptor
from overlay_positions.position_store import (
    PositionDocumentError,
    PositionStore,
    dump_positions,
    load_positions,
    parse_positions,
)


def _mixed_store() -> PositionStore:
    store = PositionStore()
    store.set("panel1", "worldAvgLabel", TranslationDescriptor(y=-10))
    store.set("panel1", "annotationHighest", LabelOffsetDescriptor(52.0, -30.0))
    store.set("panel1", "floatingNote", BoxDescriptor(bottom=10, right=10))
    store.set("panel2", "regressionEquation", TranslationDescriptor(10.5, 20.25))
    store.set("panel4", "miniCharts", BoxDescriptor(top=3, left=15))
    return store


def test_set_creates_panel_bucket_and_get_returns_descriptor():
    store = PositionStore()
    assert store.get("panel9", "legend") is None

    store.set("panel9", "legend", TranslationDescriptor(1, 2))

    assert store.get("panel9", "legend") == TranslationDescriptor(1, 2)
    assert ("panel9", "legend") in store
    assert ("panel9", "other") not in store
    assert list(store.panels()) == ["panel9"]


def test_get_or_default_falls_back_only_when_absent():
    store = PositionStore()
    default = BoxDescriptor(bottom=10, right=10)
    assert store.get_or_default("panel1", "floatingNote", default) is default

    store.set("panel1", "floatingNote", BoxDescriptor(top=4, left=2))
    assert store.get_or_default("panel1", "floatingNote", default) == BoxDescriptor(top=4, left=2)


def test_serialize_then_load_round_trips_all_shapes():
    original = _mixed_store()

    restored = PositionStore().load(original.serialize())

    assert restored == original


def test_serialize_is_a_deep_snapshot():
    store = _mixed_store()
    snapshot = store.serialize()
    snapshot["panel1"]["floatingNote"]["bottom"] = 999

    store.set("panel1", "worldAvgLabel", TranslationDescriptor(y=5))

    assert store.get("panel1", "floatingNote") == BoxDescriptor(bottom=10, right=10)
    assert snapshot["panel1"]["worldAvgLabel"] == {"y": -10}


def test_serialize_omits_inactive_edges_and_unset_axes():
    document = _mixed_store().serialize()

    assert document["panel1"]["floatingNote"] == {"right": 10, "bottom": 10}
    assert document["panel1"]["worldAvgLabel"] == {"y": -10}
    assert document["panel1"]["annotationHighest"] == {"textX": 52, "textY": -30}


def test_unknown_shapes_are_kept_verbatim():
    document = {"panel3": {"custom": {"angle": 45, "scale": 1.5}}}

    store = PositionStore().load(document)

    assert store is not None
    assert store.get("panel3", "custom") == {"angle": 45, "scale": 1.5}
    assert store.serialize() == document


def test_load_replaces_previous_contents():
    store = _mixed_store()

    store.load({"panel2": {"rSquared": {"x": 10, "y": 38}}})

    assert store.get("panel1", "floatingNote") is None
    assert store.get("panel2", "rSquared") == TranslationDescriptor(10, 38)


def test_malformed_document_returns_none_and_keeps_state(caplog: pytest.LogCaptureFixture):
    store = _mixed_store()

    with caplog.at_level(logging.WARNING, logger="OverlayPositions.Store"):
        result = store.load({"panel1": ["not", "a", "mapping"]})

    assert result is None
    assert store == _mixed_store()
    assert any("malformed" in record.getMessage() for record in caplog.records)


def test_from_document_rejects_non_mapping():
    with pytest.raises(PositionDocumentError):
        PositionStore.from_document([1, 2, 3])


def test_parse_positions_handles_invalid_json(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="OverlayPositions.Store"):
        assert parse_positions("{not json") is None
    assert caplog.records


def test_load_positions_missing_file_returns_none(tmp_path, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="OverlayPositions.Store"):
        assert load_positions(tmp_path / "positions.json") is None
    assert any("not found" in record.getMessage() for record in caplog.records)


def test_load_positions_reads_document(tmp_path):
    path = tmp_path / "positions.json"
    path.write_text(json.dumps({"panel1": {"worldAvgLabel": {"y": -10}}}), encoding="utf-8")

    store = load_positions(path)

    assert store is not None
    assert store.get("panel1", "worldAvgLabel") == TranslationDescriptor(y=-10)


def test_dump_positions_is_pretty_printed():
    store = PositionStore()
    store.set("panel1", "worldAvgLabel", TranslationDescriptor(y=5))

    text = dump_positions(store)

    assert text == '{\n  "panel1": {\n    "worldAvgLabel": {\n      "y": 5\n    }\n  }\n}'
