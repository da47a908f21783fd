from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from overlay_positions.descriptors import BoxDescriptor, LabelOffsetDescriptor, TranslationDescriptor
from overlay_positions.drag_mode import Affordance, DragModeFlag
from overlay_positions.editor_session import EditorSession, save_notifier
from overlay_positions.persistence import PersistencePipeline, SaveOutcome, SaveStatus
from overlay_positions.position_store import PositionStore


class _Target:
    def __init__(self):
        self.affordances = []
        self._offset = None
        self._placement = BoxDescriptor()

    def set_affordance(self, affordance):
        self.affordances.append(affordance)

    def offset(self):
        return self._offset

    def apply_offset(self, x, y):
        self._offset = (x, y)

    def placement(self):
        return self._placement

    def apply_placement(self, placement):
        self._placement = placement

    def apply_line_end(self, x, y):
        pass

    def apply_alignment(self, alignment, text_dx):
        pass


class _Tier:
    name = "memory"

    def __init__(self):
        self.documents = []

    def is_available(self):
        return True

    def commit(self, document):
        self.documents.append(document)
        return SaveOutcome.saved(self.name, "Positions saved to file!")


def test_missing_store_becomes_empty_editable_store(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.INFO, logger="OverlayPositions.Editor"):
        session = EditorSession(None, pipeline=PersistencePipeline([]))

    assert isinstance(session.store, PositionStore)
    assert len(session.store) == 0
    assert caplog.records


def test_registration_seeds_from_store_or_default():
    store = PositionStore()
    store.set("panel2", "rSquared", TranslationDescriptor(12, 40))
    session = EditorSession(store, pipeline=PersistencePipeline([]))
    saved, fallback, box = _Target(), _Target(), _Target()

    session.register_canvas(saved, "panel2", "rSquared", default=TranslationDescriptor(10, 38))
    session.register_canvas(fallback, "panel2", "regressionEquation", default=TranslationDescriptor(10, 20))
    session.register_box(box, "panel1", "floatingNote", default=BoxDescriptor(bottom=10, right=10))

    assert saved.offset() == (12.0, 40.0)
    assert fallback.offset() == (10.0, 20.0)
    assert box.placement() == BoxDescriptor(bottom=10, right=10)
    assert ("panel2", "regressionEquation") not in store


def test_toggle_updates_affordances_and_notifies():
    notices = SimpleNamespace(modes=[])
    center = SimpleNamespace(drag_mode_changed=notices.modes.append)
    session = EditorSession(PositionStore(), pipeline=PersistencePipeline([]), notifications=center)
    label, note, callout = _Target(), _Target(), _Target()
    session.register_canvas(label, "panel1", "worldAvgLabel", default=TranslationDescriptor(y=-10), lock_x=True)
    session.register_box(note, "panel1", "floatingNote", default=BoxDescriptor(bottom=10, right=10))
    session.register_callout(callout, "panel1", "annotationHighest", default=LabelOffsetDescriptor(60, -30))

    assert session.toggle_drag_mode() is True
    assert session.toggle_drag_mode() is False

    for target in (label, note, callout):
        assert target.affordances[0] is Affordance.INACTIVE
        assert target.affordances[-2:] == [Affordance.READY, Affordance.INACTIVE]
    assert notices.modes == [True, False]


def test_shared_flag_is_used_by_controllers():
    flag = DragModeFlag(True)
    session = EditorSession(PositionStore(), pipeline=PersistencePipeline([]), drag_mode=flag)
    controller = session.register_canvas(_Target(), "panel3", "efficiencyLabel", default=TranslationDescriptor(10, 20))

    assert controller.begin() is True
    flag.set_enabled(False)
    assert controller.update(5, 5) is None


def test_save_exports_current_store_and_notifies():
    saved = []
    center = SimpleNamespace(save_finished=saved.append)
    tier = _Tier()
    session = EditorSession(
        PositionStore(),
        pipeline=PersistencePipeline([tier], notify=save_notifier(center)),
    )
    session.store.set("panel1", "worldAvgLabel", TranslationDescriptor(y=5))

    report = session.save()

    assert report.outcome.status is SaveStatus.SAVED
    assert '"y": 5' in tier.documents[0]
    assert [outcome.message for outcome in saved] == ["Positions saved to file!"]


def test_save_notifier_without_center_is_silent():
    save_notifier(None)(SaveOutcome.saved("memory", "ok"))
