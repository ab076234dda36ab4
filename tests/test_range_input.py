import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pycut.range_input import RangeInputController, Session
from pycut.range_state import BOUND_END, BOUND_START, RangeState
from pycut.timecode import TimeCode


def _loaded_controller() -> RangeInputController:
    controller = RangeInputController()
    controller.on_source_loaded("/videos/match.mp4")
    return controller


def test_inverted_edit_corrects_end_and_starts_loop():
    controller = _loaded_controller()
    update = controller.on_text_edited("00:00:10.000", "00:00:05.000")
    assert update is not None
    assert update.range.end == TimeCode(25000)
    assert update.field_writes == {BOUND_END: "00:00:25.000"}
    assert update.seek_to == TimeCode(10000)
    assert update.start_loop is True
    assert update.status == "Looping range 00:00:10.000 - 00:00:25.000"
    assert controller.range.loop_active is True
    assert controller.session.playing is True


def test_valid_edit_writes_nothing_back():
    controller = _loaded_controller()
    update = controller.on_text_edited("00:00:10", "00:00:20")
    assert update.field_writes == {}
    assert controller.range.start == TimeCode(10000)
    assert controller.range.end == TimeCode(20000)


def test_malformed_edit_is_ignored():
    controller = _loaded_controller()
    controller.on_text_edited("00:00:10.000", "00:00:20.000")
    before = controller.range
    assert controller.on_text_edited("00:00:1", "00:00:20.000") is None
    assert controller.on_text_edited("00:00:10.000", "00:61:00") is None
    assert controller.range == before


def test_edit_without_source_updates_range_only():
    controller = RangeInputController()
    update = controller.on_text_edited("00:00:03.000", "00:00:01.000")
    assert update.range.end == TimeCode(18000)
    assert update.seek_to is None
    assert update.start_loop is False
    assert controller.range.loop_active is False


def test_nudge_writes_nudged_field_and_loops():
    controller = _loaded_controller()
    update = controller.on_nudge(BOUND_START, 0.5, "00:00:10.000", "00:00:20.000")
    assert update.field_writes == {BOUND_START: "00:00:10.500"}
    assert update.seek_to == TimeCode(10500)
    assert update.start_loop is True


def test_nudge_start_never_goes_negative():
    controller = _loaded_controller()
    update = controller.on_nudge(BOUND_START, -0.5, "00:00:00.200", "00:00:05.000")
    assert update.range.start == TimeCode(0)
    assert update.field_writes[BOUND_START] == "00:00:00.000"


def test_nudge_end_below_start_is_normalized():
    controller = _loaded_controller()
    update = controller.on_nudge(BOUND_END, -0.5, "00:00:10.000", "00:00:10.300")
    assert update.field_writes == {BOUND_END: "00:00:25.000"}
    assert update.range.end == TimeCode(25000)


def test_nudge_with_malformed_field_is_ignored():
    controller = _loaded_controller()
    assert controller.on_nudge(BOUND_START, 0.5, "garbage", "00:00:10.000") is None


def test_nudge_with_malformed_other_field_keeps_range():
    controller = _loaded_controller()
    before = controller.range
    update = controller.on_nudge(BOUND_START, 0.5, "00:00:01.000", "bad")
    assert update.field_writes == {BOUND_START: "00:00:01.500"}
    assert update.seek_to is None
    assert controller.range == before


def test_progress_click_sets_ten_second_range():
    controller = _loaded_controller()
    update = controller.on_progress_click(50.0, 200.0, TimeCode(60000))
    assert update.range.start == TimeCode(15000)
    assert update.range.end == TimeCode(25000)
    assert update.field_writes == {BOUND_START: "00:00:15.000", BOUND_END: "00:00:25.000"}
    assert update.seek_to == TimeCode(15000)
    assert update.start_loop is True


def test_progress_click_needs_duration_and_width():
    controller = _loaded_controller()
    assert controller.on_progress_click(10.0, 200.0, None) is None
    assert controller.on_progress_click(10.0, 0.0, TimeCode(60000)) is None


def test_play_range_requires_source():
    controller = RangeInputController()
    assert controller.on_play_range("00:00:01.000", "00:00:02.000") is None
    controller.on_source_loaded("/videos/match.mp4")
    assert controller.on_play_range("00:00:01.000", "00:00:02.000").start_loop is True


def test_stop_clears_loop():
    controller = _loaded_controller()
    controller.on_text_edited("00:00:01.000", "00:00:02.000")
    state = controller.on_stop()
    assert state.loop_active is False
    assert controller.session.playing is False


def test_play_full_clears_loop():
    controller = _loaded_controller()
    controller.on_text_edited("00:00:01.000", "00:00:02.000")
    assert controller.on_play_full() is True
    assert controller.range.loop_active is False
    assert RangeInputController(Session()).on_play_full() is False


def test_resolve_for_export_does_not_start_playback():
    controller = _loaded_controller()
    update = controller.resolve_for_export("00:00:10.000", "00:00:05.000")
    assert update.range.end == TimeCode(25000)
    assert update.field_writes == {BOUND_END: "00:00:25.000"}
    assert update.seek_to is None
    assert controller.session.playing is False


def test_session_defaults():
    session = Session()
    assert session.has_source is False
    assert session.range == RangeState()
