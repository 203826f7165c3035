import math
import textwrap

import pytest

from estimator.errors import MissingFeedRateError
from estimator.gcode_model import (
    PREAMBLE_LAYER,
    Comment,
    InterpreterState,
    LaserOff,
    LaserOn,
    Move,
    NoOp,
    Unrecognized,
)
from estimator.interpreter import TimingInterpreter, estimate_text


def gcode(text):
    return textwrap.dedent(text).lstrip()


def test_laser_and_layer_change_scenario():
    report = estimate_text(
        gcode(
            """
            FEEDRATE 600
            LASER ON
            MOVE Z 10
            LASER OFF
            MOVE Z 0
            """
        )
    )
    assert report.laser_seconds == 1.0
    assert report.layer_change_seconds == 1.0
    assert report.total_seconds == 2.0
    assert report.diagnostics == ()
    assert report.complete


def test_first_move_without_feed_rate_fails():
    with pytest.raises(MissingFeedRateError) as excinfo:
        estimate_text("MOVE X 5\nFEEDRATE 600\nMOVE X 10\n")
    exc = excinfo.value
    assert exc.line_number == 1
    assert exc.raw_line == "MOVE X 5"
    assert exc.partial is not None
    assert not exc.partial.complete
    assert str(exc) == "missing feed rate at line 1"


def test_partial_breakdown_stops_at_failing_line():
    source = gcode(
        """
        FOO
        G1 X0
        G1 X3
        """
    )
    with pytest.raises(MissingFeedRateError) as excinfo:
        estimate_text(source)
    partial = excinfo.value.partial
    assert excinfo.value.line_number == 3
    assert partial.total_seconds == 0.0
    assert [d.line_number for d in partial.diagnostics] == [1]


def test_file_without_motion_is_zero():
    report = estimate_text("; only comments\nLASER ON\nLASER OFF\nG21\n")
    assert report.laser_seconds == 0.0
    assert report.layer_change_seconds == 0.0
    assert report.total_seconds == 0.0


def test_empty_file():
    report = estimate_text("")
    assert report.total_seconds == 0.0
    assert report.line_count == 0
    assert report.layers == ()


def test_feed_rate_last_value_wins():
    report = estimate_text("G1 X3 F180\nG1 X9\n")
    # 3 mm at 180 mm/min then 6 mm at the same rate
    assert report.layer_change_seconds == pytest.approx(1.0 + 2.0)
    assert report.move_count == 2


def test_feed_only_line_updates_rate_without_moving():
    interpreter = TimingInterpreter()
    interpreter.step(1, "F300", Move(feed_rate=300.0))
    assert interpreter.machine.feed_rate == 300.0
    assert interpreter.machine.position == (0.0, 0.0, 0.0)
    assert interpreter.state is InterpreterState.IDLE
    assert interpreter.result().move_count == 0


def test_zero_displacement_move_needs_no_feed_rate():
    report = estimate_text("LASER ON\nMOVE X 0 Y 0\n")
    assert report.total_seconds == 0.0
    assert report.move_count == 1


def test_toggling_laser_moves_time_between_buckets():
    moves = "FEEDRATE 120\nMOVE X 4\nMOVE X 0 Y 3\nMOVE Y 0\n"
    dark = estimate_text(moves)
    lit = estimate_text("LASER ON\n" + moves)

    assert dark.laser_seconds == 0.0
    assert lit.layer_change_seconds == 0.0
    assert dark.layer_change_seconds == lit.laser_seconds
    assert dark.total_seconds == lit.total_seconds


def test_unrecognized_lines_do_not_change_durations():
    clean = "FEEDRATE 600\nLASER ON\nMOVE X 10\nLASER OFF\nMOVE X 0\n"
    noisy = "G2 X1 Y1\nFEEDRATE 600\nLASER ON\nWHAT\nMOVE X 10\nLASER OFF\nG1 X1 X2\nMOVE X 0\n"

    clean_report = estimate_text(clean)
    noisy_report = estimate_text(noisy)

    assert noisy_report.laser_seconds == clean_report.laser_seconds
    assert noisy_report.layer_change_seconds == clean_report.layer_change_seconds
    assert noisy_report.ignored_line_count == 3
    assert [d.line_number for d in noisy_report.diagnostics] == [1, 4, 7]
    assert noisy_report.diagnostics[1].raw_text == "WHAT"


def test_total_is_exact_sum_of_buckets():
    report = estimate_text(
        "G1 F777\nM3\nG1 X0.1 Y0.7\nG1 X3.3 Z0.05\nM5\nG1 Z11.1\nM3\nG1 X-2 Y9.9\n"
    )
    assert report.total_seconds == report.laser_seconds + report.layer_change_seconds


def test_repeated_runs_are_identical():
    source = "G1 F777\nM3\nG1 X0.1 Y0.7\n;LAYER:0\nG1 X3.3 Z0.05\nM5\nG1 Z11.1\nBAD\n"
    assert estimate_text(source) == estimate_text(source)


def test_state_machine_transitions():
    interpreter = TimingInterpreter()
    assert interpreter.state is InterpreterState.IDLE

    interpreter.step(1, "F600", Move(feed_rate=600.0))
    interpreter.step(2, "G1 X1", Move(x=1.0))
    assert interpreter.state is InterpreterState.NOT_EXPOSING

    interpreter.step(3, "M3", LaserOn())
    assert interpreter.state is InterpreterState.EXPOSING
    assert interpreter.machine.laser_on

    interpreter.step(4, "; note", Comment("note"))
    interpreter.step(5, "G21", NoOp("G21"))
    assert interpreter.state is InterpreterState.EXPOSING

    interpreter.step(6, "M5", LaserOff())
    assert interpreter.state is InterpreterState.NOT_EXPOSING
    assert not interpreter.machine.laser_on


def test_laser_off_from_idle():
    interpreter = TimingInterpreter()
    interpreter.step(1, "M5", LaserOff())
    assert interpreter.state is InterpreterState.NOT_EXPOSING


def test_attribution_uses_laser_state_before_move():
    interpreter = TimingInterpreter()
    interpreter.step(1, "F600", Move(feed_rate=600.0))
    interpreter.step(2, "M3", LaserOn())
    interpreter.step(3, "G1 Z10", Move(z=10.0))
    interpreter.step(4, "M5", LaserOff())
    report = interpreter.result()
    assert report.laser_seconds == 1.0
    assert report.layer_change_seconds == 0.0


def test_unrecognized_command_is_recorded():
    interpreter = TimingInterpreter()
    interpreter.step(7, "G2 X1", Unrecognized("G2 X1", "unsupported code G2"))
    (diag,) = interpreter.result().diagnostics
    assert (diag.line_number, diag.raw_text, diag.reason) == (7, "G2 X1", "unsupported code G2")


def test_layers_are_tracked_from_comments():
    report = estimate_text(
        gcode(
            """
            G1 Z1 F60
            ;LAYER:0
            M3
            G1 X2
            M5
            ;LAYER:1
            G1 Z2
            ;LAYER:2
            """
        )
    )
    assert [layer.index for layer in report.layers] == [PREAMBLE_LAYER, 0, 1, 2]
    assert report.layer_count == 3

    preamble, first, second, third = report.layers
    assert preamble.layer_change_seconds == 1.0
    assert first.laser_seconds == 2.0
    assert first.distance_mm == 2.0
    assert second.layer_change_seconds == 1.0
    assert third.move_count == 0
    assert sum(layer.total_seconds for layer in report.layers) == report.total_seconds


def test_slicer_time_is_read():
    assert estimate_text(";TIME:7325\n").slicer_estimate_seconds == 7325


def test_slicer_placeholder_time_is_ignored():
    assert estimate_text(";TIME:6666\n").slicer_estimate_seconds is None


def test_malformed_metadata_is_a_diagnostic():
    report = estimate_text(";LAYER:abc\n;TIME:soon\n")
    assert [d.reason for d in report.diagnostics] == [
        "invalid layer number",
        "invalid slicer time",
    ]


def test_unknown_command_object_is_rejected():
    with pytest.raises(TypeError):
        TimingInterpreter().step(1, "x", object())


def test_negative_slicer_time_is_a_diagnostic():
    report = estimate_text(";TIME:-5\nG1 X1 F60\n")
    assert report.slicer_estimate_seconds is None
    assert [(d.line_number, d.reason) for d in report.diagnostics] == [(1, "invalid slicer time")]
    assert report.total_seconds == 1.0


def test_move_with_overflowing_duration_is_skipped():
    report = estimate_text("G1 X1e308 F1e-300\nG1 Y1 F60\n")
    (diag,) = report.diagnostics
    assert (diag.line_number, diag.reason) == (1, "move duration out of range")
    # the skipped line neither moved the head nor set the feed rate
    assert report.total_seconds == 1.0
    assert report.move_count == 1


def test_move_overflowing_the_total_is_skipped():
    interpreter = TimingInterpreter()
    interpreter.step(1, "G1 X1e306 F1", Move(x=1e306, feed_rate=1.0))
    interpreter.step(2, "G1 X0", Move(x=0.0))
    interpreter.step(3, "G1 X1e306", Move(x=1e306))
    report = interpreter.result()
    assert [d.reason for d in report.diagnostics] == ["total duration out of range"]
    assert report.move_count == 2
    assert interpreter.machine.position == (0.0, 0.0, 0.0)
    assert math.isfinite(report.total_seconds)
