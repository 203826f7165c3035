from pathlib import Path

from estimator.config import EstimatorConfig, FeedUnit
from estimator.estimate_pipeline import estimate_file, estimate_files, estimate_source


GOOD = "FEEDRATE 600\nLASER ON\nMOVE Z 10\nLASER OFF\nMOVE Z 0\n"
NO_FEED = "MOVE X 5\n"


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_estimate_file(tmp_path):
    result = estimate_file(write(tmp_path, "part.gcode", GOOD))
    assert result.ok
    assert result.breakdown.total_seconds == 2.0
    assert result.missing_feed is None
    assert result.read_error is None


def test_missing_feed_is_reported_not_raised(tmp_path):
    result = estimate_file(write(tmp_path, "bad.gcode", NO_FEED))
    assert not result.ok
    assert result.breakdown is None
    assert result.missing_feed.line_number == 1


def test_unreadable_file(tmp_path):
    result = estimate_file(tmp_path / "missing.gcode")
    assert not result.ok
    assert result.read_error


def test_results_keep_input_order(tmp_path):
    paths = [
        write(tmp_path, "a.gcode", GOOD),
        write(tmp_path, "b.gcode", NO_FEED),
        tmp_path / "c.gcode",
        write(tmp_path, "d.gcode", "G1 X1 F60\n"),
    ]
    results = estimate_files(paths)
    assert [r.path for r in results] == paths
    assert [r.ok for r in results] == [True, False, False, True]
    assert results[3].breakdown.total_seconds == 1.0


def test_thread_pool_gives_same_results(tmp_path):
    paths = [write(tmp_path, f"{i}.gcode", f"G1 X{i + 1} F60\n") for i in range(6)]
    serial = estimate_files(paths)
    pooled = estimate_files(paths, jobs=3)
    assert [r.path for r in pooled] == paths
    assert [r.breakdown for r in pooled] == [r.breakdown for r in serial]


def test_string_paths_are_accepted(tmp_path):
    path = write(tmp_path, "a.gcode", GOOD)
    (result,) = estimate_files([str(path)])
    assert result.path == Path(path)


def test_config_is_passed_through():
    config = EstimatorConfig(feed_unit=FeedUnit.UM_PER_MIN)
    result = estimate_source(Path("moai.gcode"), "G1 X10 F600000\n", config)
    assert result.breakdown.total_seconds == 1.0
