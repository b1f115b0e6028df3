"""Tests for the recording replay command line."""

import json

from arm_raise_coach.main import build_parser, main
from conftest import make_frame

LIFT_TRACE = [10, 10, 45, 70, 90, 95, 90, 70, 40, 10]


def _write_recording(tmp_path, repeat=5, dt=0.25):
    angles = [angle for angle in LIFT_TRACE for _ in range(repeat)]
    frames = [{"timestamp": i * dt, "landmarks": make_frame(angle)} for i, angle in enumerate(angles)]
    path = tmp_path / "session.json"
    path.write_text(json.dumps(frames))
    return str(path)


def test_parser_defaults():
    args = build_parser().parse_args(["--recording", "x.json"])
    assert args.exercise == "arm_raises"
    assert args.config is None
    assert args.json is False


def test_replay_counts_rep(tmp_path, capsys):
    recording = _write_recording(tmp_path)

    assert main(["--recording", recording]) == 0

    out = capsys.readouterr().out
    assert "Analyzing 50 frames" in out
    assert "[ holding]" in out
    assert "Analysis complete. Reps: 1, final phase: resting, form score: 100" in out


def test_json_output_has_one_object_per_frame(tmp_path, capsys):
    recording = _write_recording(tmp_path)

    assert main(["--recording", recording, "--json"]) == 0

    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    records = [json.loads(line) for line in lines]
    assert len(records) == 50
    assert records[-1]["rep_count"] == 1
    assert {r["phase"] for r in records} == {"resting", "raising", "holding", "lowering"}


def test_config_override(tmp_path, capsys):
    recording = _write_recording(tmp_path, repeat=1, dt=1.0)
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"smoothing_window": 1}))

    assert main(["--recording", recording, "--config", str(config)]) == 0
    assert "Reps: 1" in capsys.readouterr().out


def test_missing_recording_fails(tmp_path, capsys):
    assert main(["--recording", str(tmp_path / "none.json")]) == 1
    assert "Recording not found" in capsys.readouterr().err


def test_bad_config_fails(tmp_path, capsys):
    recording = _write_recording(tmp_path)
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"smoothing_window": 0}))

    assert main(["--recording", recording, "--config", str(config)]) == 1


def test_named_landmark_recording(tmp_path, capsys):
    frames = [
        {"timestamp": float(i), "landmarks": [dict(zip(("x", "y", "z", "visibility"), p)) for p in make_frame(angle)]}
        for i, angle in enumerate(LIFT_TRACE)
    ]
    recording = tmp_path / "named.json"
    recording.write_text(json.dumps(frames))
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"smoothing_window": 1}))

    assert main(["--recording", str(recording), "--config", str(config)]) == 0
    assert "Reps: 1" in capsys.readouterr().out


def test_misplaced_config_key_does_not_crash(tmp_path, capsys):
    recording = _write_recording(tmp_path)
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"phase_thresholds": {"smoothing_window": 3}}))

    assert main(["--recording", recording, "--config", str(config)]) == 0
    assert "Reps: 1" in capsys.readouterr().out
