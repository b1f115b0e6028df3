import argparse
import json
import logging
import sys
import traceback

from .exercise_analysis.base_analyzer import EXERCISE_ANALYZER_REGISTRY
from .pose_detection.recorded_source import RecordedLandmarkSource
from .session import ExerciseSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Arm Raise Coach - Recorded Landmark Analysis")
    parser.add_argument(
        "--recording",
        type=str,
        required=True,
        help="Path to a JSON file of recorded landmark frames"
    )
    parser.add_argument(
        "--exercise",
        type=str,
        default="arm_raises",
        choices=sorted(EXERCISE_ANALYZER_REGISTRY),
        help="Type of exercise to analyze"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config overriding the default thresholds"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for the analyzer and session loggers"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print one JSON object per analyzed frame"
    )
    return parser


def main(argv=None) -> int:
    """Replay a landmark recording through an exercise session."""
    args = build_parser().parse_args(argv)

    level = getattr(logging, args.log_level)
    for name in ("ArmRaiseAnalyzer", "ExerciseSession"):
        logging.getLogger(name).setLevel(level)

    try:
        source = RecordedLandmarkSource(args.recording)
        session = ExerciseSession(exercise_type=args.exercise, config_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    def report(output):
        result = output["result"]
        if result is None:
            return
        if args.json:
            print(json.dumps(result.to_dict(), ensure_ascii=False))
        elif result.phase_changed or output["rep_completed"]:
            print(f"[{result.phase.value:>8}] reps={result.rep_count} score={result.form_score} "
                  f"overlay={result.overlay_status} - {result.feedback}")

    print(f"Analyzing {len(source)} frames from {args.recording}...")
    try:
        progress = session.run(source, on_result=report)
    except Exception as e:
        print(f"Error during analysis: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1

    print(f"Analysis complete. Reps: {progress.rep_count}, final phase: {progress.current_phase.value}, "
          f"form score: {progress.form_score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
