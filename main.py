import argparse
import logging
import sys
from pathlib import Path

import constants.parameters as params
from plotting.altitude_plots import plot_altitude_profile
from telemetry_utils.playback import build_window_frames, log_window_frame
from telemetry_utils.telemetry_csv_parser import (
    TelemetryParseError,
    load_telemetry_windows,
)


def _configure_logging(log_level: str, log_file: str, console: bool) -> None:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers = [logging.FileHandler(log_path, mode="w")]
    if console:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    defaults = params.TelemetryParameters()
    default_method = next(
        name
        for name, method in params.CONVERSION_METHOD_NAMES.items()
        if method == defaults.conversion_method
    )
    parser = argparse.ArgumentParser(
        description="Segment spacecraft telemetry and convert positions to WGS84 geodetic"
    )
    parser.add_argument("telemetry_csv", help="Telemetry CSV file")
    parser.add_argument(
        "--threshold-ns",
        type=int,
        default=defaults.CHUNK_DURATION_NS,
        help="Largest gap inside one window in nanoseconds (default: 1 s)",
    )
    parser.add_argument(
        "--method",
        choices=sorted(params.CONVERSION_METHOD_NAMES),
        default=default_method,
        help=f"ECEF to geodetic algorithm (default: {default_method})",
    )
    parser.add_argument("--plot", help="Write an altitude profile HTML to this path")
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    parser.add_argument("--log-file", default=params.LOG_PATH, help="Log file path")
    parser.add_argument(
        "--log-console", action="store_true", help="Also log to the console"
    )
    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.log_level, args.log_file, args.log_console)
    logger = logging.getLogger("telemetry_playback")

    try:
        windows = load_telemetry_windows(args.telemetry_csv, args.threshold_ns)
    except TelemetryParseError as exc:
        print(f"Failed to load telemetry: {exc}")
        return 1

    if not windows:
        print("No telemetry samples found.")
        return 0

    method = params.CONVERSION_METHOD_NAMES[args.method]
    frames = list(build_window_frames(windows, method=method))

    invalid = 0
    for frame in frames:
        log_window_frame(logger, frame)
        if frame.altitude_m is None:
            invalid += 1
            altitude_text = f"-- ({frame.status.name})"
        else:
            altitude_text = f"{frame.altitude_m} m"
        print(
            f"[{frame.progress_pct:3d}%] T+{frame.elapsed} s  "
            f"alt {altitude_text}  speed {frame.mean_speed_mps:.1f} m/s"
        )

    num_samples = sum(len(window) for window in windows)
    print(f"Processed {num_samples} samples in {len(windows)} windows.")
    if invalid:
        print(f"{invalid} windows had no valid geodetic conversion.")

    if args.plot:
        plot_path = plot_altitude_profile(frames, output_html=args.plot)
        print(f"Saved altitude profile plot to {plot_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
