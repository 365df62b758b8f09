import argparse
from collections import Counter
import logging
from pathlib import Path
import signal
import sys
import threading

from autocrop.config_manager import ConfigManager
from autocrop.processing.accumulator import WindowAccumulator
from autocrop.processing.settings import AccumulationSettings
from autocrop.services.flush_scheduler import FlushScheduler
from autocrop.services.frame_source import FitsFrameSource
from autocrop.services.frame_writer import FitsFrameWriter
from autocrop.status import FrameOutcome
from autocrop.utils.file_naming import CropDestinationBuilder


def setup_logging(config: ConfigManager, log_level: str, debug: bool) -> None:
    log_cfg = config.get_logging_config()
    level_name = log_level or str(log_cfg.get("level", "INFO"))
    level = getattr(logging, level_name.upper(), logging.INFO)
    if debug:
        level = logging.DEBUG

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_cfg.get("log_to_file", False):
        handlers.append(logging.FileHandler(log_cfg.get("log_file", "autocrop.log"), encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def build_accumulator(config: ConfigManager, logger: logging.Logger) -> WindowAccumulator:
    out_cfg = config.get_output_config()
    writer = FitsFrameWriter(config=config, logger=logger)
    destinations = CropDestinationBuilder(
        subdir=out_cfg.get("crop_subdir", "crop"),
        output_dir=out_cfg.get("output_dir", "autocrop_frames"),
    )
    scheduler = FlushScheduler(writer, destination_builder=destinations, logger=logger)
    settings = AccumulationSettings.from_config(config)
    logger.info(f"Using {settings}")
    return WindowAccumulator(settings, scheduler, logger=logger)


def main(argv=None) -> int:
    """Command-line interface for cropped live-stacking of FITS captures."""
    parser = argparse.ArgumentParser(
        description="Crop and sum FITS captures into time-bounded stacks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process all frames already in a session directory
  python main_autocrop.py /data/2024-05-01/M51

  # Keep watching the directory while a session is running
  python main_autocrop.py /data/2024-05-01/M51 --watch --poll-interval 1

  # Crop the central quarter and stack up to 60 seconds per output file
  python main_autocrop.py /data/session --crop-fraction 0.25 --aggregation-window 60
        """,
    )
    parser.add_argument("input_dir", type=str, help="Directory containing FITS captures")
    parser.add_argument(
        "--config", "-c", type=str, default="config.yaml",
        help="Configuration file path (default: config.yaml)",
    )
    parser.add_argument("--crop-fraction", type=float, help="Crop fraction 0..1 (overrides config)")
    parser.add_argument(
        "--aggregation-window", type=float, help="Aggregation time in seconds, 0..120 (overrides config)"
    )
    parser.add_argument("--watch", "-w", action="store_true", help="Keep polling for new frames")
    parser.add_argument("--poll-interval", type=float, help="Polling interval in seconds for --watch")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: from config, INFO)",
    )
    args = parser.parse_args(argv)

    config = ConfigManager(args.config)
    if args.crop_fraction is not None:
        config.set("autocrop.crop_fraction", args.crop_fraction)
    if args.aggregation_window is not None:
        config.set("autocrop.aggregation_window_s", args.aggregation_window)

    setup_logging(config, args.log_level, args.debug)
    logger = logging.getLogger("autocrop")

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        logger.error(f"Input directory not found: {input_dir}")
        return 1

    accumulator = build_accumulator(config, logger)
    source = FitsFrameSource.from_config(input_dir, config, logger=logger)
    outcomes: Counter = Counter()

    def on_frame(frame):
        status = accumulator.on_frame(frame)
        outcomes[status.outcome] += 1
        if status.outcome is FrameOutcome.FLUSHED:
            print(f"Saved: {status.output_path}")
        elif status.is_error:
            print(f"Error: {status.message}")
        return status

    for frame in source.iter_frames():
        on_frame(frame)

    if args.watch:
        stop_event = threading.Event()

        def _stop(signum, frame):  # noqa: ARG001
            logger.info("Stopping watch...")
            stop_event.set()

        signal.signal(signal.SIGINT, _stop)
        poll = args.poll_interval
        if poll is None:
            poll = float(config.get("input.poll_interval_s", 2.0))
        source.watch(on_frame, stop_event, poll_interval_s=poll)

    window = accumulator.window
    if not window["is_empty"]:
        logger.info(f"{window['frame_count']} frame(s) left in an unfinished window, not saved")

    print("\nSummary:")
    print(f"  frames: {sum(outcomes.values())}")
    for outcome in FrameOutcome:
        if outcomes[outcome]:
            print(f"  {outcome.value}: {outcomes[outcome]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
