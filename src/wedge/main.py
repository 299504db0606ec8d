import argparse
import json
import logging
import signal
import sys
import threading
import time

# Local package imports
from .aggregator import AggregatorConfig, KeystrokeAggregator
from .config import OUTPUT_FORMATS, load_config, merge_cli_args
from .input_manager import EvdevKeySource
from .policies import POLICIES
from .scheduler import PollingScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

EXIT_NO_DEVICE = 1
EXIT_BAD_CONFIG = 2


# Set by the signal handler, checked once per loop pass.
stop_requested = threading.Event()


def signal_handler(sig, frame):
    """
    Handles SIGINT/SIGTERM for a graceful exit.
    """
    logger.debug(f"Signal {sig} received.")
    stop_requested.set()


def parse_arguments(argv=None):
    """
    Parses command line arguments.

    Options left unset are None so that wedge.yaml values apply.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="wedge - prints barcodes typed by keyboard wedge scanners"
    )

    parser.add_argument(
        "--buffer-ms",
        dest="buffer_ms",
        type=int,
        help="Max time in ms between two characters of one scan (default: 100)"
    )

    parser.add_argument(
        "--key-down",
        dest="use_key_down",
        action="store_true",
        default=None,
        help="Read characters from key presses instead of releases"
    )

    parser.add_argument(
        "--mode",
        dest="termination",
        choices=sorted(POLICIES),
        help="How the end of a scan is detected (default: count)"
    )

    parser.add_argument(
        "--min-length",
        dest="min_length",
        type=int,
        help="Shortest barcode reported in count mode (default: 4)"
    )

    parser.add_argument(
        "--terminator",
        type=str,
        help="End-of-scan character in terminator mode (default: m)"
    )

    parser.add_argument(
        "--device",
        type=str,
        help="Only listen to keyboards whose name contains this text"
    )

    parser.add_argument(
        "--output",
        choices=OUTPUT_FORMATS,
        help="Output format (default: plain)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose logging (DEBUG level)"
    )

    return parser.parse_args(argv)


def format_token(token, output, when=None):
    """
    Renders a token for stdout.

    Args:
        token (str): The barcode.
        output (str): 'plain' or 'json'.
        when (float, optional): Wall clock time of the scan.
    """
    if output == "json":
        return json.dumps({
            "barcode": token,
            "time": when if when is not None else time.time()
        })
    return token


def make_printer(output, stream=None):
    """Returns a token callback that writes one line per barcode."""
    def emit(token):
        out = stream or sys.stdout
        out.write(format_token(token, output) + "\n")
        out.flush()
    return emit


def run(source, scheduler, aggregator, on_token, poll_interval,
        stop_event=None):
    """
    Drives the key source and scheduler on the current thread until stopped.

    Queued key events are dispatched before due timers run, so characters
    that arrived before a scan's deadline still join it. A character that
    arrived after the deadline finishes the previous scan itself.

    Args:
        stop_event (threading.Event, optional): Ends the loop once set.
            Defaults to the flag set by the signal handler.
    """
    if stop_event is None:
        stop_event = stop_requested
    aggregator.start(on_token)
    try:
        while not stop_event.is_set():
            source.pump()
            scheduler.run_due()
            time.sleep(poll_interval)
        logger.info("Stopping.")
    except KeyboardInterrupt:
        logger.info("Stopping.")
    finally:
        aggregator.stop()
        source.stop()


def check_settings(cfg):
    """
    Validates the settings not covered by AggregatorConfig.

    Returns:
        str or None: A description of the first problem found.
    """
    if cfg["output"] not in OUTPUT_FORMATS:
        return f"Invalid output format: {cfg['output']!r}"
    poll_ms = cfg["poll_ms"]
    if (isinstance(poll_ms, bool) or not isinstance(poll_ms, (int, float))
            or poll_ms < 0):
        return f"poll_ms must be a non-negative number, got {poll_ms!r}"
    if cfg["device"] is not None and not isinstance(cfg["device"], str):
        return f"device must be text, got {cfg['device']!r}"
    return None


def main(argv=None):
    """
    Main entry point of the application.
    """
    stop_requested.clear()
    args = parse_arguments(argv)
    cfg = merge_cli_args(load_config(), args)

    if cfg["verbose"]:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose mode activated.")

    try:
        agg_config = AggregatorConfig.from_dict(cfg)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_BAD_CONFIG

    problem = check_settings(cfg)
    if problem:
        logger.error(problem)
        return EXIT_BAD_CONFIG

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    source = EvdevKeySource(device_filter=cfg["device"])
    scheduler = PollingScheduler()
    aggregator = KeystrokeAggregator(source, scheduler, agg_config)

    if not source.start():
        return EXIT_NO_DEVICE

    logger.info(f"Listening for barcodes ({agg_config.termination} mode, "
                f"{agg_config.buffer_ms} ms window). Press Ctrl+C to quit.")
    run(source, scheduler, aggregator, make_printer(cfg["output"]),
        cfg["poll_ms"] / 1000.0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
