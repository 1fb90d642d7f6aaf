"""Command line entry points: ``metarmap`` and ``pixelsoff``."""

import argparse
import datetime
import logging
import signal
import sys

from metarmap import __version__
from metarmap.config import load_settings
from metarmap.display import create_display
from metarmap.driver import CycleDriver
from metarmap.errors import MetarMapError

log = logging.getLogger("metarmap")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose=False, log_file=None):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT, handlers=handlers)


def build_parser():
    parser = argparse.ArgumentParser(description="Show METAR flight categories on a NeoPixel LED map.")
    parser.add_argument("--config", help="JSON configuration file (default: ./config.json if present)")
    parser.add_argument("--airports", help="airports file, one ICAO id per LED (overrides AIRPORTS_FILE)")
    parser.add_argument("--continuous", action="store_true",
                        help="keep running, re-fetching every METAR_UPDATE_INTERVAL_MINUTES")
    parser.add_argument("--console", action="store_true", help="log LED colors instead of driving a strip")
    parser.add_argument("--log-file", help="also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every LED update")
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    return parser


def install_signal_handlers(driver):
    def handle(signum, frame):
        if driver.stopped:
            # Second signal: give up on a clean stop
            raise SystemExit(1)
        log.info("Received %s, stopping", signal.Signals(signum).name)
        driver.stop()

    signal.signal(signal.SIGINT, handle)
    signal.signal(signal.SIGTERM, handle)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    log.info("Running metarmap at %s", datetime.datetime.now().strftime("%d/%m/%Y %H:%M"))

    try:
        settings = load_settings(args.config, args.airports)
        display = create_display(settings, console=args.console)
    except MetarMapError as e:
        log.error("%s", e)
        return 1

    driver = CycleDriver(settings, display)
    install_signal_handlers(driver)
    status = 0
    try:
        if args.continuous:
            driver.run_forever()
        else:
            driver.run_once()
    except MetarMapError as e:
        log.error("%s", e)
        status = 1
    finally:
        # A finished cron run leaves its last frame lit until the next run
        if not driver.completed:
            driver.blank()
            display.deinit()
    log.info("Done")
    return status


def pixels_off(argv=None):
    """Turn every LED off."""
    parser = argparse.ArgumentParser(description="Turn off all METAR map LEDs.")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--airports", help="airports file")
    parser.add_argument("--console", action="store_true")
    args = parser.parse_args(argv)
    setup_logging()
    try:
        settings = load_settings(args.config, args.airports)
        display = create_display(settings, console=args.console)
    except MetarMapError as e:
        log.error("%s", e)
        return 1
    display.clear(settings.palette.clear)
    display.deinit()
    log.info("LEDs off")
    return 0


if __name__ == "__main__":
    sys.exit(main())
