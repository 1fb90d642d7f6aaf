#!/usr/bin/env python3
"""Turn all LEDs off, e.g. from a nightly cron job."""

import sys

from metarmap.cli import pixels_off

if __name__ == "__main__":
    sys.exit(pixels_off())
