#!/usr/bin/env python3
"""Run the METAR map. Same as the ``metarmap`` command, handy for cron."""

import sys

from metarmap.cli import main

if __name__ == "__main__":
    sys.exit(main())
