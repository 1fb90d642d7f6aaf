"""The animation loop: paint every airport, flip the phase, sleep, repeat.

Bounded mode fetches once and animates for BLINK_TOTALTIME_SECONDS (the cron
job style). Continuous mode cycles FETCHING -> DISPLAYING forever and drops to
BACKOFF for RETRY_DELAY_SECONDS when a fetch or a display update fails.
"""

import logging
import time
from enum import Enum

from metarmap.brightness import current_brightness
from metarmap.colors import describe, legend_colors, resolve_color
from metarmap.conditions import build_conditions
from metarmap.state import export_state
from metarmap.weather import fetch_reports

log = logging.getLogger(__name__)

# Longest single sleep, so a stop request is seen quickly
WAIT_STEP = 0.25


class DriverState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Step(Enum):
    FETCHING = "fetching"
    DISPLAYING = "displaying"
    BACKOFF = "backoff"


def bounded_cycles(settings):
    if not settings.animated:
        return 1
    return max(1, int(round(settings.blink_totaltime_seconds / settings.blink_speed)))


def cycles_per_update(settings):
    return max(1, int(round(settings.metar_update_interval_minutes * 60 / settings.blink_speed)))


class CycleDriver:
    def __init__(self, settings, display, fetch=None, sleep=None):
        self.settings = settings
        self.display = display
        self.fetch = fetch or fetch_reports
        self.sleep = sleep or time.sleep
        self.state = DriverState.RUNNING
        self.conditions = {}
        # Set when a bounded run painted every tick without being stopped
        self.completed = False

    @property
    def stopped(self):
        return self.state is DriverState.STOPPED

    def stop(self):
        self.state = DriverState.STOPPED

    def wait(self, seconds):
        """Sleep in short steps; returns early once stopped."""
        remaining = seconds
        while remaining > 0 and not self.stopped:
            step = min(remaining, WAIT_STEP)
            self.sleep(step)
            remaining -= step

    # -----------------------------------------------------------------------
    def refresh(self):
        """Fetch new METARs and swap in the new condition map."""
        settings = self.settings
        self.display.set_brightness(current_brightness(settings))
        reports = self.fetch(settings.airport_codes, settings.metar_api_url, settings.metar_timeout_seconds)
        conditions = build_conditions(reports, settings.airports, settings)
        try:
            export_state(settings, conditions, reports)
        except OSError as e:
            log.error("Could not write state: %s", e)
        self.conditions = conditions
        return conditions

    def paint(self, conditions, wind_cycle):
        settings = self.settings
        for airport in settings.airports:
            condition = conditions.get(airport.code)
            color = resolve_color(condition, wind_cycle, settings)
            log.debug("Setting LED %d for %s to %s %s", airport.led, airport.code,
                      describe(condition, wind_cycle, settings), color)
            self.display.set_pixel(airport.led, color)

        if settings.show_legend:
            for offset, color in enumerate(legend_colors(wind_cycle, settings)):
                self.display.set_pixel(settings.legend_start + offset, color)

        self.display.show()

    def animate(self, conditions, cycles):
        """Paint ``cycles`` times, flipping the phase between ticks."""
        wind_cycle = False
        done = 0
        while done < cycles and not self.stopped:
            self.paint(conditions, wind_cycle)
            done += 1
            if done < cycles:
                self.wait(self.settings.blink_speed)
                wind_cycle = not wind_cycle
        return done

    # -----------------------------------------------------------------------
    def run_once(self):
        """Bounded mode. A failed fetch propagates to the caller."""
        conditions = self.refresh()
        cycles = bounded_cycles(self.settings)
        done = self.animate(conditions, cycles)
        log.info("Animation cycles completed: %d", done)
        self.completed = done == cycles and not self.stopped
        self.stop()
        return done

    def run_forever(self):
        step = Step.FETCHING
        updates = 0
        while not self.stopped:
            if step is Step.FETCHING:
                updates += 1
                log.info("Update cycle #%d", updates)
                try:
                    self.refresh()
                except Exception:
                    log.exception("Error in update cycle, waiting %s seconds before retry",
                                  self.settings.retry_delay_seconds)
                    step = Step.BACKOFF
                else:
                    step = Step.DISPLAYING
            elif step is Step.DISPLAYING:
                log.info("Animating for %s minutes", self.settings.metar_update_interval_minutes)
                try:
                    self.animate(self.conditions, cycles_per_update(self.settings))
                except Exception:
                    log.exception("Error updating the LEDs, waiting %s seconds before retry",
                                  self.settings.retry_delay_seconds)
                    step = Step.BACKOFF
                else:
                    step = Step.FETCHING
            else:
                self.wait(self.settings.retry_delay_seconds)
                step = Step.FETCHING

    def blank(self):
        """Best effort: every LED to the clear color."""
        try:
            self.display.clear(self.settings.palette.clear)
        except Exception:
            log.exception("Could not clear the LEDs")
