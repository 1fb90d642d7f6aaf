"""Daytime dimming: bright between sunrise and sunset (or fixed times), dim otherwise."""

import datetime
import logging

import astral.geocoder
import astral.sun

log = logging.getLogger(__name__)


def sun_times(location, date=None):
    """(sunrise, sunset) local times for a city in astral's database, or None."""
    try:
        city = astral.geocoder.lookup(location, astral.geocoder.database())
    except KeyError:
        log.error("Location %s not recognized, please check list of supported cities and reconfigure", location)
        return None
    try:
        sun = astral.sun.sun(city.observer, date=date or datetime.date.today(), tzinfo=city.timezone)
    except ValueError as e:
        # Polar day or night, the sun never crosses the horizon
        log.error("No sunrise/sunset for %s: %s", location, e)
        return None
    return sun["sunrise"].time(), sun["sunset"].time()


def is_bright_time(now, bright_start, dim_start):
    if dim_start < bright_start:
        # Bright period wraps past midnight
        return now >= bright_start or now < dim_start
    return bright_start <= now < dim_start


def bright_window(settings, date=None):
    if settings.use_sunrise_sunset:
        times = sun_times(settings.location, date)
        if times is not None:
            return times
    return settings.bright_time_start, settings.dim_time_start


def current_brightness(settings, now=None):
    if not settings.activate_daytime_dimming:
        return settings.led_brightness
    now = now or datetime.datetime.now()
    bright_start, dim_start = bright_window(settings, now.date())
    bright = is_bright_time(now.time(), bright_start, dim_start)
    brightness = settings.led_brightness if bright else settings.led_brightness_dim
    log.info("Bright:%s Dim:%s - %s mode (%d%%)", bright_start.strftime("%H:%M"),
             dim_start.strftime("%H:%M"), "Bright" if bright else "Dim", round(brightness * 100))
    return brightness
