"""Export what the map is showing: a JSON state file and an optional JSON-lines history."""

import datetime
import json
import logging
import os
import tempfile

from metarmap.colors import resolve_color
from metarmap.flight_category import parse_visibility

log = logging.getLogger(__name__)


def utc_timestamp():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def build_state(settings, conditions, reports, timestamp=None):
    """State document for one fetch. Colors are the ones painted on the first tick."""
    by_station = {report.station_id: report for report in reports}
    airports = []
    for airport in settings.airports:
        condition = conditions.get(airport.code)
        report = by_station.get(airport.code)
        airports.append({
            "code": airport.code,
            "name": airport.name or airport.code,
            "led": airport.led,
            "flightCategory": condition.category.value if condition else "UNKNOWN",
            "color": list(resolve_color(condition, False, settings)),
            "windSpeed": condition.wind_speed if condition else 0,
            "windGustSpeed": condition.gust_speed if condition else 0,
            "windGust": condition.is_gusty if condition else False,
            "lightning": condition.has_lightning if condition else False,
            "visibility": parse_visibility(report.visibility) if report else None,
            "temperature": report.temp_c if report else None,
            "dewpoint": report.dewpoint_c if report else None,
            "altimeter": report.altim_hg if report else None,
            "rawMetar": report.raw_text if report else None,
            "obsTime": report.observation_time if report else None,
        })
    return {
        "timestamp": timestamp or utc_timestamp(),
        "airports": airports,
        "config": {"ledCount": settings.led_count, "activeCount": len(settings.airports)},
    }


def write_state(path, state):
    """Write the state file atomically (temp file in the same directory, then rename)."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".metar-state-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(state, f, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


def read_state(path):
    """The last written state, or None if there isn't one yet."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        return None


def history_entries(state):
    return [{
        "timestamp": state["timestamp"],
        "airport": airport["code"],
        "flightCategory": airport["flightCategory"],
        "windSpeed": airport["windSpeed"],
        "windGustSpeed": airport["windGustSpeed"],
        "lightning": airport["lightning"],
        "visibility": airport["visibility"],
        "temperature": airport["temperature"],
    } for airport in state["airports"]]


def append_history(path, entries):
    with open(path, "a") as f:
        for entry in entries:
            f.write(json.dumps(entry, separators=(",", ":")) + "\n")


def export_state(settings, conditions, reports):
    """Write the state file and history if they are configured."""
    if not settings.state_file_path and not settings.history_file_path:
        return None
    state = build_state(settings, conditions, reports)
    if settings.state_file_path:
        write_state(settings.state_file_path, state)
        log.info("State file written to %s", settings.state_file_path)
    if settings.history_file_path:
        entries = history_entries(state)
        append_history(settings.history_file_path, entries)
        log.info("Logged %d entries to %s", len(entries), settings.history_file_path)
    return state
