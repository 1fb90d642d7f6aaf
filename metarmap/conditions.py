"""Turn raw METAR reports into per-airport display conditions."""

import logging

from metarmap.flight_category import classify, parse_visibility
from metarmap.models import Condition, FlightCategory

log = logging.getLogger(__name__)


def detect_lightning(raw_text):
    """True if the observation reports lightning (LTG) or a thunderstorm (TS).

    The first 4 characters are the station id and are skipped. TSNO means the
    thunderstorm sensor is out, which is not lightning.
    """
    if not raw_text or "TSNO" in raw_text:
        return False
    return raw_text.find("LTG", 4) != -1 or raw_text.find("TS", 4) != -1


def is_gusty(gust_speed, settings):
    return ((settings.always_blink_for_gusts and gust_speed > 0) or
            gust_speed > settings.wind_blink_threshold)


def report_category(report):
    """The reported flight category, or one computed from visibility and clouds."""
    category = FlightCategory.from_text(report.flight_category)
    if category is not FlightCategory.UNKNOWN:
        return category
    category = classify(parse_visibility(report.visibility), report.sky_conditions)
    if category is FlightCategory.UNKNOWN:
        log.info("%s: Unable to determine flight category (missing data)", report.station_id)
    else:
        log.debug("%s: Calculated flight category: %s", report.station_id, category.value)
    return category


def extract_condition(report, settings):
    gust_speed = report.wind_gust_speed or 0
    return Condition(
        category=report_category(report),
        wind_speed=report.wind_speed or 0,
        gust_speed=gust_speed,
        is_gusty=is_gusty(gust_speed, settings),
        has_lightning=detect_lightning(report.raw_text),
    )


def build_conditions(reports, airports, settings):
    """Return a fresh {station: Condition} map for one fetch.

    Airports the source said nothing about get no entry.
    """
    conditions = {}
    for report in reports:
        condition = extract_condition(report, settings)
        conditions[report.station_id] = condition
        log.info("%s:%s:%s@%s%s:%sSM:%s:%s",
                 report.station_id, condition.category.value, report.wind_dir,
                 condition.wind_speed, ("G" + str(condition.gust_speed)) if condition.is_gusty else "",
                 report.visibility, report.wx_string, "LTG" if condition.has_lightning else "")

    missing = [a.code for a in airports if a.code not in conditions]
    if missing:
        log.warning("No METAR data for: %s", ", ".join(missing))
    return conditions
