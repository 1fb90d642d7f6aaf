"""Fetch METARs from aviationweather.gov and turn the XML into MetarReports."""

import logging
import socket
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET

from metarmap.errors import FetchError
from metarmap.models import CloudCover, CloudLayer, MetarReport

log = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; metarmap)"


# ---------------------------------------------------------------------------
# ----------- SAFE HELPERS --------------------------------------------------
# ---------------------------------------------------------------------------
def safe_text(element, default=""):
    """Return element.text if it exists and is not None, else default."""
    if element is not None and element.text is not None:
        return element.text
    return default


def safe_int(element, default=0):
    """Return int from element.text if possible, else default."""
    try:
        return int(round(float(safe_text(element, str(default)))))
    except (ValueError, TypeError):
        return default


def safe_float(element, default=None):
    """Return float from element.text if possible, else default."""
    text = safe_text(element, None)
    if text is None:
        return default
    try:
        return float(text)
    except (ValueError, TypeError):
        return default


# ---------------------------------------------------------------------------
# ----------- FETCH ---------------------------------------------------------
# ---------------------------------------------------------------------------
def build_url(base_url, airports):
    ids = ",".join(code for code in airports if code != "NULL")
    return (base_url + "?ids=" + ids +
            "&hoursBeforeNow=5&format=xml&mostRecent=true&mostRecentForEachStation=constraint")


def fetch_reports(airports, base_url, timeout=15):
    """Download and parse the latest METAR for each airport.

    Stations the service has nothing for are simply absent from the result.
    """
    codes = [code for code in airports if code != "NULL"]
    if not codes:
        raise FetchError("No airports to fetch")
    url = build_url(base_url, codes)
    log.info("Fetching METARs for %d airports", len(codes))
    log.debug(url)
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            content = response.read()
    except urllib.error.HTTPError as e:
        raise FetchError("API error: {} {}".format(e.code, e.reason)) from e
    except (socket.timeout, TimeoutError) as e:
        raise FetchError("Request timeout while fetching METAR data") from e
    except (urllib.error.URLError, OSError) as e:
        raise FetchError("Failed to fetch METAR data: {}".format(e)) from e
    reports = parse_reports(content)
    log.info("Received %d METAR reports", len(reports))
    return reports


# ---------------------------------------------------------------------------
# ----------- PARSE ---------------------------------------------------------
# ---------------------------------------------------------------------------
def parse_sky_conditions(metar):
    layers = []
    for sky in metar.iter("sky_condition"):
        cover = CloudCover.from_text(sky.get("sky_cover"))
        if cover is None:
            log.debug("Ignoring unknown sky cover %r", sky.get("sky_cover"))
            continue
        base = sky.get("cloud_base_ft_agl")
        try:
            base = int(base) if base is not None else None
        except ValueError:
            base = None
        if base is not None and base < 0:
            base = None
        layers.append(CloudLayer(cover=cover, base=base))
    return tuple(layers)


def parse_metar(metar):
    """Build a MetarReport from one <METAR> element. Missing fields get defaults."""
    visibility = metar.find("visibility_statute_mi")
    return MetarReport(
        station_id=safe_text(metar.find("station_id"), "UNKNOWN").strip().upper(),
        raw_text=safe_text(metar.find("raw_text"), ""),
        flight_category=safe_text(metar.find("flight_category"), None),
        wind_dir=safe_text(metar.find("wind_dir_degrees"), ""),
        wind_speed=max(0, safe_int(metar.find("wind_speed_kt"), 0)),
        wind_gust_speed=max(0, safe_int(metar.find("wind_gust_kt"), 0)),
        visibility=safe_text(visibility, None),
        sky_conditions=parse_sky_conditions(metar),
        temp_c=safe_float(metar.find("temp_c")),
        dewpoint_c=safe_float(metar.find("dewpoint_c")),
        altim_hg=safe_float(metar.find("altim_in_hg")),
        wx_string=safe_text(metar.find("wx_string"), ""),
        observation_time=safe_text(metar.find("observation_time"), None),
    )


def parse_reports(content):
    """Parse an aviationweather.gov XML response into a list of reports."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise FetchError("METAR response is not valid XML: {}".format(e)) from e
    if root.tag != "response" or root.find("data") is None:
        raise FetchError("METAR response has no data element")
    return [parse_metar(metar) for metar in root.iter("METAR")]
