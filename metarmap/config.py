"""Load and validate the map configuration.

Settings come from an optional JSON file whose keys are the classic METARMap
constant names (LED_COUNT, COLOR_VFR, ...). Anything left out uses the default
below. Every problem found here is a ConfigError: nothing gets defaulted once
the map is running.
"""

import datetime
import json
import logging
import os
from dataclasses import dataclass

from metarmap.colors import LEGEND_SIZE
from metarmap.errors import ConfigError
from metarmap.models import Airport, Color, FlightCategory

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# -------------------- DEFAULT CONFIGURATION --------------------------------
# ---------------------------------------------------------------------------
DEFAULTS = {
    # NeoPixel LED Configuration
    "LED_COUNT": 50,
    "LED_PIN": "D18",           # board pin name (18 is PCM)
    "LED_ORDER": "GRB",         # Strip type and colour ordering
    "LED_BRIGHTNESS": 0.5,      # Float from 0.0 (min) to 1.0 (max)
    "LED_BRIGHTNESS_DIM": 0.1,

    # Colors, GRB strips show (255,0,0) as green
    "COLOR_VFR": [255, 0, 0],
    "COLOR_VFR_FADE": [125, 0, 0],
    "COLOR_MVFR": [0, 0, 255],
    "COLOR_MVFR_FADE": [0, 0, 125],
    "COLOR_IFR": [0, 255, 0],
    "COLOR_IFR_FADE": [0, 125, 0],
    "COLOR_LIFR": [0, 125, 125],
    "COLOR_LIFR_FADE": [0, 75, 75],
    "COLOR_CLEAR": [0, 0, 0],
    "COLOR_LIGHTNING": [255, 255, 255],
    "COLOR_HIGH_WINDS": [255, 255, 0],

    # Blink/Fade functionality for Wind and Lightning
    "ACTIVATE_WINDCONDITION_ANIMATION": True,
    "ACTIVATE_LIGHTNING_ANIMATION": True,
    "FADE_INSTEAD_OF_BLINK": True,
    "WIND_BLINK_THRESHOLD": 15,
    "HIGH_WINDS_THRESHOLD": 25,     # null (or the old -1) turns high winds off
    "ALWAYS_BLINK_FOR_GUSTS": False,
    "BLINK_SPEED": 1.0,
    "BLINK_TOTALTIME_SECONDS": 300,

    # Daytime dimming of LEDs based on time of day or Sunrise/Sunset
    "ACTIVATE_DAYTIME_DIMMING": False,
    "BRIGHT_TIME_START": "07:00",
    "DIM_TIME_START": "19:00",
    "USE_SUNRISE_SUNSET": True,
    "LOCATION": "Seattle",

    # Legend
    "SHOW_LEGEND": True,
    "OFFSET_LEGEND_BY": 0,

    # Data source and continuous mode
    "METAR_API_URL": "https://aviationweather.gov/api/data/metar",
    "METAR_TIMEOUT_SECONDS": 15,
    "METAR_UPDATE_INTERVAL_MINUTES": 5,
    "RETRY_DELAY_SECONDS": 60,

    # Files
    "AIRPORTS_FILE": "/home/pi/metar/airports",
    "STATE_FILE_PATH": None,
    "HISTORY_FILE_PATH": None,
}

LED_ORDERS = ("RGB", "GRB", "RGBW", "GRBW")
HIGH_WINDS_DISABLED = -1


@dataclass(frozen=True)
class Palette:
    """Every color the resolver can hand out.

    ``normal`` and ``faded`` must cover all four flight categories.
    """

    normal: dict
    faded: dict
    clear: Color
    lightning: Color
    high_winds: Color

    def __post_init__(self):
        for name, mapping in (("normal", self.normal), ("faded", self.faded)):
            missing = [c.value for c in FlightCategory if c is not FlightCategory.UNKNOWN and c not in mapping]
            if missing:
                raise ConfigError("Palette has no {} color for {}".format(name, ", ".join(missing)))
            if FlightCategory.UNKNOWN in mapping:
                raise ConfigError("Palette must not define a {} color for UNKNOWN".format(name))

    @property
    def vfr(self):
        return self.normal[FlightCategory.VFR]


@dataclass(frozen=True)
class Settings:
    palette: Palette
    airports: tuple = ()
    airport_slots: int = 0
    led_count: int = 50
    led_pin: str = "D18"
    led_order: str = "GRB"
    led_brightness: float = 0.5
    led_brightness_dim: float = 0.1
    activate_wind_animation: bool = True
    activate_lightning_animation: bool = True
    fade_instead_of_blink: bool = True
    wind_blink_threshold: float = 15
    high_winds_threshold: float = 25
    always_blink_for_gusts: bool = False
    blink_speed: float = 1.0
    blink_totaltime_seconds: float = 300
    activate_daytime_dimming: bool = False
    bright_time_start: datetime.time = datetime.time(7, 0)
    dim_time_start: datetime.time = datetime.time(19, 0)
    use_sunrise_sunset: bool = True
    location: str = "Seattle"
    show_legend: bool = True
    offset_legend_by: int = 0
    metar_api_url: str = DEFAULTS["METAR_API_URL"]
    metar_timeout_seconds: float = 15
    metar_update_interval_minutes: float = 5
    retry_delay_seconds: float = 60
    airports_file: str = None
    state_file_path: str = None
    history_file_path: str = None

    @property
    def legend_start(self):
        return self.airport_slots + self.offset_legend_by

    @property
    def airport_codes(self):
        return [a.code for a in self.airports]

    @property
    def animated(self):
        return self.activate_wind_animation or self.activate_lightning_animation


# ---------------------------------------------------------------------------
# ----------- VALUE CHECKS --------------------------------------------------
# ---------------------------------------------------------------------------
def parse_color(key, value):
    """'255,0,0' or [255, 0, 0] -> Color."""
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",")]
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigError("{} must be three values r,g,b: {!r}".format(key, value))
    channels = []
    for channel in value:
        if isinstance(channel, bool):
            raise ConfigError("{} has a non-numeric value: {!r}".format(key, value))
        try:
            number = int(channel)
        except (TypeError, ValueError):
            raise ConfigError("{} has a non-numeric value: {!r}".format(key, value)) from None
        if number != float(channel) or not 0 <= number <= 255:
            raise ConfigError("{} values must be integers 0-255: {!r}".format(key, value))
        channels.append(number)
    return Color(*channels)


def _number(raw, key, minimum=None, positive=False, maximum=None):
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError("{} must be a number: {!r}".format(key, value))
    if positive and value <= 0:
        raise ConfigError("{} must be positive: {}".format(key, value))
    if minimum is not None and value < minimum:
        raise ConfigError("{} must be at least {}: {}".format(key, minimum, value))
    if maximum is not None and value > maximum:
        raise ConfigError("{} must be at most {}: {}".format(key, maximum, value))
    return value


def _integer(raw, key, **kwargs):
    value = _number(raw, key, **kwargs)
    if int(value) != value:
        raise ConfigError("{} must be a whole number: {}".format(key, value))
    return int(value)


def _bool(raw, key):
    value = raw[key]
    if not isinstance(value, bool):
        raise ConfigError("{} must be true or false: {!r}".format(key, value))
    return value


def _string(raw, key, optional=False):
    value = raw[key]
    if value is None and optional:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigError("{} must be a non-empty string: {!r}".format(key, value))
    return value


def _time(raw, key):
    value = raw[key]
    try:
        return datetime.datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        raise ConfigError("{} must be HH:MM (24-hour): {!r}".format(key, value)) from None


def _high_winds(raw):
    value = raw["HIGH_WINDS_THRESHOLD"]
    if value is None or value == HIGH_WINDS_DISABLED:
        return None
    return _number(raw, "HIGH_WINDS_THRESHOLD", minimum=0)


def build_palette(raw):
    def color(key):
        return parse_color(key, raw[key])

    return Palette(
        normal={
            FlightCategory.VFR: color("COLOR_VFR"),
            FlightCategory.MVFR: color("COLOR_MVFR"),
            FlightCategory.IFR: color("COLOR_IFR"),
            FlightCategory.LIFR: color("COLOR_LIFR"),
        },
        faded={
            FlightCategory.VFR: color("COLOR_VFR_FADE"),
            FlightCategory.MVFR: color("COLOR_MVFR_FADE"),
            FlightCategory.IFR: color("COLOR_IFR_FADE"),
            FlightCategory.LIFR: color("COLOR_LIFR_FADE"),
        },
        clear=color("COLOR_CLEAR"),
        lightning=color("COLOR_LIGHTNING"),
        high_winds=color("COLOR_HIGH_WINDS"),
    )


# ---------------------------------------------------------------------------
# ----------- AIRPORTS ------------------------------------------------------
# ---------------------------------------------------------------------------
def parse_airports(lines):
    """One ICAO id per line, the line number is the LED index.

    NULL keeps that LED dark. Returns (airports, number of LED slots used).
    """
    codes = [line.strip().upper() for line in lines]
    while codes and not codes[-1]:
        codes.pop()
    airports = []
    seen = {}
    for index, code in enumerate(codes):
        if not code or code == "NULL":
            continue
        if code in seen:
            raise ConfigError("Airport {} listed twice (LEDs {} and {})".format(code, seen[code], index))
        seen[code] = index
        airports.append(Airport(code=code, led=index))
    return tuple(airports), len(codes)


def parse_airports_json(data):
    """The airports.json layout, with an explicit LED per airport.

    {"version": "1.0", "airports": [{"code": "KSEA", "led": 0, "name": "Seattle-Tacoma",
    "enabled": true}, ...]}. Disabled entries keep their LED dark.
    """
    if not isinstance(data, dict) or not isinstance(data.get("airports"), list):
        raise ConfigError('Airports JSON must be an object with an "airports" list')
    if data.get("version", "1.0") != "1.0":
        log.warning("Unknown airports file version: %s", data.get("version"))

    airports = []
    slots = 0
    codes = {}
    leds = {}
    for entry in data["airports"]:
        if not isinstance(entry, dict):
            raise ConfigError("Airport entry must be an object: {!r}".format(entry))
        code = entry.get("code")
        if not isinstance(code, str) or not code.strip():
            raise ConfigError("Airport entry has no code: {!r}".format(entry))
        code = code.strip().upper()
        led = entry.get("led")
        if isinstance(led, bool) or not isinstance(led, int) or led < 0:
            raise ConfigError("Invalid LED index for {}: {!r}".format(code, led))
        name = entry.get("name")
        if name is not None and not isinstance(name, str):
            raise ConfigError("Airport name for {} must be a string: {!r}".format(code, name))
        slots = max(slots, led + 1)
        if entry.get("enabled", True) is False:
            continue
        if led in leds:
            raise ConfigError("LED {} assigned to multiple airports: {} and {}".format(led, leds[led], code))
        if code in codes:
            raise ConfigError("Airport {} listed twice (LEDs {} and {})".format(code, codes[code], led))
        leds[led] = code
        codes[code] = led
        airports.append(Airport(code=code, led=led, name=name))
    return tuple(airports), slots


def read_airports(path):
    """Read the airports file: JSON when it ends in .json, one id per line otherwise."""
    try:
        with open(path) as f:
            if path.lower().endswith(".json"):
                return parse_airports_json(json.load(f))
            return parse_airports(f.readlines())
    except OSError as e:
        raise ConfigError("Cannot read airports file {}: {}".format(path, e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError("Airports file {} is not valid JSON: {}".format(path, e)) from e


# ---------------------------------------------------------------------------
# ----------- LOAD ----------------------------------------------------------
# ---------------------------------------------------------------------------
def read_config_file(path):
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError("Cannot read config file {}: {}".format(path, e)) from e
    except json.JSONDecodeError as e:
        raise ConfigError("Config file {} is not valid JSON: {}".format(path, e)) from e
    if not isinstance(data, dict):
        raise ConfigError("Config file {} must hold a JSON object".format(path))
    return data


def build_settings(overrides=None, airports=None, airport_slots=None):
    """Validate ``overrides`` on top of DEFAULTS.

    ``airports`` may be given directly (a sequence of ICAO ids, LED index =
    position); otherwise AIRPORTS_FILE is read.
    """
    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - set(DEFAULTS))
    if unknown:
        raise ConfigError("Unknown configuration keys: {}".format(", ".join(unknown)))
    raw = dict(DEFAULTS, **overrides)

    if airports is None:
        airports, airport_slots = read_airports(_string(raw, "AIRPORTS_FILE"))
    elif airport_slots is None:
        airports, airport_slots = parse_airports(airports)

    led_order = _string(raw, "LED_ORDER").upper()
    if led_order not in LED_ORDERS:
        raise ConfigError("LED_ORDER must be one of {}: {}".format(", ".join(LED_ORDERS), led_order))

    settings = Settings(
        palette=build_palette(raw),
        airports=tuple(airports),
        airport_slots=airport_slots,
        led_count=_integer(raw, "LED_COUNT", positive=True),
        led_pin=_string(raw, "LED_PIN"),
        led_order=led_order,
        led_brightness=_number(raw, "LED_BRIGHTNESS", minimum=0, maximum=1),
        led_brightness_dim=_number(raw, "LED_BRIGHTNESS_DIM", minimum=0, maximum=1),
        activate_wind_animation=_bool(raw, "ACTIVATE_WINDCONDITION_ANIMATION"),
        activate_lightning_animation=_bool(raw, "ACTIVATE_LIGHTNING_ANIMATION"),
        fade_instead_of_blink=_bool(raw, "FADE_INSTEAD_OF_BLINK"),
        wind_blink_threshold=_number(raw, "WIND_BLINK_THRESHOLD", minimum=0),
        high_winds_threshold=_high_winds(raw),
        always_blink_for_gusts=_bool(raw, "ALWAYS_BLINK_FOR_GUSTS"),
        blink_speed=_number(raw, "BLINK_SPEED", positive=True),
        blink_totaltime_seconds=_number(raw, "BLINK_TOTALTIME_SECONDS", positive=True),
        activate_daytime_dimming=_bool(raw, "ACTIVATE_DAYTIME_DIMMING"),
        bright_time_start=_time(raw, "BRIGHT_TIME_START"),
        dim_time_start=_time(raw, "DIM_TIME_START"),
        use_sunrise_sunset=_bool(raw, "USE_SUNRISE_SUNSET"),
        location=_string(raw, "LOCATION"),
        show_legend=_bool(raw, "SHOW_LEGEND"),
        offset_legend_by=_integer(raw, "OFFSET_LEGEND_BY", minimum=0),
        metar_api_url=_string(raw, "METAR_API_URL"),
        metar_timeout_seconds=_number(raw, "METAR_TIMEOUT_SECONDS", positive=True),
        metar_update_interval_minutes=_number(raw, "METAR_UPDATE_INTERVAL_MINUTES", positive=True),
        retry_delay_seconds=_number(raw, "RETRY_DELAY_SECONDS", minimum=0),
        airports_file=_string(raw, "AIRPORTS_FILE", optional=True),
        state_file_path=_string(raw, "STATE_FILE_PATH", optional=True),
        history_file_path=_string(raw, "HISTORY_FILE_PATH", optional=True),
    )
    check_layout(settings)
    return settings


def check_layout(settings):
    if not settings.airports:
        raise ConfigError("No airports configured")
    if settings.airport_slots > settings.led_count:
        raise ConfigError("Too many airports in airports file, please increase LED_COUNT or reduce "
                          "the number of airports (airports: {} LED_COUNT: {})".format(
                              settings.airport_slots, settings.led_count))
    if settings.show_legend and settings.legend_start + LEGEND_SIZE > settings.led_count:
        raise ConfigError("Legend needs LEDs {}-{} but LED_COUNT is {}".format(
            settings.legend_start, settings.legend_start + LEGEND_SIZE - 1, settings.led_count))


def load_settings(config_path=None, airports_path=None):
    """Read the JSON config (if any) and the airports file into Settings."""
    overrides = {}
    if config_path is not None:
        overrides = read_config_file(config_path)
        log.info("Loaded configuration from %s", config_path)
    elif os.path.exists("config.json"):
        overrides = read_config_file("config.json")
        log.info("Loaded configuration from config.json")
    if airports_path is not None:
        overrides["AIRPORTS_FILE"] = airports_path
    settings = build_settings(overrides)
    log.info("Airports: %d LED_COUNT: %d", len(settings.airports), settings.led_count)
    log.info("Wind animation: %s", settings.activate_wind_animation)
    log.info("Lightning animation: %s", settings.activate_lightning_animation)
    log.info("Daytime Dimming: %s%s", settings.activate_daytime_dimming,
             " using Sunrise/Sunset" if settings.use_sunrise_sunset and settings.activate_daytime_dimming else "")
    log.info("Show legend: %s", settings.show_legend)
    return settings
