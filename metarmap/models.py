"""Value types shared by the parser, resolver and driver."""

from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum


class FlightCategory(Enum):
    VFR = "VFR"
    MVFR = "MVFR"
    IFR = "IFR"
    LIFR = "LIFR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_text(cls, text):
        """Map an API flight_category string to a category, UNKNOWN if unrecognised."""
        if not text:
            return cls.UNKNOWN
        try:
            return cls(text.strip().upper())
        except ValueError:
            return cls.UNKNOWN


# Severity order, most to least permissive
SEVERITY = (FlightCategory.VFR, FlightCategory.MVFR, FlightCategory.IFR, FlightCategory.LIFR)


class CloudCover(Enum):
    CLEAR = "CLR"
    FEW = "FEW"
    SCATTERED = "SCT"
    BROKEN = "BKN"
    OVERCAST = "OVC"
    OBSCURED = "OVX"

    @classmethod
    def from_text(cls, text):
        """Map a sky_cover code to a cover, None for codes we don't know."""
        text = (text or "").strip().upper()
        if text in ("SKC", "CAVOK", "NSC", "NCD"):
            return cls.CLEAR
        if text == "VV":
            return cls.OBSCURED
        try:
            return cls(text)
        except ValueError:
            return None


CEILING_COVERS = frozenset((CloudCover.BROKEN, CloudCover.OVERCAST, CloudCover.OBSCURED))


class Color(namedtuple("Color", "r g b")):
    """An RGB triple. Being a tuple it can be handed straight to neopixel."""

    __slots__ = ()

    def __str__(self):
        return "({},{},{})".format(self.r, self.g, self.b)


@dataclass(frozen=True)
class CloudLayer:
    cover: CloudCover
    base: int = None


@dataclass(frozen=True)
class MetarReport:
    """One observation as delivered by the data source."""

    station_id: str
    raw_text: str = ""
    flight_category: str = None
    wind_dir: str = ""
    wind_speed: int = 0
    wind_gust_speed: int = 0
    visibility: object = None
    sky_conditions: tuple = field(default_factory=tuple)
    temp_c: float = None
    dewpoint_c: float = None
    altim_hg: float = None
    wx_string: str = ""
    observation_time: str = None


@dataclass(frozen=True)
class Condition:
    category: FlightCategory
    wind_speed: int = 0
    gust_speed: int = 0
    is_gusty: bool = False
    has_lightning: bool = False


@dataclass(frozen=True)
class Airport:
    code: str
    led: int
    name: str = None
