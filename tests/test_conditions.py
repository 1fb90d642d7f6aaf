import pytest

from conftest import make_settings
from metarmap.conditions import build_conditions, detect_lightning, extract_condition
from metarmap.models import Airport, CloudCover, CloudLayer, FlightCategory, MetarReport


@pytest.mark.parametrize("raw, expected", [
    ("KSEA 121853Z 18012KT 10SM FEW050 12/06 A3002", False),
    ("KSEA 121853Z 18012KT 10SM TS FEW050CB 12/06 A3002", True),
    ("KSEA 121853Z 18012KT 10SM VCTS FEW050 12/06 A3002", True),
    ("KSEA 121853Z 18012KT 10SM FEW050 12/06 A3002 RMK LTG DSNT W", True),
    ("KSEA 121853Z 18012KT 10SM FEW050 12/06 A3002 RMK AO2 TSNO", False),
    ("KSEA 121853Z 18012KT 10SM +TSRA OVC020 12/06 A3002 RMK TSNO", False),
    ("", False),
    (None, False),
])
def test_detect_lightning(raw, expected):
    assert detect_lightning(raw) is expected


def test_station_id_is_not_searched():
    assert detect_lightning("KTSX 121853Z 00000KT 10SM CLR 12/06 A3002") is False
    assert detect_lightning("LTGX 121853Z 00000KT 10SM CLR 12/06 A3002") is False


def test_reported_category_is_used(settings):
    report = MetarReport("KSEA", flight_category="IFR", visibility="10+")
    assert extract_condition(report, settings).category is FlightCategory.IFR


def test_category_is_computed_when_missing(settings):
    report = MetarReport("KSEA", visibility="10+",
                         sky_conditions=(CloudLayer(CloudCover.BROKEN, 1500),))
    assert extract_condition(report, settings).category is FlightCategory.MVFR


def test_missing_visibility_gives_unknown(settings):
    report = MetarReport("KSEA", sky_conditions=(CloudLayer(CloudCover.OVERCAST, 5000),))
    assert extract_condition(report, settings).category is FlightCategory.UNKNOWN


def test_gust_above_threshold_is_gusty(settings):
    assert extract_condition(MetarReport("KSEA", wind_gust_speed=16), settings).is_gusty is True
    assert extract_condition(MetarReport("KSEA", wind_gust_speed=15), settings).is_gusty is False


def test_always_blink_for_gusts():
    settings = make_settings(ALWAYS_BLINK_FOR_GUSTS=True)
    assert extract_condition(MetarReport("KSEA", wind_gust_speed=5), settings).is_gusty is True
    assert extract_condition(MetarReport("KSEA", wind_gust_speed=0), settings).is_gusty is False


def test_condition_fields(settings):
    report = MetarReport("KSEA", raw_text="KSEA 121853Z 20018G28KT 10SM TS OVC030 12/06 A3002",
                         flight_category="VFR", wind_speed=18, wind_gust_speed=28)
    condition = extract_condition(report, settings)
    assert condition.wind_speed == 18
    assert condition.gust_speed == 28
    assert condition.is_gusty is True
    assert condition.has_lightning is True


def test_build_conditions_skips_missing_airports(settings):
    reports = [MetarReport("KSEA", flight_category="VFR"), MetarReport("KPAE", flight_category="LIFR")]
    conditions = build_conditions(reports, settings.airports, settings)
    assert set(conditions) == {"KSEA", "KPAE"}
    assert "KBFI" not in conditions
    assert conditions["KPAE"].category is FlightCategory.LIFR


def test_build_conditions_returns_a_new_map(settings):
    reports = [MetarReport("KSEA", flight_category="VFR")]
    first = build_conditions(reports, [Airport("KSEA", 0)], settings)
    second = build_conditions(reports, [Airport("KSEA", 0)], settings)
    assert first == second
    assert first is not second
