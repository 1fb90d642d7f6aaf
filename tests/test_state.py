import json

from conftest import make_settings
from metarmap.config import build_settings
from metarmap.models import Airport, Condition, FlightCategory, MetarReport
from metarmap.state import (append_history, build_state, export_state, history_entries, read_state,
                            write_state)

REPORTS = [MetarReport("KSEA", raw_text="KSEA 121853Z 18012KT 10SM FEW050 12/06 A3002",
                       flight_category="VFR", wind_speed=12, visibility="10+", temp_c=12.0,
                       dewpoint_c=6.0, altim_hg=30.02, observation_time="2024-03-12T18:53:00Z")]
CONDITIONS = {"KSEA": Condition(FlightCategory.VFR, wind_speed=12)}


def test_build_state(settings):
    state = build_state(settings, CONDITIONS, REPORTS, timestamp="2024-03-12T19:00:00+00:00")
    assert state["timestamp"] == "2024-03-12T19:00:00+00:00"
    assert state["config"] == {"ledCount": 50, "activeCount": 3}
    sea, bfi = state["airports"][:2]
    assert sea["flightCategory"] == "VFR"
    assert sea["color"] == [255, 0, 0]
    assert sea["visibility"] == 10.0
    assert sea["rawMetar"].startswith("KSEA")
    assert bfi["flightCategory"] == "UNKNOWN"
    assert bfi["color"] == [0, 0, 0]
    assert bfi["rawMetar"] is None


def test_state_round_trip(tmp_path, settings):
    path = tmp_path / "metar-state.json"
    state = build_state(settings, CONDITIONS, REPORTS)
    write_state(str(path), state)
    assert read_state(str(path)) == state
    assert [p.name for p in tmp_path.iterdir()] == ["metar-state.json"]


def test_write_state_replaces_existing(tmp_path, settings):
    path = tmp_path / "metar-state.json"
    path.write_text("old")
    state = build_state(settings, {}, [])
    write_state(str(path), state)
    assert read_state(str(path)) == state


def test_read_missing_state(tmp_path):
    assert read_state(str(tmp_path / "nothing.json")) is None


def test_history_is_appended(tmp_path, settings):
    path = tmp_path / "history.log"
    state = build_state(settings, CONDITIONS, REPORTS, timestamp="t1")
    append_history(str(path), history_entries(state))
    append_history(str(path), history_entries(state))
    lines = path.read_text().splitlines()
    assert len(lines) == 6
    first = json.loads(lines[0])
    assert first == {"timestamp": "t1", "airport": "KSEA", "flightCategory": "VFR", "windSpeed": 12,
                     "windGustSpeed": 0, "lightning": False, "visibility": 10.0, "temperature": 12.0}
    assert " " not in lines[0]


def test_export_state_only_when_configured(tmp_path, settings):
    assert export_state(settings, CONDITIONS, REPORTS) is None

    configured = make_settings(STATE_FILE_PATH=str(tmp_path / "state.json"),
                               HISTORY_FILE_PATH=str(tmp_path / "history.log"))
    state = export_state(configured, CONDITIONS, REPORTS)
    assert read_state(str(tmp_path / "state.json")) == state
    assert len((tmp_path / "history.log").read_text().splitlines()) == 3


def test_airport_name_is_exported():
    airports = (Airport("KSEA", 0, name="Seattle-Tacoma"), Airport("KBFI", 1))
    settings = build_settings({}, airports=airports, airport_slots=2)
    sea, bfi = build_state(settings, CONDITIONS, REPORTS)["airports"]
    assert sea["name"] == "Seattle-Tacoma"
    assert bfi["name"] == "KBFI"


def test_zero_visibility_is_exported_as_zero(settings):
    fog = [MetarReport("KSEA", raw_text="KSEA 121853Z 00000KT 0SM FG VV001 08/08 A3002",
                       flight_category="LIFR", visibility="0")]
    conditions = {"KSEA": Condition(FlightCategory.LIFR)}
    sea = build_state(settings, conditions, fog)["airports"][0]
    assert sea["visibility"] == 0.0
    assert sea["flightCategory"] == "LIFR"
