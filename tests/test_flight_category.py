import pytest

from metarmap.flight_category import ceiling_ft, classify, parse_visibility
from metarmap.models import CloudCover, CloudLayer, FlightCategory


class TestParseVisibility:
    @pytest.mark.parametrize("text, expected", [("10+", 10.0), ("6+", 6.0), ("0+", 0.0), (" 1.5+ ", 1.5)])
    def test_plus_suffix_is_dropped(self, text, expected):
        assert parse_visibility(text) == expected

    def test_plain_numbers(self):
        assert parse_visibility("0.5") == 0.5
        assert parse_visibility(3) == 3.0
        assert parse_visibility(0.25) == 0.25
        assert parse_visibility(0) == 0.0

    @pytest.mark.parametrize("value", [-1, -0.5, "-2", "-3+"])
    def test_negative_is_unknown(self, value):
        assert parse_visibility(value) is None

    @pytest.mark.parametrize("value", [None, "", "   ", "+", "abc", "1/2SM", "nan", [], True])
    def test_garbage_is_unknown(self, value):
        assert parse_visibility(value) is None


class TestCeiling:
    def test_only_broken_overcast_obscured_count(self):
        layers = [CloudLayer(CloudCover.FEW, 500), CloudLayer(CloudCover.SCATTERED, 800),
                  CloudLayer(CloudCover.BROKEN, 2500), CloudLayer(CloudCover.OVERCAST, 4000)]
        assert ceiling_ft(layers) == 2500

    def test_obscured_without_base_is_zero(self):
        assert ceiling_ft([CloudLayer(CloudCover.OBSCURED)]) == 0

    def test_no_ceiling_is_unlimited(self):
        assert ceiling_ft([CloudLayer(CloudCover.FEW, 200)]) == 10000
        assert ceiling_ft([]) == 10000
        assert ceiling_ft(None) == 10000


class TestClassify:
    @pytest.mark.parametrize("layers", [None, [], [CloudLayer(CloudCover.OVERCAST, 200)]])
    def test_no_visibility_is_unknown(self, layers):
        assert classify(None, layers) is FlightCategory.UNKNOWN
        assert classify(0, layers) is FlightCategory.UNKNOWN
        assert classify(-1, layers) is FlightCategory.UNKNOWN

    def test_clear_sky(self):
        assert classify(10, []) is FlightCategory.VFR
        assert classify(10, None) is FlightCategory.VFR

    def test_ceiling_boundary_goes_to_better_category(self):
        assert classify(10, [CloudLayer(CloudCover.OVERCAST, 3000)]) is FlightCategory.VFR
        assert classify(10, [CloudLayer(CloudCover.OVERCAST, 2999)]) is FlightCategory.MVFR
        assert classify(10, [CloudLayer(CloudCover.BROKEN, 1000)]) is FlightCategory.MVFR
        assert classify(10, [CloudLayer(CloudCover.BROKEN, 999)]) is FlightCategory.IFR
        assert classify(10, [CloudLayer(CloudCover.BROKEN, 500)]) is FlightCategory.IFR
        assert classify(10, [CloudLayer(CloudCover.BROKEN, 499)]) is FlightCategory.LIFR

    def test_visibility_boundary_goes_to_better_category(self):
        assert classify(5, []) is FlightCategory.VFR
        assert classify(4.9, []) is FlightCategory.MVFR
        assert classify(3, []) is FlightCategory.MVFR
        assert classify(2.5, []) is FlightCategory.IFR
        assert classify(1, []) is FlightCategory.IFR
        assert classify(0.9, []) is FlightCategory.LIFR

    def test_visibility_dominates_when_worse(self):
        assert classify(0.9, [CloudLayer(CloudCover.CLEAR)]) is FlightCategory.LIFR

    def test_ceiling_dominates_when_worse(self):
        assert classify(10, [CloudLayer(CloudCover.OVERCAST, 700)]) is FlightCategory.IFR

    def test_scattered_layers_do_not_form_a_ceiling(self):
        assert classify(10, [CloudLayer(CloudCover.SCATTERED, 300)]) is FlightCategory.VFR
