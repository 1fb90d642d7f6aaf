import pytest

from metarmap.config import build_settings
from metarmap.display import Display
from metarmap.models import Color

VFR = Color(255, 0, 0)
VFR_FADE = Color(125, 0, 0)
MVFR = Color(0, 0, 255)
MVFR_FADE = Color(0, 0, 125)
CLEAR = Color(0, 0, 0)
LIGHTNING = Color(255, 255, 255)
HIGH_WINDS = Color(255, 255, 0)


def make_settings(airports=("KSEA", "KBFI", "KPAE"), **overrides):
    return build_settings(overrides, airports=list(airports))


@pytest.fixture
def settings():
    return make_settings()


class FakeDisplay(Display):
    def __init__(self, led_count=50):
        super().__init__(led_count)
        self.pixels = [(0, 0, 0)] * led_count
        self.frames = []
        self.brightness = None
        self.deinited = False

    def _set(self, index, color):
        self.pixels[index] = color

    def show(self):
        self.frames.append(list(self.pixels))

    def set_brightness(self, brightness):
        self.brightness = brightness

    def deinit(self):
        self.deinited = True


@pytest.fixture
def display():
    return FakeDisplay()


class FakeSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)

    @property
    def total(self):
        return round(sum(self.calls), 6)
