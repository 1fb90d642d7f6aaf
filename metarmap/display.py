"""LED strip outputs: a real NeoPixel strip, or the console for development."""

import logging

from metarmap.errors import ConfigError

log = logging.getLogger(__name__)


class Display:
    """Buffered strip. Nothing is visible until show()."""

    def __init__(self, led_count):
        self.led_count = led_count

    def set_pixel(self, index, color):
        if not 0 <= index < self.led_count:
            log.warning("LED index out of range: %s", index)
            return False
        self._set(index, tuple(color))
        return True

    def fill(self, color):
        for index in range(self.led_count):
            self._set(index, tuple(color))

    def clear(self, color=(0, 0, 0)):
        """Set every LED to ``color`` and show it."""
        self.fill(color)
        self.show()

    def _set(self, index, color):
        raise NotImplementedError

    def show(self):
        raise NotImplementedError

    def set_brightness(self, brightness):
        raise NotImplementedError

    def deinit(self):
        pass


class NeoPixelDisplay(Display):
    def __init__(self, settings):
        super().__init__(settings.led_count)
        # Only importable on the Pi
        import board
        import neopixel

        try:
            pin = getattr(board, settings.led_pin)
        except AttributeError:
            raise ConfigError("board has no pin {} (LED_PIN)".format(settings.led_pin)) from None
        self.pixels = neopixel.NeoPixel(pin, settings.led_count, brightness=settings.led_brightness,
                                        pixel_order=getattr(neopixel, settings.led_order),
                                        auto_write=False)
        log.info("NeoPixel strip: %d LEDs on %s (%s)", settings.led_count, settings.led_pin, settings.led_order)

    def _set(self, index, color):
        self.pixels[index] = color

    def show(self):
        self.pixels.show()

    def set_brightness(self, brightness):
        self.pixels.brightness = brightness

    def deinit(self):
        self.pixels.deinit()


class ConsoleDisplay(Display):
    """Keeps the strip in memory and logs it on show()."""

    def __init__(self, settings):
        super().__init__(settings.led_count)
        self.pixels = [(0, 0, 0)] * settings.led_count
        self.brightness = settings.led_brightness
        self.labels = {a.led: a.code for a in settings.airports}
        self.shown = 0

    def _set(self, index, color):
        self.pixels[index] = color

    def show(self):
        self.shown += 1
        status = "  ".join("{}:{},{},{}".format(self.labels.get(i, i), *color)
                           for i, color in enumerate(self.pixels) if i in self.labels)
        active = sum(1 for color in self.pixels if any(color))
        log.info("[strip] %s (%d/%d LEDs lit)", status, active, self.led_count)

    def set_brightness(self, brightness):
        self.brightness = brightness
        log.info("[strip] Brightness set to %d%%", round(brightness * 100))


def create_display(settings, console=False):
    if console:
        return ConsoleDisplay(settings)
    return NeoPixelDisplay(settings)
