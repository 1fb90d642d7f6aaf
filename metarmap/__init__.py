"""Show METAR flight categories, wind and lightning on a NeoPixel LED strip."""

__version__ = "2.0.0"
