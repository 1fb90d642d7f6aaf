"""Visibility parsing and FAA flight category classification.

Flight category rules:
  VFR:  ceiling > 3000 ft AGL and visibility > 5 SM
  MVFR: ceiling 1000-3000 ft AGL or visibility 3-5 SM
  IFR:  ceiling 500-1000 ft AGL or visibility 1-3 SM
  LIFR: ceiling < 500 ft AGL or visibility < 1 SM
Boundary values go to the better category.
"""

import logging

from metarmap.models import CEILING_COVERS, SEVERITY, FlightCategory

log = logging.getLogger(__name__)

UNLIMITED_CEILING_FT = 10000


def parse_visibility(value):
    """Return visibility in statute miles, or None when it can't be trusted.

    Accepts numbers, "10+" style strings and plain numeric strings.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("+"):
        text = text[:-1].strip()
    if not text:
        return None
    try:
        visibility = float(text)
    except ValueError:
        return None
    if visibility != visibility or visibility < 0:
        return None
    return visibility


def ceiling_ft(layers):
    """Lowest broken, overcast or obscured base. A layer without a base counts as 0."""
    ceiling = None
    for layer in layers or ():
        if layer.cover not in CEILING_COVERS:
            continue
        base = layer.base or 0
        if ceiling is None or base < ceiling:
            ceiling = base
    return UNLIMITED_CEILING_FT if ceiling is None else ceiling


def _ceiling_category(ceiling):
    if ceiling < 500:
        return FlightCategory.LIFR
    if ceiling < 1000:
        return FlightCategory.IFR
    if ceiling < 3000:
        return FlightCategory.MVFR
    return FlightCategory.VFR


def _visibility_category(visibility):
    if visibility < 1:
        return FlightCategory.LIFR
    if visibility < 3:
        return FlightCategory.IFR
    if visibility < 5:
        return FlightCategory.MVFR
    return FlightCategory.VFR


def worst(*categories):
    return max(categories, key=SEVERITY.index)


def classify(visibility, layers=None):
    """Flight category from visibility (SM) and cloud layers.

    Without a usable visibility there is nothing to classify, whatever the sky.
    """
    if visibility is None or visibility <= 0:
        return FlightCategory.UNKNOWN
    ceiling = ceiling_ft(layers)
    log.debug("Finding category for %sSM, ceiling %sft", visibility, ceiling)
    return worst(_ceiling_category(ceiling), _visibility_category(visibility))
