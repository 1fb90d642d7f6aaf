"""Pick the LED color for an airport, and for the legend, at a given animation phase.

``wind_cycle`` is the shared animation phase. Wind effects (blink, fade, high
winds) show while it is True, lightning flashes while it is False, so the two
never land on the same tick.
"""

from metarmap.models import FlightCategory

LEGEND_SIZE = 7


def is_windy(condition, wind_cycle, settings):
    return (settings.activate_wind_animation and wind_cycle and
            (condition.wind_speed >= settings.wind_blink_threshold or condition.is_gusty))


def is_high_winds(condition, wind_cycle, settings):
    threshold = settings.high_winds_threshold
    return (is_windy(condition, wind_cycle, settings) and threshold is not None and
            (condition.wind_speed >= threshold or condition.gust_speed >= threshold))


def shows_lightning(condition, wind_cycle, settings):
    return settings.activate_lightning_animation and not wind_cycle and condition.has_lightning


def resolve_color(condition, wind_cycle, settings):
    """Color for one airport. First matching rule wins:

    no data, lightning, high winds, windy (fade or blink), flight category.
    """
    palette = settings.palette
    if condition is None or condition.category not in palette.normal:
        return palette.clear
    if shows_lightning(condition, wind_cycle, settings):
        return palette.lightning
    if is_high_winds(condition, wind_cycle, settings):
        return palette.high_winds
    if is_windy(condition, wind_cycle, settings):
        return palette.faded[condition.category] if settings.fade_instead_of_blink else palette.clear
    return palette.normal[condition.category]


def describe(condition, wind_cycle, settings):
    """Short text for the log, e.g. 'lightning very windy MVFR'."""
    if condition is None:
        return "None"
    words = []
    if condition.category in settings.palette.normal:
        if shows_lightning(condition, wind_cycle, settings):
            words.append("lightning")
        if is_high_winds(condition, wind_cycle, settings):
            words.append("very")
        if is_windy(condition, wind_cycle, settings):
            words.append("windy")
    words.append(condition.category.value)
    return " ".join(words)


def legend_colors(wind_cycle, settings):
    """The seven legend LEDs: VFR, MVFR, IFR, LIFR, lightning, windy, high winds.

    The animated ones follow the same phase rules as the airports, using a VFR
    airport as the example.
    """
    palette = settings.palette
    colors = [palette.normal[category] for category in
              (FlightCategory.VFR, FlightCategory.MVFR, FlightCategory.IFR, FlightCategory.LIFR)]

    if settings.activate_lightning_animation:
        colors.append(palette.vfr if wind_cycle else palette.lightning)
    else:
        colors.append(palette.clear)

    if settings.activate_wind_animation:
        if wind_cycle:
            colors.append(palette.faded[FlightCategory.VFR] if settings.fade_instead_of_blink else palette.clear)
        else:
            colors.append(palette.vfr)
    else:
        colors.append(palette.clear)

    if settings.activate_wind_animation and settings.high_winds_threshold is not None:
        colors.append(palette.high_winds if wind_cycle else palette.vfr)
    else:
        colors.append(palette.clear)

    return colors
