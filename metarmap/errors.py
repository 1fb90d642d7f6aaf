class MetarMapError(Exception):
    """Base class for errors that stop the map."""


class ConfigError(MetarMapError):
    """Configuration is missing, malformed or out of range."""


class FetchError(MetarMapError):
    """The METAR source could not be reached or returned something unusable."""
