class MapLoadError(Exception):
    """Base class for everything raised while turning a YAML+image pair into a grid."""


class ConfigError(MapLoadError):
    """Metadata document is missing a key or holds a malformed value."""


class DecodeError(MapLoadError):
    """Raster stream could not be decoded into a brightness grid."""


class GenerationError(MapLoadError):
    """Unexpected failure while walking the pixels of a loaded map."""
