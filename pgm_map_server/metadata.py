import os
from dataclasses import dataclass
from numbers import Real
from typing import Optional

import yaml

from pgm_map_server.errors import ConfigError

REQUIRED_KEYS = ('resolution', 'origin', 'free_thresh', 'occupied_thresh')


@dataclass(frozen=True)
class MapMetadata:
    resolution: float       # meters per pixel
    origin_x: float
    origin_y: float
    origin_theta: float     # yaw, radians
    free_thresh: float
    occupied_thresh: float
    image: Optional[str] = None


def _number(value, key: str) -> float:
    # bool is an int subclass; `resolution: true` is a typo, not a number
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigError(f"YAML attribute '{key}' must be a number, got {value!r}")
    return float(value)


def _unit_interval(value, key: str) -> float:
    v = _number(value, key)
    if not 0.0 <= v <= 1.0:
        raise ConfigError(f"YAML attribute '{key}' must be within [0, 1], got {v}")
    return v


def parse_metadata(stream) -> MapMetadata:
    """
    Parse a map_server style metadata document.

    Args:
        stream: text/binary stream or string holding a YAML mapping
    Returns:
        MapMetadata
    Raises:
        ConfigError: malformed YAML, missing required attribute or bad value
    """
    try:
        params = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parameter file could not be parsed: {e}") from e

    if not isinstance(params, dict):
        raise ConfigError("YAML parameter file must contain a mapping of attributes")

    # Sanity checks
    for key in REQUIRED_KEYS:
        if key not in params:
            raise ConfigError(f"YAML parameter file missing required attribute: '{key}'")

    origin = params['origin']
    if not isinstance(origin, (list, tuple)) or len(origin) != 3:
        raise ConfigError(f"YAML attribute 'origin' must be [x, y, theta], got {origin!r}")
    x, y, theta = (_number(v, 'origin') for v in origin)

    resolution = _number(params['resolution'], 'resolution')
    if resolution <= 0.0:
        raise ConfigError(f"YAML attribute 'resolution' must be positive, got {resolution}")

    image = params.get('image')
    if image is not None and not isinstance(image, str):
        raise ConfigError(f"YAML attribute 'image' must be a path string, got {image!r}")

    return MapMetadata(
        resolution=resolution,
        origin_x=x,
        origin_y=y,
        origin_theta=theta,
        free_thresh=_unit_interval(params['free_thresh'], 'free_thresh'),
        occupied_thresh=_unit_interval(params['occupied_thresh'], 'occupied_thresh'),
        image=image,
    )


def resolve_image_path(yaml_path: str, image_path: str, image_from_yaml: Optional[str]) -> str:
    """Explicit image_path wins; otherwise the YAML 'image' key, relative to the YAML's folder."""
    path = image_path or image_from_yaml or ''
    if path and not os.path.isabs(path):
        path = os.path.join(os.path.dirname(os.path.abspath(yaml_path)), path)
    return path
