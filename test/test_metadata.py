import io
import os

import pytest

from pgm_map_server.errors import ConfigError
from pgm_map_server.metadata import MapMetadata, REQUIRED_KEYS, parse_metadata, resolve_image_path

VALID = {
    'resolution': '0.05',
    'origin': '[1.5, -2.0, 1.5708]',
    'free_thresh': '0.2',
    'occupied_thresh': '0.8',
}


def _doc(**overrides):
    fields = dict(VALID, **overrides)
    return '\n'.join(f"{k}: {v}" for k, v in fields.items() if v is not None) + '\n'


def test_parse_valid_document():
    meta = parse_metadata(io.StringIO(_doc()))
    assert meta == MapMetadata(
        resolution=0.05, origin_x=1.5, origin_y=-2.0, origin_theta=1.5708,
        free_thresh=0.2, occupied_thresh=0.8, image=None,
    )


def test_parse_accepts_bytes_and_integers():
    meta = parse_metadata(_doc(resolution='1', origin='[0, 0, 0]', free_thresh='0').encode())
    assert meta.resolution == 1.0 and isinstance(meta.resolution, float)
    assert (meta.origin_x, meta.origin_y, meta.origin_theta) == (0.0, 0.0, 0.0)
    assert meta.free_thresh == 0.0


def test_parse_keeps_image_key():
    meta = parse_metadata(_doc(image='room.pgm'))
    assert meta.image == 'room.pgm'


@pytest.mark.parametrize('key', REQUIRED_KEYS)
def test_missing_required_key(key):
    with pytest.raises(ConfigError, match=key):
        parse_metadata(_doc(**{key: None}))


@pytest.mark.parametrize('origin', ['[0.0, 0.0]', '[0, 0, 0, 0]', '0.0', "['a', 0, 0]", '{x: 1}'])
def test_malformed_origin(origin):
    with pytest.raises(ConfigError, match='origin'):
        parse_metadata(_doc(origin=origin))


@pytest.mark.parametrize('key,value', [
    ('resolution', 'fine'),
    ('resolution', 'true'),
    ('resolution', '0.0'),
    ('resolution', '-0.05'),
    ('free_thresh', 'low'),
    ('free_thresh', '-0.1'),
    ('occupied_thresh', '1.5'),
    ('image', '42'),
])
def test_bad_values(key, value):
    with pytest.raises(ConfigError, match=key):
        parse_metadata(_doc(**{key: value}))


def test_thresholds_order_not_enforced():
    meta = parse_metadata(_doc(free_thresh='0.9', occupied_thresh='0.1'))
    assert meta.free_thresh > meta.occupied_thresh


def test_not_a_mapping():
    with pytest.raises(ConfigError):
        parse_metadata('- 1\n- 2\n')
    with pytest.raises(ConfigError):
        parse_metadata('')


def test_malformed_yaml():
    with pytest.raises(ConfigError, match='parsed'):
        parse_metadata('resolution: [0.05\norigin: {')


def test_metadata_is_immutable():
    meta = parse_metadata(_doc())
    with pytest.raises(Exception):
        meta.resolution = 1.0


def test_resolve_image_path():
    yaml_path = os.path.join(os.sep, 'maps', 'room.yaml')
    assert resolve_image_path(yaml_path, '', 'room.pgm') == os.path.join(os.sep, 'maps', 'room.pgm')
    assert resolve_image_path(yaml_path, '/other/x.png', 'room.pgm') == '/other/x.png'
    assert resolve_image_path(yaml_path, '', '/abs/room.pgm') == '/abs/room.pgm'
    assert resolve_image_path(yaml_path, '', None) == ''
