import io
import re
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from pgm_map_server.errors import ConfigError, DecodeError


@dataclass(frozen=True)
class RasterImage:
    # (height, width) float64 in [0, 1], row 0 = top of the image
    brightness: np.ndarray

    @property
    def width(self) -> int:
        return int(self.brightness.shape[1])

    @property
    def height(self) -> int:
        return int(self.brightness.shape[0])

    def brightness_at(self, col: int, row: int) -> float:
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(f"pixel ({col}, {row}) outside {self.width}x{self.height} image")
        return float(self.brightness[row, col])


def _to_unit(arr: np.ndarray, max_value=None) -> np.ndarray:
    if max_value is None and np.issubdtype(arr.dtype, np.integer):
        max_value = np.iinfo(arr.dtype).max
    if max_value is not None:
        arr = arr.astype(np.float64) / float(max_value)
    return np.clip(arr.astype(np.float64), 0.0, 1.0)


def _value_channel(arr: np.ndarray) -> np.ndarray:
    # HSV value = max over the color channels; alpha ignored
    if arr.ndim == 2:
        return arr
    if arr.ndim == 3 and arr.shape[2] in (1, 2):
        return arr[..., 0]
    if arr.ndim == 3:
        return arr[..., :3].max(axis=2)
    raise DecodeError(f"unsupported raster shape {arr.shape}")


def from_array(arr: np.ndarray, max_value=None) -> RasterImage:
    """
    Wrap a decoded (h, w) or (h, w, c) sample array as a RasterImage.

    Integer samples are divided by `max_value`, or by their dtype's maximum
    when it is not given. Float samples are taken as already in [0, 1].
    """
    brightness = _to_unit(_value_channel(np.asarray(arr)), max_value)
    if brightness.ndim != 2 or brightness.shape[0] == 0 or brightness.shape[1] == 0:
        raise DecodeError(f"raster has no pixels (shape {brightness.shape})")
    brightness.setflags(write=False)
    return RasterImage(brightness=brightness)


# whitespace and '#' comments, then one decimal field of a PNM header
_PNM_FIELD = re.compile(rb'(?:\s|#[^\n]*\n?)*(\d+)')


def pnm_maxval(data: bytes):
    """maxval of a PGM/PPM header (P2, P3, P5, P6), None for anything else."""
    if len(data) < 2 or data[:1] != b'P' or data[1:2] not in (b'2', b'3', b'5', b'6'):
        return None
    fields, pos = [], 2
    while len(fields) < 3:  # width, height, maxval
        m = _PNM_FIELD.match(data, pos)
        if m is None:
            return None
        fields.append(int(m.group(1)))
        pos = m.end()
    return fields[2] or None


def decode_with_opencv(data: bytes) -> RasterImage:
    try:
        img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise DecodeError(f"failed to decode raster: {e}") from e
    if img is None:
        raise DecodeError("failed to decode raster: unknown or corrupt image data")
    # 8-bit PNM samples come back rescaled to 255, 16-bit ones raw
    max_value = pnm_maxval(data) if img.dtype == np.uint16 else None
    return from_array(img, max_value)


def decode_with_pillow(data: bytes) -> RasterImage:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode.startswith('I'):
                # 16-bit grayscale, sometimes widened to 32-bit 'I'; wider
                # samples saturate at white
                arr = np.clip(np.asarray(img, dtype=np.float64) / 65535.0, 0.0, 1.0)
            elif img.mode == 'F':
                arr = np.asarray(img, dtype=np.float64)
            elif img.mode in ('L', 'LA'):
                arr = np.asarray(img)
            else:
                arr = np.asarray(img.convert('RGB'))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"failed to decode raster: {e}") from e
    return from_array(arr)


DECODERS = {
    'opencv': decode_with_opencv,
    'pillow': decode_with_pillow,
}


def get_decoder(name: str):
    try:
        return DECODERS[name]
    except KeyError:
        raise ConfigError(f"unknown raster decoder '{name}' (expected one of {sorted(DECODERS)})") from None
