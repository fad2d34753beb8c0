import math
import time
from array import array

from pgm_map_server.classify import classify
from pgm_map_server.errors import DecodeError, GenerationError
from pgm_map_server.metadata import MapMetadata, parse_metadata
from pgm_map_server.raster import RasterImage, decode_with_opencv
from pgm_map_server.records import Quaternion

DEFAULT_FRAME_ID = 'map_old'


def seconds_to_stamp(seconds: float, stamp):
    """Write wall-clock seconds into a builtin_interfaces/Time-like object."""
    sec = int(seconds)
    stamp.sec = sec
    stamp.nanosec = int((seconds - sec) * 1e9)
    return stamp


def yaw_to_quaternion(theta: float, out=None):
    """Rotation of `theta` radians about +z as a unit quaternion."""
    q = out if out is not None else Quaternion()
    q.x = 0.0
    q.y = 0.0
    q.z = math.sin(theta / 2.0)
    q.w = math.cos(theta / 2.0)
    return q


class YamlPgmMapGenerator:
    """
    Occupancy grid generator for a YAML metadata stream plus the accompanying
    image stream (PGM, PNG, ... anything the decoder understands).

    Both streams are read to completion here and may be closed afterwards.
    Nothing is mutated after construction, so the fill_* and generate_data
    calls can be made from several threads at once.
    """

    def __init__(self, metadata_yaml, data_pgm, frame_id: str = DEFAULT_FRAME_ID,
                 clock=time.time, decoder=decode_with_opencv):
        self._meta: MapMetadata = parse_metadata(metadata_yaml)
        data = data_pgm.read() if hasattr(data_pgm, 'read') else data_pgm
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DecodeError(f"raster stream must yield bytes, got {type(data).__name__} (open it in binary mode)")
        self._image: RasterImage = decoder(bytes(data))
        self._frame_id = str(frame_id)
        self._clock = clock

    @property
    def metadata(self) -> MapMetadata:
        return self._meta

    @property
    def image(self) -> RasterImage:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def resolution(self) -> float:
        return self._meta.resolution

    @property
    def frame_id(self) -> str:
        return self._frame_id

    def fill_header(self, header):
        header.frame_id = self._frame_id
        seconds_to_stamp(self._clock(), header.stamp)

    def fill_information(self, info):
        seconds_to_stamp(self._clock(), info.map_load_time)
        origin = info.origin
        origin.position.x = self._meta.origin_x
        origin.position.y = self._meta.origin_y
        yaw_to_quaternion(self._meta.origin_theta, origin.orientation)
        info.width = self.width
        info.height = self.height
        info.resolution = self._meta.resolution

    def generate_data(self) -> bytes:
        """One signed byte per cell (0 free, 100 occupied, -1 unknown), bottom row first."""
        try:
            grid = classify(self._image, self._meta.free_thresh, self._meta.occupied_thresh)
            return grid.tobytes()
        except Exception as e:
            raise GenerationError(f"YAML+PGM generator generateData error: {e}") from e

    def fill_grid(self, msg, data: bytes = None):
        """Fill a whole nav_msgs/OccupancyGrid; pass `data` to reuse an earlier generate_data()."""
        self.fill_header(msg.header)
        self.fill_information(msg.info)
        msg.data = array('b', self.generate_data() if data is None else data)
        return msg
