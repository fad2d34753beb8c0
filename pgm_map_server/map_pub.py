#!/usr/bin/env python3
import os
import rclpy
from rclpy.node import Node
from nav_msgs.msg import OccupancyGrid
from rclpy.qos import QoSProfile, ReliabilityPolicy, DurabilityPolicy, HistoryPolicy

from pgm_map_server.errors import MapLoadError
from pgm_map_server.generator import YamlPgmMapGenerator
from pgm_map_server.metadata import parse_metadata, resolve_image_path
from pgm_map_server.raster import get_decoder


class MapPublisher(Node):
    def __init__(self):
        super().__init__('pgm_map_pub', automatically_declare_parameters_from_overrides=True)

        def _p(name, default):
            p = self.get_parameter(name)
            return (p.value if p.type_ is not None else default)

        self.yaml_path  = str(_p('yaml_path', ''))
        self.image_path = str(_p('image_path', ''))
        self.frame_id   = str(_p('frame_id', 'map'))
        self.topic      = str(_p('topic', '/map'))
        self.decoder    = str(_p('decoder', 'opencv'))
        self.period     = float(_p('publish_period', 0.0))

        if not self.yaml_path or not os.path.exists(self.yaml_path):
            self.get_logger().fatal(f"yaml_path missing/invalid: {self.yaml_path}")
            raise SystemExit(1)

        try:
            self.gen = self._load()
            # the pixel walk runs once; republishes only refresh the stamp
            self.data = self.gen.generate_data()
        except (MapLoadError, OSError) as e:
            self.get_logger().fatal(f"failed to load map {self.yaml_path}: {e}")
            raise SystemExit(1)

        qos = QoSProfile(reliability=ReliabilityPolicy.RELIABLE,
                         durability=DurabilityPolicy.TRANSIENT_LOCAL,
                         history=HistoryPolicy.KEEP_LAST, depth=1)
        self.pub = self.create_publisher(OccupancyGrid, self.topic, qos)

        self._publish()
        self.get_logger().info(
            f"pgm_map_server: published map {self.gen.width}x{self.gen.height} "
            f"res={self.gen.resolution} frame={self.frame_id} on {self.topic}")

        if self.period > 0.0:
            self.timer = self.create_timer(self.period, self._publish)

    def _load(self) -> YamlPgmMapGenerator:
        decoder = get_decoder(self.decoder)
        with open(self.yaml_path, 'rb') as f:
            yaml_bytes = f.read()

        # the generator validates the YAML itself; this only locates the image
        meta = parse_metadata(yaml_bytes)
        image_path = resolve_image_path(self.yaml_path, self.image_path, meta.image)
        if not image_path or not os.path.exists(image_path):
            self.get_logger().fatal(f"image_path missing/invalid: {image_path}")
            raise SystemExit(1)

        with open(image_path, 'rb') as img:
            return YamlPgmMapGenerator(yaml_bytes, img, frame_id=self.frame_id, decoder=decoder)

    def _publish(self):
        msg = OccupancyGrid()
        self.gen.fill_grid(msg, self.data)
        self.pub.publish(msg)


def main():
    rclpy.init()
    node = MapPublisher()
    rclpy.spin(node)
    node.destroy_node()
    rclpy.shutdown()

if __name__ == '__main__':
    main()
